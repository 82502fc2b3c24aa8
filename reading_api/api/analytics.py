"""Analytics and dashboard API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from reading_api.api.dependencies import get_admin_user, get_analytics_service, get_current_user
from reading_api.models import User
from reading_api.schemas.analytics import (
    DashboardResponse,
    PlatformAnalyticsResponse,
    StoryAnalyticsResponse,
    UserAnalyticsResponse,
)
from reading_api.schemas.common import Envelope
from reading_api.services.analytics_service import AnalyticsService

router = APIRouter(prefix="/api/v1/analytics", tags=["analytics"])

Period = Annotated[int | None, Query(ge=1, le=365)]


@router.get("/user", response_model=Envelope[UserAnalyticsResponse])
def user_analytics(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[AnalyticsService, Depends(get_analytics_service)],
    period: Period = None,
):
    """Reading summary for the current user over the last ``period`` days."""
    return {"success": True, "data": service.user_analytics(current_user.id, period)}


@router.get("/dashboard", response_model=Envelope[DashboardResponse])
def dashboard(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[AnalyticsService, Depends(get_analytics_service)],
):
    """Recent reading, monthly totals, favorite categories and streak."""
    return {"success": True, "data": service.user_dashboard(current_user.id)}


@router.get("/stories/{story_id}", response_model=Envelope[StoryAnalyticsResponse])
def story_analytics(
    story_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[AnalyticsService, Depends(get_analytics_service)],
    period: Period = None,
):
    """Readership and rating statistics for a story."""
    return {"success": True, "data": service.story_analytics(story_id, period)}


@router.get("/platform", response_model=Envelope[PlatformAnalyticsResponse])
def platform_analytics(
    admin: Annotated[User, Depends(get_admin_user)],
    service: Annotated[AnalyticsService, Depends(get_analytics_service)],
    period: Period = None,
):
    """System-wide engagement totals. Administrators only."""
    return {"success": True, "data": service.platform_analytics(period)}
