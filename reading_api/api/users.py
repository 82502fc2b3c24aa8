"""Endpoints listing the current user's own engagement records."""

from typing import Annotated

from fastapi import APIRouter, Depends

from reading_api.api.dependencies import (
    PageParams,
    get_analytics_service,
    get_current_user,
    get_progress_service,
    get_rating_service,
)
from reading_api.models import User
from reading_api.models.enums import ReadingStatus
from reading_api.schemas.analytics import UserStatsResponse
from reading_api.schemas.common import Envelope
from reading_api.schemas.progress import CompletedListResponse, ProgressListResponse
from reading_api.schemas.rating import UserRatingsResponse
from reading_api.services.analytics_service import AnalyticsService
from reading_api.services.progress_service import ProgressService
from reading_api.services.rating_service import RatingService

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("/progress", response_model=Envelope[ProgressListResponse])
def list_user_progress(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ProgressService, Depends(get_progress_service)],
    pages: Annotated[PageParams, Depends()],
    status: ReadingStatus | None = None,
):
    """Page through the user's reading progress."""
    data = service.list_progress(current_user.id, status, pages.page, pages.limit)
    return {"success": True, "data": data}


@router.get("/completed", response_model=Envelope[CompletedListResponse])
def list_completed_stories(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ProgressService, Depends(get_progress_service)],
    pages: Annotated[PageParams, Depends()],
):
    """Page through stories the user has finished."""
    data = service.list_completed(current_user.id, pages.page, pages.limit)
    return {"success": True, "data": data}


@router.get("/ratings", response_model=Envelope[UserRatingsResponse])
def list_user_ratings(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[RatingService, Depends(get_rating_service)],
    pages: Annotated[PageParams, Depends()],
):
    """Page through the user's ratings with a summary of all of them."""
    data = service.list_user_ratings(current_user.id, pages.page, pages.limit)
    return {"success": True, "data": data}


@router.get("/stats", response_model=Envelope[UserStatsResponse])
def user_stats(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[AnalyticsService, Depends(get_analytics_service)],
):
    """Lifetime reading and rating totals for the current user."""
    return {"success": True, "data": service.user_stats(current_user.id)}
