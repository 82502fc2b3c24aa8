"""Story rating API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from reading_api.api.dependencies import PageParams, get_current_user, get_rating_service
from reading_api.models import User
from reading_api.schemas.common import Envelope
from reading_api.schemas.rating import (
    RatingResponse,
    RatingSort,
    RatingSubmit,
    RatingSubmitResponse,
    StoryAggregateResponse,
    StoryRatingsResponse,
)
from reading_api.services.rating_service import RatingService

router = APIRouter(prefix="/api/v1/stories", tags=["ratings"])


@router.get("/{story_id}/rating", response_model=Envelope[RatingResponse | None])
def get_my_rating(
    story_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[RatingService, Depends(get_rating_service)],
):
    """Get the current user's rating of a story, or null."""
    return {"success": True, "data": service.get_rating(current_user.id, story_id)}


@router.post("/{story_id}/rating", response_model=Envelope[RatingSubmitResponse])
def rate_story(
    story_id: int,
    body: RatingSubmit,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[RatingService, Depends(get_rating_service)],
):
    """Rate a published story, replacing any earlier rating by the user."""
    rating, aggregate = service.submit_rating(current_user.id, story_id, body.rating, body.comment)
    return {"success": True, "data": {"rating": rating, "aggregate": aggregate}}


@router.delete("/{story_id}/rating", response_model=Envelope[StoryAggregateResponse])
def delete_my_rating(
    story_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[RatingService, Depends(get_rating_service)],
):
    """Withdraw the user's rating; returns the story's new aggregate."""
    aggregate = service.delete_rating(current_user.id, story_id)
    return {"success": True, "data": aggregate}


@router.get("/{story_id}/ratings", response_model=Envelope[StoryRatingsResponse])
def list_story_ratings(
    story_id: int,
    service: Annotated[RatingService, Depends(get_rating_service)],
    pages: Annotated[PageParams, Depends()],
    sort: RatingSort = "newest",
):
    """Public page of a story's ratings with statistics over all of them."""
    data = service.list_ratings(story_id, sort, pages.page, pages.limit)
    return {"success": True, "data": data}
