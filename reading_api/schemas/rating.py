"""Rating schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from reading_api.schemas.common import Pagination, StorySummary

RatingSort = Literal["newest", "oldest", "highest", "lowest"]


class RatingSubmit(BaseModel):
    """Submit or replace the caller's rating."""

    rating: float = Field(..., ge=1, le=5)
    comment: str | None = Field(None, max_length=5000)


class RatingResponse(BaseModel):
    """Rating response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    story_id: int
    rating: float
    comment: str | None
    created_at: datetime
    updated_at: datetime


class StoryAggregateResponse(BaseModel):
    """Denormalized rating statistics of a story."""

    model_config = ConfigDict(from_attributes=True)

    story_id: int
    average_rating: float | None
    rating_count: int


class RatingSubmitResponse(BaseModel):
    rating: RatingResponse
    aggregate: StoryAggregateResponse


class StarCount(BaseModel):
    stars: int
    count: int


class RatingStatistics(BaseModel):
    average_rating: float | None
    total_count: int
    distribution: list[StarCount]


class RaterRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str | None


class StoryRatingResponse(RatingResponse):
    user: RaterRef


class StoryRatingsResponse(BaseModel):
    """Page of a story's ratings with statistics over the full set."""

    ratings: list[StoryRatingResponse]
    statistics: RatingStatistics
    pagination: Pagination


class UserRatingResponse(RatingResponse):
    story: StorySummary


class UserRatingSummary(BaseModel):
    total: int
    average_rating: float
    distribution: list[StarCount]


class UserRatingsResponse(BaseModel):
    ratings: list[UserRatingResponse]
    summary: UserRatingSummary
    pagination: Pagination
