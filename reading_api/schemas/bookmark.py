"""Bookmark schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from reading_api.schemas.common import Pagination, StorySummary


class BookmarkToggle(BaseModel):
    """Toggle a bookmark on a story."""

    story_id: int = Field(..., alias="storyId", gt=0)

    model_config = ConfigDict(populate_by_name=True)


class BookmarkResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    story_id: int
    created_at: datetime


class BookmarkWithStory(BookmarkResponse):
    story: StorySummary


class BookmarkStatusResponse(BaseModel):
    """Bookmark state after a toggle or lookup."""

    is_bookmarked: bool
    bookmark: BookmarkResponse | None = None


class BookmarkListResponse(BaseModel):
    bookmarks: list[BookmarkWithStory]
    pagination: Pagination
