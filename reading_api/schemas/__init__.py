"""Pydantic schemas for API requests and responses."""

from reading_api.schemas.bookmark import BookmarkStatusResponse, BookmarkToggle
from reading_api.schemas.common import Envelope, LocalizedText, Pagination, StorySummary
from reading_api.schemas.progress import ProgressResponse, ProgressUpdate
from reading_api.schemas.rating import RatingResponse, RatingSubmit, StoryAggregateResponse

__all__ = [
    "Envelope",
    "Pagination",
    "LocalizedText",
    "StorySummary",
    "ProgressUpdate",
    "ProgressResponse",
    "RatingSubmit",
    "RatingResponse",
    "StoryAggregateResponse",
    "BookmarkToggle",
    "BookmarkStatusResponse",
]
