"""SQLAlchemy models."""

from reading_api.models.bookmark import Bookmark
from reading_api.models.progress import ReadingProgress
from reading_api.models.rating import Rating
from reading_api.models.story import Category, Story, story_categories
from reading_api.models.user import User

__all__ = [
    "User",
    "Story",
    "Category",
    "story_categories",
    "ReadingProgress",
    "Rating",
    "Bookmark",
]
