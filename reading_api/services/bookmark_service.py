"""Bookmark toggling."""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from reading_api.errors import NotFoundError
from reading_api.models import Bookmark, Story
from reading_api.schemas.common import Pagination
from reading_api.services.stories import get_published_story

logger = logging.getLogger(__name__)


class BookmarkService:
    """Owns bookmark existence per (user, story)."""

    def __init__(self, db: Session):
        self.db = db

    def get_bookmark(self, user_id: int, story_id: int) -> Bookmark | None:
        return (
            self.db.query(Bookmark)
            .filter(Bookmark.user_id == user_id, Bookmark.story_id == story_id)
            .first()
        )

    def toggle_bookmark(self, user_id: int, story_id: int) -> dict[str, Any]:
        """Flip the bookmark on a published story.

        Returns:
            {"is_bookmarked": bool, "bookmark": Bookmark | None}
        """
        get_published_story(self.db, story_id, action="bookmark")

        existing = self.get_bookmark(user_id, story_id)
        if existing:
            # Matches no row if a concurrent toggle removed it first
            self.db.query(Bookmark).filter(Bookmark.id == existing.id).delete(
                synchronize_session="fetch"
            )
            self.db.commit()
            logger.info(f"User {user_id} removed bookmark on story {story_id}")
            return {"is_bookmarked": False, "bookmark": None}

        bookmark = Bookmark(user_id=user_id, story_id=story_id, created_at=datetime.now(UTC))
        self.db.add(bookmark)
        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent toggle created it first; report the state it left
            self.db.rollback()
            return {"is_bookmarked": True, "bookmark": self.get_bookmark(user_id, story_id)}
        self.db.refresh(bookmark)
        logger.info(f"User {user_id} bookmarked story {story_id}")
        return {"is_bookmarked": True, "bookmark": bookmark}

    def is_bookmarked(self, user_id: int, story_id: int) -> bool:
        return self.get_bookmark(user_id, story_id) is not None

    def bookmark_status(self, user_id: int, story_id: int) -> dict[str, Any]:
        bookmark = self.get_bookmark(user_id, story_id)
        return {"is_bookmarked": bookmark is not None, "bookmark": bookmark}

    def remove_bookmark(self, user_id: int, story_id: int) -> None:
        bookmark = self.get_bookmark(user_id, story_id)
        if not bookmark:
            raise NotFoundError("Bookmark not found")
        self.db.delete(bookmark)
        self.db.commit()

    def list_bookmarks(self, user_id: int, page: int = 1, limit: int = 20) -> dict[str, Any]:
        """List the user's bookmarks, newest first."""
        query = (
            self.db.query(Bookmark)
            .join(Story, Bookmark.story_id == Story.id)
            .filter(Bookmark.user_id == user_id, Story.deleted_at.is_(None))
        )
        total = query.count()
        rows = (
            query.order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return {"bookmarks": rows, "pagination": Pagination.build(page, limit, total)}
