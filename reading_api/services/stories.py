"""Story lookups shared by the engagement services."""

from sqlalchemy.orm import Session

from reading_api.errors import ForbiddenError, NotFoundError
from reading_api.models import Story


def get_story(db: Session, story_id: int) -> Story:
    """Get a story that has not been deleted."""
    story = db.query(Story).filter(Story.id == story_id, Story.deleted_at.is_(None)).first()
    if not story:
        raise NotFoundError("Story not found")
    return story


def get_published_story(db: Session, story_id: int, action: str | None = None) -> Story:
    """Get a story that readers may engage with.

    When ``action`` is given an unpublished story raises ForbiddenError
    ("Cannot <action> unpublished stories"); otherwise it is reported as
    missing.
    """
    story = db.query(Story).filter(Story.id == story_id, Story.deleted_at.is_(None)).first()
    if story is not None and story.is_published:
        return story
    if story is None or action is None:
        raise NotFoundError("Story not found" if action else "Story not found or not published")
    raise ForbiddenError(f"Cannot {action} unpublished stories")
