"""Reading progress tracking."""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from reading_api.errors import InternalError, NotFoundError, ValidationError
from reading_api.models import ReadingProgress, Story
from reading_api.models.enums import Language, ReadingStatus
from reading_api.schemas.common import Pagination
from reading_api.services.stories import get_published_story

logger = logging.getLogger(__name__)

# Writable fields and their lower bounds
COUNTER_FIELDS = {
    "last_paragraph": 0,
    "total_paragraphs": 1,
    "reading_time_seconds": 0,
    "words_read": 0,
}
PROGRESS_FIELDS = {*COUNTER_FIELDS, "completion_percentage", "language", "status"}


def validate_progress_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Check a progress write and normalize enum values to strings.

    ``None`` values are treated as not supplied.
    """
    cleaned = {name: value for name, value in fields.items() if value is not None}

    unknown = set(cleaned) - PROGRESS_FIELDS
    if unknown:
        raise ValidationError(f"Unknown progress fields: {', '.join(sorted(unknown))}")

    errors = []
    for name, minimum in COUNTER_FIELDS.items():
        if name not in cleaned:
            continue
        value = cleaned[name]
        if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
            errors.append({"field": name, "message": f"must be an integer >= {minimum}"})

    if "completion_percentage" in cleaned:
        value = cleaned["completion_percentage"]
        if isinstance(value, bool) or not isinstance(value, int | float) or not 0 <= value <= 100:
            errors.append({"field": "completion_percentage", "message": "must be between 0 and 100"})

    if "language" in cleaned:
        try:
            cleaned["language"] = Language(cleaned["language"]).value
        except ValueError:
            errors.append({"field": "language", "message": "unsupported language"})

    if "status" in cleaned:
        try:
            cleaned["status"] = ReadingStatus(cleaned["status"]).value
        except ValueError:
            errors.append({"field": "status", "message": "must be STARTED or COMPLETED"})

    if errors:
        raise ValidationError("Invalid progress data", details=errors)
    return cleaned


class ProgressService:
    """Owns the per-(user, story) reading progress record."""

    def __init__(self, db: Session):
        self.db = db

    def get_progress(self, user_id: int, story_id: int) -> ReadingProgress | None:
        """Get the user's progress on a story, or None."""
        return (
            self.db.query(ReadingProgress)
            .filter(ReadingProgress.user_id == user_id, ReadingProgress.story_id == story_id)
            .first()
        )

    def record_progress(
        self, user_id: int, story_id: int, fields: dict[str, Any]
    ) -> ReadingProgress:
        """Upsert the user's progress on a published story.

        Only supplied fields change. A record whose resulting status is
        COMPLETED always has completion 100 and a completion time; omitting
        ``status`` keeps the current one, and an explicit STARTED reopens a
        completed record.
        """
        cleaned = validate_progress_fields(fields)
        get_published_story(self.db, story_id)
        return self._upsert(user_id, story_id, cleaned, retry=True)

    def _upsert(
        self, user_id: int, story_id: int, fields: dict[str, Any], retry: bool
    ) -> ReadingProgress:
        now = datetime.now(UTC)
        fields = dict(fields)
        requested_status = fields.pop("status", None)

        progress = self.get_progress(user_id, story_id)
        previous_status = progress.status if progress else None
        if progress is None:
            progress = ReadingProgress(
                user_id=user_id,
                story_id=story_id,
                status=ReadingStatus.STARTED.value,
                last_paragraph=0,
                completion_percentage=0.0,
                reading_time_seconds=0,
                words_read=0,
                started_at=now,
            )
            self.db.add(progress)

        for name, value in fields.items():
            setattr(progress, name, value)
        progress.last_read_at = now
        if requested_status is not None:
            progress.status = requested_status

        if progress.status == ReadingStatus.COMPLETED.value:
            progress.completion_percentage = 100.0
            if previous_status != ReadingStatus.COMPLETED.value or progress.completed_at is None:
                progress.completed_at = now
        else:
            progress.completed_at = None

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            if previous_status is None and retry:
                # Another request created the row first; apply on top of it
                return self._upsert(user_id, story_id, {**fields, "status": requested_status}, False)
            logger.exception(f"Failed to save progress for user {user_id} on story {story_id}")
            raise InternalError("Failed to update reading progress")
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to save progress for user {user_id} on story {story_id}")
            raise InternalError("Failed to update reading progress")

        self.db.refresh(progress)
        if previous_status != progress.status:
            logger.info(
                f"Progress for user {user_id} on story {story_id}: "
                f"{previous_status or 'new'} -> {progress.status}"
            )
        return progress

    def delete_progress(self, user_id: int, story_id: int) -> None:
        """Remove the user's progress on a story."""
        progress = self.get_progress(user_id, story_id)
        if not progress:
            raise NotFoundError("Reading progress not found")
        self.db.delete(progress)
        self.db.commit()

    def list_progress(
        self,
        user_id: int,
        status: ReadingStatus | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> dict[str, Any]:
        """List the user's progress, most recently read first.

        Returns:
            {"progress": [...], "summary": {...}, "pagination": Pagination}
        """
        base = (
            self.db.query(ReadingProgress)
            .join(Story, ReadingProgress.story_id == Story.id)
            .filter(ReadingProgress.user_id == user_id, Story.deleted_at.is_(None))
        )

        counts = dict(
            base.with_entities(ReadingProgress.status, func.count(ReadingProgress.id))
            .group_by(ReadingProgress.status)
            .all()
        )
        started = counts.get(ReadingStatus.STARTED.value, 0)
        completed = counts.get(ReadingStatus.COMPLETED.value, 0)

        query = base
        if status is not None:
            query = query.filter(ReadingProgress.status == ReadingStatus(status).value)
        total = query.count()
        rows = (
            query.order_by(
                ReadingProgress.last_read_at.desc(),
                ReadingProgress.started_at.desc(),
                ReadingProgress.id.desc(),
            )
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        return {
            "progress": rows,
            "summary": {"total": total, "started": started, "completed": completed},
            "pagination": Pagination.build(page, limit, total),
        }

    def list_completed(self, user_id: int, page: int = 1, limit: int = 20) -> dict[str, Any]:
        """List completed stories, most recently completed first."""
        query = (
            self.db.query(ReadingProgress)
            .join(Story, ReadingProgress.story_id == Story.id)
            .filter(
                ReadingProgress.user_id == user_id,
                ReadingProgress.status == ReadingStatus.COMPLETED.value,
                Story.deleted_at.is_(None),
            )
        )
        total = query.count()
        rows = (
            query.order_by(ReadingProgress.completed_at.desc(), ReadingProgress.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return {"stories": rows, "pagination": Pagination.build(page, limit, total)}
