"""Story ratings and the story's denormalized rating aggregate."""

import logging
import math
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from reading_api.errors import InternalError, NotFoundError, ValidationError
from reading_api.models import Rating, Story
from reading_api.schemas.common import Pagination
from reading_api.services.locks import StoryLockRegistry, story_locks
from reading_api.services.stories import get_published_story, get_story

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5

_RATING_SORT_ORDERS: dict[str, Any] = {
    "newest": (Rating.created_at.desc(), Rating.id.desc()),
    "oldest": (Rating.created_at.asc(), Rating.id.asc()),
    "highest": (Rating.rating.desc(), Rating.created_at.desc(), Rating.id.desc()),
    "lowest": (Rating.rating.asc(), Rating.created_at.desc(), Rating.id.desc()),
}


@dataclass(frozen=True)
class StoryAggregate:
    """Rating statistics written onto a story."""

    story_id: int
    average_rating: float | None
    rating_count: int


def validate_rating_value(value: Any) -> float:
    """Check that a rating lies in the closed interval [1, 5]."""
    if isinstance(value, bool) or not isinstance(value, int | float) or math.isnan(value):
        raise ValidationError("Rating must be a number between 1 and 5")
    if not MIN_RATING <= value <= MAX_RATING:
        raise ValidationError(
            "Rating must be between 1 and 5", details={"field": "rating", "value": value}
        )
    return float(value)


def build_distribution(values: list[tuple[float, int]]) -> list[dict[str, int]]:
    """Bucket (rating, count) pairs into whole stars 1-5."""
    buckets = dict.fromkeys(range(MIN_RATING, MAX_RATING + 1), 0)
    for value, count in values:
        stars = min(MAX_RATING, max(MIN_RATING, math.floor(value)))
        buckets[stars] += count
    return [{"stars": stars, "count": count} for stars, count in buckets.items()]


class RatingService:
    """Owns ratings and keeps each story's average and count consistent with them."""

    def __init__(self, db: Session, locks: StoryLockRegistry | None = None):
        self.db = db
        self.locks = locks or story_locks

    def get_rating(self, user_id: int, story_id: int) -> Rating | None:
        """Get the user's rating for a story, or None."""
        return (
            self.db.query(Rating)
            .filter(Rating.user_id == user_id, Rating.story_id == story_id)
            .first()
        )

    def submit_rating(
        self,
        user_id: int,
        story_id: int,
        value: float,
        comment: str | None = None,
    ) -> tuple[Rating, StoryAggregate]:
        """Create or replace the user's rating and recompute the story aggregate."""
        value = validate_rating_value(value)
        get_published_story(self.db, story_id, action="rate")

        with self.locks.hold(story_id):
            try:
                self._lock_story_row(story_id)
                now = datetime.now(UTC)
                rating = self.get_rating(user_id, story_id)
                if rating is None:
                    rating = Rating(
                        user_id=user_id,
                        story_id=story_id,
                        rating=value,
                        comment=comment,
                        created_at=now,
                        updated_at=now,
                    )
                    self.db.add(rating)
                else:
                    rating.rating = value
                    rating.comment = comment
                    rating.updated_at = now
                self.db.flush()
                aggregate = self._write_aggregate(story_id)
                self.db.commit()
            except SQLAlchemyError:
                self.db.rollback()
                logger.exception(f"Failed to submit rating for user {user_id} on story {story_id}")
                raise InternalError("Failed to submit rating")

        self.db.refresh(rating)
        logger.info(
            f"Rating {value} by user {user_id} on story {story_id}: "
            f"average={aggregate.average_rating} count={aggregate.rating_count}"
        )
        return rating, aggregate

    def delete_rating(self, user_id: int, story_id: int) -> StoryAggregate:
        """Remove the user's rating and recompute the story aggregate."""
        with self.locks.hold(story_id):
            self._lock_story_row(story_id)
            rating = self.get_rating(user_id, story_id)
            if rating is None:
                self.db.rollback()
                raise NotFoundError("Rating not found")
            try:
                self.db.delete(rating)
                self.db.flush()
                aggregate = self._write_aggregate(story_id)
                self.db.commit()
            except SQLAlchemyError:
                self.db.rollback()
                logger.exception(f"Failed to delete rating for user {user_id} on story {story_id}")
                raise InternalError("Failed to delete rating")

        logger.info(
            f"Rating by user {user_id} removed from story {story_id}: "
            f"average={aggregate.average_rating} count={aggregate.rating_count}"
        )
        return aggregate

    def recompute_aggregate(self, story_id: int) -> StoryAggregate:
        """Rebuild a story's aggregate from its current ratings."""
        get_story(self.db, story_id)
        with self.locks.hold(story_id):
            try:
                self._lock_story_row(story_id)
                aggregate = self._write_aggregate(story_id)
                self.db.commit()
            except SQLAlchemyError:
                self.db.rollback()
                logger.exception(f"Failed to recompute rating aggregate for story {story_id}")
                raise InternalError("Failed to recompute rating aggregate")
        return aggregate

    def _lock_story_row(self, story_id: int) -> None:
        # Serializes writers across processes on databases with row locks
        self.db.query(Story.id).filter(Story.id == story_id).with_for_update().first()

    def _write_aggregate(self, story_id: int) -> StoryAggregate:
        average, count = (
            self.db.query(func.avg(Rating.rating), func.count(Rating.id))
            .filter(Rating.story_id == story_id)
            .one()
        )
        aggregate = StoryAggregate(
            story_id=story_id,
            average_rating=float(average) if count else None,
            rating_count=count,
        )
        self.db.query(Story).filter(Story.id == story_id).update(
            {Story.average_rating: aggregate.average_rating, Story.rating_count: count},
            synchronize_session="fetch",
        )
        return aggregate

    def distribution(self, story_id: int) -> list[dict[str, int]]:
        """Count of ratings per whole star over every rating of the story."""
        rows = (
            self.db.query(Rating.rating, func.count(Rating.id))
            .filter(Rating.story_id == story_id)
            .group_by(Rating.rating)
            .all()
        )
        return build_distribution(rows)

    def list_ratings(
        self,
        story_id: int,
        sort: str = "newest",
        page: int = 1,
        limit: int = 20,
    ) -> dict[str, Any]:
        """Page through a story's ratings.

        Returns:
            {
                "ratings": [Rating, ...],
                "statistics": {"average_rating", "total_count", "distribution"},
                "pagination": Pagination,
            }
        """
        if sort not in _RATING_SORT_ORDERS:
            raise ValidationError(
                f"Unknown sort '{sort}'", details={"allowed": list(_RATING_SORT_ORDERS)}
            )
        story = get_story(self.db, story_id)

        query = self.db.query(Rating).filter(Rating.story_id == story_id)
        total = query.count()
        rows = (
            query.order_by(*_RATING_SORT_ORDERS[sort])
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        return {
            "ratings": rows,
            "statistics": {
                "average_rating": story.average_rating,
                "total_count": story.rating_count,
                "distribution": self.distribution(story_id),
            },
            "pagination": Pagination.build(page, limit, total),
        }

    def list_user_ratings(self, user_id: int, page: int = 1, limit: int = 20) -> dict[str, Any]:
        """Page through the user's ratings, most recently updated first."""
        query = (
            self.db.query(Rating)
            .join(Story, Rating.story_id == Story.id)
            .filter(Rating.user_id == user_id, Story.deleted_at.is_(None))
        )
        total = query.count()
        average = query.with_entities(func.avg(Rating.rating)).scalar()
        grouped = (
            query.with_entities(Rating.rating, func.count(Rating.id)).group_by(Rating.rating).all()
        )
        rows = (
            query.order_by(Rating.updated_at.desc(), Rating.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return {
            "ratings": rows,
            "summary": {
                "total": total,
                "average_rating": round(float(average), 2) if average is not None else 0.0,
                "distribution": build_distribution(grouped),
            },
            "pagination": Pagination.build(page, limit, total),
        }
