"""Read-only engagement views: dashboards and analytics."""

from collections import Counter, defaultdict
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from reading_api.config import Settings, get_settings
from reading_api.models import Bookmark, Category, Rating, ReadingProgress, Story, User
from reading_api.models.enums import ReadingStatus, StoryStatus
from reading_api.models.story import story_categories
from reading_api.services.rating_service import RatingService
from reading_api.services.stories import get_story
from reading_api.services.streak import StreakCalculator, activity_day

COMPLETED = ReadingStatus.COMPLETED.value


def _percentage(part: int, whole: int) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


def _minutes(seconds: int | float) -> int:
    return round(seconds / 60)


class AnalyticsService:
    """Composes progress, rating and bookmark data into read views."""

    def __init__(self, db: Session, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()
        self.streaks = StreakCalculator(db, self.settings.streak_allows_yesterday)

    def _user_progress(self, user_id: int):
        return (
            self.db.query(ReadingProgress)
            .join(Story, ReadingProgress.story_id == Story.id)
            .filter(ReadingProgress.user_id == user_id, Story.deleted_at.is_(None))
        )

    def user_dashboard(self, user_id: int, now: datetime | None = None) -> dict[str, Any]:
        """Recent reading, this month's totals and favorite categories."""
        now = now or datetime.now(UTC)

        recent_progress = (
            self._user_progress(user_id)
            .order_by(ReadingProgress.last_read_at.desc(), ReadingProgress.id.desc())
            .limit(self.settings.dashboard_recent_limit)
            .all()
        )

        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        monthly = (
            self.db.query(ReadingProgress.status, ReadingProgress.reading_time_seconds)
            .filter(
                ReadingProgress.user_id == user_id,
                ReadingProgress.last_read_at >= month_start,
            )
            .all()
        )

        return {
            "recent_progress": recent_progress,
            "monthly_stats": {
                "stories_completed": sum(1 for status, _ in monthly if status == COMPLETED),
                "total_reading_minutes": _minutes(sum(seconds or 0 for _, seconds in monthly)),
            },
            "favorite_categories": self._favorite_categories(user_id),
            "current_streak": self.streaks.compute_streak(user_id, activity_day(now)),
        }

    def _favorite_categories(self, user_id: int) -> list[dict[str, Any]]:
        """Categories of the stories the user has read, most read first."""
        counts = (
            self.db.query(story_categories.c.category_id, func.count(ReadingProgress.id))
            .join(ReadingProgress, ReadingProgress.story_id == story_categories.c.story_id)
            .filter(ReadingProgress.user_id == user_id)
            .group_by(story_categories.c.category_id)
            .order_by(func.count(ReadingProgress.id).desc(), story_categories.c.category_id)
            .limit(self.settings.favorite_categories_limit)
            .all()
        )
        if not counts:
            return []

        names = {
            category.id: (category.name or {}).get("en") or "Unknown"
            for category in self.db.query(Category)
            .filter(Category.id.in_([category_id for category_id, _ in counts]))
            .all()
        }
        return [
            {"name": names.get(category_id, "Unknown"), "count": count}
            for category_id, count in counts
        ]

    def user_stats(self, user_id: int) -> dict[str, Any]:
        """Lifetime reading and rating totals."""
        progress = self._user_progress(user_id)
        started = progress.count()
        completed = progress.filter(ReadingProgress.status == COMPLETED).count()
        total_ratings, average_rating = (
            self.db.query(func.count(Rating.id), func.avg(Rating.rating))
            .filter(Rating.user_id == user_id)
            .one()
        )
        recent_progress = (
            progress.order_by(ReadingProgress.last_read_at.desc(), ReadingProgress.id.desc())
            .limit(self.settings.dashboard_recent_limit)
            .all()
        )
        return {
            "total_stories_started": started,
            "total_stories_completed": completed,
            "completion_rate": _percentage(completed, started),
            "total_ratings": total_ratings,
            "average_rating": round(float(average_rating), 2) if average_rating else 0.0,
            "recent_progress": recent_progress,
        }

    def user_analytics(
        self, user_id: int, period_days: int | None = None, now: datetime | None = None
    ) -> dict[str, Any]:
        """Reading summary over the last ``period_days`` days."""
        period_days = period_days or self.settings.analytics_period_days
        now = now or datetime.now(UTC)
        since = now - timedelta(days=period_days)

        progress = (
            self.db.query(ReadingProgress)
            .filter(ReadingProgress.user_id == user_id, ReadingProgress.started_at >= since)
            .all()
        )
        started = len(progress)
        completed = sum(1 for p in progress if p.status == COMPLETED)
        reading_seconds = sum(p.reading_time_seconds or 0 for p in progress)
        words = sum(p.words_read or 0 for p in progress)

        bookmarks_count = (
            self.db.query(func.count(Bookmark.id)).filter(Bookmark.user_id == user_id).scalar()
        )
        ratings_count = (
            self.db.query(func.count(Rating.id)).filter(Rating.user_id == user_id).scalar()
        )

        recent_since = now - timedelta(days=self.settings.recent_activity_days)
        recent_activity = (
            self._user_progress(user_id)
            .filter(ReadingProgress.last_read_at >= recent_since)
            .order_by(ReadingProgress.last_read_at.desc(), ReadingProgress.id.desc())
            .limit(10)
            .all()
        )

        return {
            "period": period_days,
            "summary": {
                "total_stories_started": started,
                "total_stories_completed": completed,
                "completion_rate": _percentage(completed, started),
                "total_reading_time_minutes": _minutes(reading_seconds),
                "total_words_read": words,
                "average_reading_time_minutes": (
                    _minutes(reading_seconds / completed) if completed else 0
                ),
                "bookmarks_count": bookmarks_count,
                "ratings_count": ratings_count,
                "current_streak": self.streaks.compute_streak(user_id, activity_day(now)),
            },
            "language_preferences": dict(Counter(p.language for p in progress if p.language)),
            "recent_activity": recent_activity,
            "progress_by_day": self._progress_by_day(user_id, period_days, now),
        }

    def _progress_by_day(
        self, user_id: int, period_days: int, now: datetime
    ) -> list[dict[str, Any]]:
        """One row per calendar day of the window, oldest first, keyed by last_read_at."""
        today = activity_day(now)
        first_day = today - timedelta(days=period_days - 1)
        window_start = datetime(first_day.year, first_day.month, first_day.day, tzinfo=UTC)

        rows = (
            self.db.query(
                ReadingProgress.last_read_at,
                ReadingProgress.reading_time_seconds,
                ReadingProgress.words_read,
                ReadingProgress.status,
            )
            .filter(
                ReadingProgress.user_id == user_id,
                ReadingProgress.last_read_at >= window_start,
            )
            .all()
        )

        by_day: dict[Any, list] = defaultdict(list)
        for last_read_at, seconds, words, status in rows:
            by_day[activity_day(last_read_at)].append((seconds or 0, words or 0, status))

        result = []
        for offset in range(period_days):
            day = first_day + timedelta(days=offset)
            entries = by_day.get(day, [])
            result.append(
                {
                    "date": day,
                    "reading_time_minutes": _minutes(sum(e[0] for e in entries)),
                    "words_read": sum(e[1] for e in entries),
                    "stories_completed": sum(1 for e in entries if e[2] == COMPLETED),
                    "stories_read": len(entries),
                }
            )
        return result

    def story_analytics(
        self, story_id: int, period_days: int | None = None, now: datetime | None = None
    ) -> dict[str, Any]:
        """Readership and rating statistics for one story."""
        period_days = period_days or self.settings.analytics_period_days
        now = now or datetime.now(UTC)

        ratings = RatingService(self.db)
        story = get_story(self.db, story_id)

        base = self.db.query(ReadingProgress).filter(ReadingProgress.story_id == story_id)
        total_readers = base.count()
        completed_readers = base.filter(ReadingProgress.status == COMPLETED).count()
        average_completion, average_seconds = (
            self.db.query(
                func.avg(ReadingProgress.completion_percentage),
                func.avg(ReadingProgress.reading_time_seconds),
            )
            .filter(ReadingProgress.story_id == story_id)
            .one()
        )
        popular_language = (
            self.db.query(ReadingProgress.language)
            .filter(ReadingProgress.story_id == story_id, ReadingProgress.language.isnot(None))
            .group_by(ReadingProgress.language)
            .order_by(func.count(ReadingProgress.id).desc(), ReadingProgress.language)
            .first()
        )
        recent_readers = base.filter(
            ReadingProgress.started_at >= now - timedelta(days=period_days)
        ).count()

        return {
            "story": story,
            "ratings": {
                "average": story.average_rating,
                "total": story.rating_count,
                "distribution": ratings.distribution(story_id),
            },
            "reading": {
                "total_readers": total_readers,
                "completed_readers": completed_readers,
                "completion_rate": _percentage(completed_readers, total_readers),
                "average_completion_percentage": round(float(average_completion or 0), 2),
                "average_reading_time_minutes": _minutes(float(average_seconds or 0)),
                "popular_language": popular_language[0] if popular_language else None,
            },
            "period_days": period_days,
            "recent_readers": recent_readers,
        }

    def platform_analytics(
        self, period_days: int | None = None, now: datetime | None = None, limit: int = 5
    ) -> dict[str, Any]:
        """System-wide totals, top-rated and most-read stories."""
        period_days = period_days or self.settings.recent_activity_days
        now = now or datetime.now(UTC)
        since = now - timedelta(days=period_days)

        stories = self.db.query(Story).filter(Story.deleted_at.is_(None))
        total_stories = stories.count()
        published_stories = stories.filter(Story.status == StoryStatus.PUBLISHED.value).count()

        total_progress = self.db.query(func.count(ReadingProgress.id)).scalar()
        completed_progress = (
            self.db.query(func.count(ReadingProgress.id))
            .filter(ReadingProgress.status == COMPLETED)
            .scalar()
        )
        total_ratings, average_rating = self.db.query(
            func.count(Rating.id), func.avg(Rating.rating)
        ).one()
        active_readers = (
            self.db.query(func.count(func.distinct(ReadingProgress.user_id)))
            .filter(ReadingProgress.last_read_at >= since)
            .scalar()
        )

        published = stories.filter(Story.status == StoryStatus.PUBLISHED.value)
        top_rated = (
            published.filter(Story.average_rating.isnot(None))
            .order_by(Story.average_rating.desc(), Story.rating_count.desc(), Story.id)
            .limit(limit)
            .all()
        )

        reader_counts = (
            self.db.query(ReadingProgress.story_id, func.count(ReadingProgress.id))
            .join(Story, ReadingProgress.story_id == Story.id)
            .filter(Story.status == StoryStatus.PUBLISHED.value, Story.deleted_at.is_(None))
            .group_by(ReadingProgress.story_id)
            .order_by(func.count(ReadingProgress.id).desc(), ReadingProgress.story_id)
            .limit(limit)
            .all()
        )
        stories_by_id = {}
        if reader_counts:
            ids = [story_id for story_id, _ in reader_counts]
            stories_by_id = {
                story.id: story for story in self.db.query(Story).filter(Story.id.in_(ids)).all()
            }

        return {
            "period_days": period_days,
            "content": {
                "total_stories": total_stories,
                "published_stories": published_stories,
                "draft_stories": total_stories - published_stories,
            },
            "users": {
                "total_users": self.db.query(func.count(User.id)).scalar(),
                "active_readers": active_readers,
            },
            "engagement": {
                "total_ratings": total_ratings,
                "average_rating": round(float(average_rating), 2) if average_rating else 0.0,
                "total_reading_sessions": total_progress,
                "total_bookmarks": self.db.query(func.count(Bookmark.id)).scalar(),
                "completion_rate": _percentage(completed_progress, total_progress),
            },
            "top_rated": top_rated,
            "most_read": [
                {"story": stories_by_id[story_id], "reader_count": count}
                for story_id, count in reader_counts
            ],
        }
