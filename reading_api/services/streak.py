"""Reading streaks: consecutive calendar days with reading activity."""

from collections.abc import Iterable
from datetime import UTC, date, datetime, timedelta

from sqlalchemy.orm import Session

from reading_api.config import get_settings
from reading_api.models import ReadingProgress


def activity_day(timestamp: datetime) -> date:
    """Calendar day (UTC) of an activity timestamp.

    Naive timestamps are taken to be UTC already.
    """
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(UTC)
    return timestamp.date()


def calculate_streak(
    timestamps: Iterable[datetime | None],
    today: date,
    allow_yesterday: bool = True,
) -> int:
    """Count consecutive active days ending at the most recent active day.

    The run has to reach today, or yesterday when ``allow_yesterday`` is
    set; an older run counts as broken and yields 0. Days after ``today``
    are ignored.
    """
    days = sorted(
        {activity_day(ts) for ts in timestamps if ts is not None},
        reverse=True,
    )
    days = [day for day in days if day <= today]
    if not days:
        return 0

    anchor = today
    if days[0] != today:
        if not allow_yesterday or days[0] != today - timedelta(days=1):
            return 0
        anchor = days[0]

    streak = 0
    for day in days:
        if day != anchor - timedelta(days=streak):
            break
        streak += 1
    return streak


class StreakCalculator:
    """Derives a user's current streak from their progress timestamps."""

    def __init__(self, db: Session, allow_yesterday: bool | None = None):
        self.db = db
        if allow_yesterday is None:
            allow_yesterday = get_settings().streak_allows_yesterday
        self.allow_yesterday = allow_yesterday

    def compute_streak(self, user_id: int, today: date | None = None) -> int:
        rows = (
            self.db.query(ReadingProgress.last_read_at)
            .filter(ReadingProgress.user_id == user_id)
            .all()
        )
        return calculate_streak(
            (last_read_at for (last_read_at,) in rows),
            today or datetime.now(UTC).date(),
            self.allow_yesterday,
        )
