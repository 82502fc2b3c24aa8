"""Analytics and dashboard schemas."""

import datetime

from pydantic import BaseModel

from reading_api.schemas.common import StorySummary
from reading_api.schemas.progress import ProgressWithStory
from reading_api.schemas.rating import StarCount


class UserAnalyticsSummary(BaseModel):
    total_stories_started: int
    total_stories_completed: int
    completion_rate: float
    total_reading_time_minutes: int
    total_words_read: int
    average_reading_time_minutes: int
    bookmarks_count: int
    ratings_count: int
    current_streak: int


class DailyProgress(BaseModel):
    """Reading activity rolled up for one calendar day."""

    date: datetime.date
    reading_time_minutes: int
    words_read: int
    stories_completed: int
    stories_read: int


class UserAnalyticsResponse(BaseModel):
    period: int
    summary: UserAnalyticsSummary
    language_preferences: dict[str, int]
    recent_activity: list[ProgressWithStory]
    progress_by_day: list[DailyProgress]


class UserStatsResponse(BaseModel):
    """Lifetime totals for one reader."""

    total_stories_started: int
    total_stories_completed: int
    completion_rate: float
    total_ratings: int
    average_rating: float
    recent_progress: list[ProgressWithStory]


class MonthlyStats(BaseModel):
    stories_completed: int
    total_reading_minutes: int


class CategoryCount(BaseModel):
    name: str
    count: int


class DashboardResponse(BaseModel):
    recent_progress: list[ProgressWithStory]
    monthly_stats: MonthlyStats
    favorite_categories: list[CategoryCount]
    current_streak: int


class StoryRatingStats(BaseModel):
    average: float | None
    total: int
    distribution: list[StarCount]


class StoryReadingStats(BaseModel):
    total_readers: int
    completed_readers: int
    completion_rate: float
    average_completion_percentage: float
    average_reading_time_minutes: int
    popular_language: str | None


class StoryAnalyticsResponse(BaseModel):
    story: StorySummary
    ratings: StoryRatingStats
    reading: StoryReadingStats
    period_days: int
    recent_readers: int


class ContentTotals(BaseModel):
    total_stories: int
    published_stories: int
    draft_stories: int


class UserTotals(BaseModel):
    total_users: int
    active_readers: int


class EngagementTotals(BaseModel):
    total_ratings: int
    average_rating: float
    total_reading_sessions: int
    total_bookmarks: int
    completion_rate: float


class MostReadStory(BaseModel):
    story: StorySummary
    reader_count: int


class PlatformAnalyticsResponse(BaseModel):
    period_days: int
    content: ContentTotals
    users: UserTotals
    engagement: EngagementTotals
    top_rated: list[StorySummary]
    most_read: list[MostReadStory]
