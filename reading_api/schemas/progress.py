"""Reading progress schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from reading_api.models.enums import Language, ReadingStatus
from reading_api.schemas.common import Pagination, StorySummary


class ProgressUpdate(BaseModel):
    """Progress write. Omitted fields are left untouched."""

    story_id: int = Field(..., alias="storyId", gt=0)
    last_paragraph: int | None = Field(None, alias="lastParagraph", ge=0)
    total_paragraphs: int | None = Field(None, alias="totalParagraphs", ge=1)
    completion_percentage: float | None = Field(
        None, alias="completionPercentage", ge=0, le=100
    )
    reading_time_seconds: int | None = Field(None, alias="readingTimeSeconds", ge=0)
    words_read: int | None = Field(None, alias="wordsRead", ge=0)
    language: Language | None = None
    status: ReadingStatus | None = None

    model_config = ConfigDict(populate_by_name=True)

    def supplied_fields(self) -> dict:
        """Fields present in the request, excluding the story id."""
        return self.model_dump(exclude_unset=True, exclude={"story_id"})


class ProgressResponse(BaseModel):
    """Reading progress response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    story_id: int
    status: ReadingStatus
    last_paragraph: int
    total_paragraphs: int | None
    completion_percentage: float
    reading_time_seconds: int
    words_read: int
    language: Language | None
    started_at: datetime
    last_read_at: datetime
    completed_at: datetime | None


class ProgressWithStory(ProgressResponse):
    """Progress record with its story."""

    story: StorySummary


class ProgressSummary(BaseModel):
    total: int
    started: int
    completed: int


class ProgressListResponse(BaseModel):
    """Progress list with status counts."""

    progress: list[ProgressWithStory]
    summary: ProgressSummary
    pagination: Pagination


class CompletedListResponse(BaseModel):
    stories: list[ProgressWithStory]
    pagination: Pagination


class DeletedResponse(BaseModel):
    deleted: bool = True
