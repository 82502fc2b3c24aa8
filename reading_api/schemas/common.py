"""Shared response envelope, pagination and localized text schemas."""

import math
from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Successful response wrapper."""

    success: bool = True
    data: T


class Pagination(BaseModel):
    """Pagination metadata for list responses."""

    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit))


class LocalizedText(BaseModel):
    """Localized story or category text as stored by the content service.

    Only the supported languages are returned; other keys are dropped.
    """

    model_config = ConfigDict(extra="ignore")

    en: str | None = None
    tr: str | None = None


class CategoryRef(BaseModel):
    """Category reference embedded in story summaries."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    slug: str
    name: LocalizedText


class StorySummary(BaseModel):
    """Story fields embedded in engagement responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    slug: str
    title: LocalizedText
    short_description: LocalizedText | None = None
    published_at: datetime | None = None
    average_rating: float | None
    rating_count: int
    categories: list[CategoryRef] = []
