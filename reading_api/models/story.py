"""Story and category models.

Stories and categories are managed by the content service; this service
reads them and owns only the rating aggregate columns on ``stories``.
"""

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, String, Table
from sqlalchemy.orm import relationship

from reading_api.database import Base
from reading_api.models.enums import StoryStatus
from reading_api.models.mixins import SoftDeleteMixin, TimestampMixin

story_categories = Table(
    "story_categories",
    Base.metadata,
    Column("story_id", Integer, ForeignKey("stories.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "category_id", Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True
    ),
)


class Story(Base, TimestampMixin, SoftDeleteMixin):
    """A bilingual story."""

    __tablename__ = "stories"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    title = Column(JSON, nullable=False)  # {"en": ..., "tr": ...}
    short_description = Column(JSON, nullable=True)
    status = Column(String(20), nullable=False, default="DRAFT", index=True)  # "DRAFT" | "PUBLISHED"
    published_at = Column(DateTime(timezone=True), nullable=True)

    # Denormalized from ratings; rewritten on every rating mutation
    average_rating = Column(Float, nullable=True)
    rating_count = Column(Integer, nullable=False, default=0)

    # Relationships
    categories = relationship("Category", secondary=story_categories, back_populates="stories")
    progress = relationship(
        "ReadingProgress", back_populates="story", cascade="all, delete-orphan", passive_deletes=True
    )
    ratings = relationship(
        "Rating", back_populates="story", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def is_published(self) -> bool:
        return self.status == StoryStatus.PUBLISHED.value and self.deleted_at is None


class Category(Base, TimestampMixin):
    """Story category."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(255), unique=True, nullable=False)
    name = Column(JSON, nullable=False)  # {"en": ..., "tr": ...}

    stories = relationship("Story", secondary=story_categories, back_populates="categories")
