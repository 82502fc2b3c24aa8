"""Reading progress model."""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from reading_api.database import Base
from reading_api.models.mixins import TimestampMixin


class ReadingProgress(Base, TimestampMixin):
    """One user's advancement through one story.

    ``completed_at`` is set exactly when ``status`` is COMPLETED.
    """

    __tablename__ = "reading_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "story_id", name="uq_reading_progress_user_story"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    story_id = Column(
        Integer, ForeignKey("stories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status = Column(String(20), nullable=False, default="STARTED", index=True)
    last_paragraph = Column(Integer, nullable=False, default=0)
    total_paragraphs = Column(Integer, nullable=True)
    completion_percentage = Column(Float, nullable=False, default=0.0)
    reading_time_seconds = Column(Integer, nullable=False, default=0)
    words_read = Column(Integer, nullable=False, default=0)
    language = Column(String(5), nullable=True)  # "en" | "tr"
    started_at = Column(DateTime(timezone=True), nullable=False)
    last_read_at = Column(DateTime(timezone=True), nullable=False, index=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    user = relationship("User", backref="reading_progress")
    story = relationship("Story", back_populates="progress")
