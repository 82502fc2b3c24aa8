"""Bookmark model."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from reading_api.database import Base


class Bookmark(Base):
    """A story saved by a user. Absence means not bookmarked."""

    __tablename__ = "bookmarks"
    __table_args__ = (UniqueConstraint("user_id", "story_id", name="uq_bookmarks_user_story"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    story_id = Column(
        Integer, ForeignKey("stories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    user = relationship("User", backref="bookmarks")
    story = relationship("Story")
