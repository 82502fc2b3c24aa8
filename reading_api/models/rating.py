"""Rating model."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from reading_api.database import Base


class Rating(Base):
    """One user's 1-5 evaluation of one story."""

    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("user_id", "story_id", name="uq_ratings_user_story"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_ratings_range"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    story_id = Column(
        Integer, ForeignKey("stories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    rating = Column(Float, nullable=False)
    comment = Column(Text, nullable=True)
    # Set by the service so ordering by recency is exact
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    user = relationship("User", backref="ratings")
    story = relationship("Story", back_populates="ratings")
