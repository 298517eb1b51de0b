"""
Review-status database models
SQLAlchemy models for artifact review submissions and visitor ratings
"""

from sqlalchemy import (
    Column, String, DateTime, Text, Integer, ForeignKey,
    CheckConstraint, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import enum

from artifact_search.db.session import Base


class ReviewStatus(str, enum.Enum):
    """Review workflow status of a submitted artifact"""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


# Statuses that keep an artifact out of the public catalogue
HIDDEN_STATUSES = (ReviewStatus.PENDING.value, ReviewStatus.REJECTED.value)


class ReviewRecord(Base):
    """One submission of an artifact for review; resubmissions add new rows"""
    __tablename__ = "review_records"
    __table_args__ = (
        Index("ix_review_records_artifact_saved", "artifact_id", "saved_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    artifact_id = Column(String(64), nullable=False, index=True)  # document id, not enforced across stores
    user_id = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default=ReviewStatus.PENDING.value)
    reason = Column(Text, nullable=True)
    professor_id = Column(Integer, nullable=True)
    saved_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    ratings = relationship("Rating", back_populates="review", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<ReviewRecord(id={self.id}, artifact_id='{self.artifact_id}', status='{self.status}')>"


class Rating(Base):
    """Visitor rating, linked to an artifact through its review record"""
    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("user_id", "review_id", name="uq_ratings_user_review"),
        CheckConstraint("rating_value BETWEEN 1 AND 5", name="ck_ratings_value_range"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False)
    review_id = Column(Integer, ForeignKey("review_records.id"), nullable=False, index=True)
    rating_value = Column(Integer, nullable=False)
    rated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    # Relationships
    review = relationship("ReviewRecord", back_populates="ratings")

    def __repr__(self):
        return f"<Rating(id={self.id}, review_id={self.review_id}, value={self.rating_value})>"
