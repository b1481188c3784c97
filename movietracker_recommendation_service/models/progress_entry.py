"""Stored progress for one movie under one namespace."""

from datetime import UTC, datetime

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Index, Integer, String

from movietracker_recommendation_service.models.base import Base


class ProgressEntry(Base):
    """Persisted progress record.

    Each row is one ever-touched movie's {watched, rating} state for a namespace.
    """

    __tablename__ = "progress_entries"

    # Composite primary key
    namespace = Column(String(100), primary_key=True)
    movie_id = Column(Integer, primary_key=True)

    watched = Column(Boolean, nullable=False, default=False)
    rating = Column(Integer, nullable=False, default=0)

    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_progress_rating_range"),
        Index("idx_progress_namespace", "namespace"),
    )

    def __repr__(self):
        return (
            f"<ProgressEntry(namespace='{self.namespace}', movie_id={self.movie_id}, "
            f"watched={self.watched}, rating={self.rating})>"
        )
