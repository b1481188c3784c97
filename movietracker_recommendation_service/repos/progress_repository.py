"""Repository for a user's per-movie watch/rating progress."""

import logging
from datetime import UTC, datetime
from typing import Dict, Mapping, Optional

from sqlalchemy.orm import Session

from movietracker_recommendation_service.models import ProgressEntry, ProgressRecord
from movietracker_recommendation_service.models.progress_record import validate_rating

logger = logging.getLogger(__name__)


class ProgressRepository:
    """
    Repository for progress records stored under one namespace.

    Records are created on the first watch/rate action and committed after
    every mutation.
    """

    def __init__(self, db: Session, namespace: str):
        self.db = db
        self.namespace = namespace

    def _get_entry(self, movie_id: int) -> Optional[ProgressEntry]:
        return (
            self.db.query(ProgressEntry)
            .filter(
                ProgressEntry.namespace == self.namespace,
                ProgressEntry.movie_id == movie_id
            )
            .first()
        )

    def _get_or_create_entry(self, movie_id: int) -> ProgressEntry:
        entry = self._get_entry(movie_id)
        if entry is None:
            entry = ProgressEntry(
                namespace=self.namespace,
                movie_id=movie_id,
                watched=False,
                rating=0
            )
            self.db.add(entry)
        return entry

    def _save(self, entry: ProgressEntry) -> ProgressRecord:
        entry.updated_at = datetime.now(UTC)  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(entry)
        return ProgressRecord(watched=bool(entry.watched), rating=int(entry.rating))

    def load_progress(self) -> Dict[int, ProgressRecord]:
        """
        Load an immutable snapshot of every record in the namespace.

        Returns:
            Dict mapping movie id to ProgressRecord
        """
        entries = (
            self.db.query(ProgressEntry)
            .filter(ProgressEntry.namespace == self.namespace)
            .order_by(ProgressEntry.movie_id)
            .all()
        )
        return {
            int(entry.movie_id): ProgressRecord(watched=bool(entry.watched), rating=int(entry.rating))
            for entry in entries
        }

    def get_record(self, movie_id: int) -> Optional[ProgressRecord]:
        """Get the record for a movie, or None if it was never touched."""
        entry = self._get_entry(movie_id)
        if entry is None:
            return None
        return ProgressRecord(watched=bool(entry.watched), rating=int(entry.rating))

    def toggle_watched(self, movie_id: int) -> ProgressRecord:
        """
        Flip a movie's watched flag.

        Marking a movie unwatched also clears its rating.

        Args:
            movie_id: Movie to toggle

        Returns:
            Updated ProgressRecord
        """
        entry = self._get_or_create_entry(movie_id)
        entry.watched = not entry.watched  # type: ignore[assignment]
        if not entry.watched:
            entry.rating = 0  # type: ignore[assignment]

        record = self._save(entry)
        logger.info(f"Movie {movie_id} marked {'watched' if record.watched else 'unwatched'}")
        return record

    def set_rating(self, movie_id: int, rating: int) -> ProgressRecord:
        """
        Rate a movie.

        Giving the movie the rating it already has removes the rating.
        Any non-zero rating marks the movie watched.

        Args:
            movie_id: Movie to rate
            rating: Rating 0-5 (0 clears)

        Returns:
            Updated ProgressRecord

        Raises:
            MalformedProgressError: If rating is not an integer in [0, 5]
        """
        validate_rating(rating)

        entry = self._get_or_create_entry(movie_id)
        if entry.rating == rating:
            entry.rating = 0  # type: ignore[assignment]
        else:
            entry.rating = rating  # type: ignore[assignment]
            if rating > 0:
                entry.watched = True  # type: ignore[assignment]

        record = self._save(entry)
        logger.info(f"Movie {movie_id} rated {record.rating}/5")
        return record

    def replace_all(self, progress: Mapping[int, ProgressRecord], batch_size: int = 100) -> int:
        """
        Replace every record in the namespace.

        The delete and all inserts share one transaction; on failure the
        previous records are left in place.

        Args:
            progress: Validated progress snapshot
            batch_size: Batch size for inserts

        Returns:
            Number of records stored
        """
        now = datetime.now(UTC)
        records = [
            ProgressEntry(
                namespace=self.namespace,
                movie_id=movie_id,
                watched=record.watched,
                rating=record.rating,
                updated_at=now
            )
            for movie_id, record in progress.items()
        ]

        try:
            logger.info(f"Clearing existing progress for namespace {self.namespace}...")
            self.db.query(ProgressEntry).filter(ProgressEntry.namespace == self.namespace).delete()

            # Batch insert
            count = 0
            for i in range(0, len(records), batch_size):
                batch = records[i:i + batch_size]
                self.db.bulk_save_objects(batch)
                count += len(batch)

            self.db.commit()
        except Exception as e:
            logger.error(f"Error replacing progress for namespace {self.namespace}: {str(e)}")
            self.db.rollback()
            raise

        logger.info(f"✓ Stored {count} progress records")
        return count

    def count_records(self) -> int:
        """Count records in the namespace."""
        return self.db.query(ProgressEntry).filter(ProgressEntry.namespace == self.namespace).count()
