"""Unit tests for movietracker_recommendation_service.repos.progress_repository."""
from unittest.mock import patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from movietracker_recommendation_service.exceptions import MalformedProgressError
from movietracker_recommendation_service.models.progress_entry import ProgressEntry
from movietracker_recommendation_service.models.progress_record import ProgressRecord
from movietracker_recommendation_service.repos.progress_repository import ProgressRepository


class TestProgressRepositoryInit:
    """Tests for ProgressRepository initialization."""

    def test_init_with_session(self, test_db_session):
        # Act
        repo = ProgressRepository(test_db_session, 'ns')

        # Assert
        assert repo.db == test_db_session
        assert repo.namespace == 'ns'


class TestLoadProgress:
    """Tests for load_progress method."""

    def test_load_progress_empty(self, progress_repository):
        assert progress_repository.load_progress() == {}

    def test_load_progress_returns_snapshot(self, progress_repository, stored_progress):
        assert progress_repository.load_progress() == stored_progress

    def test_load_progress_only_reads_own_namespace(self, progress_repository, test_db_session):
        # Arrange
        test_db_session.add(ProgressEntry(namespace='other', movie_id=1, watched=True, rating=5))
        test_db_session.commit()

        # Act & Assert
        assert progress_repository.load_progress() == {}


class TestGetRecord:
    """Tests for get_record method."""

    def test_get_record_absent_returns_none(self, progress_repository):
        assert progress_repository.get_record(42) is None

    def test_get_record_present(self, progress_repository, stored_progress):
        assert progress_repository.get_record(1) == ProgressRecord(watched=True, rating=5)


class TestToggleWatched:
    """Tests for toggle_watched method."""

    def test_toggle_creates_record_as_watched(self, progress_repository, test_db_session):
        # Act
        record = progress_repository.toggle_watched(2)

        # Assert
        assert record == ProgressRecord(watched=True, rating=0)
        assert test_db_session.query(ProgressEntry).count() == 1

    def test_toggle_twice_returns_to_unwatched(self, progress_repository):
        # Act
        progress_repository.toggle_watched(2)
        record = progress_repository.toggle_watched(2)

        # Assert
        assert record == ProgressRecord(watched=False, rating=0)
        assert progress_repository.get_record(2) == ProgressRecord(watched=False, rating=0)

    def test_toggle_unwatched_clears_rating(self, progress_repository, stored_progress):
        # Act
        record = progress_repository.toggle_watched(1)

        # Assert
        assert record == ProgressRecord(watched=False, rating=0)


class TestSetRating:
    """Tests for set_rating method."""

    def test_set_rating_marks_watched(self, progress_repository):
        # Act
        record = progress_repository.set_rating(4, 3)

        # Assert
        assert record == ProgressRecord(watched=True, rating=3)

    def test_set_rating_changes_existing_rating(self, progress_repository, stored_progress):
        # Act
        record = progress_repository.set_rating(1, 2)

        # Assert
        assert record == ProgressRecord(watched=True, rating=2)

    def test_set_same_rating_clears_it(self, progress_repository, stored_progress):
        # Act
        record = progress_repository.set_rating(1, 5)

        # Assert - watched stays
        assert record == ProgressRecord(watched=True, rating=0)

    def test_set_rating_on_unwatched_record(self, progress_repository, stored_progress):
        # Act
        record = progress_repository.set_rating(6, 4)

        # Assert
        assert record == ProgressRecord(watched=True, rating=4)

    def test_set_rating_zero_on_new_record_stays_unwatched(self, progress_repository):
        # Act
        record = progress_repository.set_rating(3, 0)

        # Assert
        assert record == ProgressRecord(watched=False, rating=0)

    @pytest.mark.parametrize('rating', [-1, 6, '4', 3.5])
    def test_set_rating_rejects_invalid(self, progress_repository, test_db_session, rating):
        # Act & Assert
        with pytest.raises(MalformedProgressError):
            progress_repository.set_rating(1, rating)
        assert test_db_session.query(ProgressEntry).count() == 0

    def test_rating_implies_watched_after_any_sequence(self, progress_repository):
        # Act
        progress_repository.set_rating(1, 4)
        progress_repository.toggle_watched(1)
        progress_repository.set_rating(1, 2)
        progress_repository.toggle_watched(1)

        # Assert
        for record in progress_repository.load_progress().values():
            assert record.rating == 0 or record.watched


class TestReplaceAll:
    """Tests for replace_all method."""

    def test_replace_all_clears_and_inserts(self, progress_repository, stored_progress):
        # Arrange
        new_progress = {
            10: ProgressRecord(watched=True, rating=1),
            11: ProgressRecord(watched=False, rating=0),
        }

        # Act
        count = progress_repository.replace_all(new_progress)

        # Assert
        assert count == 2
        assert progress_repository.load_progress() == new_progress

    def test_replace_all_keeps_other_namespaces(self, progress_repository, test_db_session):
        # Arrange
        test_db_session.add(ProgressEntry(namespace='other', movie_id=1, watched=True, rating=5))
        test_db_session.commit()

        # Act
        progress_repository.replace_all({2: ProgressRecord(watched=True, rating=3)})

        # Assert
        assert test_db_session.query(ProgressEntry).filter_by(namespace='other').count() == 1

    def test_replace_all_with_small_batches(self, progress_repository):
        # Arrange
        progress = {movie_id: ProgressRecord(watched=True, rating=1) for movie_id in range(1, 8)}

        # Act
        count = progress_repository.replace_all(progress, batch_size=3)

        # Assert
        assert count == 7
        assert progress_repository.count_records() == 7

    def test_replace_all_empty(self, progress_repository, stored_progress):
        assert progress_repository.replace_all({}) == 0
        assert progress_repository.count_records() == 0

    def test_replace_all_failure_keeps_existing_progress(
            self, progress_repository, test_db_session, stored_progress
    ):
        # Arrange
        new_progress = {
            10: ProgressRecord(watched=True, rating=1),
            11: ProgressRecord(watched=True, rating=2),
        }

        # Act
        with patch.object(
                test_db_session,
                'bulk_save_objects',
                side_effect=[None, SQLAlchemyError("Insert failed")]
        ):
            with pytest.raises(SQLAlchemyError):
                progress_repository.replace_all(new_progress, batch_size=1)

        # Assert
        assert progress_repository.load_progress() == stored_progress
