"""Shared test fixtures and configuration for pytest."""
import os

# Must be set before models.database is imported
os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')

import json
from typing import Dict, List
from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from movietracker_recommendation_service.models.base import Base
from movietracker_recommendation_service.models.movie import Category, Movie
from movietracker_recommendation_service.models.progress_entry import ProgressEntry
from movietracker_recommendation_service.models.progress_record import ProgressRecord
from movietracker_recommendation_service.repos.progress_repository import ProgressRepository
from movietracker_recommendation_service.services.tracker_service import MovieTrackerService

TEST_NAMESPACE = 'testProgress'


# ===== Database Fixtures =====

@pytest.fixture(scope="function")
def test_db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def test_session_factory(test_db_engine):
    """Session factory bound to the test database."""
    return sessionmaker(bind=test_db_engine, autocommit=False, autoflush=False)


@pytest.fixture(scope="function")
def test_db_session(test_session_factory):
    """Create a database session for testing."""
    session = test_session_factory()
    yield session
    session.close()


@pytest.fixture
def progress_repository(test_db_session) -> ProgressRepository:
    """ProgressRepository bound to the test session."""
    return ProgressRepository(test_db_session, TEST_NAMESPACE)


# ===== Sample Data Fixtures =====

@pytest.fixture
def frozen() -> Movie:
    return Movie(
        id=1,
        title='Frozen',
        year=2013,
        category=Category.ANIMATION,
        song='Let It Go',
        description='Two sisters and a kingdom trapped in eternal winter.'
    )


@pytest.fixture
def mary_poppins() -> Movie:
    return Movie(
        id=2,
        title='Mary Poppins',
        year=1964,
        category=Category.LIVE_ACTION,
        song='A Spoonful of Sugar',
        description='A magical nanny.'
    )


@pytest.fixture
def two_movie_catalog(frozen, mary_poppins) -> List[Movie]:
    """The Frozen / Mary Poppins catalog."""
    return [frozen, mary_poppins]


@pytest.fixture
def sample_catalog_data() -> List[Dict]:
    """Catalog entries as they appear in movies.json."""
    return [
        {'id': 1, 'title': 'Cinderella', 'year': 1950, 'type': 'animation',
         'song': 'Bibbidi-Bobbidi-Boo', 'description': 'A mistreated young woman attends the ball.'},
        {'id': 2, 'title': 'Mary Poppins', 'year': 1964, 'type': 'live-action',
         'song': 'A Spoonful of Sugar', 'description': 'A magical nanny.'},
        {'id': 3, 'title': 'Aladdin', 'year': 1992, 'type': 'animation',
         'song': 'A Whole New World', 'description': 'A street urchin finds a magic lamp.'},
        {'id': 4, 'title': 'The Lion King', 'year': 1994, 'type': 'animation',
         'song': 'Circle of Life', 'description': 'A lion cub must reclaim his kingdom.'},
        {'id': 5, 'title': 'Enchanted', 'year': 2007, 'type': 'live-action',
         'song': "That's How You Know", 'description': 'A princess lands in New York.'},
        {'id': 6, 'title': 'Frozen', 'year': 2013, 'type': 'animation',
         'song': 'Let It Go', 'description': 'Eternal winter.'},
        {'id': 7, 'title': 'Encanto', 'year': 2021, 'type': 'animation',
         'song': "We Don't Talk About Bruno", 'description': 'A magical Colombian family.'},
    ]


@pytest.fixture
def sample_catalog(sample_catalog_data) -> List[Movie]:
    """Seven-movie catalog covering both categories and all eras."""
    return [Movie.from_dict(entry) for entry in sample_catalog_data]


@pytest.fixture
def catalog_file(tmp_path, sample_catalog_data):
    """movies.json written to a temporary directory."""
    path = tmp_path / 'movies.json'
    with open(path, 'w') as f:
        json.dump(sample_catalog_data, f)
    return path


@pytest.fixture
def mock_catalog_loader(sample_catalog):
    """Mock CatalogLoader returning the sample catalog."""
    mock = Mock()
    mock.load_catalog.return_value = sample_catalog
    return mock


@pytest.fixture
def tracker_service(mock_catalog_loader, test_session_factory) -> MovieTrackerService:
    """MovieTrackerService wired to the test database and sample catalog."""
    return MovieTrackerService(
        catalog_loader=mock_catalog_loader,
        session_factory=test_session_factory,
        namespace=TEST_NAMESPACE,
        recommendation_limit=5
    )


@pytest.fixture
def stored_progress(test_db_session) -> Dict[int, ProgressRecord]:
    """Progress rows for the sample catalog, stored in the test database."""
    progress = {
        1: ProgressRecord(watched=True, rating=5),
        3: ProgressRecord(watched=True, rating=4),
        5: ProgressRecord(watched=True, rating=0),
        6: ProgressRecord(watched=False, rating=0),
    }
    for movie_id, record in progress.items():
        test_db_session.add(ProgressEntry(
            namespace=TEST_NAMESPACE,
            movie_id=movie_id,
            watched=record.watched,
            rating=record.rating
        ))
    test_db_session.commit()
    return progress


# ===== Azure Functions Fixtures =====

@pytest.fixture
def mock_http_request():
    """Mock Azure Functions HttpRequest."""
    mock_req = Mock()
    mock_req.route_params = {}
    mock_req.params = {}
    mock_req.get_json.return_value = {}
    mock_req.get_body.return_value = b''
    return mock_req
