"""Service tying the catalog, progress store and recommendation engine together."""
import json
import logging
import math
from typing import Callable, Dict, List, Optional, Tuple, Union
from urllib.parse import quote

from sqlalchemy.orm import Session

from movietracker_recommendation_service.config import (
    get_progress_namespace,
    get_recommendation_limit,
)
from movietracker_recommendation_service.engine import analyze, rank, select
from movietracker_recommendation_service.engine.preference_analyzer import rated_movies
from movietracker_recommendation_service.exceptions import MalformedProgressError, MovieNotFoundError
from movietracker_recommendation_service.models import (
    Movie,
    MovieQuery,
    PreferenceProfile,
    ProgressRecord,
    Recommendation,
)
from movietracker_recommendation_service.models.database import SessionLocal
from movietracker_recommendation_service.models.progress_record import (
    dump_progress_map,
    parse_progress_map,
)
from movietracker_recommendation_service.repos import ProgressRepository
from movietracker_recommendation_service.services.catalog_loader import CatalogLoader

logger = logging.getLogger(__name__)

PLAYLIST_TITLE = "My Disney Soundtrack"
PLAYLIST_MAX_SONGS = 10
SPOTIFY_SEARCH_URL = "https://open.spotify.com/search/"


class MovieTrackerService:
    """
    Application layer for the movie tracker.

    Mutates progress through the repository and re-runs the pure engine on a
    fresh snapshot for every read.
    """

    def __init__(
            self,
            catalog_loader: Optional[CatalogLoader] = None,
            session_factory: Callable[[], Session] = SessionLocal,
            namespace: Optional[str] = None,
            recommendation_limit: Optional[int] = None
    ):
        """
        Initialize the tracker service.

        Args:
            catalog_loader: Loader for the movie catalog (default: configured source)
            session_factory: Callable returning a database session
            namespace: Progress namespace (default: from config)
            recommendation_limit: Default number of recommendations (default: from config)
        """
        self.catalog_loader = catalog_loader or CatalogLoader()
        self.session_factory = session_factory
        self.namespace = namespace or get_progress_namespace()
        if recommendation_limit is None:
            recommendation_limit = get_recommendation_limit()
        self.recommendation_limit = recommendation_limit

        # Loaded once, on first use
        self._catalog: Optional[List[Movie]] = None
        self._catalog_index: Optional[Dict[int, Movie]] = None

        logger.info(f"Initialized MovieTrackerService (namespace: {self.namespace})")

    # ===== CATALOG =====

    def _ensure_catalog(self):
        if self._catalog is None:
            self._catalog = self.catalog_loader.load_catalog()
            self._catalog_index = {movie.id: movie for movie in self._catalog}

    @property
    def catalog(self) -> List[Movie]:
        self._ensure_catalog()
        return self._catalog

    def get_movie(self, movie_id: int) -> Movie:
        """
        Raises:
            MovieNotFoundError: If the id is not in the catalog
        """
        self._ensure_catalog()
        movie = self._catalog_index.get(movie_id)
        if movie is None:
            raise MovieNotFoundError(movie_id)
        return movie

    # ===== PROGRESS =====

    def load_progress(self) -> Dict[int, ProgressRecord]:
        """Snapshot of the current progress map."""
        db = self.session_factory()
        try:
            return ProgressRepository(db, self.namespace).load_progress()
        finally:
            db.close()

    def get_progress(self, movie_id: int) -> Optional[ProgressRecord]:
        self.get_movie(movie_id)
        db = self.session_factory()
        try:
            return ProgressRepository(db, self.namespace).get_record(movie_id)
        finally:
            db.close()

    def toggle_watched(self, movie_id: int) -> ProgressRecord:
        """Flip a catalog movie's watched flag."""
        self.get_movie(movie_id)
        db = self.session_factory()
        try:
            return ProgressRepository(db, self.namespace).toggle_watched(movie_id)
        finally:
            db.close()

    def set_rating(self, movie_id: int, rating: int) -> ProgressRecord:
        """Rate a catalog movie (same rating again clears it)."""
        self.get_movie(movie_id)
        db = self.session_factory()
        try:
            return ProgressRepository(db, self.namespace).set_rating(movie_id, rating)
        finally:
            db.close()

    def export_progress(self) -> Dict[str, dict]:
        """Progress map in its {"<movieId>": {"watched", "rating"}} form."""
        return dump_progress_map(self.load_progress())

    def import_progress(self, data: Union[str, bytes, dict]) -> int:
        """
        Replace all progress with an exported progress map.

        Args:
            data: JSON text or decoded JSON object

        Returns:
            Number of records imported

        Raises:
            MalformedProgressError: If the data is not a valid progress map
        """
        if isinstance(data, (str, bytes)):
            try:
                data = json.loads(data)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise MalformedProgressError(f"Progress is not valid JSON: {e}") from e

        progress = parse_progress_map(data)

        db = self.session_factory()
        try:
            count = ProgressRepository(db, self.namespace).replace_all(progress)
        finally:
            db.close()

        logger.info(f"✓ Imported {count} progress records")
        return count

    # ===== RECOMMENDATIONS =====

    def get_profile(self) -> PreferenceProfile:
        return analyze(self.catalog, self.load_progress())

    def get_recommendations(self, limit: Optional[int] = None) -> List[Recommendation]:
        """
        Top unwatched movies for the current progress.

        Args:
            limit: Number of recommendations (default: configured limit)
        """
        _, recommendations = self.get_profile_and_recommendations(limit=limit)
        return recommendations

    def get_profile_and_recommendations(
            self,
            limit: Optional[int] = None
    ) -> Tuple[PreferenceProfile, List[Recommendation]]:
        """
        Profile and recommendations computed from one progress snapshot.

        Args:
            limit: Number of recommendations (default: configured limit)
        """
        if limit is None:
            limit = self.recommendation_limit

        progress = self.load_progress()
        profile = analyze(self.catalog, progress)
        return profile, rank(self.catalog, progress, profile, limit=limit)

    def browse(self, query: Optional[MovieQuery] = None) -> List[Movie]:
        """Filtered and sorted catalog."""
        movies, _ = self.browse_with_progress(query)
        return movies

    def browse_with_progress(
            self,
            query: Optional[MovieQuery] = None
    ) -> Tuple[List[Movie], Dict[int, ProgressRecord]]:
        """Filtered and sorted catalog together with the snapshot it was selected from."""
        progress = self.load_progress()
        return select(self.catalog, progress, query or MovieQuery()), progress

    # ===== SUMMARIES =====

    def get_stats(self) -> Dict:
        """
        Progress statistics over the catalog.

        Returns:
            Dict with total, watched and unwatched counts and the average
            rating (one decimal, None if nothing is rated)
        """
        progress = self.load_progress()
        total_movies = len(self.catalog)
        watched_count = sum(
            1 for movie in self.catalog
            if progress.get(movie.id) is not None and progress[movie.id].watched
        )

        ratings = [rating for _, rating in rated_movies(self.catalog, progress)]
        average_rating = None
        if ratings:
            # Half up to one decimal, so 4.25 shows as 4.3
            average_rating = math.floor(sum(ratings) * 10 / len(ratings) + 0.5) / 10

        return {
            'total_movies': total_movies,
            'watched_count': watched_count,
            'unwatched_count': total_movies - watched_count,
            'rated_count': len(ratings),
            'average_rating': average_rating
        }

    def get_soundtrack_playlist(self) -> Dict:
        """
        Songs from the user's rated movies, best rated first, with a Spotify
        search link for the first ten.
        """
        rated = rated_movies(self.catalog, self.load_progress())
        rated = sorted(rated, key=lambda pair: pair[1], reverse=True)

        top = rated[:PLAYLIST_MAX_SONGS]
        songs = [
            {
                'song': movie.song,
                'movie_id': movie.id,
                'title': movie.title,
                'year': movie.year,
                'rating': rating
            }
            for movie, rating in top
        ]

        search_url = None
        if top:
            search_query = " OR ".join(movie.song for movie, _ in top)
            # Same escaping as encodeURIComponent
            search_url = SPOTIFY_SEARCH_URL + quote(search_query, safe="!*'()")

        return {
            'name': f"{PLAYLIST_TITLE} ({len(rated)} songs)",
            'song_count': len(rated),
            'songs': songs,
            'remaining_count': max(len(rated) - PLAYLIST_MAX_SONGS, 0),
            'spotify_search_url': search_url
        }
