"""Service to load the movie catalog from a local file or a remote URL"""
import json
import logging
from pathlib import Path
from typing import List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from movietracker_recommendation_service.config import get_catalog_source
from movietracker_recommendation_service.exceptions import CatalogLoadError
from movietracker_recommendation_service.models import Movie

logger = logging.getLogger(__name__)


class CatalogLoader:
    """Loads the movie catalog (movies.json) from disk or over HTTP."""

    def __init__(self, source: Optional[str] = None):
        self.source = source or get_catalog_source()

        # Configure session with retries
        self.session = requests.Session()
        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504]
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        # noinspection HttpUrlsUsage
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    @property
    def is_remote(self) -> bool:
        return self.source.startswith(("http://", "https://"))

    def _fetch_raw(self):
        if self.is_remote:
            try:
                response = self.session.get(self.source, timeout=10)
                response.raise_for_status()
                return response.json()
            except (requests.RequestException, ValueError) as e:
                raise CatalogLoadError(f"Failed to fetch catalog from {self.source}: {e}") from e

        path = Path(self.source)
        if not path.exists():
            raise CatalogLoadError(f"Catalog file not found: {path}")

        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogLoadError(f"Failed to read catalog {path}: {e}") from e

    def load_catalog(self) -> List[Movie]:
        """
        Load and validate the catalog.

        Returns:
            Movies in catalog order

        Raises:
            CatalogLoadError: If the source is unreachable or malformed
        """
        logger.info(f"Loading movie catalog from {self.source}...")
        raw = self._fetch_raw()

        if not isinstance(raw, list):
            raise CatalogLoadError("Catalog must be a JSON list of movies")

        movies: List[Movie] = []
        seen_ids = set()
        for i, entry in enumerate(raw):
            try:
                movie = Movie.from_dict(entry)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise CatalogLoadError(f"Invalid catalog entry at index {i}: {e!r}") from e

            if movie.id in seen_ids:
                raise CatalogLoadError(f"Duplicate movie id {movie.id} in catalog")
            seen_ids.add(movie.id)
            movies.append(movie)

        logger.info(f"✓ Loaded {len(movies)} movies")
        return movies
