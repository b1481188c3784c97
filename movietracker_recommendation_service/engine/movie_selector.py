"""Filter and sort the catalog for browsing."""
import unicodedata
from typing import List, Mapping, Sequence

from movietracker_recommendation_service.models.movie import Movie
from movietracker_recommendation_service.models.progress_record import ProgressRecord
from movietracker_recommendation_service.models.query import (
    CategoryFilter,
    MovieQuery,
    SortKey,
    StatusFilter,
)


def title_collation_key(title: str) -> str:
    """Accent- and case-insensitive key, so 'Éclair' sorts next to 'eclair'."""
    decomposed = unicodedata.normalize("NFKD", title)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def matches_text(movie: Movie, text: str) -> bool:
    if not text:
        return True
    needle = text.lower()
    return (
        needle in movie.title.lower()
        or needle in movie.song.lower()
        or needle in str(movie.year)
    )


def matches_category(movie: Movie, category: CategoryFilter) -> bool:
    return category == CategoryFilter.ALL or movie.category.value == category.value


def matches_status(movie: Movie, progress: Mapping[int, ProgressRecord], status: StatusFilter) -> bool:
    record = progress.get(movie.id)

    if status == StatusFilter.WATCHED:
        return record is not None and record.watched
    if status == StatusFilter.UNWATCHED:
        return record is None or not record.watched
    if status == StatusFilter.RATED:
        return record is not None and record.rating > 0
    return True


def current_rating(progress: Mapping[int, ProgressRecord], movie_id: int) -> int:
    record = progress.get(movie_id)
    return record.rating if record is not None else 0


def sort_movies(
        movies: Sequence[Movie],
        progress: Mapping[int, ProgressRecord],
        sort_key: SortKey
) -> List[Movie]:
    """Sort movies; every ordering is stable."""
    if sort_key == SortKey.TITLE:
        return sorted(movies, key=lambda movie: title_collation_key(movie.title))
    if sort_key == SortKey.YEAR_ASC:
        return sorted(movies, key=lambda movie: movie.year)
    if sort_key == SortKey.YEAR_DESC:
        return sorted(movies, key=lambda movie: movie.year, reverse=True)
    if sort_key == SortKey.RATING:
        return sorted(movies, key=lambda movie: current_rating(progress, movie.id), reverse=True)
    raise ValueError(f"Unknown sort key: {sort_key}")


def select(
        catalog: Sequence[Movie],
        progress: Mapping[int, ProgressRecord],
        query: MovieQuery
) -> List[Movie]:
    """
    Apply the query's text, category and status filters (all must match),
    then its sort order.

    Args:
        catalog: Loaded movies
        progress: Snapshot mapping movie id to ProgressRecord
        query: Browse query

    Returns:
        Matching movies in display order
    """
    matching = [
        movie for movie in catalog
        if matches_text(movie, query.text)
        and matches_category(movie, query.category)
        and matches_status(movie, progress, query.status)
    ]
    return sort_movies(matching, progress, query.sort_key)
