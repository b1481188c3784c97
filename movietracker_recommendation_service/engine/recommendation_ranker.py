"""Score unwatched movies against a preference profile."""
import logging
import math
from typing import List, Mapping, Sequence

from movietracker_recommendation_service.models.movie import Movie
from movietracker_recommendation_service.models.profile import PreferenceProfile, Recommendation
from movietracker_recommendation_service.models.progress_record import MAX_RATING, ProgressRecord

logger = logging.getLogger(__name__)

BASE_SCORE = 50
CATEGORY_WEIGHT = 30
ERA_WEIGHT = 20
DEFAULT_LIMIT = 5


def is_watched(progress: Mapping[int, ProgressRecord], movie_id: int) -> bool:
    record = progress.get(movie_id)
    return record is not None and record.watched


def score_movie(movie: Movie, profile: PreferenceProfile) -> int:
    """
    Affinity score in [50, 100].

    Base 50, up to 30 for the preferred category and up to 20 for an era
    the user has rated. Rounds half up.
    """
    score = float(BASE_SCORE)

    if movie.category == profile.preferred_category:
        category_mean = profile.average_rating_by_category[movie.category]
        score += (category_mean / MAX_RATING) * CATEGORY_WEIGHT

    era_mean = profile.average_rating_by_era[movie.era]
    if era_mean > 0:
        score += (era_mean / MAX_RATING) * ERA_WEIGHT

    return math.floor(score + 0.5)


def rank(
        catalog: Sequence[Movie],
        progress: Mapping[int, ProgressRecord],
        profile: PreferenceProfile,
        limit: int = DEFAULT_LIMIT
) -> List[Recommendation]:
    """
    Rank unwatched movies by score.

    Ties keep catalog order. With no rated movies every candidate scores 50,
    so the result is the first `limit` unwatched movies in catalog order.

    Args:
        catalog: Loaded movies
        progress: Snapshot mapping movie id to ProgressRecord
        profile: Profile from the preference analyzer
        limit: Maximum number of recommendations

    Returns:
        Recommendations, best first (empty if everything is watched)
    """
    if limit < 0:
        raise ValueError(f"limit must not be negative, got {limit}")

    candidates = [movie for movie in catalog if not is_watched(progress, movie.id)]
    if not candidates:
        logger.debug("No unwatched movies left to recommend")
        return []

    scored = [Recommendation(movie=movie, score=score_movie(movie, profile)) for movie in candidates]

    # sorted() is stable
    ranked = sorted(scored, key=lambda rec: rec.score, reverse=True)

    return ranked[:limit]
