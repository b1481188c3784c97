"""Reduce a catalog and a progress snapshot to a preference profile."""
import logging
from typing import List, Mapping, Sequence, Tuple

from movietracker_recommendation_service.engine.aggregation import grouped_mean
from movietracker_recommendation_service.models.movie import (
    CATEGORY_ORDER,
    ERA_ORDER,
    Category,
    Movie,
)
from movietracker_recommendation_service.models.profile import PreferenceProfile
from movietracker_recommendation_service.models.progress_record import ProgressRecord

logger = logging.getLogger(__name__)

HIGHLY_RATED_THRESHOLD = 4


def rated_movies(
        catalog: Sequence[Movie],
        progress: Mapping[int, ProgressRecord]
) -> List[Tuple[Movie, int]]:
    """
    Pair each rated catalog movie with its rating, in catalog order.

    Progress for ids outside the catalog is ignored.
    """
    rated = []
    for movie in catalog:
        record = progress.get(movie.id)
        if record is not None and record.rating > 0:
            rated.append((movie, record.rating))
    return rated


def analyze(catalog: Sequence[Movie], progress: Mapping[int, ProgressRecord]) -> PreferenceProfile:
    """
    Build the preference profile for a progress snapshot.

    Only rated movies participate. Category and era averages default to 0.0
    when nothing in that partition is rated.

    Args:
        catalog: Loaded movies
        progress: Snapshot mapping movie id to ProgressRecord

    Returns:
        PreferenceProfile
    """
    rated = rated_movies(catalog, progress)

    by_category = grouped_mean(
        ((movie.category, rating) for movie, rating in rated), CATEGORY_ORDER
    )
    by_era = grouped_mean(
        ((movie.era, rating) for movie, rating in rated), ERA_ORDER
    )

    # Strict comparison: equal averages resolve to live-action
    if by_category[Category.ANIMATION] > by_category[Category.LIVE_ACTION]:
        preferred_category = Category.ANIMATION
    else:
        preferred_category = Category.LIVE_ACTION

    # max() keeps the first maximal era in ERA_ORDER
    preferred_era = max(ERA_ORDER, key=lambda era: by_era[era])

    highly_rated_ids = frozenset(
        movie.id for movie, rating in rated if rating >= HIGHLY_RATED_THRESHOLD
    )

    logger.debug(
        f"Analyzed {len(rated)} rated movies: preferred {preferred_category.value}, "
        f"{preferred_era.value}"
    )

    return PreferenceProfile(
        average_rating_by_category=by_category,
        average_rating_by_era=by_era,
        preferred_category=preferred_category,
        preferred_era=preferred_era,
        highly_rated_ids=highly_rated_ids,
    )
