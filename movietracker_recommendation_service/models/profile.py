"""Derived preference profile and recommendation types."""
from dataclasses import dataclass, field
from typing import Dict, FrozenSet

from movietracker_recommendation_service.models.movie import Category, Era, Movie, CATEGORY_ORDER, ERA_ORDER


@dataclass(frozen=True)
class PreferenceProfile:
    """
    Which category and era the user rates most highly.

    Averages of 0.0 mean "no signal" for that partition, not a low score.
    """

    average_rating_by_category: Dict[Category, float]
    average_rating_by_era: Dict[Era, float]
    preferred_category: Category
    preferred_era: Era
    highly_rated_ids: FrozenSet[int] = field(default_factory=frozenset)

    @property
    def has_signal(self) -> bool:
        """True if at least one movie has been rated."""
        return any(mean > 0 for mean in self.average_rating_by_category.values())

    def to_dict(self) -> dict:
        return {
            "average_rating_by_category": {
                category.value: self.average_rating_by_category[category] for category in CATEGORY_ORDER
            },
            "average_rating_by_era": {
                era.value: self.average_rating_by_era[era] for era in ERA_ORDER
            },
            "preferred_category": self.preferred_category.value,
            "preferred_era": self.preferred_era.value,
            "highly_rated_ids": sorted(self.highly_rated_ids),
            "has_signal": self.has_signal,
        }


@dataclass(frozen=True)
class Recommendation:
    """An unwatched movie paired with its affinity score."""

    movie: Movie
    score: int

    def to_dict(self) -> dict:
        data = self.movie.to_dict()
        data["score"] = self.score
        return data
