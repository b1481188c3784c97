"""Catalog movie and the category/era vocabularies used to group it."""
from dataclasses import dataclass
from enum import Enum


class Category(str, Enum):
    ANIMATION = "animation"
    LIVE_ACTION = "live-action"


class Era(str, Enum):
    """Fixed partition of release years."""
    CLASSIC = "classic"
    RENAISSANCE = "renaissance"
    MODERN = "modern"


# Iteration order matters: it breaks ties when picking a preferred era
ERA_ORDER = (Era.CLASSIC, Era.RENAISSANCE, Era.MODERN)
CATEGORY_ORDER = (Category.ANIMATION, Category.LIVE_ACTION)

RENAISSANCE_START_YEAR = 1990
MODERN_START_YEAR = 2010


def era_for_year(year: int) -> Era:
    """Map a release year to its era."""
    if year >= MODERN_START_YEAR:
        return Era.MODERN
    if year >= RENAISSANCE_START_YEAR:
        return Era.RENAISSANCE
    return Era.CLASSIC


@dataclass(frozen=True)
class Movie:
    """A catalog entry. Immutable once loaded; identity is the id."""

    id: int
    title: str
    year: int
    category: Category
    song: str
    description: str = ""

    @property
    def era(self) -> Era:
        return era_for_year(self.year)

    @classmethod
    def from_dict(cls, data: dict) -> "Movie":
        """
        Build a movie from a catalog JSON object.

        The category may be given as either 'category' or 'type'.

        Raises:
            KeyError: If a required field is missing
            ValueError: If a field has the wrong type or an unknown category
        """
        category = data.get("category", data.get("type"))
        if category is None:
            raise KeyError("category")

        movie_id = data["id"]
        year = data["year"]
        if isinstance(movie_id, bool) or not isinstance(movie_id, int):
            raise ValueError(f"Movie id must be an integer, got {movie_id!r}")
        if isinstance(year, bool) or not isinstance(year, int):
            raise ValueError(f"Movie year must be an integer, got {year!r}")

        return cls(
            id=movie_id,
            title=str(data["title"]),
            year=year,
            category=Category(category),
            song=str(data.get("song") or ""),
            description=str(data.get("description") or ""),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "year": self.year,
            "category": self.category.value,
            "era": self.era.value,
            "song": self.song,
            "description": self.description,
        }
