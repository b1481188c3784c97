"""Browse query parameters for filtering and sorting the catalog."""
from dataclasses import dataclass
from enum import Enum


class CategoryFilter(str, Enum):
    ALL = "all"
    ANIMATION = "animation"
    LIVE_ACTION = "live-action"


class StatusFilter(str, Enum):
    ALL = "all"
    WATCHED = "watched"
    UNWATCHED = "unwatched"
    RATED = "rated"


class SortKey(str, Enum):
    TITLE = "title"
    YEAR_ASC = "year-asc"
    YEAR_DESC = "year-desc"
    RATING = "rating"


@dataclass(frozen=True)
class MovieQuery:
    """Search text plus category/status filters and a sort order."""

    text: str = ""
    category: CategoryFilter = CategoryFilter.ALL
    status: StatusFilter = StatusFilter.ALL
    sort_key: SortKey = SortKey.TITLE

    @classmethod
    def from_params(cls, params: dict) -> "MovieQuery":
        """
        Build a query from request parameters (q, category, status, sort).

        Raises:
            ValueError: If an enum parameter has an unknown value
        """
        return cls(
            text=params.get("q", "") or "",
            category=CategoryFilter(params.get("category") or CategoryFilter.ALL.value),
            status=StatusFilter(params.get("status") or StatusFilter.ALL.value),
            sort_key=SortKey(params.get("sort") or SortKey.TITLE.value),
        )
