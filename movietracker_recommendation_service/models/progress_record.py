"""Per-movie progress record and the progress map wire format."""
from dataclasses import dataclass
from typing import Dict, Mapping

from movietracker_recommendation_service.exceptions import MalformedProgressError

MIN_RATING = 0
MAX_RATING = 5


@dataclass(frozen=True)
class ProgressRecord:
    """
    A user's state for one movie.

    rating 0 means "unrated". A record with rating > 0 is always watched;
    the progress repository mutators keep it that way.
    """

    watched: bool = False
    rating: int = 0

    @classmethod
    def from_dict(cls, data: Mapping) -> "ProgressRecord":
        """
        Validate and build a record from its {watched, rating} form.

        Raises:
            MalformedProgressError: If a field is missing, mistyped or out of range
        """
        if not isinstance(data, Mapping):
            raise MalformedProgressError(f"Progress record must be an object, got {data!r}")

        try:
            watched = data["watched"]
            rating = data["rating"]
        except KeyError as e:
            raise MalformedProgressError(f"Progress record is missing field {e}") from e

        if not isinstance(watched, bool):
            raise MalformedProgressError(f"watched must be a boolean, got {watched!r}")
        validate_rating(rating)
        if rating > 0 and not watched:
            raise MalformedProgressError("A rated movie must be marked as watched")

        return cls(watched=watched, rating=rating)

    def to_dict(self) -> dict:
        return {"watched": self.watched, "rating": self.rating}


def validate_rating(rating) -> int:
    """
    Check that a rating is an integer between 0 and 5.

    Raises:
        MalformedProgressError: If it is not
    """
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise MalformedProgressError(f"rating must be an integer, got {rating!r}")
    if rating < MIN_RATING or rating > MAX_RATING:
        raise MalformedProgressError(f"rating must be between {MIN_RATING} and {MAX_RATING}, got {rating}")
    return rating


def parse_progress_map(raw: Mapping) -> Dict[int, ProgressRecord]:
    """
    Parse an exported progress map ({"<movieId>": {"watched": .., "rating": ..}}).

    Args:
        raw: Decoded JSON object

    Returns:
        Dict mapping movie id to ProgressRecord

    Raises:
        MalformedProgressError: If any key or record is malformed
    """
    if not isinstance(raw, Mapping):
        raise MalformedProgressError("Progress must be a JSON object keyed by movie id")

    progress: Dict[int, ProgressRecord] = {}
    for key, value in raw.items():
        try:
            movie_id = int(key)
        except (TypeError, ValueError) as e:
            raise MalformedProgressError(f"Progress key {key!r} is not a movie id") from e
        progress[movie_id] = ProgressRecord.from_dict(value)

    return progress


def dump_progress_map(progress: Mapping[int, ProgressRecord]) -> Dict[str, dict]:
    """Serialize a progress snapshot to its JSON-compatible form, keys as strings."""
    return {str(movie_id): record.to_dict() for movie_id, record in progress.items()}
