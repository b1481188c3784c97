"""Exceptions raised at the boundaries of the movie tracker."""


class MalformedProgressError(ValueError):
    """A progress record or progress map does not have the expected shape."""


class MovieNotFoundError(LookupError):
    """A movie id is not part of the loaded catalog."""

    def __init__(self, movie_id: int):
        super().__init__(f"Movie {movie_id} not found in catalog")
        self.movie_id = movie_id


class CatalogLoadError(RuntimeError):
    """The movie catalog could not be loaded."""
