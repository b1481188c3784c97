"""Service classes"""

from .catalog_loader import CatalogLoader
from .tracker_service import MovieTrackerService

__all__ = ["CatalogLoader", "MovieTrackerService"]
