"""Domain types and SQLAlchemy models"""

from movietracker_recommendation_service.models.base import Base
from movietracker_recommendation_service.models.movie import Category, Era, Movie, era_for_year
from movietracker_recommendation_service.models.profile import PreferenceProfile, Recommendation
from movietracker_recommendation_service.models.progress_entry import ProgressEntry
from movietracker_recommendation_service.models.progress_record import ProgressRecord
from movietracker_recommendation_service.models.query import CategoryFilter, MovieQuery, SortKey, StatusFilter

__all__ = [
    "Base",
    "Category",
    "CategoryFilter",
    "Era",
    "Movie",
    "MovieQuery",
    "PreferenceProfile",
    "ProgressEntry",
    "ProgressRecord",
    "Recommendation",
    "SortKey",
    "StatusFilter",
    "era_for_year",
]
