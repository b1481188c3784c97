"""Repository classes"""

from movietracker_recommendation_service.repos.progress_repository import ProgressRepository

__all__ = [
    "ProgressRepository",
]
