"""Preference analysis, recommendation ranking and catalog selection"""

from .movie_selector import select
from .preference_analyzer import analyze
from .recommendation_ranker import rank

__all__ = ["analyze", "rank", "select"]
