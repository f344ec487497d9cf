"""
Core services: login, rating, and genre-affinity recommendations.

Services receive a Store (see app.core.store) and hold no other state.
"""

from app.core.errors import InvalidInput, NotFound, RecommenderError, StoreUnavailable
from app.core.ratings import RatingService, RatingResult
from app.core.recommender import RecommendationEngine, RecommendationResult, RecommendedMovie
from app.core.users import LoginService

__all__ = [
    'InvalidInput',
    'NotFound',
    'RecommenderError',
    'StoreUnavailable',
    'RatingService',
    'RatingResult',
    'RecommendationEngine',
    'RecommendationResult',
    'RecommendedMovie',
    'LoginService',
]
