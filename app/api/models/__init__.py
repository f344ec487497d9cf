"""
Pydantic schemas for API request/response validation.
"""

from app.api.models.user import LoginRequest, LoginResponse, UserPayload
from app.api.models.movie import MovieItem
from app.api.models.rating import RatingRequest, RatingResponse
from app.api.models.recommendation import (
    RecommendationRequest, RecommendationResponse, RecommendationItem,
)

__all__ = [
    "LoginRequest",
    "LoginResponse",
    "UserPayload",
    "MovieItem",
    "RatingRequest",
    "RatingResponse",
    "RecommendationRequest",
    "RecommendationResponse",
    "RecommendationItem",
]
