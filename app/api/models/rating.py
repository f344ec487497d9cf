"""
Pydantic schemas for Rating API.
"""

from pydantic import BaseModel, StrictInt


class RatingRequest(BaseModel):
    """Request body for rating a movie; range checks happen in the service."""

    username: str | None = None
    # Strict so JSON booleans are not coerced to 1/0
    movieId: StrictInt | None = None
    rating: StrictInt | None = None


class RatingResponse(BaseModel):
    success: bool
    message: str
