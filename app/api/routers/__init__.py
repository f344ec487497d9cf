"""
API route handlers.
"""

from app.api.routers import auth, movies, ratings, recommendations, system

__all__ = ["auth", "movies", "ratings", "recommendations", "system"]
