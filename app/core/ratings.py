"""
Rating service: validates and records one (user, movie, rating) observation.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

from app.core.errors import InvalidInput, NotFound
from app.core.store import Store

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


@dataclass(frozen=True)
class RatingResult:
    """Outcome of a recorded rating."""

    username: str
    movie_id: int
    rating: int
    timestamp: int
    affected: int


def current_timestamp_ms() -> int:
    """Epoch milliseconds, the unit RATED timestamps are stored in."""
    return int(time.time() * 1000)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_rating(username: Any, movie_id: Any, rating: Any) -> None:
    """
    Check a rating request before it reaches the store.

    Raises:
        InvalidInput: If the username is empty, the movie ID is not a
            positive integer, or the rating is not an integer in [1, 5]
    """
    if not isinstance(username, str) or not username.strip():
        raise InvalidInput("username is required")
    if not _is_int(movie_id) or movie_id <= 0:
        raise InvalidInput("movieId must be a positive integer")
    if not _is_int(rating) or not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidInput(f"rating must be an integer between {MIN_RATING} and {MAX_RATING}")


class RatingService:
    """Records ratings as upserts: one RATED edge per (user, movie)."""

    def __init__(self, store: Store, clock: Callable[[], int] = current_timestamp_ms):
        self.store = store
        self.clock = clock

    def record_rating(self, username: str, movie_id: int, rating: int) -> RatingResult:
        """
        Create or overwrite the user's rating of a movie.

        Args:
            username: Name of the rating user
            movie_id: ID of an existing movie
            rating: Integer rating (1 to 5)

        Returns:
            RatingResult with the stored values

        Raises:
            InvalidInput: If any field is missing or out of range
            NotFound: If the user or the movie does not exist
            StoreUnavailable: If the store cannot execute the write
        """
        validate_rating(username, movie_id, rating)

        timestamp = self.clock()
        affected = self.store.upsert_rating(username, movie_id, rating, timestamp)
        if affected == 0:
            logger.warning("Rating not stored: user %r or movie %s not found", username, movie_id)
            raise NotFound(f"User '{username}' or movie {movie_id} not found")

        logger.info("User %r rated movie %s with %s", username, movie_id, rating)
        return RatingResult(
            username=username,
            movie_id=movie_id,
            rating=rating,
            timestamp=timestamp,
            affected=affected,
        )
