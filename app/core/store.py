"""
Store contract consumed by the services.

Both the SQLAlchemy backend (app.database.sql_store) and the Neo4j backend
(app.database.graph_store) implement the Store protocol. A Store instance
is one unit of work: everything done through it commits or rolls back
together.
"""

from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from app.core.errors import StoreUnavailable

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


@dataclass(frozen=True)
class UserRecord:
    """A user as returned by the store (identifier is opaque)."""

    user_id: str
    username: str


@dataclass(frozen=True)
class MovieRecord:
    movie_id: int
    title: str


@dataclass(frozen=True)
class RatedMovie:
    """A movie rated by a user, with the names of its genres."""

    movie_id: int
    genres: Tuple[str, ...]


@dataclass(frozen=True)
class PeerStats:
    """Aggregated peer ratings for one movie; average is None when count is 0."""

    count: int
    average: Optional[float]


def as_int(value: Any, field: str = "value") -> int:
    """
    Convert a store integer into a native int.

    Raises:
        StoreUnavailable: If the value is missing, not integral, or outside
            the signed 64-bit range
    """
    if value is None or isinstance(value, bool):
        raise StoreUnavailable(f"Store returned an invalid {field}: {value!r}")
    try:
        result = int(value)
    except (TypeError, ValueError) as e:
        raise StoreUnavailable(f"Store returned an invalid {field}: {value!r}") from e
    if isinstance(value, float) and result != value:
        raise StoreUnavailable(f"Store returned a non-integral {field}: {value!r}")
    if not INT64_MIN <= result <= INT64_MAX:
        raise StoreUnavailable(f"Store returned an out-of-range {field}: {value!r}")
    return result


def as_float(value: Any) -> Optional[float]:
    """Convert a nullable store number into a float."""
    if value is None:
        return None
    return float(value)


class Store(Protocol):
    """Read/write operations the services need from the store."""

    def find_or_create_user(self, name: str, password: str) -> UserRecord:
        ...

    def get_movies_rated_at_least(self, username: str, min_rating: int) -> List[RatedMovie]:
        ...

    def get_genre_frequency(self, movie_ids: Sequence[int]) -> Dict[str, int]:
        ...

    def get_candidate_movies_for_genre(self, genre: str, exclude_rated_by: str) -> List[MovieRecord]:
        ...

    def get_peer_rating_stats(self, movie_id: int, exclude_user: str, min_rating: int) -> PeerStats:
        ...

    def get_peer_rating_stats_bulk(
        self, movie_ids: Sequence[int], exclude_user: str, min_rating: int
    ) -> Dict[int, PeerStats]:
        ...

    def upsert_rating(self, username: str, movie_id: int, rating: int, timestamp: int) -> int:
        ...

    def list_all_movies(self) -> List[MovieRecord]:
        ...

    def count_users(self) -> int:
        ...

    def count_movies(self) -> int:
        ...


class StoreProvider(Protocol):
    """Opens one Store unit of work per request."""

    def store_scope(self) -> AbstractContextManager[Store]:
        ...

    def verify_connectivity(self) -> None:
        ...

    def close(self) -> None:
        ...
