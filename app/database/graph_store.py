"""
Neo4j implementation of the Store contract.

The graph layout is (:User {name, password, userId})-[:RATED {rating,
timestamp}]->(:Movie {movieId, title})-[:HAS_GENRE]->(:Genre {name}).
All queries of one request run inside a single explicit transaction.
"""

import functools
import logging
from contextlib import contextmanager
from typing import Dict, Generator, List, Optional, Sequence, Tuple

from neo4j import GraphDatabase
from neo4j.exceptions import DriverError, Neo4jError

from app.core.errors import StoreUnavailable
from app.core.store import (
    MovieRecord, PeerStats, RatedMovie, UserRecord, as_float, as_int,
)

logger = logging.getLogger(__name__)


FIND_OR_CREATE_USER = """
MERGE (u:User {name: $name, password: $password})
ON CREATE SET u.userId = randomUUID()
ON MATCH SET u.userId = coalesce(u.userId, randomUUID())
RETURN u.name AS username, u.userId AS userId
"""

MOVIES_RATED_AT_LEAST = """
MATCH (u:User {name: $username})-[r:RATED]->(m:Movie)
WHERE r.rating >= $min_rating
WITH DISTINCT m
OPTIONAL MATCH (m)-[:HAS_GENRE]->(g:Genre)
RETURN m.movieId AS movieId, collect(DISTINCT g.name) AS genres
ORDER BY movieId
"""

GENRE_FREQUENCY = """
MATCH (m:Movie)-[:HAS_GENRE]->(g:Genre)
WHERE m.movieId IN $movie_ids
RETURN g.name AS genre, count(DISTINCT m) AS frequency
"""

CANDIDATE_MOVIES = """
MATCH (g:Genre {name: $genre})<-[:HAS_GENRE]-(m:Movie)
WHERE NOT EXISTS {
    MATCH (:User {name: $username})-[:RATED]->(m)
}
RETURN m.movieId AS movieId, m.title AS title
ORDER BY movieId
"""

PEER_RATING_STATS = """
UNWIND $movie_ids AS movieId
MATCH (m:Movie {movieId: movieId})
OPTIONAL MATCH (other:User)-[r:RATED]->(m)
WHERE r.rating >= $min_rating AND other.name <> $exclude_user
RETURN m.movieId AS movieId,
       count(DISTINCT other) AS numRatings,
       avg(r.rating) AS avgRating
"""

UPSERT_RATING = """
MATCH (u:User {name: $username})
MATCH (m:Movie {movieId: $movie_id})
MERGE (u)-[r:RATED]->(m)
SET r.rating = $rating, r.timestamp = $timestamp
RETURN count(r) AS affected
"""

LIST_MOVIES = """
MATCH (m:Movie)
RETURN m.movieId AS movieId, m.title AS title
ORDER BY title, movieId
"""

COUNT_USERS = "MATCH (u:User) RETURN count(u) AS total"

COUNT_MOVIES = "MATCH (m:Movie) RETURN count(m) AS total"


def _translate_errors(method):
    """Re-raise driver failures as StoreUnavailable."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except (Neo4jError, DriverError) as e:
            raise StoreUnavailable(str(e)) from e

    return wrapper


class Neo4jStore:
    """Store bound to one open Neo4j transaction."""

    def __init__(self, tx):
        self.tx = tx

    def _records(self, query: str, **params) -> list:
        return list(self.tx.run(query, params))

    def _single(self, query: str, **params):
        records = self._records(query, **params)
        if not records:
            raise StoreUnavailable("Query returned no rows")
        return records[0]

    @_translate_errors
    def find_or_create_user(self, name: str, password: str) -> UserRecord:
        record = self._single(FIND_OR_CREATE_USER, name=name, password=password)
        if record["userId"] is None:
            raise StoreUnavailable(f"User {name!r} has no userId")
        return UserRecord(user_id=str(record["userId"]), username=record["username"])

    @_translate_errors
    def get_movies_rated_at_least(self, username: str, min_rating: int) -> List[RatedMovie]:
        records = self._records(MOVIES_RATED_AT_LEAST, username=username, min_rating=min_rating)
        return [
            RatedMovie(
                movie_id=as_int(r["movieId"], "movie_id"),
                genres=tuple(sorted(g for g in r["genres"] if g is not None)),
            )
            for r in records
        ]

    @_translate_errors
    def get_genre_frequency(self, movie_ids: Sequence[int]) -> Dict[str, int]:
        if not movie_ids:
            return {}
        records = self._records(GENRE_FREQUENCY, movie_ids=list(movie_ids))
        return {r["genre"]: as_int(r["frequency"], "genre count") for r in records}

    @_translate_errors
    def get_candidate_movies_for_genre(self, genre: str, exclude_rated_by: str) -> List[MovieRecord]:
        records = self._records(CANDIDATE_MOVIES, genre=genre, username=exclude_rated_by)
        return [MovieRecord(movie_id=as_int(r["movieId"], "movie_id"), title=r["title"]) for r in records]

    def get_peer_rating_stats(self, movie_id: int, exclude_user: str, min_rating: int) -> PeerStats:
        stats = self.get_peer_rating_stats_bulk([movie_id], exclude_user, min_rating)
        return stats[movie_id]

    @_translate_errors
    def get_peer_rating_stats_bulk(
        self, movie_ids: Sequence[int], exclude_user: str, min_rating: int
    ) -> Dict[int, PeerStats]:
        stats = {movie_id: PeerStats(count=0, average=None) for movie_id in movie_ids}
        if not movie_ids:
            return stats
        records = self._records(
            PEER_RATING_STATS,
            movie_ids=list(movie_ids),
            exclude_user=exclude_user,
            min_rating=min_rating,
        )
        for r in records:
            stats[as_int(r["movieId"], "movie_id")] = PeerStats(
                count=as_int(r["numRatings"], "rating count"),
                average=as_float(r["avgRating"]),
            )
        return stats

    @_translate_errors
    def upsert_rating(self, username: str, movie_id: int, rating: int, timestamp: int) -> int:
        records = self._records(
            UPSERT_RATING,
            username=username,
            movie_id=movie_id,
            rating=rating,
            timestamp=timestamp,
        )
        if not records:
            return 0
        return as_int(records[0]["affected"], "affected rows")

    @_translate_errors
    def list_all_movies(self) -> List[MovieRecord]:
        return [
            MovieRecord(movie_id=as_int(r["movieId"], "movie_id"), title=r["title"])
            for r in self._records(LIST_MOVIES)
        ]

    @_translate_errors
    def count_users(self) -> int:
        return as_int(self._single(COUNT_USERS)["total"], "user count")

    @_translate_errors
    def count_movies(self) -> int:
        return as_int(self._single(COUNT_MOVIES)["total"], "movie count")


class GraphDatabaseManager:
    """
    Owns the Neo4j driver and opens one transaction per request.
    """

    def __init__(
        self,
        uri: str = "bolt://localhost:7687",
        auth: Optional[Tuple[str, str]] = None,
        database: str = "movies",
        timeout: float = 10.0,
        driver=None,
    ):
        """
        Initialize graph database manager.

        Args:
            uri: Bolt URI of the Neo4j server
            auth: (user, password) tuple
            database: Name of the database holding the movie graph
            timeout: Transaction timeout in seconds
            driver: Pre-built driver (used by tests)
        """
        self.uri = uri
        self.database = database
        self.timeout = timeout
        self.driver = driver if driver is not None else GraphDatabase.driver(uri, auth=auth)

    @contextmanager
    def store_scope(self) -> Generator[Neo4jStore, None, None]:
        """
        Open a session and an explicit transaction.

        The transaction commits when the block succeeds and rolls back
        otherwise; the session is always closed.
        """
        try:
            with self.driver.session(database=self.database) as session:
                with session.begin_transaction(timeout=self.timeout) as tx:
                    yield Neo4jStore(tx)
                    tx.commit()
        except (Neo4jError, DriverError) as e:
            raise StoreUnavailable(str(e)) from e

    def verify_connectivity(self) -> None:
        try:
            self.driver.verify_connectivity()
        except (Neo4jError, DriverError) as e:
            raise StoreUnavailable(str(e)) from e
        logger.info("Connected to Neo4j at %s (database %s)", self.uri, self.database)

    def close(self) -> None:
        self.driver.close()
