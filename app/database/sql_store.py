"""
SQLAlchemy implementation of the Store contract.
"""

import functools
from typing import Dict, List, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import StoreUnavailable
from app.core.store import (
    MovieRecord, PeerStats, RatedMovie, UserRecord, as_float, as_int,
)
from app.database import crud


def _translate_errors(method):
    """Re-raise SQLAlchemy failures as StoreUnavailable."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except SQLAlchemyError as e:
            raise StoreUnavailable(str(e)) from e

    return wrapper


class SqlStore:
    """Store backed by one SQLAlchemy session (one transaction)."""

    def __init__(self, session: Session):
        self.session = session

    @_translate_errors
    def find_or_create_user(self, name: str, password: str) -> UserRecord:
        user = crud.find_or_create_user(self.session, name, password)
        return UserRecord(user_id=str(as_int(user.user_id, "user_id")), username=user.name)

    @_translate_errors
    def get_movies_rated_at_least(self, username: str, min_rating: int) -> List[RatedMovie]:
        movies = crud.get_movies_rated_at_least(self.session, username, min_rating)
        return [
            RatedMovie(
                movie_id=as_int(m.movie_id, "movie_id"),
                genres=tuple(sorted(g.name for g in m.genres)),
            )
            for m in movies
        ]

    @_translate_errors
    def get_genre_frequency(self, movie_ids: Sequence[int]) -> Dict[str, int]:
        frequency = crud.get_genre_frequency(self.session, movie_ids)
        return {genre: as_int(count, "genre count") for genre, count in frequency.items()}

    @_translate_errors
    def get_candidate_movies_for_genre(self, genre: str, exclude_rated_by: str) -> List[MovieRecord]:
        movies = crud.get_candidate_movies_for_genre(self.session, genre, exclude_rated_by)
        return [MovieRecord(movie_id=as_int(m.movie_id, "movie_id"), title=m.title) for m in movies]

    def get_peer_rating_stats(self, movie_id: int, exclude_user: str, min_rating: int) -> PeerStats:
        stats = self.get_peer_rating_stats_bulk([movie_id], exclude_user, min_rating)
        return stats[movie_id]

    @_translate_errors
    def get_peer_rating_stats_bulk(
        self, movie_ids: Sequence[int], exclude_user: str, min_rating: int
    ) -> Dict[int, PeerStats]:
        rows = crud.get_peer_rating_stats(self.session, movie_ids, exclude_user, min_rating)
        stats = {movie_id: PeerStats(count=0, average=None) for movie_id in movie_ids}
        for movie_id, (count, average) in rows.items():
            stats[as_int(movie_id, "movie_id")] = PeerStats(
                count=as_int(count, "rating count"),
                average=as_float(average),
            )
        return stats

    @_translate_errors
    def upsert_rating(self, username: str, movie_id: int, rating: int, timestamp: int) -> int:
        return crud.upsert_rating(self.session, username, movie_id, rating, timestamp)

    @_translate_errors
    def list_all_movies(self) -> List[MovieRecord]:
        return [
            MovieRecord(movie_id=as_int(m.movie_id, "movie_id"), title=m.title)
            for m in crud.get_movies(self.session)
        ]

    @_translate_errors
    def count_users(self) -> int:
        return as_int(crud.get_user_count(self.session), "user count")

    @_translate_errors
    def count_movies(self) -> int:
        return as_int(crud.get_movie_count(self.session), "movie count")
