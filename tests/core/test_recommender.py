"""
Unit tests for the recommendation engine.

Scenarios run against an in-memory SQLite store.
"""

import pytest

from app.core.errors import InvalidInput, StoreUnavailable
from app.core.recommender import (
    RecommendationEngine,
    REASON_NO_CANDIDATES,
    REASON_NO_HIGH_RATINGS,
    compute_cost,
    rank_candidates,
    select_genre,
)
from app.core.store import MovieRecord, PeerStats
from app.database import crud
from app.database.connection import DatabaseManager


@pytest.fixture
def db_manager():
    """Create an in-memory database with the schema."""
    manager = DatabaseManager(db_path=":memory:")
    manager.create_tables()
    yield manager
    manager.close()


def seed(db_manager, movies, users, ratings):
    """Insert movies (id, title, genres), user names and (user, movie, rating) triples."""
    with db_manager.session_scope() as session:
        for movie_id, title, genres in movies:
            crud.create_movie(session, movie_id=movie_id, title=title, genres=genres)
        for name in users:
            crud.create_user(session, name=name, password="pw")
        for name, movie_id, rating in ratings:
            crud.upsert_rating(session, name, movie_id, rating, timestamp=1)


def recommend(db_manager, username):
    with db_manager.store_scope() as store:
        return RecommendationEngine(store).recommend(username)


class TestScoring:
    """Tests for the pure scoring helpers."""

    def test_compute_cost(self):
        assert compute_cost(5.0, 2) == pytest.approx(-3.0)

    def test_compute_cost_neutral_default(self):
        assert compute_cost(None, 1) == pytest.approx(1.0)

    def test_cost_decreases_with_higher_average(self):
        costs = [compute_cost(avg, 3) for avg in (1.0, 2.5, 4.0, 4.5, 5.0)]
        assert costs == sorted(costs, reverse=True)
        assert len(set(costs)) == len(costs)

    def test_select_genre_highest_frequency(self):
        assert select_genre({"Comedy": 1, "Action": 3, "Drama": 2}) == ("Action", 3)

    def test_select_genre_tie_breaks_by_name(self):
        assert select_genre({"Thriller": 2, "Action": 2, "Drama": 2}) == ("Action", 2)

    def test_select_genre_empty(self):
        assert select_genre({}) is None

    def test_rank_orders_by_cost_then_peer_count(self):
        candidates = [MovieRecord(movie_id=i, title=f"M{i}") for i in range(1, 5)]
        stats = {
            1: PeerStats(count=1, average=4.0),
            2: PeerStats(count=3, average=4.0),
            3: PeerStats(count=2, average=5.0),
            4: PeerStats(count=0, average=None),
        }
        ranked = rank_candidates(candidates, stats, genre_frequency=1)

        assert [r.movie_id for r in ranked] == [3, 2, 1, 4]
        assert ranked[-1].avg_rating == 3.0

    def test_rank_truncates(self):
        candidates = [MovieRecord(movie_id=i, title=f"M{i}") for i in range(1, 9)]
        assert len(rank_candidates(candidates, {}, genre_frequency=1)) == 5


class TestRecommendationEngine:
    """End-to-end engine behaviour over the SQL store."""

    def test_alice_scenario(self, db_manager):
        seed(
            db_manager,
            movies=[
                (1, "Die Hard", ["Action"]),
                (2, "Speed", ["Action"]),
                (3, "Airplane!", ["Comedy"]),
                (4, "Aliens", ["Action"]),
            ],
            users=["alice", "bob"],
            ratings=[("alice", 1, 5), ("alice", 2, 5), ("alice", 3, 2), ("bob", 4, 5)],
        )

        result = recommend(db_manager, "alice")

        assert result.genre == "Action"
        assert result.genre_frequency == 2
        assert not result.insufficient_data
        assert len(result.recommendations) == 1
        movie = result.recommendations[0]
        assert movie.movie_id == 4
        assert movie.num_ratings == 1
        assert movie.avg_rating == pytest.approx(5.0)
        assert movie.cost == pytest.approx(-3.0)

    def test_no_high_ratings(self, db_manager):
        seed(
            db_manager,
            movies=[(1, "Die Hard", ["Action"]), (2, "Speed", ["Action"])],
            users=["carol"],
            ratings=[("carol", 1, 3)],
        )

        result = recommend(db_manager, "carol")

        assert result.insufficient_data
        assert result.recommendations == []
        assert result.reason == REASON_NO_HIGH_RATINGS

    def test_unknown_user_is_insufficient_data(self, db_manager):
        result = recommend(db_manager, "ghost")
        assert result.reason == REASON_NO_HIGH_RATINGS

    def test_every_genre_movie_already_rated(self, db_manager):
        seed(
            db_manager,
            movies=[(1, "Die Hard", ["Action"]), (2, "Speed", ["Action"])],
            users=["alice"],
            ratings=[("alice", 1, 5), ("alice", 2, 1)],
        )

        result = recommend(db_manager, "alice")

        assert result.insufficient_data
        assert result.reason == REASON_NO_CANDIDATES
        assert result.genre == "Action"

    def test_never_recommends_rated_movies(self, db_manager):
        movies = [(i, f"Action {i}", ["Action"]) for i in range(1, 11)]
        ratings = [("alice", 1, 5), ("alice", 2, 1), ("alice", 3, 3)]
        ratings += [("bob", i, 5) for i in range(1, 11)]
        seed(db_manager, movies=movies, users=["alice", "bob"], ratings=ratings)

        result = recommend(db_manager, "alice")

        ids = [r.movie_id for r in result.recommendations]
        assert not {1, 2, 3} & set(ids)
        assert len(ids) == 5

    def test_results_sorted_and_limited(self, db_manager):
        movies = [(i, f"Action {i}", ["Action"]) for i in range(1, 9)]
        users = ["alice", "bob", "erin", "frank"]
        ratings = [("alice", 1, 5)]
        ratings += [("bob", 2, 5), ("erin", 2, 5), ("bob", 3, 4), ("bob", 4, 5)]
        ratings += [("frank", 5, 4), ("erin", 5, 4), ("erin", 6, 2)]
        seed(db_manager, movies=movies, users=users, ratings=ratings)

        result = recommend(db_manager, "alice")
        recs = result.recommendations

        assert len(recs) == 5
        keys = [(r.cost, -r.num_ratings) for r in recs]
        assert keys == sorted(keys)
        # Two 5-star raters beat one 5-star rater at equal cost
        assert [r.movie_id for r in recs[:2]] == [2, 4]
        # Movie 5 (two raters, avg 4) ranks before movie 3 (one rater, avg 4)
        assert [r.movie_id for r in recs[2:4]] == [5, 3]

    def test_genre_tie_is_deterministic(self, db_manager):
        seed(
            db_manager,
            movies=[
                (1, "Speed", ["Thriller"]),
                (2, "Die Hard", ["Action"]),
                (3, "Heat", ["Action"]),
                (4, "Se7en", ["Thriller"]),
            ],
            users=["alice"],
            ratings=[("alice", 1, 5), ("alice", 2, 5)],
        )

        result = recommend(db_manager, "alice")

        assert result.genre == "Action"
        assert [r.movie_id for r in result.recommendations] == [3]

    def test_missing_username(self, db_manager):
        with pytest.raises(InvalidInput):
            recommend(db_manager, "")

    def test_store_failure_propagates(self):
        class BrokenStore:
            def get_movies_rated_at_least(self, username, min_rating):
                raise StoreUnavailable("timeout")

        with pytest.raises(StoreUnavailable):
            RecommendationEngine(BrokenStore()).recommend("alice")
