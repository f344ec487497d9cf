"""
End-to-end test of the user journey through the HTTP API:

1. Users log in (auto-registration)
2. Users rate movies
3. Recommendations reflect the ratings
"""

import pytest
from fastapi.testclient import TestClient

from app.api.main import create_app
from app.database import crud
from app.database.connection import DatabaseManager


@pytest.fixture
def client():
    """App backed by an in-memory database holding four movies."""
    manager = DatabaseManager(db_path=":memory:")
    manager.create_tables()
    with manager.session_scope() as session:
        crud.create_movie(session, movie_id=1, title="Die Hard", genres=["Action"])
        crud.create_movie(session, movie_id=2, title="Speed", genres=["Action"])
        crud.create_movie(session, movie_id=3, title="Airplane!", genres=["Comedy"])
        crud.create_movie(session, movie_id=4, title="Aliens", genres=["Action"])
    with TestClient(create_app(store_provider=manager)) as test_client:
        yield test_client


def rate(client, username, movie_id, rating):
    r = client.post("/api/avaliar", json={"username": username, "movieId": movie_id, "rating": rating})
    assert r.status_code == 200, r.text


class TestRecommendationFlow:
    """Complete journey from login to recommendations."""

    def test_end_to_end_flow(self, client):
        for name in ("alice", "bob", "carol"):
            r = client.post("/api/login", json={"username": name, "password": "pw"})
            assert r.status_code == 200

        rate(client, "alice", 1, 5)
        rate(client, "alice", 2, 5)
        rate(client, "alice", 3, 2)
        rate(client, "bob", 4, 5)
        rate(client, "carol", 1, 3)

        r = client.post("/api/recomendar", json={"username": "alice"})
        assert r.status_code == 200
        data = r.json()
        assert data["success"] is True
        assert data["recomendacoes"] == [
            {"titulo": "Aliens", "id": 4, "custo": -3.0, "avaliacoes": 1},
        ]

        r = client.post("/api/recomendar", json={"username": "carol"})
        assert r.status_code == 200
        assert r.json()["success"] is False

    def test_rating_a_recommendation_removes_it(self, client):
        client.post("/api/login", json={"username": "alice", "password": "pw"})
        client.post("/api/login", json={"username": "bob", "password": "pw"})
        rate(client, "alice", 1, 5)
        rate(client, "bob", 4, 5)

        first = client.post("/api/recomendar", json={"username": "alice"}).json()
        assert [item["id"] for item in first["recomendacoes"]] == [4, 2]

        rate(client, "alice", 4, 1)
        second = client.post("/api/recomendar", json={"username": "alice"}).json()
        assert [item["id"] for item in second["recomendacoes"]] == [2]
