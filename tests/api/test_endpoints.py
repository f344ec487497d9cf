"""
API tests for login, movie list, rating and health endpoints.

Uses FastAPI TestClient against an app wired to an in-memory database.
"""

import pytest
from fastapi.testclient import TestClient

from app.api.main import create_app
from app.core.errors import StoreUnavailable
from app.database import crud
from app.database.connection import DatabaseManager


@pytest.fixture
def db_manager():
    """In-memory database with a small catalogue."""
    manager = DatabaseManager(db_path=":memory:")
    manager.create_tables()
    with manager.session_scope() as session:
        crud.create_movie(session, movie_id=2, title="Speed", genres=["Action"])
        crud.create_movie(session, movie_id=1, title="Die Hard", genres=["Action"])
        crud.create_movie(session, movie_id=3, title="Airplane!", genres=["Comedy"])
    yield manager
    manager.close()


@pytest.fixture
def client(db_manager):
    return TestClient(create_app(store_provider=db_manager))


class BrokenProvider:
    """Store provider whose every unit of work fails."""

    def store_scope(self):
        raise StoreUnavailable("SELECT secret FROM nowhere")

    def verify_connectivity(self):
        pass

    def close(self):
        pass


@pytest.fixture
def broken_client():
    return TestClient(create_app(store_provider=BrokenProvider()), raise_server_exceptions=False)


class TestLoginEndpoint:
    """Tests for POST /api/login."""

    def test_login_creates_user(self, client):
        r = client.post("/api/login", json={"username": "dave", "password": "pw1"})
        assert r.status_code == 200
        data = r.json()
        assert data["success"] is True
        assert data["user"]["username"] == "dave"
        assert data["user"]["userId"]

    def test_login_twice_same_user_id(self, client):
        first = client.post("/api/login", json={"username": "dave", "password": "pw1"})
        second = client.post("/api/login", json={"username": "dave", "password": "pw1"})
        assert first.json()["user"]["userId"] == second.json()["user"]["userId"]

    def test_login_different_password_new_user(self, client):
        first = client.post("/api/login", json={"username": "dave", "password": "pw1"})
        second = client.post("/api/login", json={"username": "dave", "password": "pw2"})
        assert first.json()["user"]["userId"] != second.json()["user"]["userId"]

    @pytest.mark.parametrize("payload", [
        {"username": "dave"},
        {"password": "pw"},
        {"username": "", "password": "pw"},
        {},
    ])
    def test_login_missing_fields(self, client, payload):
        r = client.post("/api/login", json=payload)
        assert r.status_code == 400
        assert "error" in r.json()

    def test_login_store_failure(self, broken_client):
        r = broken_client.post("/api/login", json={"username": "dave", "password": "pw1"})
        assert r.status_code == 500
        assert r.json() == {"error": "Erro ao realizar login"}


class TestMovieEndpoint:
    """Tests for GET /api/filmes."""

    def test_list_movies_sorted_by_title(self, client):
        r = client.get("/api/filmes")
        assert r.status_code == 200
        assert r.json() == [
            {"id": 3, "nome": "Airplane!"},
            {"id": 1, "nome": "Die Hard"},
            {"id": 2, "nome": "Speed"},
        ]

    def test_list_movies_store_failure_hides_details(self, broken_client):
        r = broken_client.get("/api/filmes")
        assert r.status_code == 500
        assert "secret" not in r.text
        assert r.json() == {"error": "Erro ao buscar filmes"}


class TestRatingEndpoint:
    """Tests for POST /api/avaliar."""

    @pytest.fixture
    def user(self, client):
        client.post("/api/login", json={"username": "alice", "password": "pw"})
        return "alice"

    @pytest.mark.parametrize("rating", [1, 2, 3, 4, 5])
    def test_rate_movie(self, client, user, rating):
        r = client.post("/api/avaliar", json={"username": user, "movieId": 1, "rating": rating})
        assert r.status_code == 200
        assert r.json() == {"success": True, "message": "Avaliação registrada com sucesso!"}

    def test_rerating_keeps_one_rating(self, client, user, db_manager):
        client.post("/api/avaliar", json={"username": user, "movieId": 1, "rating": 5})
        client.post("/api/avaliar", json={"username": user, "movieId": 1, "rating": 5})

        with db_manager.session_scope() as session:
            alice = crud.get_users_by_name(session, "alice")[0]
            assert len(crud.get_ratings_by_user(session, alice.user_id)) == 1

    @pytest.mark.parametrize("payload", [
        {"username": "alice", "movieId": 1, "rating": 0},
        {"username": "alice", "movieId": 1, "rating": 6},
        {"username": "alice", "movieId": 1, "rating": 4.5},
        {"username": "alice", "movieId": 1},
        {"username": "alice", "rating": 3},
        {"movieId": 1, "rating": 3},
        {"username": "alice", "movieId": "abc", "rating": 3},
        {"username": "alice", "movieId": 1, "rating": True},
        {"username": "alice", "movieId": True, "rating": 3},
    ])
    def test_invalid_rating_request(self, client, user, payload):
        r = client.post("/api/avaliar", json=payload)
        assert r.status_code == 400
        assert r.json() == {"error": "Dados inválidos"}

    def test_unknown_movie(self, client, user):
        r = client.post("/api/avaliar", json={"username": user, "movieId": 999, "rating": 4})
        assert r.status_code == 404
        assert "error" in r.json()

    def test_unknown_user(self, client):
        r = client.post("/api/avaliar", json={"username": "nobody", "movieId": 1, "rating": 4})
        assert r.status_code == 404

    def test_store_failure(self, broken_client):
        r = broken_client.post("/api/avaliar", json={"username": "alice", "movieId": 1, "rating": 4})
        assert r.status_code == 500
        assert r.json() == {"error": "Erro ao salvar avaliação"}


class TestSystemEndpoints:
    """Tests for GET / and GET /api/health."""

    def test_root(self, client):
        r = client.get("/")
        assert r.status_code == 200
        assert r.json()["health"] == "/api/health"

    def test_health(self, client):
        r = client.get("/api/health")
        assert r.status_code == 200
        data = r.json()
        assert data["status"] == "healthy"
        assert data["movies"] == 3
        assert data["users"] == 0

    def test_health_unavailable(self, broken_client):
        r = broken_client.get("/api/health")
        assert r.status_code == 200
        assert r.json()["status"] == "unhealthy"
