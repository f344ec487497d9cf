"""
Unit tests for the login service.
"""

import pytest

from app.core.errors import InvalidInput
from app.core.users import LoginService
from app.database.connection import DatabaseManager


@pytest.fixture
def db_manager():
    manager = DatabaseManager(db_path=":memory:")
    manager.create_tables()
    yield manager
    manager.close()


def login(db_manager, username, password):
    with db_manager.store_scope() as store:
        return LoginService(store).login_or_register(username, password)


class TestLoginService:
    """Tests for login-or-register."""

    def test_same_credentials_same_user(self, db_manager):
        first = login(db_manager, "dave", "pw1")
        second = login(db_manager, "dave", "pw1")

        assert first.user_id == second.user_id
        assert first.username == "dave"

    def test_new_password_registers_another_user(self, db_manager):
        # Credentials are matched as a pair, so this is a second account
        first = login(db_manager, "dave", "pw1")
        second = login(db_manager, "dave", "pw2")

        assert first.user_id != second.user_id
        with db_manager.store_scope() as store:
            assert store.count_users() == 2

    def test_user_id_is_opaque_string(self, db_manager):
        user = login(db_manager, "erin", "secret")
        assert isinstance(user.user_id, str)
        assert user.user_id

    @pytest.mark.parametrize("username,password", [
        ("", "pw"),
        ("dave", ""),
        (None, "pw"),
        ("dave", None),
    ])
    def test_missing_credentials(self, db_manager, username, password):
        with pytest.raises(InvalidInput):
            login(db_manager, username, password)
