"""
Login service: upsert a user by (name, password).
"""

import logging

from app.core.errors import InvalidInput
from app.core.store import Store, UserRecord

logger = logging.getLogger(__name__)


class LoginService:
    """
    Finds or registers users.

    The match key is the full (name, password) pair, so logging in with a
    new password under an existing name registers a second user.
    """

    def __init__(self, store: Store):
        self.store = store

    def login_or_register(self, username: str, password: str) -> UserRecord:
        """
        Return the user matching the credentials, creating it if needed.

        Raises:
            InvalidInput: If username or password is empty
            StoreUnavailable: If the store cannot execute the upsert
        """
        if not isinstance(username, str) or not username.strip():
            raise InvalidInput("username is required")
        if not isinstance(password, str) or not password:
            raise InvalidInput("password is required")

        user = self.store.find_or_create_user(username, password)
        logger.info("User %r logged in (id=%s)", user.username, user.user_id)
        return user
