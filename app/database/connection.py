"""
Database connection management using SQLAlchemy.

This module handles SQLite engine creation and per-request units of work.
The DatabaseManager is created by the application factory and injected
into request handlers, so tests can hand in an in-memory database.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Generator
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from app.core.errors import StoreUnavailable
from app.database.models import Base
from app.database.sql_store import SqlStore

logger = logging.getLogger(__name__)

# Default database path
DEFAULT_DB_PATH = "data/recommender.db"
IN_MEMORY = ":memory:"


def get_database_url(db_path: str = DEFAULT_DB_PATH) -> str:
    """
    Get SQLite database URL.

    Args:
        db_path: Path to SQLite database file, or ":memory:"

    Returns:
        SQLAlchemy database URL
    """
    if db_path == IN_MEMORY:
        return "sqlite://"

    # Ensure directory exists
    db_dir = os.path.dirname(db_path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)

    # SQLite URL format: sqlite:///path/to/database.db
    return f"sqlite:///{os.path.abspath(db_path)}"


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """
    Enable foreign key constraints for SQLite.

    SQLite disables foreign key constraints by default.
    """
    if not isinstance(dbapi_conn, sqlite3.Connection):
        return
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """
    Database connection manager.

    Handles engine creation, session management, and schema creation.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH, echo: bool = False, timeout: float = 10.0):
        """
        Initialize database manager.

        Args:
            db_path: Path to SQLite database file, or ":memory:"
            echo: If True, log all SQL statements (useful for debugging)
            timeout: Seconds a statement waits on a locked database before failing
        """
        self.db_path = db_path
        self.database_url = get_database_url(db_path)

        engine_kwargs = {}
        if db_path == IN_MEMORY:
            # One shared connection keeps the in-memory database alive;
            # file databases give each session its own pooled connection
            engine_kwargs["poolclass"] = StaticPool

        self.engine = create_engine(
            self.database_url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": timeout},
            **engine_kwargs
        )

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine
        )

    def create_tables(self):
        """Create all tables that don't exist yet."""
        Base.metadata.create_all(bind=self.engine)

    def drop_tables(self):
        """
        Drop all tables defined in the models.

        WARNING: This will delete all data in the database!
        """
        Base.metadata.drop_all(bind=self.engine)

    def reset_database(self):
        """Drop and recreate all tables."""
        self.drop_tables()
        self.create_tables()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Context manager for database sessions.

        Automatically commits on success and rolls back on failure.

        Usage:
            with db_manager.session_scope() as session:
                session.add(user)
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def store_scope(self) -> Generator[SqlStore, None, None]:
        """
        Open one Store unit of work backed by a session.

        Commit failures are reported as StoreUnavailable.
        """
        try:
            with self.session_scope() as session:
                yield SqlStore(session)
        except SQLAlchemyError as e:
            raise StoreUnavailable(str(e)) from e

    def verify_connectivity(self) -> None:
        """Run a trivial statement, raising StoreUnavailable if it fails."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise StoreUnavailable(str(e)) from e
        logger.info("Connected to SQLite database at %s", self.db_path)

    def close(self):
        """Close the database engine and all connections."""
        self.engine.dispose()
