"""
API configuration loaded from environment or defaults.
"""

import os
from pathlib import Path
from typing import Optional


def get_store_backend() -> str:
    """Get store backend ('sqlite' or 'neo4j')."""
    return os.getenv("STORE_BACKEND", "sqlite").strip().lower()


def get_database_path() -> str:
    """Get SQLite database file path from env or default."""
    return os.getenv("DATABASE_URL", "sqlite:///").replace("sqlite:///", "") or str(
        Path(__file__).resolve().parents[2] / "data" / "recommender.db"
    )


def get_neo4j_uri() -> str:
    return os.getenv("NEO4J_URI", "bolt://localhost:7687")


def get_neo4j_auth() -> tuple[str, str]:
    """Get (user, password) for the Neo4j driver."""
    return os.getenv("NEO4J_USER", "neo4j"), os.getenv("NEO4J_PASSWORD", "neo4j")


def get_neo4j_database() -> str:
    return os.getenv("NEO4J_DATABASE", "movies")


def get_store_timeout() -> float:
    """Get per-transaction store timeout in seconds."""
    return float(os.getenv("STORE_TIMEOUT_SECONDS", "10"))


def get_log_level() -> str:
    """Get log level from env or default."""
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_log_file() -> Optional[str]:
    """Get log file name; None logs to console only."""
    return os.getenv("LOG_FILE") or None


def get_api_host() -> str:
    """Get API host for binding."""
    return os.getenv("API_HOST", "0.0.0.0")


def get_api_port() -> int:
    """Get API port."""
    return int(os.getenv("API_PORT", "3000"))
