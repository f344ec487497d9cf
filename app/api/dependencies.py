"""
FastAPI dependency injection for the store provider.
"""

import logging

from fastapi import HTTPException, Request

from app.api.config import (
    get_database_path, get_neo4j_auth, get_neo4j_database, get_neo4j_uri,
    get_store_backend, get_store_timeout,
)
from app.core.store import StoreProvider

logger = logging.getLogger(__name__)


def build_store_provider() -> StoreProvider:
    """Create the store provider selected by STORE_BACKEND."""
    backend = get_store_backend()
    timeout = get_store_timeout()
    if backend == "neo4j":
        from app.database.graph_store import GraphDatabaseManager

        return GraphDatabaseManager(
            uri=get_neo4j_uri(),
            auth=get_neo4j_auth(),
            database=get_neo4j_database(),
            timeout=timeout,
        )
    if backend == "sqlite":
        from app.database.connection import DatabaseManager

        db_manager = DatabaseManager(db_path=get_database_path(), timeout=timeout)
        db_manager.create_tables()
        return db_manager
    raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")


def get_store_provider(request: Request) -> StoreProvider:
    """Return the provider the application was started with."""
    provider = getattr(request.app.state, "store_provider", None)
    if provider is None:
        logger.error("Store provider is not initialized")
        raise HTTPException(status_code=500, detail="Banco de dados indisponível")
    return provider
