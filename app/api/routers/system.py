"""
System API endpoints (health).
"""

import logging

from fastapi import APIRouter, Depends

from app.api.dependencies import get_store_provider
from app.core.errors import StoreUnavailable
from app.core.store import StoreProvider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["system"])


@router.get("/health")
def health_check(provider: StoreProvider = Depends(get_store_provider)):
    """Health check: store reachable and catalogue size."""
    try:
        with provider.store_scope() as store:
            user_count = store.count_users()
            movie_count = store.count_movies()
    except StoreUnavailable as e:
        logger.warning("Health check failed: %s", e)
        return {"status": "unhealthy", "database": "unavailable"}
    return {
        "status": "healthy",
        "database": "connected",
        "users": user_count,
        "movies": movie_count,
    }
