"""
Movie API endpoints.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from app.api.dependencies import get_store_provider
from app.api.models.movie import MovieItem
from app.core.errors import StoreUnavailable
from app.core.store import StoreProvider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["movies"])


@router.get("/filmes", response_model=list[MovieItem])
def list_movies(provider: StoreProvider = Depends(get_store_provider)):
    """List every movie ordered by title (for the selection dropdown)."""
    try:
        with provider.store_scope() as store:
            movies = store.list_all_movies()
    except StoreUnavailable:
        logger.exception("Listing movies failed")
        raise HTTPException(status_code=500, detail="Erro ao buscar filmes")
    return [MovieItem(id=m.movie_id, nome=m.title) for m in movies]
