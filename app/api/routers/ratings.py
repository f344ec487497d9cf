"""
Rating API endpoints.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from app.api.dependencies import get_store_provider
from app.api.models.rating import RatingRequest, RatingResponse
from app.core.errors import InvalidInput, NotFound, StoreUnavailable
from app.core.ratings import RatingService, validate_rating
from app.core.store import StoreProvider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["ratings"])


@router.post("/avaliar", response_model=RatingResponse)
def rate_movie(body: RatingRequest, provider: StoreProvider = Depends(get_store_provider)):
    """Create or overwrite the user's rating of a movie."""
    try:
        # Reject bad input before opening a store transaction
        validate_rating(body.username, body.movieId, body.rating)
        with provider.store_scope() as store:
            RatingService(store).record_rating(body.username, body.movieId, body.rating)
    except InvalidInput as e:
        logger.info("Invalid rating request: %s", e)
        raise HTTPException(status_code=400, detail="Dados inválidos")
    except NotFound:
        raise HTTPException(status_code=404, detail="Usuário ou filme não encontrado")
    except StoreUnavailable:
        logger.exception("Saving rating failed")
        raise HTTPException(status_code=500, detail="Erro ao salvar avaliação")
    return RatingResponse(success=True, message="Avaliação registrada com sucesso!")
