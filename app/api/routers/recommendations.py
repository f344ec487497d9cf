"""
Recommendation API endpoints.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from app.api.dependencies import get_store_provider
from app.api.models.recommendation import (
    RecommendationItem, RecommendationRequest, RecommendationResponse,
)
from app.core.errors import InvalidInput, StoreUnavailable
from app.core.recommender import RecommendationEngine
from app.core.store import StoreProvider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["recommendations"])

NO_RECOMMENDATIONS_MESSAGE = (
    "Não foi possível gerar recomendações. Avalie mais filmes com nota >= 4!"
)


@router.post(
    "/recomendar",
    response_model=RecommendationResponse,
    response_model_exclude_none=True,
)
def recommend(body: RecommendationRequest, provider: StoreProvider = Depends(get_store_provider)):
    """Recommend up to five unseen movies from the user's favourite genre."""
    try:
        with provider.store_scope() as store:
            result = RecommendationEngine(store).recommend(body.username)
    except InvalidInput:
        raise HTTPException(status_code=400, detail="Username é obrigatório")
    except StoreUnavailable:
        logger.exception("Recommendation failed for %r", body.username)
        raise HTTPException(status_code=500, detail="Erro ao gerar recomendação")

    if result.insufficient_data:
        return RecommendationResponse(
            success=False,
            message=NO_RECOMMENDATIONS_MESSAGE,
            reason=result.reason,
        )
    return RecommendationResponse(
        success=True,
        recomendacoes=[
            RecommendationItem(
                titulo=r.title,
                id=r.movie_id,
                custo=r.cost,
                avaliacoes=r.num_ratings,
            )
            for r in result.recommendations
        ],
    )
