"""
Pydantic schemas for Recommendation API.
"""

from pydantic import BaseModel


class RecommendationRequest(BaseModel):
    username: str | None = None


class RecommendationItem(BaseModel):
    """Single recommended movie with its cost and peer rating count."""

    titulo: str
    id: int
    custo: float
    avaliacoes: int


class RecommendationResponse(BaseModel):
    """
    Recommendation outcome.

    ``success`` is False when there is not enough data to recommend
    anything; ``message`` and ``reason`` then explain why.
    """

    success: bool
    recomendacoes: list[RecommendationItem] | None = None
    message: str | None = None
    reason: str | None = None
