"""
Pydantic schemas for Movie API.
"""

from pydantic import BaseModel


class MovieItem(BaseModel):
    """One entry of the movie selection list."""

    id: int
    nome: str
