"""
Database module for the recommender system.

This module provides the SQLAlchemy models, connection management, CRUD
operations and the two Store backends (SQLite via SQLAlchemy, Neo4j).
"""

from app.database.models import Base, User, Movie, Genre, Rating, movie_genres
from app.database.connection import DatabaseManager
from app.database.sql_store import SqlStore
from app.database.init_db import init_database, verify_schema
from app.database import crud

__all__ = [
    # Models
    'Base',
    'User',
    'Movie',
    'Genre',
    'Rating',
    'movie_genres',
    # Connection
    'DatabaseManager',
    'SqlStore',
    # Initialization
    'init_database',
    'verify_schema',
    # CRUD module
    'crud',
]
