"""
SQLAlchemy ORM models for the recommender system database.

The relational layout mirrors the movie graph: User, Movie and Genre nodes
become tables, HAS_GENRE becomes the ``movie_genres`` association table and
RATED becomes the ``ratings`` table.
"""

from typing import List
from sqlalchemy import (
    BigInteger, Column, Integer, String, Text, ForeignKey, Table,
    CheckConstraint, UniqueConstraint, Index,
)
from sqlalchemy.orm import DeclarativeBase, relationship, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


# HAS_GENRE edges (Movie -> Genre), many-to-many and read-only for the API
movie_genres = Table(
    'movie_genres',
    Base.metadata,
    Column('movie_id', Integer, ForeignKey('movies.movie_id', ondelete='CASCADE'), primary_key=True),
    Column('genre_id', Integer, ForeignKey('genres.genre_id', ondelete='CASCADE'), primary_key=True),
    Index('idx_movie_genres_genre', 'genre_id'),
)


class User(Base):
    """
    User table.

    Users are created on first login and matched on the (name, password)
    pair, so several rows may share a name.

    Attributes:
        user_id: Primary key, auto-incremented
        name: Login name
        password: Login password, part of the match key
    """
    __tablename__ = 'users'

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    # Relationships
    ratings: Mapped[List["Rating"]] = relationship(
        "Rating",
        back_populates="user",
        cascade="all, delete-orphan"
    )

    # Constraints
    __table_args__ = (
        UniqueConstraint('name', 'password', name='unique_user_credentials'),
        Index('idx_users_name', 'name'),
    )

    def __repr__(self) -> str:
        return f"<User(user_id={self.user_id}, name='{self.name}')>"


class Genre(Base):
    """
    Genre table (reference data).

    Attributes:
        genre_id: Primary key, auto-incremented
        name: Unique genre name
    """
    __tablename__ = 'genres'

    genre_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    movies: Mapped[List["Movie"]] = relationship(
        "Movie",
        secondary=movie_genres,
        back_populates="genres",
    )

    def __repr__(self) -> str:
        return f"<Genre(genre_id={self.genre_id}, name='{self.name}')>"


class Movie(Base):
    """
    Movie table (pre-loaded catalogue).

    Attributes:
        movie_id: Primary key (from the MovieLens dataset)
        title: Movie title (required)
        genres: Linked Genre rows
    """
    __tablename__ = 'movies'

    movie_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)

    # Relationships
    genres: Mapped[List["Genre"]] = relationship(
        "Genre",
        secondary=movie_genres,
        back_populates="movies",
    )
    ratings: Mapped[List["Rating"]] = relationship(
        "Rating",
        back_populates="movie",
        cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index('idx_movies_title', 'title'),
    )

    def __repr__(self) -> str:
        return f"<Movie(movie_id={self.movie_id}, title='{self.title}')>"


class Rating(Base):
    """
    Rating table storing RATED edges.

    Attributes:
        rating_id: Primary key, auto-incremented
        user_id: Foreign key to users table
        movie_id: Foreign key to movies table
        rating: Integer rating value (1 to 5)
        timestamp: Epoch milliseconds of the last write
    """
    __tablename__ = 'ratings'

    rating_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey('users.user_id', ondelete='CASCADE'),
        nullable=False
    )
    movie_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey('movies.movie_id', ondelete='CASCADE'),
        nullable=False
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="ratings")
    movie: Mapped["Movie"] = relationship("Movie", back_populates="ratings")

    # Constraints and indexes
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name='check_rating_range'),
        UniqueConstraint('user_id', 'movie_id', name='unique_user_movie'),
        Index('idx_ratings_user', 'user_id'),
        Index('idx_ratings_movie', 'movie_id'),
    )

    def __repr__(self) -> str:
        return f"<Rating(rating_id={self.rating_id}, user_id={self.user_id}, movie_id={self.movie_id}, rating={self.rating})>"
