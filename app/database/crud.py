"""
CRUD and traversal queries for User, Movie, Genre and Rating models.

Functions flush but never commit: the caller's unit of work
(DatabaseManager.session_scope) owns the transaction.
"""

from typing import Dict, List, Optional, Sequence, Tuple
from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session, selectinload

from app.database.models import User, Movie, Genre, Rating, movie_genres


# ==================== USER CRUD OPERATIONS ====================

def create_user(session: Session, name: str, password: str) -> User:
    """
    Create a new user.

    Args:
        session: Database session
        name: Login name
        password: Login password

    Returns:
        Created User object
    """
    user = User(name=name, password=password)
    session.add(user)
    session.flush()
    return user


def get_user_by_credentials(session: Session, name: str, password: str) -> Optional[User]:
    """
    Get the user matching both name and password.

    Args:
        session: Database session
        name: Login name
        password: Login password

    Returns:
        User object or None if not found
    """
    return session.execute(
        select(User).where(and_(User.name == name, User.password == password))
    ).scalar_one_or_none()


def get_users_by_name(session: Session, name: str) -> List[User]:
    """Get every user row carrying the given name."""
    return list(
        session.execute(select(User).where(User.name == name).order_by(User.user_id)).scalars()
    )


def find_or_create_user(session: Session, name: str, password: str) -> User:
    """
    Return the user matching (name, password), creating it if absent.

    A different password for an existing name creates a separate user.
    """
    user = get_user_by_credentials(session, name, password)
    if user is None:
        user = create_user(session, name, password)
    return user


def get_user_count(session: Session) -> int:
    """Get total count of users."""
    return session.execute(select(func.count(User.user_id))).scalar_one()


# ==================== GENRE / MOVIE CRUD OPERATIONS ====================

def get_or_create_genre(session: Session, name: str) -> Genre:
    """Get a genre by name, creating it if it does not exist yet."""
    genre = session.execute(select(Genre).where(Genre.name == name)).scalar_one_or_none()
    if genre is None:
        genre = Genre(name=name)
        session.add(genre)
        session.flush()
    return genre


def create_movie(
    session: Session,
    movie_id: int,
    title: str,
    genres: Sequence[str] = ()
) -> Movie:
    """
    Create a new movie and link it to its genres.

    Args:
        session: Database session
        movie_id: Movie ID (from MovieLens dataset)
        title: Movie title
        genres: Genre names, created on demand

    Returns:
        Created Movie object
    """
    movie = Movie(movie_id=movie_id, title=title)
    movie.genres = [get_or_create_genre(session, name) for name in dict.fromkeys(genres)]
    session.add(movie)
    session.flush()
    return movie


def get_movie(session: Session, movie_id: int) -> Optional[Movie]:
    """Get a movie by ID, or None if not found."""
    return session.get(Movie, movie_id)


def get_movies(session: Session) -> List[Movie]:
    """Get every movie ordered by title."""
    return list(
        session.execute(select(Movie).order_by(Movie.title, Movie.movie_id)).scalars()
    )


def get_movie_count(session: Session) -> int:
    """Get total count of movies."""
    return session.execute(select(func.count(Movie.movie_id))).scalar_one()


# ==================== RATING CRUD OPERATIONS ====================

def get_rating_by_user_movie(
    session: Session,
    user_id: int,
    movie_id: int
) -> Optional[Rating]:
    """Get the rating a user gave a movie, or None."""
    return session.execute(
        select(Rating).where(and_(Rating.user_id == user_id, Rating.movie_id == movie_id))
    ).scalar_one_or_none()


def get_ratings_by_user(session: Session, user_id: int) -> List[Rating]:
    """Get all ratings by a specific user."""
    return list(session.execute(select(Rating).where(Rating.user_id == user_id)).scalars())


def upsert_rating(
    session: Session,
    username: str,
    movie_id: int,
    rating: int,
    timestamp: int
) -> int:
    """
    Create or overwrite the rating of every user named ``username`` for a movie.

    Args:
        session: Database session
        username: Name of the rating user(s)
        movie_id: Movie ID
        rating: Rating value (1 to 5)
        timestamp: Epoch milliseconds stored on the rating

    Returns:
        Number of ratings written; 0 when the user or the movie is unknown
    """
    users = get_users_by_name(session, username)
    movie = get_movie(session, movie_id)
    if not users or movie is None:
        return 0

    for user in users:
        existing = get_rating_by_user_movie(session, user.user_id, movie_id)
        if existing:
            existing.rating = rating
            existing.timestamp = timestamp
        else:
            session.add(Rating(
                user_id=user.user_id,
                movie_id=movie_id,
                rating=rating,
                timestamp=timestamp,
            ))
    session.flush()
    return len(users)


# ==================== RECOMMENDATION TRAVERSALS ====================

def get_movies_rated_at_least(session: Session, username: str, min_rating: int) -> List[Movie]:
    """
    Get the movies a user rated with at least ``min_rating``.

    Genres are eagerly loaded so callers can follow HAS_GENRE without
    additional queries.
    """
    stmt = (
        select(Movie)
        .join(Rating, Rating.movie_id == Movie.movie_id)
        .join(User, User.user_id == Rating.user_id)
        .where(and_(User.name == username, Rating.rating >= min_rating))
        .options(selectinload(Movie.genres))
        .order_by(Movie.movie_id)
        .distinct()
    )
    return list(session.execute(stmt).scalars())


def get_genre_frequency(session: Session, movie_ids: Sequence[int]) -> Dict[str, int]:
    """Count how many of the given movies belong to each genre."""
    if not movie_ids:
        return {}
    stmt = (
        select(Genre.name, func.count())
        .select_from(movie_genres)
        .join(Genre, Genre.genre_id == movie_genres.c.genre_id)
        .where(movie_genres.c.movie_id.in_(list(movie_ids)))
        .group_by(Genre.name)
    )
    return {name: count for name, count in session.execute(stmt)}


def get_candidate_movies_for_genre(session: Session, genre: str, username: str) -> List[Movie]:
    """
    Get movies of a genre that no user named ``username`` has rated.

    Ratings of any value exclude a movie.
    """
    already_rated = (
        select(Rating.rating_id)
        .join(User, User.user_id == Rating.user_id)
        .where(and_(Rating.movie_id == Movie.movie_id, User.name == username))
    )
    stmt = (
        select(Movie)
        .join(Movie.genres)
        .where(and_(Genre.name == genre, ~already_rated.exists()))
        .order_by(Movie.movie_id)
    )
    return list(session.execute(stmt).scalars())


def get_peer_rating_stats(
    session: Session,
    movie_ids: Sequence[int],
    exclude_user: str,
    min_rating: int
) -> Dict[int, Tuple[int, Optional[float]]]:
    """
    Aggregate ratings >= ``min_rating`` given by other users.

    Args:
        session: Database session
        movie_ids: Movies to aggregate
        exclude_user: Name whose ratings are ignored
        min_rating: Minimum rating value counted

    Returns:
        Mapping movie_id -> (distinct rater count, average rating). Movies
        without qualifying ratings are absent.
    """
    if not movie_ids:
        return {}
    stmt = (
        select(
            Rating.movie_id,
            func.count(func.distinct(Rating.user_id)),
            func.avg(Rating.rating),
        )
        .join(User, User.user_id == Rating.user_id)
        .where(and_(
            Rating.movie_id.in_(list(movie_ids)),
            Rating.rating >= min_rating,
            User.name != exclude_user,
        ))
        .group_by(Rating.movie_id)
    )
    return {movie_id: (count, average) for movie_id, count, average in session.execute(stmt)}
