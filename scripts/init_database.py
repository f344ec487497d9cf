#!/usr/bin/env python
"""
Database initialization script for MovieLens data.

This script performs a complete SQLite database setup:
1. Creates the database schema (tables, indexes, constraints)
2. Imports movies and their genres (HAS_GENRE links)
3. Optionally imports ratings, creating one user per MovieLens user ID
4. Verifies the schema

Supported movie files:
    - movies.csv from ml-latest / ml-latest-small (movieId,title,genres)
    - u.item from ml-100k (pipe separated, binary genre flags)

Usage:
    # Full import
    python scripts/init_database.py --reset --movies data/ml-latest-small/movies.csv \
        --ratings data/ml-latest-small/ratings.csv

    # Movies only, keep existing data
    python scripts/init_database.py --movies data/ml-100k/u.item
"""

import sys
import csv
import time
import argparse
from pathlib import Path
from typing import Iterator, List, Tuple

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.database import init_database, verify_schema, crud, DatabaseManager
from app.api.config import get_database_path
from app.utils.logging_config import setup_logging


# Genre names (19 genres in MovieLens 100k, in u.item flag order)
ML100K_GENRES = [
    'unknown', 'Action', 'Adventure', 'Animation', 'Children', 'Comedy',
    'Crime', 'Documentary', 'Drama', 'Fantasy', 'Film-Noir', 'Horror',
    'Musical', 'Mystery', 'Romance', 'Sci-Fi', 'Thriller', 'War', 'Western'
]

NO_GENRES = '(no genres listed)'


def print_section(title):
    """Print a formatted section header."""
    print(f"\n{'='*60}")
    print(f"{title}")
    print('='*60)


def round_rating(value: str) -> int:
    """Round a MovieLens star rating half-up and clamp it to [1, 5]."""
    return min(5, max(1, int(float(value) + 0.5)))


def read_movies_csv(path: Path) -> Iterator[Tuple[int, str, List[str]]]:
    """Yield (movie_id, title, genres) from a movies.csv file."""
    with open(path, newline='', encoding='utf-8') as f:
        for row in csv.DictReader(f):
            genres = [g for g in row['genres'].split('|') if g and g != NO_GENRES]
            yield int(row['movieId']), row['title'], genres


def read_u_item(path: Path) -> Iterator[Tuple[int, str, List[str]]]:
    """Yield (movie_id, title, genres) from a ml-100k u.item file."""
    with open(path, 'r', encoding='latin-1') as f:
        for line in f:
            parts = line.strip().split('|')
            if len(parts) < 5 + len(ML100K_GENRES):
                continue
            flags = parts[5:5 + len(ML100K_GENRES)]
            genres = [name for name, flag in zip(ML100K_GENRES, flags) if flag == '1']
            yield int(parts[0]), parts[1], genres


def import_movies(db_manager: DatabaseManager, movies_path: Path, verbose: bool = True) -> int:
    """
    Import movies and genres.

    Movies that already exist are skipped.

    Returns:
        Number of movies imported
    """
    if verbose:
        print_section("Importing Movies")

    reader = read_u_item if movies_path.suffix == '.item' else read_movies_csv
    imported_count = 0
    skipped_count = 0

    with db_manager.session_scope() as session:
        for movie_id, title, genres in reader(movies_path):
            if crud.get_movie(session, movie_id):
                skipped_count += 1
                continue
            crud.create_movie(session, movie_id=movie_id, title=title, genres=genres)
            imported_count += 1

            if verbose and imported_count % 1000 == 0:
                print(f"  Imported {imported_count} movies...")

    if verbose:
        print(f"\n[SUCCESS] Movie import complete!")
        print(f"  Imported: {imported_count} movies")
        if skipped_count > 0:
            print(f"  Skipped (already exist): {skipped_count} movies")
    return imported_count


def import_ratings(db_manager: DatabaseManager, ratings_path: Path, verbose: bool = True) -> int:
    """
    Import ratings.csv (userId,movieId,rating,timestamp).

    Each MovieLens user becomes a user named ``user_<id>`` with password
    ``movielens``. Half-star ratings are rounded to the nearest integer and
    clamped to [1, 5].

    Returns:
        Number of ratings imported
    """
    if verbose:
        print_section("Importing Ratings")

    imported_count = 0
    skipped_count = 0

    with db_manager.session_scope() as session:
        with open(ratings_path, newline='', encoding='utf-8') as f:
            for row in csv.DictReader(f):
                movie_id = int(row['movieId'])
                rating = round_rating(row['rating'])
                username = f"user_{row['userId']}"
                crud.find_or_create_user(session, username, "movielens")
                written = crud.upsert_rating(
                    session,
                    username=username,
                    movie_id=movie_id,
                    rating=rating,
                    timestamp=int(row['timestamp']) * 1000,
                )
                if written:
                    imported_count += 1
                else:
                    skipped_count += 1

                if verbose and imported_count and imported_count % 10000 == 0:
                    print(f"  Imported {imported_count} ratings...")

    if verbose:
        print(f"\n[SUCCESS] Rating import complete!")
        print(f"  Imported: {imported_count} ratings")
        if skipped_count > 0:
            print(f"  Skipped (unknown movie): {skipped_count} ratings")
    return imported_count


def main():
    parser = argparse.ArgumentParser(description="Initialize the recommender database")
    parser.add_argument('--db-path', default=get_database_path(), help='SQLite database file')
    parser.add_argument('--movies', type=Path, help='movies.csv or u.item file')
    parser.add_argument('--ratings', type=Path, help='ratings.csv file')
    parser.add_argument('--reset', action='store_true', help='Drop existing tables first')
    parser.add_argument('--quiet', action='store_true', help='Only print errors')
    args = parser.parse_args()

    setup_logging(level='WARNING' if args.quiet else 'INFO')
    verbose = not args.quiet
    start = time.time()

    db_manager = init_database(db_path=args.db_path, reset=args.reset)
    try:
        if args.movies:
            if not args.movies.exists():
                print(f"[ERROR] Movies file not found: {args.movies}")
                return 1
            import_movies(db_manager, args.movies, verbose=verbose)

        if args.ratings:
            if not args.ratings.exists():
                print(f"[ERROR] Ratings file not found: {args.ratings}")
                return 1
            import_ratings(db_manager, args.ratings, verbose=verbose)

        if not verify_schema(db_manager):
            print("\n[ERROR] Database initialization failed!")
            return 1
    finally:
        db_manager.close()

    if verbose:
        print(f"\n[SUCCESS] Database ready at {args.db_path} ({time.time() - start:.1f}s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
