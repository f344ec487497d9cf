"""
Genre-affinity recommendation engine.

Ranks unseen movies of the user's favourite genre by a cost that combines
genre affinity with peer approval:

    cost = (6.0 - avg_peer_rating) - (genre_frequency * 2.0)

Lower cost is better. The engine keeps no state between calls; everything
is read from the Store passed in.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from app.core.errors import InvalidInput
from app.core.store import MovieRecord, PeerStats, Store

logger = logging.getLogger(__name__)

HIGH_RATING = 4
NEUTRAL_AVG_RATING = 3.0
MAX_COST_BASE = 6.0
GENRE_WEIGHT = 2.0
MAX_RECOMMENDATIONS = 5

REASON_NO_HIGH_RATINGS = "insufficient high ratings"
REASON_NO_CANDIDATES = "no unseen movies in preferred genre"


@dataclass(frozen=True)
class RecommendedMovie:
    movie_id: int
    title: str
    cost: float
    num_ratings: int
    avg_rating: float


@dataclass(frozen=True)
class RecommendationResult:
    """
    Ranked recommendations for one user.

    An empty result is not an error: ``reason`` then says why no movie
    could be recommended.
    """

    username: str
    recommendations: List[RecommendedMovie] = field(default_factory=list)
    genre: Optional[str] = None
    genre_frequency: int = 0
    reason: Optional[str] = None

    @property
    def insufficient_data(self) -> bool:
        return not self.recommendations


def compute_cost(avg_rating: Optional[float], genre_frequency: int) -> float:
    """Cost of a candidate; a missing peer average counts as neutral (3.0)."""
    if avg_rating is None:
        avg_rating = NEUTRAL_AVG_RATING
    return (MAX_COST_BASE - avg_rating) - (genre_frequency * GENRE_WEIGHT)


def select_genre(frequency: Dict[str, int]) -> Optional[Tuple[str, int]]:
    """
    Pick the most frequent genre.

    Ties go to the lexicographically smallest genre name.

    Returns:
        (genre, frequency) or None when there are no genres
    """
    if not frequency:
        return None
    genre = min(frequency, key=lambda name: (-frequency[name], name))
    return genre, frequency[genre]


def rank_candidates(
    candidates: List[MovieRecord],
    stats: Dict[int, PeerStats],
    genre_frequency: int,
    limit: int = MAX_RECOMMENDATIONS,
) -> List[RecommendedMovie]:
    """
    Score and order candidates.

    Order is cost ascending, then number of peer ratings descending, then
    movie ID ascending.
    """
    scored = []
    for movie in candidates:
        peer = stats.get(movie.movie_id, PeerStats(count=0, average=None))
        avg_rating = peer.average if peer.average is not None else NEUTRAL_AVG_RATING
        scored.append(RecommendedMovie(
            movie_id=movie.movie_id,
            title=movie.title,
            cost=compute_cost(avg_rating, genre_frequency),
            num_ratings=peer.count,
            avg_rating=avg_rating,
        ))
    scored.sort(key=lambda r: (r.cost, -r.num_ratings, r.movie_id))
    return scored[:limit]


class RecommendationEngine:
    """
    Computes up to five recommendations for a user.

    Usage:
        engine = RecommendationEngine(store)
        result = engine.recommend("alice")
    """

    def __init__(self, store: Store, limit: int = MAX_RECOMMENDATIONS):
        self.store = store
        self.limit = limit

    def recommend(self, username: str) -> RecommendationResult:
        """
        Recommend unseen movies from the user's favourite genre.

        Args:
            username: Name of the requesting user

        Returns:
            RecommendationResult, empty with a reason when the user has no
            rating >= 4 or has already rated every movie of the genre

        Raises:
            InvalidInput: If username is empty
            StoreUnavailable: If a store query fails
        """
        if not isinstance(username, str) or not username.strip():
            raise InvalidInput("username is required")

        # Genre inference from ratings >= 4
        liked = self.store.get_movies_rated_at_least(username, HIGH_RATING)
        frequency = self.store.get_genre_frequency([m.movie_id for m in liked])
        selected = select_genre(frequency)
        if selected is None:
            logger.info("No recommendations for %r: %s", username, REASON_NO_HIGH_RATINGS)
            return RecommendationResult(username=username, reason=REASON_NO_HIGH_RATINGS)
        genre, genre_frequency = selected
        logger.debug("Preferred genre for %r: %s (frequency %d)", username, genre, genre_frequency)

        candidates = self.store.get_candidate_movies_for_genre(genre, exclude_rated_by=username)
        if not candidates:
            logger.info("No recommendations for %r: %s", username, REASON_NO_CANDIDATES)
            return RecommendationResult(
                username=username,
                genre=genre,
                genre_frequency=genre_frequency,
                reason=REASON_NO_CANDIDATES,
            )

        stats = self.store.get_peer_rating_stats_bulk(
            [m.movie_id for m in candidates],
            exclude_user=username,
            min_rating=HIGH_RATING,
        )
        ranked = rank_candidates(candidates, stats, genre_frequency, limit=self.limit)
        logger.info(
            "Recommended %d movies to %r from %d %s candidates",
            len(ranked), username, len(candidates), genre,
        )
        return RecommendationResult(
            username=username,
            recommendations=ranked,
            genre=genre,
            genre_frequency=genre_frequency,
        )
