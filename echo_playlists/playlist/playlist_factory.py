"""
Playlist Factory
================

Dispatches a generation request to the strategy registered for its
algorithm. The registry is exhaustive: a factory refuses to start unless
every Algorithm member has a strategy, and unknown algorithm names are
resolved to hybrid by Algorithm.parse before they get here.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .config import Algorithm, HybridConfig
from .strategies import (
    DiscoveryPlaylistStrategy,
    GenrePlaylistStrategy,
    HistoryPlaylistStrategy,
    HybridPlaylistStrategy,
    MoodPlaylistStrategy,
    PlaylistGenerationStrategy,
    PlaylistRequest,
    SegmentResult,
    SimilarityPlaylistStrategy,
    TempoPlaylistStrategy,
)

logger = logging.getLogger(__name__)

ALGORITHM_CATALOGUE: Dict[Algorithm, Dict[str, Any]] = {
    Algorithm.SIMILARITY: {
        "label": "Similar",
        "description": "Based on musical similarity with your favourites",
        "requires_seeds": True,
        "parameters": ["seed_tracks", "seed_artists"],
    },
    Algorithm.MOOD: {
        "label": "Mood",
        "description": "Built to match a specific mood",
        "requires_seeds": False,
        "parameters": ["audio_features"],
    },
    Algorithm.GENRE: {
        "label": "Genre",
        "description": "Focused on specific musical genres",
        "requires_seeds": False,
        "parameters": ["seed_genres"],
    },
    Algorithm.TEMPO: {
        "label": "Tempo",
        "description": "Tuned by tempo and energy",
        "requires_seeds": False,
        "parameters": ["audio_features"],
    },
    Algorithm.DISCOVERY: {
        "label": "Discovery",
        "description": "New personalised discoveries",
        "requires_seeds": False,
        "parameters": [],
    },
    Algorithm.HISTORY: {
        "label": "Favourites",
        "description": "Based on your listening history",
        "requires_seeds": False,
        "parameters": [],
    },
    Algorithm.HYBRID: {
        "label": "Smart Mix",
        "description": "Combines several algorithms for the best result",
        "requires_seeds": False,
        "parameters": ["seed_tracks", "seed_artists", "seed_genres", "audio_features"],
    },
}


def describe_algorithms() -> List[Dict[str, Any]]:
    """Catalogue of the available algorithms, for clients building a picker."""
    return [{"id": algorithm.value, **info} for algorithm, info in ALGORITHM_CATALOGUE.items()]


class PlaylistFactory:
    """Factory for building playlist segments via the strategy pattern.

    Usage:
        factory = PlaylistFactory.with_default_strategies()
        segment = factory.create(Algorithm.MOOD, request)
    """

    def __init__(self, strategies: Optional[Dict[Algorithm, PlaylistGenerationStrategy]] = None):
        self.strategies: Dict[Algorithm, PlaylistGenerationStrategy] = {}
        for strategy in (strategies or {}).values():
            self.register_strategy(strategy)

    @classmethod
    def with_default_strategies(cls, hybrid_config: HybridConfig = HybridConfig()) -> "PlaylistFactory":
        singles: Dict[Algorithm, PlaylistGenerationStrategy] = {
            strategy.algorithm: strategy
            for strategy in (
                SimilarityPlaylistStrategy(),
                MoodPlaylistStrategy(),
                GenrePlaylistStrategy(),
                TempoPlaylistStrategy(),
                DiscoveryPlaylistStrategy(),
                HistoryPlaylistStrategy(),
            )
        }
        factory = cls(singles)
        factory.register_strategy(HybridPlaylistStrategy(singles, hybrid_config))
        factory.ensure_complete()
        return factory

    def register_strategy(self, strategy: PlaylistGenerationStrategy) -> None:
        """Register a strategy, replacing any previous one for its algorithm."""
        self.strategies[strategy.algorithm] = strategy
        logger.debug(f"Registered strategy: {strategy.__class__.__name__} ({strategy.algorithm.value})")

    def ensure_complete(self) -> None:
        missing = [a.value for a in Algorithm if a not in self.strategies]
        if missing:
            raise ValueError(f"No strategy registered for: {', '.join(missing)}")

    def create(self, algorithm: Algorithm, request: PlaylistRequest) -> SegmentResult:
        """Build a segment with the strategy registered for algorithm.

        Raises:
            ValueError: If no strategy handles the algorithm
        """
        strategy = self.strategies.get(algorithm)
        if strategy is None or not strategy.can_handle(algorithm):
            error = f"No strategy can handle algorithm '{algorithm.value}'"
            logger.error(error)
            raise ValueError(error)

        logger.info(
            f"Building playlist: algorithm={algorithm.value} "
            f"tracks={request.target_size} "
            f"candidates={len(request.candidates)} "
            f"strategy={strategy.__class__.__name__}"
        )
        return strategy.build(request)

    def get_supported_algorithms(self) -> List[str]:
        return [algorithm.value for algorithm in self.strategies]
