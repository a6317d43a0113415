"""
Playlist Generation Strategies
==============================

Strategy pattern implementations, one per generation algorithm.

Available strategies:
- SimilarityPlaylistStrategy: greedy selection around seed tracks
- MoodPlaylistStrategy: tracks matching a target mood
- GenrePlaylistStrategy: tracks sharing the requested genres
- TempoPlaylistStrategy: tracks close to a target tempo
- DiscoveryPlaylistStrategy: unheard tracks with discovery potential
- HistoryPlaylistStrategy: the listener's favourites
- HybridPlaylistStrategy: interleaved blend of several strategies

Public API:
-----------
Base:
    PlaylistGenerationStrategy
    PlaylistRequest
    SegmentResult
"""

from .base_strategy import (
    PlaylistGenerationStrategy,
    PlaylistRequest,
    SegmentResult,
)
from .similarity_strategy import SimilarityPlaylistStrategy
from .ranked_strategies import (
    DiscoveryPlaylistStrategy,
    GenrePlaylistStrategy,
    HistoryPlaylistStrategy,
    MoodPlaylistStrategy,
    RankedPlaylistStrategy,
    TempoPlaylistStrategy,
)
from .hybrid_strategy import (
    HybridPlaylistStrategy,
    interleave_segments,
    split_target_size,
)

__all__ = [
    "PlaylistGenerationStrategy",
    "PlaylistRequest",
    "SegmentResult",
    "SimilarityPlaylistStrategy",
    "RankedPlaylistStrategy",
    "MoodPlaylistStrategy",
    "GenrePlaylistStrategy",
    "TempoPlaylistStrategy",
    "DiscoveryPlaylistStrategy",
    "HistoryPlaylistStrategy",
    "HybridPlaylistStrategy",
    "interleave_segments",
    "split_target_size",
]
