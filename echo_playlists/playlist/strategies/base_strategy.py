"""
Base Strategy for Playlist Generation
=====================================

Defines the abstract base class every generation strategy implements and
the request/result structures passed between the factory and strategies.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Mapping, Tuple

from echo_playlists.playlist.config import MOOD_TOLERANCE, Algorithm, GenerationRules
from echo_playlists.playlist.models import Artist, Track, UserProfile


@dataclass(frozen=True)
class PlaylistRequest:
    """Everything a strategy needs to build one segment.

    Built once per generation call by the pipeline; the hybrid strategy
    derives per-bucket copies with a smaller target_size.
    """

    profile: UserProfile
    """Listener profile (empty profile when it could not be loaded)."""

    candidates: Tuple[Track, ...]
    """Catalog tracks available for selection."""

    rules: GenerationRules
    """Merged generation rules."""

    target_size: int
    """Maximum number of tracks to return."""

    seed_tracks: Tuple[Track, ...] = ()
    """Caller-supplied seed tracks, already resolved."""

    seed_artists: Tuple[Artist, ...] = ()
    """Caller-supplied seed artists."""

    seed_genres: FrozenSet[str] = frozenset()
    """Caller-supplied seed genres."""

    mood_target: Mapping[str, float] = field(default_factory=dict)
    """Target audio features (mood and tempo strategies)."""

    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    """Reference time for recency factors."""

    mood_tolerance: float = MOOD_TOLERANCE
    """Per-dimension tolerance for the mood pre-filter."""


@dataclass
class SegmentResult:
    """Ordered tracks picked by one strategy."""

    algorithm: Algorithm
    """Strategy that produced the segment."""

    tracks: Tuple[Track, ...]
    """Selected tracks, in selection order."""

    stats: Dict[str, Any] = field(default_factory=dict)
    """Diagnostics (pool sizes, requested vs. selected counts)."""

    @property
    def track_ids(self) -> Tuple[str, ...]:
        return tuple(t.id for t in self.tracks)

    def __len__(self) -> int:
        return len(self.tracks)


class PlaylistGenerationStrategy(ABC):
    """Abstract base class for playlist generation strategies.

    Subclasses set `algorithm` and implement build(). A strategy must not
    keep per-call state on the instance: all working state lives in locals
    so one instance can serve concurrent generations.
    """

    algorithm: Algorithm

    def can_handle(self, algorithm: Algorithm) -> bool:
        return algorithm == self.algorithm

    @abstractmethod
    def build(self, request: PlaylistRequest) -> SegmentResult:
        """Select up to request.target_size tracks.

        Returns fewer tracks when the constraints leave no eligible
        candidate; that is a normal outcome, not an error.
        """

    def _empty_result(self, reason: str) -> SegmentResult:
        return SegmentResult(algorithm=self.algorithm, tracks=(), stats={"reason": reason})
