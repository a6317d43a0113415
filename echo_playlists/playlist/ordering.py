"""
Playlist ordering for smooth track-to-track transitions.

Greedy nearest-neighbour tour over a transition matrix: start from the first
track and keep appending the unplaced track that transitions best from the
last placed one. O(n^2), no backtracking, no optimality guarantee.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

import numpy as np

from echo_playlists.playlist.models import Track
from echo_playlists.playlist.scoring.transition_scoring import build_transition_matrix

logger = logging.getLogger(__name__)

MIN_TRACKS_TO_ORDER = 3


@dataclass(frozen=True)
class OrderingResult:
    """
    Result of ordering operation.

    Attributes:
        ordered_tracks: Tracks in the new sequence
        stats: Diagnostics (mean transition before/after, whether ordering ran)
    """
    ordered_tracks: List[Track]
    stats: Dict[str, Any] = field(default_factory=dict)


def _mean_adjacent(matrix: np.ndarray, order: Sequence[int]) -> float:
    if len(order) < 2:
        return 0.0
    return float(np.mean([matrix[a, b] for a, b in zip(order, order[1:])]))


def order_by_transitions(tracks: Sequence[Track]) -> OrderingResult:
    """
    Reorder tracks with a greedy nearest-neighbour pass.

    Lists shorter than three tracks are returned unchanged. Ties go to the
    track that came first in the input.

    Args:
        tracks: Tracks to order (may contain the same track twice)

    Returns:
        OrderingResult with the reordered tracks and statistics
    """
    tracks = list(tracks)
    if len(tracks) < MIN_TRACKS_TO_ORDER:
        return OrderingResult(ordered_tracks=tracks, stats={"reordered": False})

    matrix = build_transition_matrix(tracks)
    n = len(tracks)
    placed = np.zeros(n, dtype=bool)
    order = [0]
    placed[0] = True

    while len(order) < n:
        row = np.where(placed, -np.inf, matrix[order[-1]])
        # argmax returns the first index among equal maxima
        next_index = int(np.argmax(row))
        order.append(next_index)
        placed[next_index] = True

    before = _mean_adjacent(matrix, list(range(n)))
    after = _mean_adjacent(matrix, order)
    logger.debug(f"Ordered {n} tracks: mean transition {before:.3f} -> {after:.3f}")

    return OrderingResult(
        ordered_tracks=[tracks[i] for i in order],
        stats={
            "reordered": True,
            "mean_transition_before": before,
            "mean_transition_after": after,
        },
    )
