"""
Hybrid strategy: blend several single-strategy segments.

The target size is split into buckets (40% similarity, 20% mood, 20%
discovery, 20% history by default). Each non-empty bucket is built by its
own strategy with its own selection state, and the segments are
interleaved round-robin.

Segments do not share used ids, so one track can be picked by two
strategies and then appear twice in the blend. The blend does not
de-duplicate.
"""
from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Dict, List, Mapping, Sequence, Tuple

from echo_playlists.playlist.config import Algorithm, HybridConfig
from echo_playlists.playlist.models import Track
from echo_playlists.playlist.strategies.base_strategy import (
    PlaylistGenerationStrategy,
    PlaylistRequest,
    SegmentResult,
)

logger = logging.getLogger(__name__)


def split_target_size(
    target_size: int,
    weights: Sequence[Tuple[Algorithm, float]],
) -> Dict[Algorithm, int]:
    """
    Split target_size into per-strategy buckets.

    Each bucket is floor(target_size * share); whatever the flooring leaves
    over goes to the first bucket, so the buckets always sum to target_size.

    Args:
        target_size: Total number of tracks wanted
        weights: (algorithm, share) pairs in interleaving order

    Returns:
        Ordered mapping of algorithm -> bucket size
    """
    buckets = {algorithm: math.floor(target_size * share) for algorithm, share in weights}
    first = weights[0][0]
    buckets[first] += target_size - sum(buckets.values())
    return buckets


def interleave_segments(segments: Mapping[Algorithm, Sequence[Track]]) -> List[Track]:
    """
    Round-robin merge: index 0 of every segment, then index 1, and so on.

    Segments are visited in mapping order; exhausted segments are skipped.
    Duplicates across segments are kept.
    """
    result: List[Track] = []
    longest = max((len(s) for s in segments.values()), default=0)
    for index in range(longest):
        for segment in segments.values():
            if index < len(segment):
                result.append(segment[index])
    return result


class HybridPlaylistStrategy(PlaylistGenerationStrategy):
    algorithm = Algorithm.HYBRID

    def __init__(
        self,
        strategies: Mapping[Algorithm, PlaylistGenerationStrategy],
        config: HybridConfig = HybridConfig(),
    ):
        missing = [a.value for a, _ in config.weights if a not in strategies]
        if missing:
            raise ValueError(f"Hybrid blend needs strategies for: {', '.join(missing)}")
        self.strategies = strategies
        self.config = config

    def build(self, request: PlaylistRequest) -> SegmentResult:
        if request.target_size <= 0:
            return self._empty_result("target size is zero")

        buckets = split_target_size(request.target_size, self.config.weights)
        logger.debug(
            "Hybrid buckets: " + ", ".join(f"{a.value}={n}" for a, n in buckets.items())
        )

        segments: Dict[Algorithm, Tuple[Track, ...]] = {}
        for algorithm, size in buckets.items():
            if size <= 0:
                continue
            segment = self.strategies[algorithm].build(replace(request, target_size=size))
            segments[algorithm] = segment.tracks

        blended = interleave_segments(segments)
        distinct = len({t.id for t in blended})
        if distinct < len(blended):
            logger.debug(f"Hybrid blend has {len(blended) - distinct} cross-segment duplicates")

        return SegmentResult(
            algorithm=self.algorithm,
            tracks=tuple(blended),
            stats={
                "requested": request.target_size,
                "selected": len(blended),
                "buckets": {a.value: n for a, n in buckets.items()},
                "segments": {a.value: len(s) for a, s in segments.items()},
                "cross_segment_duplicates": len(blended) - distinct,
            },
        )
