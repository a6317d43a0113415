"""
Similarity strategy: greedy selection around a seed set.

Each round re-scores every remaining candidate against the seed set and
takes the single best eligible track scoring above min_similarity. O(n * k)
for n candidates and k target tracks.
"""
from __future__ import annotations

import logging
from typing import List, Tuple

from echo_playlists.playlist.config import Algorithm
from echo_playlists.playlist.models import Track
from echo_playlists.playlist.scoring import SelectionState, score_similarity, summarize_seeds
from echo_playlists.playlist.strategies.base_strategy import (
    PlaylistGenerationStrategy,
    PlaylistRequest,
    SegmentResult,
)

logger = logging.getLogger(__name__)

PROFILE_SEED_COUNT = 5


def resolve_working_seeds(request: PlaylistRequest) -> Tuple[Track, ...]:
    """Caller seeds, or the listener's top tracks when none were given."""
    if request.seed_tracks:
        return tuple(request.seed_tracks)
    return tuple(request.profile.top_tracks[:PROFILE_SEED_COUNT])


class SimilarityPlaylistStrategy(PlaylistGenerationStrategy):
    algorithm = Algorithm.SIMILARITY

    def build(self, request: PlaylistRequest) -> SegmentResult:
        if request.target_size <= 0:
            return self._empty_result("target size is zero")

        seeds = resolve_working_seeds(request)
        summary = summarize_seeds(seeds)
        state = SelectionState(rules=request.rules)
        selected: List[Track] = []

        # Seeds open the segment, under the same constraints as picks
        for seed in seeds:
            if len(selected) >= request.target_size:
                break
            if state.is_eligible(seed):
                selected.append(seed)
                state.accept(seed)
        seeded = len(selected)

        rounds = 0
        while len(selected) < request.target_size:
            rounds += 1
            best_track = None
            best_score = request.rules.min_similarity

            for track in request.candidates:
                if not state.is_eligible(track):
                    continue
                score = score_similarity(track, summary, request.profile)
                if score > best_score:
                    best_score = score
                    best_track = track

            if best_track is None:
                logger.debug(
                    f"Similarity: no candidate above {request.rules.min_similarity:.2f} "
                    f"after {len(selected)}/{request.target_size} tracks"
                )
                break

            selected.append(best_track)
            state.accept(best_track)

        logger.debug(
            f"Similarity segment: {len(selected)} tracks ({seeded} seeds, "
            f"{len(seeds)} working seeds, {rounds} rounds)"
        )
        return SegmentResult(
            algorithm=self.algorithm,
            tracks=tuple(selected),
            stats={
                "requested": request.target_size,
                "selected": len(selected),
                "seed_count": len(seeds),
                "seeds_included": seeded,
            },
        )
