"""
Rank-then-walk strategies.

Mood, discovery, history, genre and tempo share one shape: filter the
catalog once, sort the survivors by score (descending, stable), then walk
the sorted list applying the selection constraints until the target size is
reached. O(n log n), unlike the similarity strategy's repeated scans.
"""
from __future__ import annotations

import logging
from abc import abstractmethod
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence

from echo_playlists.playlist.config import Algorithm
from echo_playlists.playlist.features import average_audio_features
from echo_playlists.playlist.models import NORMALIZED_FEATURES, Track
from echo_playlists.playlist.scoring import (
    SelectionState,
    genre_overlap,
    matches_mood,
    score_discovery,
    score_genre,
    score_history,
    score_mood,
    score_tempo,
)
from echo_playlists.playlist.scoring.strategy_scoring import MOOD_FEATURES
from echo_playlists.playlist.strategies.base_strategy import (
    PlaylistGenerationStrategy,
    PlaylistRequest,
    SegmentResult,
)

logger = logging.getLogger(__name__)

DISCOVERY_MAX_PLAY_COUNT = 3
HISTORY_MAX_SKIP_RATIO = 0.3


def walk_ranked(ranked: Sequence[Track], request: PlaylistRequest) -> List[Track]:
    """Take tracks in rank order, skipping any that break the constraints."""
    state = SelectionState(rules=request.rules)
    selected: List[Track] = []
    for track in ranked:
        if len(selected) >= request.target_size:
            break
        if not state.is_eligible(track):
            continue
        selected.append(track)
        state.accept(track)
    return selected


class RankedPlaylistStrategy(PlaylistGenerationStrategy):
    """Filter once, sort once, walk."""

    @abstractmethod
    def scorer(self, request: PlaylistRequest) -> Callable[[Track], float]:
        """Score function for this request (targets resolved once)."""

    @abstractmethod
    def pool(self, request: PlaylistRequest) -> List[Track]:
        """Candidates that pass this strategy's pre-filter, in catalog order."""

    def build(self, request: PlaylistRequest) -> SegmentResult:
        if request.target_size <= 0:
            return self._empty_result("target size is zero")

        pool = self.pool(request)
        score = self.scorer(request)
        scores: Dict[str, float] = {t.id: score(t) for t in pool}
        # sorted() is stable: equal scores keep catalog order
        ranked = sorted(pool, key=lambda t: scores[t.id], reverse=True)
        selected = walk_ranked(ranked, request)

        logger.debug(
            f"{self.algorithm.value.title()} segment: {len(selected)}/{request.target_size} tracks "
            f"from a pool of {len(pool)}/{len(request.candidates)}"
        )
        return SegmentResult(
            algorithm=self.algorithm,
            tracks=tuple(selected),
            stats={
                "requested": request.target_size,
                "selected": len(selected),
                "pool_size": len(pool),
                "scores": {t.id: scores[t.id] for t in selected},
            },
        )


def resolve_mood_target(request: PlaylistRequest) -> Dict[str, float]:
    """Normalized dimensions of the caller's target, else the profile averages."""
    target = {
        name: value for name, value in request.mood_target.items()
        if name in NORMALIZED_FEATURES and value is not None
    }
    if target:
        return target
    return {
        name: value for name, value in request.profile.avg_audio_features.items()
        if name in MOOD_FEATURES
    }


class MoodPlaylistStrategy(RankedPlaylistStrategy):
    algorithm = Algorithm.MOOD

    def scorer(self, request: PlaylistRequest) -> Callable[[Track], float]:
        target = resolve_mood_target(request)
        return lambda track: score_mood(track.features(), target)

    def pool(self, request: PlaylistRequest) -> List[Track]:
        target = resolve_mood_target(request)
        return [t for t in request.candidates if matches_mood(t.features(), target, request.mood_tolerance)]

    def build(self, request: PlaylistRequest) -> SegmentResult:
        logger.debug(f"Mood target: {resolve_mood_target(request) or '(none)'}")
        return super().build(request)


class DiscoveryPlaylistStrategy(RankedPlaylistStrategy):
    """Tracks the listener has not heard (or barely has), ranked by discovery potential."""

    algorithm = Algorithm.DISCOVERY

    def scorer(self, request: PlaylistRequest) -> Callable[[Track], float]:
        return lambda track: score_discovery(track, request.profile, request.now)

    def pool(self, request: PlaylistRequest) -> List[Track]:
        listened = request.profile.listened_track_ids
        return [
            t for t in request.candidates
            if t.id not in listened or t.play_count < DISCOVERY_MAX_PLAY_COUNT
        ]


class HistoryPlaylistStrategy(RankedPlaylistStrategy):
    """Favourites: heard before, rarely skipped."""

    algorithm = Algorithm.HISTORY

    def scorer(self, request: PlaylistRequest) -> Callable[[Track], float]:
        return lambda track: score_history(track, request.now)

    def pool(self, request: PlaylistRequest) -> List[Track]:
        listened = request.profile.listened_track_ids
        return [
            t for t in request.candidates
            if t.id in listened and t.skip_ratio < HISTORY_MAX_SKIP_RATIO
        ]


def resolve_target_genres(request: PlaylistRequest) -> FrozenSet[str]:
    """Seed genres plus seed-artist genres, else the profile's preferred genres."""
    genres = set(request.seed_genres)
    for artist in request.seed_artists:
        genres.update(artist.genres)
    if genres:
        return frozenset(genres)
    return request.profile.preferred_genres


class GenrePlaylistStrategy(RankedPlaylistStrategy):
    algorithm = Algorithm.GENRE

    def scorer(self, request: PlaylistRequest) -> Callable[[Track], float]:
        target = resolve_target_genres(request)
        return lambda track: score_genre(track, target)

    def pool(self, request: PlaylistRequest) -> List[Track]:
        target = resolve_target_genres(request)
        return [t for t in request.candidates if genre_overlap(t.genres, target)]


def resolve_tempo_target(request: PlaylistRequest) -> Optional[float]:
    """Requested tempo, else the profile average, else the catalog average."""
    tempo = request.mood_target.get("tempo")
    if tempo is not None:
        return float(tempo)
    tempo = request.profile.avg_audio_features.get("tempo")
    if tempo is not None:
        return float(tempo)
    catalog_average = average_audio_features(request.candidates) or {}
    return catalog_average.get("tempo")


class TempoPlaylistStrategy(RankedPlaylistStrategy):
    """Tracks close to a target tempo, with energy as a secondary factor."""

    algorithm = Algorithm.TEMPO

    def scorer(self, request: PlaylistRequest) -> Callable[[Track], float]:
        target_tempo = resolve_tempo_target(request)
        target_energy = request.mood_target.get("energy")
        if target_energy is None:
            target_energy = request.profile.avg_audio_features.get("energy")
        logger.debug(f"Tempo target: {target_tempo} BPM, energy {target_energy}")
        return lambda track: score_tempo(track.features(), target_tempo, target_energy)

    def pool(self, request: PlaylistRequest) -> List[Track]:
        return [t for t in request.candidates if t.features().get("tempo") is not None]
