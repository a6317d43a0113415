"""
Per-strategy candidate scoring.

Each function scores one candidate track for one generation strategy:

- similarity: against a seed set and the listener profile, in [0, 1]
- mood: against a target mood mapping, in [0, 1]
- discovery: against the listener profile, ranking only (not normalized)
- history: from the track's own play statistics, ranking only
- genre: overlap with requested genres, in [0, 1]
- tempo: proximity to a target tempo (and energy), in [0, 1]

Similarity and mood average over the factors that apply; a factor whose
inputs are missing is left out of the mean rather than counted as zero.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import AbstractSet, FrozenSet, Iterable, Mapping, Optional

from echo_playlists.playlist.features import average_audio_features, compare_audio_features
from echo_playlists.playlist.models import Track, UserProfile

MOOD_FEATURES = ("valence", "energy", "danceability", "acousticness")

PREFERRED_ARTIST_FACTOR = 0.3
DISCOVERY_GENRE_WEIGHT = 0.2
DISCOVERY_POPULARITY_WEIGHT = 0.3
DISCOVERY_IDEAL_POPULARITY = 0.4
DISCOVERY_RECENCY_WEIGHT = 0.2
DISCOVERY_RECENCY_MONTHS = 12
HISTORY_PLAY_COUNT_WEIGHT = 0.4
HISTORY_PLAY_COUNT_SATURATION = 10
HISTORY_COMPLETION_WEIGHT = 0.3
HISTORY_RECENCY_WEIGHT = 0.3
HISTORY_RECENCY_DAYS = 30
TEMPO_SCALE_BPM = 50.0


@dataclass(frozen=True)
class SeedSummary:
    """Aggregate view of a seed set, computed once per builder run."""

    average_features: Optional[Mapping[str, float]]
    genres: FrozenSet[str]


def summarize_seeds(seed_tracks: Iterable[Track]) -> SeedSummary:
    seeds = list(seed_tracks)
    genres = frozenset(g for seed in seeds for g in seed.genres)
    return SeedSummary(average_features=average_audio_features(seeds), genres=genres)


def genre_overlap(track_genres: AbstractSet[str], reference_genres: AbstractSet[str]) -> Optional[float]:
    """|track ∩ reference| / max(|reference|, |track|), or None if either side is empty."""
    if not track_genres or not reference_genres:
        return None
    common = len(track_genres & reference_genres)
    return common / max(len(reference_genres), len(track_genres))


def score_similarity(track: Track, seeds: SeedSummary, profile: UserProfile) -> float:
    total = 0.0
    factors = 0

    features = track.features()
    if features and seeds.average_features is not None:
        total += compare_audio_features(seeds.average_features, features)
        factors += 1

    overlap = genre_overlap(track.genres, seeds.genres)
    if overlap is not None:
        total += overlap
        factors += 1

    if track.artist_id is not None and track.artist_id in profile.preferred_artists:
        total += PREFERRED_ARTIST_FACTOR
        factors += 1

    return total / factors if factors else 0.0


def score_mood(features: Optional[Mapping[str, float]], target_mood: Optional[Mapping[str, float]]) -> float:
    if not features or not target_mood:
        return 0.0

    total = 0.0
    factors = 0
    for name in MOOD_FEATURES:
        if features.get(name) is not None and target_mood.get(name) is not None:
            total += 1.0 - abs(features[name] - target_mood[name])
            factors += 1
    return total / factors if factors else 0.0


def matches_mood(
    features: Optional[Mapping[str, float]],
    target_mood: Optional[Mapping[str, float]],
    tolerance: float = 0.3,
) -> bool:
    """Every target dimension the track defines must be within tolerance."""
    if not features or target_mood is None:
        return False
    for name, target in target_mood.items():
        value = features.get(name)
        if value is None or target is None:
            continue
        if abs(value - target) > tolerance:
            return False
    return True


def _utc(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


def months_since(moment: datetime, now: datetime) -> float:
    moment, now = _utc(moment), _utc(now)
    return (now - moment).total_seconds() / (60 * 60 * 24 * 30)


def score_discovery(track: Track, profile: UserProfile, now: datetime) -> float:
    score = 0.0

    if track.genres:
        score += len(track.genres & profile.preferred_genres) * DISCOVERY_GENRE_WEIGHT

    if track.popularity is not None:
        score += (1.0 - abs(track.popularity - DISCOVERY_IDEAL_POPULARITY)) * DISCOVERY_POPULARITY_WEIGHT

    released = track.effective_release_date
    if released is not None:
        released_at = datetime(released.year, released.month, released.day, tzinfo=now.tzinfo)
        months = max(0.0, months_since(released_at, now))
        if months < DISCOVERY_RECENCY_MONTHS:
            score += (DISCOVERY_RECENCY_MONTHS - months) / DISCOVERY_RECENCY_MONTHS * DISCOVERY_RECENCY_WEIGHT

    return score


def score_history(track: Track, now: datetime) -> float:
    score = 0.0

    if track.play_count:
        score += min(track.play_count / HISTORY_PLAY_COUNT_SATURATION, 1.0) * HISTORY_PLAY_COUNT_WEIGHT

    if track.completion_rate is not None:
        score += track.completion_rate * HISTORY_COMPLETION_WEIGHT

    if track.last_played_at is not None:
        days = max(0.0, (_utc(now) - _utc(track.last_played_at)).total_seconds() / (60 * 60 * 24))
        score += max(0.0, 1.0 - days / HISTORY_RECENCY_DAYS) * HISTORY_RECENCY_WEIGHT

    return score


def score_genre(track: Track, target_genres: AbstractSet[str]) -> float:
    overlap = genre_overlap(track.genres, target_genres)
    return overlap if overlap is not None else 0.0


def tempo_proximity(tempo_a: float, tempo_b: float) -> float:
    return max(0.0, 1.0 - abs(tempo_a - tempo_b) / TEMPO_SCALE_BPM)


def score_tempo(
    features: Optional[Mapping[str, float]],
    target_tempo: Optional[float],
    target_energy: Optional[float] = None,
) -> float:
    if not features or features.get("tempo") is None or target_tempo is None:
        return 0.0

    total = tempo_proximity(features["tempo"], target_tempo)
    factors = 1
    if target_energy is not None and features.get("energy") is not None:
        total += 1.0 - abs(features["energy"] - target_energy)
        factors += 1
    return total / factors
