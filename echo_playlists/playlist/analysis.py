"""
Playlist analysis: descriptive statistics over a finished track list,
plus simple mood and listening-context labels derived from audio features.

A missing feature never satisfies a threshold, in either direction.
"""
from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import numpy as np

from echo_playlists.playlist.models import Playlist, Track

logger = logging.getLogger(__name__)

SUMMARY_FEATURES = ("energy", "valence", "danceability", "tempo")


def _above(features: Mapping[str, Any], name: str, threshold: float) -> bool:
    value = features.get(name)
    return value is not None and value > threshold


def _below(features: Mapping[str, Any], name: str, threshold: float) -> bool:
    value = features.get(name)
    return value is not None and value < threshold


def classify_mood(features: Mapping[str, Any]) -> str:
    """
    Label a feature vector with a coarse mood.

    Returns:
        One of happy, peaceful, aggressive, sad, danceable, acoustic, neutral
    """
    if _above(features, "valence", 0.6) and _above(features, "energy", 0.6):
        return "happy"
    if _above(features, "valence", 0.6) and _below(features, "energy", 0.4):
        return "peaceful"
    if _below(features, "valence", 0.4) and _above(features, "energy", 0.6):
        return "aggressive"
    if _below(features, "valence", 0.4) and _below(features, "energy", 0.4):
        return "sad"
    if _above(features, "danceability", 0.7):
        return "danceable"
    if _above(features, "acousticness", 0.7):
        return "acoustic"
    return "neutral"


def suggest_listening_contexts(features: Mapping[str, Any]) -> List[str]:
    """Listening contexts a track suits; ["general"] when nothing specific applies."""
    contexts: List[str] = []
    if _above(features, "energy", 0.7) and _above(features, "danceability", 0.6):
        contexts.extend(["party", "workout"])
    if _above(features, "valence", 0.6) and _above(features, "energy", 0.5):
        contexts.append("mood_booster")
    if _above(features, "acousticness", 0.6) and _below(features, "energy", 0.5):
        contexts.extend(["chill", "study"])
    if _above(features, "instrumentalness", 0.5):
        contexts.extend(["focus", "background"])
    return contexts or ["general"]


def _mean(values: Sequence[float]) -> Optional[float]:
    return float(np.mean(values)) if values else None


def analyze_playlist(tracks: Union[Playlist, Sequence[Track]]) -> Dict[str, Any]:
    """
    Summarize a playlist (or any track list).

    Averages only count tracks that define the dimension; a statistic with
    no contributing track is None.
    """
    if isinstance(tracks, Playlist):
        tracks = [entry.track for entry in tracks.tracks]

    genres: Counter = Counter()
    decades: Counter = Counter()
    moods: Counter = Counter()
    feature_values: Dict[str, List[float]] = {name: [] for name in SUMMARY_FEATURES}
    popularity: List[float] = []

    for track in tracks:
        genres.update(track.genres)
        features = track.features()
        if features:
            moods[classify_mood(features)] += 1
        for name in SUMMARY_FEATURES:
            if name in features:
                feature_values[name].append(features[name])
        if track.popularity is not None:
            popularity.append(track.popularity)
        released = track.effective_release_date
        if released is not None:
            decades[f"{released.year // 10 * 10}s"] += 1

    return {
        "track_count": len(tracks),
        "total_duration_ms": sum(t.duration_ms or 0 for t in tracks),
        "unique_artists": len({t.artist_id for t in tracks if t.artist_id is not None}),
        "genres": dict(genres.most_common()),
        "average_features": {name: _mean(values) for name, values in feature_values.items()},
        "popularity": {
            "min": min(popularity) if popularity else None,
            "max": max(popularity) if popularity else None,
            "avg": _mean(popularity),
        },
        "decades": dict(sorted(decades.items())),
        "moods": dict(moods.most_common()),
    }
