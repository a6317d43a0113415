"""
Audio-feature comparison.

Pairwise similarity and averaging over partial feature vectors. Every scorer
and the sequence optimizer go through these two functions.
"""
from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional

import numpy as np

from echo_playlists.playlist.models import ALL_FEATURES, NORMALIZED_FEATURES, Track


def compare_audio_features(
    features_a: Optional[Mapping[str, float]],
    features_b: Optional[Mapping[str, float]],
) -> float:
    """
    Similarity in [0, 1] between two partial feature mappings.

    Each normalized dimension present in both contributes 1 - |a - b|; the
    result is the mean over those dimensions. Tempo is not part of this
    comparison (it is on a BPM scale). Returns 0.0 when nothing overlaps.
    """
    if not features_a or not features_b:
        return 0.0

    shared = [
        name for name in NORMALIZED_FEATURES
        if features_a.get(name) is not None and features_b.get(name) is not None
    ]
    if not shared:
        return 0.0

    a = np.array([features_a[name] for name in shared], dtype=float)
    b = np.array([features_b[name] for name in shared], dtype=float)
    return float(np.mean(1.0 - np.abs(a - b)))


def average_audio_features(tracks: Iterable[Track]) -> Optional[Dict[str, float]]:
    """
    Per-dimension mean over the tracks that define each dimension.

    Tracks without any audio features are left out entirely. Returns None
    when no track has features.
    """
    vectors = [t.features() for t in tracks]
    vectors = [v for v in vectors if v]
    if not vectors:
        return None

    averages: Dict[str, float] = {}
    for name in ALL_FEATURES:
        values = [v[name] for v in vectors if name in v]
        if values:
            averages[name] = float(np.mean(values))
    return averages
