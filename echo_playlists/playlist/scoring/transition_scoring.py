"""
Transition scoring between consecutive tracks.

The score of placing track B right after track A is the mean over the
factors that apply:

- audio-feature similarity of the full vectors
- a flat 0.3 factor when both tracks are by the same (known) artist
- tempo proximity, max(0, 1 - |tempo_a - tempo_b| / 50)

When none applies the score is a neutral 0.5, so tracks with no data never
block the optimizer.
"""
from typing import Sequence

import numpy as np

from echo_playlists.playlist.features import compare_audio_features
from echo_playlists.playlist.models import Track
from echo_playlists.playlist.scoring.strategy_scoring import tempo_proximity

SAME_ARTIST_FACTOR = 0.3
NEUTRAL_TRANSITION = 0.5


def compute_transition_score(track_a: Track, track_b: Track) -> float:
    """
    Score the transition from track_a to track_b.

    Args:
        track_a: Track currently playing
        track_b: Track that would follow it

    Returns:
        Transition score in [0, 1]
    """
    total = 0.0
    factors = 0

    features_a = track_a.features()
    features_b = track_b.features()
    if features_a and features_b:
        total += compare_audio_features(features_a, features_b)
        factors += 1

    if track_a.artist_id is not None and track_a.artist_id == track_b.artist_id:
        total += SAME_ARTIST_FACTOR
        factors += 1

    tempo_a = features_a.get("tempo")
    tempo_b = features_b.get("tempo")
    if tempo_a is not None and tempo_b is not None:
        total += tempo_proximity(tempo_a, tempo_b)
        factors += 1

    return total / factors if factors else NEUTRAL_TRANSITION


def build_transition_matrix(tracks: Sequence[Track]) -> np.ndarray:
    """
    Pairwise transition scores, shape (N, N).

    Entry [i, j] scores playing tracks[j] right after tracks[i]. The score is
    symmetric, so only the upper triangle is computed. The diagonal is left
    at -inf so a track is never chosen to follow itself.
    """
    n = len(tracks)
    matrix = np.full((n, n), -np.inf, dtype=float)
    for i in range(n):
        for j in range(i + 1, n):
            score = compute_transition_score(tracks[i], tracks[j])
            matrix[i, j] = score
            matrix[j, i] = score
    return matrix
