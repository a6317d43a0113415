"""
Scoring Module
==============

Candidate scoring for every generation strategy, track-to-track transition
scoring, and the selection constraints builders apply while picking tracks.

Public API:
-----------
Strategy Scoring:
    score_similarity(), score_mood(), matches_mood(), score_discovery(),
    score_history(), score_genre(), score_tempo(), summarize_seeds()

Transition Scoring:
    compute_transition_score()
    build_transition_matrix()

Constraints:
    SelectionState
"""

from .strategy_scoring import (
    SeedSummary,
    genre_overlap,
    matches_mood,
    score_discovery,
    score_genre,
    score_history,
    score_mood,
    score_similarity,
    score_tempo,
    summarize_seeds,
    tempo_proximity,
)
from .transition_scoring import (
    build_transition_matrix,
    compute_transition_score,
)
from .constraints import (
    SelectionState,
    is_frequently_skipped,
)

__all__ = [
    # Strategy scoring
    "SeedSummary",
    "genre_overlap",
    "matches_mood",
    "score_discovery",
    "score_genre",
    "score_history",
    "score_mood",
    "score_similarity",
    "score_tempo",
    "summarize_seeds",
    "tempo_proximity",
    # Transition scoring
    "build_transition_matrix",
    "compute_transition_score",
    # Constraints
    "SelectionState",
    "is_frequently_skipped",
]
