"""Unit tests for candidate scoring.

Coverage:
- Similarity, mood, discovery, history, genre and tempo scorers
- Mood pre-filter
- Transition scoring and the transition matrix
"""

from datetime import date, timedelta

import numpy as np
import pytest

from echo_playlists.playlist.models import UserProfile
from echo_playlists.playlist.scoring import (
    build_transition_matrix,
    compute_transition_score,
    genre_overlap,
    matches_mood,
    score_discovery,
    score_genre,
    score_history,
    score_mood,
    score_similarity,
    score_tempo,
    summarize_seeds,
)


# =============================================================================
# Similarity
# =============================================================================

class TestSimilarityScore:
    """Test score_similarity against a seed summary."""

    def test_identical_track_scores_one(self, make_track):
        seed = make_track("s", artist_id="a1", genres=("rock",), energy=0.5, valence=0.5)
        candidate = make_track("c", artist_id="a2", genres=("rock",), energy=0.5, valence=0.5)
        score = score_similarity(candidate, summarize_seeds([seed]), UserProfile.empty())
        assert score == pytest.approx(1.0)

    def test_preferred_artist_only(self, make_track):
        candidate = make_track("c", artist_id="fav")
        profile = UserProfile(preferred_artists=frozenset({"fav"}))
        assert score_similarity(candidate, summarize_seeds([]), profile) == pytest.approx(0.3)

    def test_no_applicable_factor(self, make_track):
        candidate = make_track("c", artist_id="a9")
        assert score_similarity(candidate, summarize_seeds([]), UserProfile.empty()) == 0.0

    def test_missing_factors_are_left_out_of_mean(self, make_track):
        """A track without features is scored on genres alone, not penalized."""
        seed = make_track("s", genres=("rock",), energy=0.1)
        candidate = make_track("c", genres=("rock", "pop"))
        score = score_similarity(candidate, summarize_seeds([seed]), UserProfile.empty())
        assert score == pytest.approx(0.5)

    def test_score_in_unit_interval(self, make_track):
        seed = make_track("s", genres=("rock", "indie"), energy=0.9, valence=0.1, danceability=0.3)
        profile = UserProfile(preferred_artists=frozenset({"a1"}))
        for energy in (0.0, 0.25, 0.5, 1.0):
            candidate = make_track("c", artist_id="a1", genres=("indie",), energy=energy, valence=0.8)
            assert 0.0 <= score_similarity(candidate, summarize_seeds([seed]), profile) <= 1.0

    def test_genre_overlap_ratio(self):
        assert genre_overlap(frozenset({"a", "b"}), frozenset({"a"})) == pytest.approx(0.5)
        assert genre_overlap(frozenset({"a"}), frozenset({"a", "b", "c", "d"})) == pytest.approx(0.25)
        assert genre_overlap(frozenset(), frozenset({"a"})) is None


# =============================================================================
# Mood
# =============================================================================

class TestMoodScore:
    """Test score_mood and matches_mood."""

    def test_exact_match(self):
        target = {"valence": 0.8, "energy": 0.7}
        assert score_mood({"valence": 0.8, "energy": 0.7, "tempo": 128.0}, target) == pytest.approx(1.0)

    def test_partial_match(self):
        assert score_mood({"valence": 0.5}, {"valence": 0.75, "energy": 0.5}) == pytest.approx(0.75)

    def test_no_features(self):
        assert score_mood({}, {"valence": 0.8}) == 0.0
        assert score_mood(None, {"valence": 0.8}) == 0.0

    def test_matches_within_tolerance(self):
        assert matches_mood({"valence": 0.6, "energy": 0.9}, {"valence": 0.8, "energy": 0.7})

    def test_rejects_outside_tolerance(self):
        assert not matches_mood({"valence": 0.25, "energy": 0.7}, {"valence": 0.8, "energy": 0.7})

    def test_missing_track_dimension_is_not_checked(self):
        assert matches_mood({"energy": 0.7}, {"valence": 0.8, "energy": 0.7})

    def test_track_without_features_never_matches(self):
        assert not matches_mood({}, {"valence": 0.8})

    def test_no_target(self):
        assert not matches_mood({"valence": 0.8}, None)
        # An empty target constrains nothing
        assert matches_mood({"valence": 0.8}, {})


# =============================================================================
# Discovery
# =============================================================================

class TestDiscoveryScore:
    """Test score_discovery."""

    def test_mid_popularity_preferred(self, make_track, now):
        profile = UserProfile.empty()
        niche = make_track("niche", popularity=0.4)
        hit = make_track("hit", popularity=0.9)
        assert score_discovery(niche, profile, now) == pytest.approx(0.3)
        assert score_discovery(hit, profile, now) == pytest.approx(0.15)

    def test_preferred_genres_count(self, make_track, now):
        profile = UserProfile(preferred_genres=frozenset({"rock", "jazz", "pop"}))
        track = make_track("t", genres=("rock", "jazz", "metal"))
        assert score_discovery(track, profile, now) == pytest.approx(0.4)

    def test_recent_release_bonus(self, make_track, now):
        profile = UserProfile.empty()
        recent = make_track("recent", release_date=(now - timedelta(days=30)).date())
        old = make_track("old", release_date=date(1999, 1, 1))
        assert score_discovery(recent, profile, now) > 0.15
        assert score_discovery(old, profile, now) == 0.0

    def test_future_release_clamped(self, make_track, now):
        track = make_track("future", release_date=date(2025, 1, 1))
        assert score_discovery(track, UserProfile.empty(), now) == pytest.approx(0.2)


# =============================================================================
# History
# =============================================================================

class TestHistoryScore:
    """Test score_history."""

    def test_heavy_rotation_scores_full(self, make_track, now):
        track = make_track("t", play_count=25, completion_rate=1.0, last_played_at=now)
        assert score_history(track, now) == pytest.approx(1.0)

    def test_play_count_saturates(self, make_track, now):
        assert score_history(make_track("t", play_count=5), now) == pytest.approx(0.2)
        assert score_history(make_track("t", play_count=10), now) == pytest.approx(0.4)

    def test_stale_track_gets_no_recency(self, make_track, now):
        track = make_track("t", last_played_at=now - timedelta(days=45))
        assert score_history(track, now) == 0.0

    def test_future_last_played_clamped(self, make_track, now):
        track = make_track("t", last_played_at=now + timedelta(days=3))
        assert score_history(track, now) == pytest.approx(0.3)


# =============================================================================
# Genre and tempo
# =============================================================================

class TestGenreAndTempoScore:
    """Test score_genre and score_tempo."""

    def test_genre_score(self, make_track):
        assert score_genre(make_track("t", genres=("jazz",)), frozenset({"jazz"})) == pytest.approx(1.0)
        assert score_genre(make_track("t"), frozenset({"jazz"})) == 0.0

    def test_tempo_proximity(self):
        assert score_tempo({"tempo": 120.0}, 120.0) == pytest.approx(1.0)
        assert score_tempo({"tempo": 145.0}, 120.0) == pytest.approx(0.5)
        assert score_tempo({"tempo": 200.0}, 120.0) == 0.0

    def test_tempo_with_energy_target(self):
        assert score_tempo({"tempo": 120.0, "energy": 0.5}, 120.0, 0.75) == pytest.approx(0.875)

    def test_no_tempo(self):
        assert score_tempo({"energy": 0.5}, 120.0) == 0.0
        assert score_tempo({"tempo": 120.0}, None) == 0.0


# =============================================================================
# Transitions
# =============================================================================

class TestTransitionScore:
    """Test compute_transition_score and build_transition_matrix."""

    def test_neutral_without_data(self, make_track):
        assert compute_transition_score(make_track("a"), make_track("b")) == pytest.approx(0.5)

    def test_same_artist_bonus_alone(self, make_track):
        a = make_track("a", artist_id="x")
        b = make_track("b", artist_id="x")
        assert compute_transition_score(a, b) == pytest.approx(0.3)

    def test_unknown_artists_are_not_the_same(self, make_track):
        a = make_track("a", genres=("rock",))
        b = make_track("b", genres=("rock",))
        assert a.artist_id is None
        assert compute_transition_score(a, b) == pytest.approx(0.5)

    def test_all_factors(self, make_track):
        a = make_track("a", artist_id="x", energy=0.5, tempo=120.0)
        b = make_track("b", artist_id="x", energy=0.5, tempo=120.0)
        assert compute_transition_score(a, b) == pytest.approx((1.0 + 0.3 + 1.0) / 3)

    def test_matrix_shape_and_symmetry(self, make_track):
        tracks = [
            make_track("a", energy=0.1),
            make_track("b", energy=0.9),
            make_track("c", energy=0.4, tempo=100.0),
        ]
        matrix = build_transition_matrix(tracks)
        assert matrix.shape == (3, 3)
        assert np.all(np.isneginf(np.diag(matrix)))
        assert matrix[0, 1] == pytest.approx(matrix[1, 0])
        assert matrix[0, 1] == pytest.approx(compute_transition_score(tracks[0], tracks[1]))
