"""Unit tests for the hybrid blender."""

import pytest

from echo_playlists.playlist.config import DEFAULT_HYBRID_WEIGHTS, Algorithm, HybridConfig
from echo_playlists.playlist.strategies import (
    HybridPlaylistStrategy,
    PlaylistGenerationStrategy,
    SegmentResult,
    interleave_segments,
    split_target_size,
)


# =============================================================================
# Stub strategy
# =============================================================================

class StubStrategy(PlaylistGenerationStrategy):
    """Returns the first target_size tracks of a fixed list and records requests."""

    def __init__(self, algorithm, tracks):
        self.algorithm = algorithm
        self.tracks = tuple(tracks)
        self.requests = []

    def build(self, request):
        self.requests.append(request)
        return SegmentResult(algorithm=self.algorithm, tracks=self.tracks[:request.target_size])


def _stubs(make_track, shared=None):
    stubs = {}
    for algorithm, _ in DEFAULT_HYBRID_WEIGHTS:
        prefix = algorithm.value[0]
        tracks = [make_track(f"{prefix}{i}") for i in range(10)]
        if shared is not None:
            tracks[0] = shared
        stubs[algorithm] = StubStrategy(algorithm, tracks)
    return stubs


# =============================================================================
# Bucket split
# =============================================================================

class TestSplitTargetSize:
    """Test split_target_size."""

    def test_default_split_of_thirty(self):
        buckets = split_target_size(30, DEFAULT_HYBRID_WEIGHTS)
        assert buckets == {
            Algorithm.SIMILARITY: 12,
            Algorithm.MOOD: 6,
            Algorithm.DISCOVERY: 6,
            Algorithm.HISTORY: 6,
        }

    def test_shortfall_goes_to_similarity(self):
        buckets = split_target_size(7, DEFAULT_HYBRID_WEIGHTS)
        assert buckets[Algorithm.MOOD] == 1
        assert buckets[Algorithm.SIMILARITY] == 4

    @pytest.mark.parametrize("size", range(0, 61))
    def test_buckets_sum_to_target(self, size):
        buckets = split_target_size(size, DEFAULT_HYBRID_WEIGHTS)
        assert sum(buckets.values()) == size
        assert all(n >= 0 for n in buckets.values())

    def test_order_follows_weights(self):
        assert list(split_target_size(10, DEFAULT_HYBRID_WEIGHTS)) == [a for a, _ in DEFAULT_HYBRID_WEIGHTS]


# =============================================================================
# Interleaving
# =============================================================================

class TestInterleaveSegments:
    """Test round-robin interleaving."""

    def test_round_robin(self, make_track):
        segments = {
            Algorithm.SIMILARITY: [make_track("s0"), make_track("s1"), make_track("s2")],
            Algorithm.MOOD: [make_track("m0")],
            Algorithm.DISCOVERY: [],
            Algorithm.HISTORY: [make_track("h0"), make_track("h1")],
        }
        ids = [t.id for t in interleave_segments(segments)]
        assert ids == ["s0", "m0", "h0", "s1", "h1", "s2"]

    def test_empty(self):
        assert interleave_segments({}) == []


# =============================================================================
# HybridPlaylistStrategy
# =============================================================================

class TestHybridStrategy:
    """Test the blend built from per-bucket strategies."""

    def test_blend_order(self, make_track, make_request):
        stubs = _stubs(make_track)
        result = HybridPlaylistStrategy(stubs).build(make_request([], target_size=10))

        assert list(result.track_ids) == ["s0", "m0", "d0", "h0", "s1", "m1", "d1", "h1", "s2", "s3"]
        assert result.stats["buckets"] == {"similarity": 4, "mood": 2, "discovery": 2, "history": 2}
        assert [r.target_size for r in stubs[Algorithm.SIMILARITY].requests] == [4]

    def test_cross_segment_duplicates_kept(self, make_track, make_request):
        shared = make_track("shared")
        result = HybridPlaylistStrategy(_stubs(make_track, shared=shared)).build(make_request([], target_size=10))
        assert result.track_ids.count("shared") == 4
        assert result.stats["cross_segment_duplicates"] == 3

    def test_empty_buckets_not_built(self, make_track, make_request):
        stubs = _stubs(make_track)
        result = HybridPlaylistStrategy(stubs).build(make_request([], target_size=2))
        # 2 * 0.2 floors to 0: only similarity is built
        assert result.track_ids == ("s0", "s1")
        assert stubs[Algorithm.MOOD].requests == []

    def test_custom_weights(self, make_track, make_request):
        stubs = _stubs(make_track)
        config = HybridConfig(weights=((Algorithm.HISTORY, 0.5), (Algorithm.MOOD, 0.5)))
        result = HybridPlaylistStrategy(stubs, config).build(make_request([], target_size=4))
        assert result.track_ids == ("h0", "m0", "h1", "m1")

    def test_missing_strategy_rejected(self, make_track):
        stubs = _stubs(make_track)
        del stubs[Algorithm.DISCOVERY]
        with pytest.raises(ValueError, match="discovery"):
            HybridPlaylistStrategy(stubs)

    def test_zero_target(self, make_track, make_request):
        assert len(HybridPlaylistStrategy(_stubs(make_track)).build(make_request([], target_size=0))) == 0
