"""Unit tests for playlist analysis and mood labels."""

from datetime import date

import pytest

from echo_playlists.playlist.analysis import (
    analyze_playlist,
    classify_mood,
    suggest_listening_contexts,
)
from echo_playlists.playlist.assembler import assemble_playlist
from echo_playlists.playlist.config import Algorithm


class TestClassifyMood:
    """Test classify_mood."""

    @pytest.mark.parametrize("features,expected", [
        ({"valence": 0.8, "energy": 0.8}, "happy"),
        ({"valence": 0.8, "energy": 0.2}, "peaceful"),
        ({"valence": 0.2, "energy": 0.9}, "aggressive"),
        ({"valence": 0.1, "energy": 0.1}, "sad"),
        ({"valence": 0.5, "energy": 0.5, "danceability": 0.9}, "danceable"),
        ({"acousticness": 0.9}, "acoustic"),
        ({"valence": 0.5, "energy": 0.5}, "neutral"),
    ])
    def test_labels(self, features, expected):
        assert classify_mood(features) == expected

    def test_missing_dimension_never_matches(self):
        # Without energy neither the high nor the low branch applies
        assert classify_mood({"valence": 0.9}) == "neutral"


class TestListeningContexts:
    """Test suggest_listening_contexts."""

    def test_party_track(self):
        contexts = suggest_listening_contexts({"energy": 0.9, "danceability": 0.8, "valence": 0.7})
        assert contexts == ["party", "workout", "mood_booster"]

    def test_quiet_track(self):
        contexts = suggest_listening_contexts({"acousticness": 0.8, "energy": 0.2, "instrumentalness": 0.9})
        assert contexts == ["chill", "study", "focus", "background"]

    def test_general(self):
        assert suggest_listening_contexts({}) == ["general"]

    def test_unknown_dimension_ignored(self):
        # Only AudioFeatures dimensions drive contexts
        assert suggest_listening_contexts({"liveness": 0.9}) == ["general"]


class TestAnalyzePlaylist:
    """Test analyze_playlist."""

    def test_statistics(self, make_track):
        tracks = [
            make_track("a", artist_id="x", genres=("rock",), popularity=40.0,
                       release_date=date(1994, 3, 1), energy=0.8, valence=0.8, tempo=120.0),
            make_track("b", artist_id="x", genres=("rock", "indie"), popularity=80.0,
                       release_date=date(2001, 1, 1), energy=0.2, valence=0.2),
            make_track("c", artist_id="y", duration_ms=None, release_date=date(1999, 12, 31)),
        ]
        analysis = analyze_playlist(tracks)

        assert analysis["track_count"] == 3
        assert analysis["total_duration_ms"] == 400_000
        assert analysis["unique_artists"] == 2
        assert analysis["genres"] == {"rock": 2, "indie": 1}
        assert analysis["average_features"]["energy"] == pytest.approx(0.5)
        assert analysis["average_features"]["tempo"] == pytest.approx(120.0)
        assert analysis["average_features"]["danceability"] is None
        assert analysis["popularity"] == {"min": 40.0, "max": 80.0, "avg": pytest.approx(60.0)}
        assert analysis["decades"] == {"1990s": 2, "2000s": 1}
        assert analysis["moods"] == {"happy": 1, "sad": 1}

    def test_accepts_playlist(self, make_track, now):
        playlist = assemble_playlist(
            [make_track("a", energy=0.9, valence=0.9)],
            playlist_id="p",
            algorithm=Algorithm.MOOD,
            now=now,
        )
        analysis = analyze_playlist(playlist)
        assert analysis["track_count"] == 1
        assert analysis["moods"] == {"happy": 1}

    def test_empty(self):
        analysis = analyze_playlist([])
        assert analysis["track_count"] == 0
        assert analysis["popularity"]["avg"] is None
        assert analysis["genres"] == {}
