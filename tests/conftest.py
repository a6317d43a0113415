"""Test configuration and fixtures."""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add repo root to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from echo_playlists.playlist.config import GenerationRules
from echo_playlists.playlist.models import Artist, AudioFeatures, Track, UserProfile
from echo_playlists.playlist.strategies import PlaylistRequest

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def build_track(
    track_id,
    *,
    artist_id=None,
    artist_name=None,
    genres=(),
    duration_ms=200_000,
    popularity=None,
    play_count=0,
    skip_ratio=0.0,
    completion_rate=None,
    last_played_at=None,
    release_date=None,
    **features,
):
    """Build a Track; keyword arguments not listed above are audio features."""
    artist = None
    if artist_id is not None or genres:
        artist = Artist(
            id=artist_id,
            name=artist_name or (f"Artist {artist_id}" if artist_id else ""),
            genres=frozenset(genres),
        )
    return Track(
        id=track_id,
        title=f"Song {track_id}",
        artist=artist,
        duration_ms=duration_ms,
        audio_features=AudioFeatures(**features) if features else None,
        popularity=popularity,
        play_count=play_count,
        skip_ratio=skip_ratio,
        completion_rate=completion_rate,
        last_played_at=last_played_at,
        release_date=release_date,
    )


def build_request(candidates, **kwargs):
    """PlaylistRequest with an empty profile and default rules unless overridden."""
    kwargs.setdefault("profile", UserProfile.empty())
    kwargs.setdefault("rules", GenerationRules())
    kwargs.setdefault("target_size", 10)
    kwargs.setdefault("now", NOW)
    return PlaylistRequest(candidates=tuple(candidates), **kwargs)


FLAT_FEATURES = dict(energy=0.5, valence=0.5, danceability=0.5, acousticness=0.5, instrumentalness=0.5)


def build_uniform_catalog(track_count=20, artist_count=10):
    """Identical-sounding rock tracks, track_count // artist_count per artist."""
    per_artist = track_count // artist_count
    return [
        build_track(f"t{i}", artist_id=f"a{i // per_artist}", genres=("rock",), **FLAT_FEATURES)
        for i in range(track_count)
    ]


@pytest.fixture()
def now():
    return NOW


@pytest.fixture()
def make_track():
    return build_track


@pytest.fixture()
def make_request():
    return build_request


@pytest.fixture()
def uniform_catalog():
    """20 tracks by 10 artists (2 each), all with the same features and genre."""
    return build_uniform_catalog()
