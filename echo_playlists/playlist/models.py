"""
Data model for playlist generation.

Catalog tracks, listener profiles and generated playlists. All types are
frozen dataclasses: the engine reads catalog entries and never mutates them,
it wraps them in PlaylistEntry objects when producing output.

Fields that a provider may not know are Optional, and scorers check for None
explicitly instead of relying on falsy fallbacks.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

# Dimensions normalized to [0, 1]
NORMALIZED_FEATURES: Tuple[str, ...] = (
    "energy",
    "valence",
    "danceability",
    "acousticness",
    "instrumentalness",
)
ALL_FEATURES: Tuple[str, ...] = NORMALIZED_FEATURES + ("tempo",)


def _parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO timestamp (or pass a datetime through), always UTC-aware."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    # Release dates from streaming services can be year-only or year-month
    if len(text) == 4:
        return date(int(text), 1, 1)
    if len(text) == 7:
        return date(int(text[:4]), int(text[5:7]), 1)
    return _parse_datetime(text).date()


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first key present in data (snake_case or camelCase)."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value)


@dataclass(frozen=True)
class Artist:
    id: Optional[str]
    name: str = ""
    genres: FrozenSet[str] = frozenset()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Artist":
        artist_id = data.get("id")
        return cls(
            id=str(artist_id) if artist_id is not None else None,
            name=data.get("name") or "",
            genres=frozenset(data.get("genres") or ()),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "genres": sorted(self.genres)}


@dataclass(frozen=True)
class Album:
    id: Optional[str]
    title: str = ""
    release_date: Optional[date] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Album":
        album_id = data.get("id")
        return cls(
            id=str(album_id) if album_id is not None else None,
            title=data.get("title") or data.get("name") or "",
            release_date=_parse_date(_pick(data, "release_date", "releaseDate")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "release_date": self.release_date.isoformat() if self.release_date else None,
        }


@dataclass(frozen=True)
class AudioFeatures:
    """Pre-computed audio features. Each dimension is present or absent independently."""

    energy: Optional[float] = None
    valence: Optional[float] = None
    danceability: Optional[float] = None
    acousticness: Optional[float] = None
    instrumentalness: Optional[float] = None
    tempo: Optional[float] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> Optional["AudioFeatures"]:
        """Build from a plain mapping; unknown keys are ignored. None stays None."""
        if data is None:
            return None
        if isinstance(data, AudioFeatures):
            return data
        return cls(**{name: _optional_float(data.get(name)) for name in ALL_FEATURES})

    def as_mapping(self) -> Dict[str, float]:
        """Only the dimensions that are present."""
        return {
            name: getattr(self, name)
            for name in ALL_FEATURES
            if getattr(self, name) is not None
        }

    def is_empty(self) -> bool:
        return not self.as_mapping()


@dataclass(frozen=True)
class Track:
    id: str
    title: str = ""
    artist: Optional[Artist] = None
    album: Optional[Album] = None
    duration_ms: Optional[int] = None
    audio_features: Optional[AudioFeatures] = None
    popularity: Optional[float] = None
    play_count: int = 0
    skip_ratio: float = 0.0
    completion_rate: Optional[float] = None
    last_played_at: Optional[datetime] = None
    release_date: Optional[date] = None

    @property
    def artist_id(self) -> Optional[str]:
        return self.artist.id if self.artist is not None else None

    @property
    def genres(self) -> FrozenSet[str]:
        return self.artist.genres if self.artist is not None else frozenset()

    @property
    def effective_release_date(self) -> Optional[date]:
        if self.release_date is not None:
            return self.release_date
        if self.album is not None:
            return self.album.release_date
        return None

    def features(self) -> Dict[str, float]:
        """Present audio-feature dimensions (empty mapping when unknown)."""
        if self.audio_features is None:
            return {}
        return self.audio_features.as_mapping()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Track":
        """Build a track from a provider record (snake_case or camelCase keys)."""
        artist = data.get("artist")
        album = data.get("album")
        features = _pick(data, "audio_features", "audioFeatures")
        popularity = data.get("popularity")
        return cls(
            id=str(data["id"]),
            title=data.get("title") or data.get("name") or "",
            artist=Artist.from_dict(artist) if isinstance(artist, Mapping) else artist,
            album=Album.from_dict(album) if isinstance(album, Mapping) else album,
            duration_ms=_pick(data, "duration_ms", "duration"),
            audio_features=AudioFeatures.from_mapping(features),
            popularity=_optional_float(popularity),
            play_count=int(_pick(data, "play_count", "playCount", default=0)),
            skip_ratio=float(_pick(data, "skip_ratio", "skipRatio", default=0.0)),
            completion_rate=_optional_float(
                _pick(data, "completion_rate", "avg_completion_rate", "avgCompletionRate", "completionRate")
            ),
            last_played_at=_parse_datetime(_pick(data, "last_played_at", "lastPlayed", "last_played")),
            release_date=_parse_date(_pick(data, "release_date", "releaseDate")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "artist": self.artist.to_dict() if self.artist else None,
            "album": self.album.to_dict() if self.album else None,
            "duration_ms": self.duration_ms,
            "audio_features": self.features() or None,
            "popularity": self.popularity,
            "play_count": self.play_count,
            "skip_ratio": self.skip_ratio,
            "completion_rate": self.completion_rate,
            "last_played_at": self.last_played_at.isoformat() if self.last_played_at else None,
            "release_date": self.release_date.isoformat() if self.release_date else None,
        }


@dataclass(frozen=True)
class UserProfile:
    """Listener profile, built once per generation call."""

    top_tracks: Tuple[Track, ...] = ()
    top_artists: Tuple[Artist, ...] = ()
    preferred_genres: FrozenSet[str] = frozenset()
    preferred_artists: FrozenSet[str] = frozenset()
    listened_track_ids: FrozenSet[str] = frozenset()
    avg_audio_features: Mapping[str, float] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "UserProfile":
        return cls()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserProfile":
        top_tracks = _pick(data, "top_tracks", "topTracks", default=())
        top_artists = _pick(data, "top_artists", "topArtists", default=())
        avg_features = AudioFeatures.from_mapping(_pick(data, "avg_audio_features", "avgAudioFeatures"))
        return cls(
            top_tracks=tuple(t if isinstance(t, Track) else Track.from_dict(t) for t in top_tracks),
            top_artists=tuple(a if isinstance(a, Artist) else Artist.from_dict(a) for a in top_artists),
            preferred_genres=frozenset(_pick(data, "preferred_genres", "preferredGenres", default=())),
            preferred_artists=frozenset(
                str(a) for a in _pick(data, "preferred_artists", "preferredArtists", default=())
            ),
            listened_track_ids=frozenset(
                str(t) for t in _pick(data, "listened_track_ids", "listenedTrackIds", default=())
            ),
            avg_audio_features=avg_features.as_mapping() if avg_features else {},
        )


@dataclass(frozen=True)
class PlaylistEntry:
    """A catalog track placed in a playlist."""

    track: Track
    position: int
    transition_score: Optional[float] = None

    @property
    def id(self) -> str:
        return self.track.id

    def to_dict(self) -> Dict[str, Any]:
        data = self.track.to_dict()
        data["position"] = self.position
        data["transition_score"] = self.transition_score
        return data


@dataclass(frozen=True)
class Playlist:
    id: str
    name: str
    description: str
    algorithm: str
    tracks: Tuple[PlaylistEntry, ...]
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def track_ids(self) -> Tuple[str, ...]:
        return tuple(entry.id for entry in self.tracks)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "algorithm": self.algorithm,
            "tracks": [entry.to_dict() for entry in self.tracks],
            "metadata": dict(self.metadata),
        }


def coerce_tracks(records: Iterable[Any]) -> Tuple[Track, ...]:
    """Accept Track objects or provider mappings."""
    return tuple(r if isinstance(r, Track) else Track.from_dict(r) for r in records)


__all__ = [
    "NORMALIZED_FEATURES",
    "ALL_FEATURES",
    "Artist",
    "Album",
    "AudioFeatures",
    "Track",
    "UserProfile",
    "PlaylistEntry",
    "Playlist",
    "coerce_tracks",
]
