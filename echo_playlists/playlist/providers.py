"""
Track and profile providers.

The engine reads a listener profile and a track catalog through two async,
read-only protocols. Bundled implementations serve in-memory data (tests,
embedding) and JSON files (the CLI).
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, Sequence, Tuple, Union

from echo_playlists.playlist.errors import ProfileUnavailableError
from echo_playlists.playlist.history_analyzer import (
    apply_listening_stats,
    build_user_profile,
    summarize_history,
)
from echo_playlists.playlist.models import Track, UserProfile, coerce_tracks

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ProfileProvider(Protocol):
    async def get_user_music_profile(self, user_id: str) -> UserProfile:
        ...


class CatalogProvider(Protocol):
    async def get_available_tracks(self, user_id: str) -> Sequence[Track]:
        ...


class InMemoryProfileProvider:
    """Profiles keyed by user id; unknown users get an empty profile."""

    def __init__(self, profiles: Optional[Mapping[str, UserProfile]] = None, default: Optional[UserProfile] = None):
        self.profiles: Dict[str, UserProfile] = dict(profiles or {})
        self.default = default

    async def get_user_music_profile(self, user_id: str) -> UserProfile:
        profile = self.profiles.get(user_id, self.default)
        if profile is None:
            logger.debug(f"No profile stored for user {user_id!r}")
            return UserProfile.empty()
        return profile


class InMemoryCatalogProvider:
    """The same catalog for every user."""

    def __init__(self, tracks: Iterable[Any] = ()):
        self.tracks: Tuple[Track, ...] = coerce_tracks(tracks)

    async def get_available_tracks(self, user_id: str) -> Sequence[Track]:
        return self.tracks


def _read_json(path: PathLike) -> Any:
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


class JsonCatalogProvider:
    """
    Catalog read from a JSON file.

    The file holds either a list of track records or an object with a
    "tracks" list. When a listening-history file is also given, play counts,
    skip ratios, completion rates and last-played times are taken from it.
    """

    def __init__(self, path: PathLike, history_path: Optional[PathLike] = None):
        self.path = Path(path)
        self.history_path = Path(history_path) if history_path else None
        self._tracks: Optional[Tuple[Track, ...]] = None

    def load(self) -> Tuple[Track, ...]:
        data = _read_json(self.path)
        records = data.get("tracks", []) if isinstance(data, Mapping) else data
        tracks = coerce_tracks(records)
        if self.history_path is not None:
            history = _read_json(self.history_path)
            tracks = apply_listening_stats(tracks, summarize_history(history))
        logger.info(f"Loaded {len(tracks)} tracks from {self.path.name}")
        return tracks

    async def get_available_tracks(self, user_id: str) -> Sequence[Track]:
        if self._tracks is None:
            self._tracks = self.load()
        return self._tracks


class JsonProfileProvider:
    """
    Profile read from a JSON file.

    A JSON object is taken as a ready profile; a JSON list is taken as
    listening history and turned into a profile. History events are resolved
    against catalog_provider's tracks when one is given.

    Raises:
        ProfileUnavailableError: If the file is missing or unreadable
    """

    def __init__(self, path: PathLike, catalog_provider: Optional[CatalogProvider] = None):
        self.path = Path(path)
        self.catalog_provider = catalog_provider

    async def get_user_music_profile(self, user_id: str) -> UserProfile:
        try:
            data = _read_json(self.path)
        except (OSError, ValueError) as e:
            raise ProfileUnavailableError(f"Cannot read profile {self.path}: {e}") from e

        if isinstance(data, list):
            catalog = None
            if self.catalog_provider is not None:
                catalog = coerce_tracks(await self.catalog_provider.get_available_tracks(user_id))
            return build_user_profile(data, catalog=catalog)
        if isinstance(data, Mapping):
            return UserProfile.from_dict(data)
        raise ProfileUnavailableError(f"Unexpected profile format in {self.path}")
