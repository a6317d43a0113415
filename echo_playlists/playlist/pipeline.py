"""
Playlist generation pipeline.

Orchestrates one generation call:
- read the listener profile and the catalog (sequential awaits)
- resolve seeds against the catalog
- build a segment with the strategy for the requested algorithm
- reorder it for smooth transitions
- assemble the output Playlist

No state outlives a call; every call owns its selection state.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from echo_playlists.config_loader import Config
from echo_playlists.logging_utils import format_count, run_id_scope, stage_timer, truncate_list
from echo_playlists.playlist.assembler import assemble_playlist, default_playlist_id, utc_now
from echo_playlists.playlist.config import Algorithm
from echo_playlists.playlist.errors import CatalogEmptyError
from echo_playlists.playlist.models import Artist, Playlist, Track, UserProfile, coerce_tracks
from echo_playlists.playlist.ordering import order_by_transitions
from echo_playlists.playlist.playlist_factory import PlaylistFactory
from echo_playlists.playlist.providers import CatalogProvider, ProfileProvider
from echo_playlists.playlist.strategies import PlaylistRequest

logger = logging.getLogger(__name__)

IdFactory = Callable[[], str]
Clock = Callable[[], datetime]


@dataclass(frozen=True)
class GenerationParams:
    """
    Caller parameters for one generation.

    Attributes:
        user_id: Listener the playlist is generated for
        algorithm: Algorithm name; unknown names fall back to hybrid
        seed_tracks: Track objects, provider records, or track ids
        seed_artists: Artist objects, mappings, or plain names
        seed_genres: Genre names, in caller order
        audio_features: Target features for the mood and tempo strategies
        rules: Partial rule overrides (snake_case or camelCase keys)
        target_size: Number of tracks wanted (config default when None)
    """
    user_id: str
    algorithm: Any = Algorithm.HYBRID.value
    seed_tracks: Sequence[Any] = ()
    seed_artists: Sequence[Any] = ()
    seed_genres: Sequence[str] = ()
    audio_features: Optional[Mapping[str, Any]] = None
    rules: Mapping[str, Any] = field(default_factory=dict)
    target_size: Optional[int] = None


def resolve_seed_tracks(
    seeds: Iterable[Any],
    catalog: Sequence[Track],
    profile: UserProfile,
) -> Tuple[Track, ...]:
    """Resolve seed ids against the catalog, then the profile's top tracks. Unknown ids are dropped."""
    index: Dict[str, Track] = {t.id: t for t in profile.top_tracks}
    index.update((t.id, t) for t in catalog)

    resolved: List[Track] = []
    dropped: List[str] = []
    for seed in seeds:
        if isinstance(seed, Track):
            resolved.append(seed)
        elif isinstance(seed, Mapping):
            resolved.append(Track.from_dict(seed))
        elif str(seed) in index:
            resolved.append(index[str(seed)])
        else:
            dropped.append(str(seed))
    if dropped:
        logger.debug(f"Dropped unresolved seed tracks: {truncate_list(dropped)}")
    return tuple(resolved)


def resolve_profile_tracks(profile: UserProfile, catalog: Sequence[Track]) -> UserProfile:
    """
    Swap the profile's top tracks for the catalog's records of the same ids.

    Top tracks the catalog does not offer are dropped, so history-only ids
    never reach a playlist.
    """
    if not profile.top_tracks:
        return profile
    index: Dict[str, Track] = {t.id: t for t in catalog}
    resolved = tuple(index[t.id] for t in profile.top_tracks if t.id in index)
    if len(resolved) < len(profile.top_tracks):
        logger.debug(
            f"Dropped {len(profile.top_tracks) - len(resolved)} profile top tracks missing from the catalog"
        )
    return replace(profile, top_tracks=resolved)


def resolve_seed_artists(seeds: Iterable[Any], catalog: Sequence[Track]) -> Tuple[Artist, ...]:
    """Artist objects pass through; names and ids are matched against catalog artists when possible."""
    known: Dict[str, Artist] = {}
    for track in catalog:
        if track.artist is not None:
            if track.artist.id is not None:
                known.setdefault(track.artist.id, track.artist)
            if track.artist.name:
                known.setdefault(track.artist.name.casefold(), track.artist)

    resolved: List[Artist] = []
    for seed in seeds:
        if isinstance(seed, Artist):
            resolved.append(seed)
        elif isinstance(seed, Mapping):
            resolved.append(Artist.from_dict(seed))
        else:
            text = str(seed)
            resolved.append(known.get(text) or known.get(text.casefold()) or Artist(id=None, name=text))
    return tuple(resolved)


def _mood_target(audio_features: Optional[Mapping[str, Any]]) -> Dict[str, float]:
    if not audio_features:
        return {}
    return {name: float(value) for name, value in audio_features.items() if value is not None}


async def _load_profile(provider: ProfileProvider, user_id: str) -> UserProfile:
    try:
        return await provider.get_user_music_profile(user_id)
    except Exception as e:
        logger.warning(f"Profile unavailable for user {user_id!r} ({e}); continuing with an empty profile")
        return UserProfile.empty()


async def generate_playlist(
    params: GenerationParams,
    *,
    profile_provider: ProfileProvider,
    catalog_provider: CatalogProvider,
    config: Optional[Config] = None,
    id_factory: Optional[IdFactory] = None,
    clock: Optional[Clock] = None,
    factory: Optional[PlaylistFactory] = None,
) -> Playlist:
    """
    Generate a playlist for params.user_id.

    Args:
        params: Caller parameters
        profile_provider: Source of the listener profile
        catalog_provider: Source of candidate tracks
        config: Engine configuration (defaults when None)
        id_factory: Playlist id generator
        clock: Time source
        factory: Strategy registry (built from config when None)

    Returns:
        Playlist

    Raises:
        CatalogEmptyError: If the catalog provider returns no tracks
    """
    config = config or Config.default()
    now = (clock or utc_now)()
    playlist_id = id_factory() if id_factory is not None else default_playlist_id(now)
    algorithm = Algorithm.parse(params.algorithm)
    target_size = params.target_size if params.target_size is not None else config.default_target_size
    started = time.perf_counter()
    timings: Dict[str, float] = {}

    with run_id_scope(playlist_id):
        logger.info(
            f"Generating {algorithm.value} playlist for user {params.user_id!r} "
            f"({format_count(target_size, 'track')})"
        )

        with stage_timer("Provider reads", logger, timings):
            profile = await _load_profile(profile_provider, params.user_id)
            catalog = coerce_tracks(await catalog_provider.get_available_tracks(params.user_id))

        if not catalog:
            raise CatalogEmptyError(params.user_id)
        if len(catalog) > config.max_catalog_size:
            logger.warning(
                f"Catalog has {len(catalog):,} tracks; considering the first {config.max_catalog_size:,}"
            )
            catalog = catalog[:config.max_catalog_size]

        rules = config.default_rules.merged(params.rules, strict=False)
        profile = resolve_profile_tracks(profile, catalog)
        seed_tracks = resolve_seed_tracks(params.seed_tracks, catalog, profile)
        seed_artists = resolve_seed_artists(params.seed_artists, catalog)
        seed_genres = tuple(dict.fromkeys(params.seed_genres))
        mood_target = _mood_target(params.audio_features)

        request = PlaylistRequest(
            profile=profile,
            candidates=catalog,
            rules=rules,
            target_size=target_size,
            seed_tracks=seed_tracks,
            seed_artists=seed_artists,
            seed_genres=frozenset(seed_genres),
            mood_target=mood_target,
            now=now,
            mood_tolerance=config.mood_tolerance,
        )

        factory = factory or PlaylistFactory.with_default_strategies(config.hybrid_config)
        with stage_timer("Track selection", logger, timings):
            segment = factory.create(algorithm, request)

        with stage_timer("Ordering", logger, timings):
            ordering = order_by_transitions(segment.tracks)

        generation_ms = int((time.perf_counter() - started) * 1000)
        playlist = assemble_playlist(
            ordering.ordered_tracks,
            playlist_id=playlist_id,
            algorithm=algorithm,
            now=now,
            seed_artists=seed_artists,
            seed_genres=seed_genres,
            metadata={
                "user_id": params.user_id,
                "algorithm": algorithm.value,
                "rules": rules.to_dict(),
                "seeds": {
                    "seed_tracks": [t.id for t in seed_tracks],
                    "seed_artists": [a.name or a.id for a in seed_artists],
                    "seed_genres": list(seed_genres),
                },
                "audio_features": mood_target,
                "generation_time_ms": generation_ms,
                "stats": {
                    "selection": segment.stats,
                    "ordering": ordering.stats,
                    "timings_ms": {stage: round(s * 1000, 1) for stage, s in timings.items()},
                },
            },
        )
        logger.info(
            f"Playlist {playlist.name!r}: {format_count(len(playlist.tracks), 'track')} "
            f"of {target_size} requested in {generation_ms}ms"
        )
        return playlist


def generate_playlist_sync(params: GenerationParams, **kwargs: Any) -> Playlist:
    """Blocking wrapper around generate_playlist (CLI, scripts)."""
    return asyncio.run(generate_playlist(params, **kwargs))
