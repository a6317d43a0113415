"""
Playlist assembly: wrap the ordered tracks into the output Playlist.

Positions are 1-based and contiguous. Each entry after the first carries the
transition score from the entry before it, computed on the final order.
"""
from __future__ import annotations

import logging
import random
import string
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from echo_playlists.playlist.config import Algorithm
from echo_playlists.playlist.models import Artist, Playlist, PlaylistEntry, Track
from echo_playlists.playlist.playlist_factory import ALGORITHM_CATALOGUE
from echo_playlists.playlist.scoring.transition_scoring import compute_transition_score

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase

ALGORITHM_DESCRIPTIONS: Dict[Algorithm, str] = {
    Algorithm.SIMILARITY: "Playlist based on musical similarity",
    Algorithm.MOOD: "Playlist created to match your mood",
    Algorithm.GENRE: "Mix focused on your favourite genres",
    Algorithm.TEMPO: "Playlist optimized by tempo and energy",
    Algorithm.DISCOVERY: "Personalized new music discoveries",
    Algorithm.HISTORY: "Based on your listening history",
    Algorithm.HYBRID: "Smart mix combining several algorithms",
}
FALLBACK_DESCRIPTION = "Playlist generated automatically by Echo"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def default_playlist_id(now: Optional[datetime] = None) -> str:
    """playlist_<epoch ms>_<9 random base36 chars>"""
    now = now or utc_now()
    suffix = "".join(random.choices(_BASE36, k=9))
    return f"playlist_{int(now.timestamp() * 1000)}_{suffix}"


def assign_positions(tracks: Sequence[Track]) -> List[PlaylistEntry]:
    entries: List[PlaylistEntry] = []
    previous: Optional[Track] = None
    for position, track in enumerate(tracks, start=1):
        score = compute_transition_score(previous, track) if previous is not None else None
        entries.append(PlaylistEntry(track=track, position=position, transition_score=score))
        previous = track
    return entries


def generate_playlist_name(
    algorithm: Algorithm,
    seed_artists: Sequence[Artist] = (),
    seed_genres: Sequence[str] = (),
    now: Optional[datetime] = None,
) -> str:
    """
    Human-readable playlist name.

    "Mix <first seed artist> - dd/mm HH:MM", else "Mix <first seed genre> - ...",
    else "<algorithm label> - ...".
    """
    stamp = (now or utc_now()).strftime("%d/%m %H:%M")
    named_artists = [a.name for a in seed_artists if a.name]
    if named_artists:
        return f"Mix {named_artists[0]} - {stamp}"
    if seed_genres:
        return f"Mix {seed_genres[0]} - {stamp}"
    label = ALGORITHM_CATALOGUE.get(algorithm, {}).get("label", "Playlist")
    return f"{label} - {stamp}"


def describe_algorithm(algorithm: Any) -> str:
    if isinstance(algorithm, Algorithm):
        return ALGORITHM_DESCRIPTIONS.get(algorithm, FALLBACK_DESCRIPTION)
    return FALLBACK_DESCRIPTION


def build_metadata(
    entries: Sequence[PlaylistEntry],
    *,
    generated_at: datetime,
    extra: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    artist_ids = {e.track.artist_id for e in entries if e.track.artist_id is not None}
    metadata: Dict[str, Any] = {
        "generated_at": generated_at.isoformat(),
        "total_duration_ms": sum(e.track.duration_ms or 0 for e in entries),
        "track_count": len(entries),
        "unique_artists": len(artist_ids),
    }
    if extra:
        metadata.update(extra)
    return metadata


def assemble_playlist(
    tracks: Sequence[Track],
    *,
    playlist_id: str,
    algorithm: Algorithm,
    now: datetime,
    seed_artists: Sequence[Artist] = (),
    seed_genres: Sequence[str] = (),
    metadata: Optional[Mapping[str, Any]] = None,
) -> Playlist:
    """
    Build the output Playlist from tracks already in final order.

    Args:
        tracks: Ordered tracks
        playlist_id: Identity of the new playlist
        algorithm: Algorithm that produced them
        now: Generation time (name stamp and metadata timestamp)
        seed_artists: Seed artists (first named one is used for the name)
        seed_genres: Seed genres, in caller order
        metadata: Extra metadata merged over the computed fields

    Returns:
        Playlist
    """
    entries = assign_positions(tracks)
    playlist = Playlist(
        id=playlist_id,
        name=generate_playlist_name(algorithm, seed_artists, seed_genres, now),
        description=describe_algorithm(algorithm),
        algorithm=algorithm.value,
        tracks=tuple(entries),
        metadata=build_metadata(entries, generated_at=now, extra=metadata),
    )
    logger.debug(f"Assembled {playlist.id}: '{playlist.name}' with {len(entries)} tracks")
    return playlist
