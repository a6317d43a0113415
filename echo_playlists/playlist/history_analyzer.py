"""
Listening history analysis module.

Turns raw listening events (one record per play or skip) into the
UserProfile the generators consume: top tracks and artists, preferred
genres and artists, listened ids and the average audio-feature vector.
"""
from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from echo_playlists.playlist.features import average_audio_features
from echo_playlists.playlist.models import Artist, Track, UserProfile, _parse_datetime, _pick

logger = logging.getLogger(__name__)

SKIP_ACTIONS = frozenset({"skip"})


@dataclass(frozen=True)
class HistoryAnalysisConfig:
    """Configuration for history analysis."""
    top_track_count: int = 50
    artist_count: int = 10
    genre_count: int = 10


@dataclass
class TrackListeningStats:
    """Aggregated listening behaviour for one track."""
    track: Track
    play_count: int = 0
    skip_count: int = 0
    completion_rates: List[float] = field(default_factory=list)
    last_played_at: Optional[datetime] = None

    @property
    def skip_ratio(self) -> float:
        total = self.play_count + self.skip_count
        return self.skip_count / total if total else 0.0

    @property
    def completion_rate(self) -> Optional[float]:
        if not self.completion_rates:
            return None
        return sum(self.completion_rates) / len(self.completion_rates)

    def annotated_track(self, track: Optional[Track] = None) -> Track:
        """The track (default: the one seen in the history) with its listening fields replaced."""
        return replace(
            track if track is not None else self.track,
            play_count=self.play_count,
            skip_ratio=self.skip_ratio,
            completion_rate=self.completion_rate,
            last_played_at=self.last_played_at,
        )


def _event_track(event: Mapping[str, Any]) -> Optional[Track]:
    track = event.get("track")
    if isinstance(track, Track):
        return track
    if isinstance(track, Mapping):
        return Track.from_dict(track)
    track_id = _pick(event, "track_id", "trackId")
    if track_id is None:
        return None
    return Track(id=str(track_id))


def summarize_history(history: Iterable[Mapping[str, Any]]) -> Dict[str, TrackListeningStats]:
    """
    Aggregate listening events per track id.

    Each event is a mapping with a `track` (record or Track) or a bare
    `track_id`, plus optional `action_type` ("play", "skip", ...),
    `completion_rate` and `played_at`. Events without a track are ignored.
    """
    stats: Dict[str, TrackListeningStats] = {}
    dropped = 0
    for event in history:
        track = _event_track(event)
        if track is None:
            dropped += 1
            continue
        entry = stats.get(track.id)
        if entry is None:
            entry = stats[track.id] = TrackListeningStats(track=track)

        action = str(_pick(event, "action_type", "actionType", default="play")).lower()
        if action in SKIP_ACTIONS:
            entry.skip_count += 1
        else:
            entry.play_count += 1

        completion = _pick(event, "completion_rate", "completionRate")
        if completion is not None:
            entry.completion_rates.append(float(completion))

        played_at = _parse_datetime(_pick(event, "played_at", "playedAt"))
        if played_at is not None and (entry.last_played_at is None or played_at > entry.last_played_at):
            entry.last_played_at = played_at

    if dropped:
        logger.debug(f"Ignored {dropped} history events without a track")
    return stats


def build_user_profile(
    history: Iterable[Mapping[str, Any]],
    config: HistoryAnalysisConfig = HistoryAnalysisConfig(),
    catalog: Optional[Sequence[Track]] = None,
) -> UserProfile:
    """
    Build a listener profile from raw listening history.

    Events often carry only a track id; when a catalog is given, its records
    supply the artist, genres and audio features of the tracks heard.

    Args:
        history: Listening events (see summarize_history)
        config: Profile sizes
        catalog: Track records to resolve history ids against

    Returns:
        UserProfile (empty when the history is empty)
    """
    stats = summarize_history(history)
    if not stats:
        logger.info("Listening history is empty; using an empty profile")
        return UserProfile.empty()

    index: Dict[str, Track] = {t.id: t for t in catalog or ()}
    tracks = [s.annotated_track(index.get(track_id)) for track_id, s in stats.items()]
    # Stable: equal play counts keep first-heard order
    top_tracks = sorted(
        (t for t in tracks if t.play_count > 0),
        key=lambda t: t.play_count,
        reverse=True,
    )[:config.top_track_count]

    artist_plays: Counter = Counter()
    artists: Dict[str, Artist] = {}
    genre_plays: Counter = Counter()
    for track in tracks:
        if track.artist_id is not None:
            artist_plays[track.artist_id] += track.play_count
            artists.setdefault(track.artist_id, track.artist)
        for genre in track.genres:
            genre_plays[genre] += track.play_count

    top_artist_ids = [a for a, plays in artist_plays.most_common(config.artist_count) if plays > 0]
    preferred_genres = [g for g, plays in genre_plays.most_common(config.genre_count) if plays > 0]

    profile = UserProfile(
        top_tracks=tuple(top_tracks),
        top_artists=tuple(artists[a] for a in top_artist_ids),
        preferred_genres=frozenset(preferred_genres),
        preferred_artists=frozenset(top_artist_ids),
        listened_track_ids=frozenset(stats),
        avg_audio_features=average_audio_features(top_tracks) or {},
    )
    logger.info(
        f"Profile from history: {len(stats)} tracks, {len(top_artist_ids)} top artists, "
        f"{len(preferred_genres)} preferred genres"
    )
    return profile


def apply_listening_stats(
    catalog: Sequence[Track],
    stats: Mapping[str, TrackListeningStats],
) -> Tuple[Track, ...]:
    """Overlay aggregated listening fields on catalog tracks that appear in the history."""
    return tuple(
        stats[t.id].annotated_track(t) if t.id in stats else t
        for t in catalog
    )
