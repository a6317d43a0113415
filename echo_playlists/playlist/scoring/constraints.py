"""
Selection constraints shared by every single-strategy builder.

A SelectionState is created per builder invocation and dropped when the
builder returns, so concurrent generations never share used ids or artist
counts.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Set

from echo_playlists.playlist.config import GenerationRules
from echo_playlists.playlist.models import Track

SKIP_RATIO_LIMIT = 0.5


def is_frequently_skipped(track: Track) -> bool:
    return track.skip_ratio > SKIP_RATIO_LIMIT


@dataclass
class SelectionState:
    """Used track ids and per-artist counts for one builder run."""

    rules: GenerationRules
    used_ids: Set[str] = field(default_factory=set)
    artist_counts: Counter = field(default_factory=Counter)

    def is_eligible(self, track: Track) -> bool:
        if track.id in self.used_ids:
            return False
        artist_id = track.artist_id
        if artist_id is not None and self.artist_counts[artist_id] >= self.rules.max_repeat_artist:
            return False
        if self.rules.avoid_skipped_tracks and is_frequently_skipped(track):
            return False
        return True

    def accept(self, track: Track) -> None:
        self.used_ids.add(track.id)
        # Tracks without a known artist are never capped
        if track.artist_id is not None:
            self.artist_counts[track.artist_id] += 1

    @property
    def selected_count(self) -> int:
        return len(self.used_ids)
