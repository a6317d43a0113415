# -*- coding: utf-8 -*-
"""
Echo Playlist Engine - command line entry point
Generates a playlist from a JSON catalog and a listener profile or history
"""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from echo_playlists.config_loader import Config
from echo_playlists.logging_utils import (
    RunSummary,
    add_logging_args,
    configure_logging,
    resolve_log_level,
)
from echo_playlists.playlist.analysis import analyze_playlist
from echo_playlists.playlist.config import Algorithm
from echo_playlists.playlist.errors import PlaylistEngineError
from echo_playlists.playlist.models import Playlist
from echo_playlists.playlist.pipeline import GenerationParams, generate_playlist_sync
from echo_playlists.playlist.playlist_factory import describe_algorithms
from echo_playlists.playlist.providers import (
    InMemoryProfileProvider,
    JsonCatalogProvider,
    JsonProfileProvider,
)

logger = logging.getLogger("echo_playlists.cli")


def parse_key_values(items: Optional[Sequence[str]], *, numeric: bool = False) -> Dict[str, Any]:
    """Parse repeated key=value options into a dict."""
    result: Dict[str, Any] = {}
    for item in items or ():
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Expected key=value, got {item!r}")
        result[key.strip()] = float(value) if numeric else value.strip()
    return result


class PlaylistApp:
    """Wires providers and configuration for one CLI run"""

    def __init__(self, config: Config, catalog_path: str, profile_path: Optional[str] = None,
                 history_path: Optional[str] = None):
        self.config = config
        self.catalog = JsonCatalogProvider(catalog_path, history_path=history_path)
        if profile_path:
            self.profiles = JsonProfileProvider(profile_path, catalog_provider=self.catalog)
        elif history_path:
            self.profiles = JsonProfileProvider(history_path, catalog_provider=self.catalog)
        else:
            logger.info("No profile or history given; generating without a listener profile")
            self.profiles = InMemoryProfileProvider()

    def run(self, params: GenerationParams) -> Playlist:
        return generate_playlist_sync(
            params,
            profile_provider=self.profiles,
            catalog_provider=self.catalog,
            config=self.config,
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a playlist from a track catalog and a listener profile"
    )
    parser.add_argument("--catalog", type=str, help="JSON file with the candidate tracks")
    parser.add_argument("--profile", type=str, help="JSON listener profile (object) or listening history (list)")
    parser.add_argument("--history", type=str, help="JSON listening history; enriches the catalog and builds the profile")
    parser.add_argument(
        "--algorithm",
        type=str,
        default=Algorithm.HYBRID.value,
        help=f"One of {', '.join(a.value for a in Algorithm)} (unknown values use hybrid)",
    )
    parser.add_argument("--tracks", type=int, default=None, help="Number of tracks (default: from config, else 30)")
    parser.add_argument("--user", type=str, default="cli", help="User id recorded in the playlist metadata")
    parser.add_argument("--seed-track", action="append", default=[], metavar="ID", help="Seed track id (repeatable)")
    parser.add_argument("--seed-artist", action="append", default=[], metavar="NAME", help="Seed artist name (repeatable)")
    parser.add_argument("--seed-genre", action="append", default=[], metavar="GENRE", help="Seed genre (repeatable)")
    parser.add_argument("--mood", action="append", default=[], metavar="KEY=VALUE",
                        help="Target audio feature, e.g. --mood valence=0.8 (repeatable)")
    parser.add_argument("--rule", action="append", default=[], metavar="KEY=VALUE",
                        help="Generation rule override, e.g. --rule max_repeat_artist=1 (repeatable)")
    parser.add_argument("--config", type=str, help="YAML configuration file (default: $ECHO_PLAYLIST_CONFIG)")
    parser.add_argument("--output", type=str, help="Write the playlist JSON to this file instead of stdout")
    parser.add_argument("--analyze", action="store_true", help="Include playlist analysis in the output")
    parser.add_argument("--list-algorithms", action="store_true", help="Print the available algorithms and exit")
    add_logging_args(parser)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list_algorithms:
        print(json.dumps(describe_algorithms(), indent=2))
        return 0
    if not args.catalog:
        parser.error("--catalog is required")

    try:
        config = Config.load(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"\nConfiguration Error: {e}\n", file=sys.stderr)
        return 1

    configure_logging(
        level=resolve_log_level(args, default=config.log_level),
        log_file=args.log_file or config.log_file,
        show_run_id=args.show_run_id,
    )

    try:
        params = GenerationParams(
            user_id=args.user,
            algorithm=args.algorithm,
            seed_tracks=args.seed_track,
            seed_artists=args.seed_artist,
            seed_genres=args.seed_genre,
            audio_features=parse_key_values(args.mood, numeric=True) or None,
            rules=parse_key_values(args.rule),
            target_size=args.tracks,
        )
        app = PlaylistApp(config, args.catalog, profile_path=args.profile, history_path=args.history)
        playlist = app.run(params)
    except PlaylistEngineError as e:
        logger.error(f"Generation failed: {e}")
        return 2
    except (OSError, ValueError) as e:
        logger.error(f"Invalid input: {e}")
        return 1

    output = playlist.to_dict()
    if args.analyze:
        output["analysis"] = analyze_playlist(playlist)
    text = json.dumps(output, indent=2, ensure_ascii=False, default=str)

    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
        logger.info(f"Playlist written to {args.output}")
    else:
        print(text)

    summary = RunSummary("Playlist Generation", logger)
    summary.add("playlist", playlist.name)
    summary.add("algorithm", playlist.algorithm)
    summary.add("tracks", len(playlist.tracks))
    summary.add("unique_artists", playlist.metadata.get("unique_artists", 0))
    summary.add("duration_min", playlist.metadata.get("total_duration_ms", 0) / 60000)
    unresolved = len(args.seed_track) - len(playlist.metadata["seeds"]["seed_tracks"])
    if unresolved:
        summary.increment("unresolved_seed_tracks", unresolved)
    summary.log()
    return 0


if __name__ == "__main__":
    sys.exit(main())
