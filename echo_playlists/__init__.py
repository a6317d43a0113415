"""Echo playlist engine: profile-driven playlist generation, ranking and sequencing."""

from .playlist.pipeline import GenerationParams, generate_playlist, generate_playlist_sync

__version__ = "0.1.0"

__all__ = ["GenerationParams", "generate_playlist", "generate_playlist_sync", "__version__"]
