# Data model and configuration
from .models import (
    Album,
    Artist,
    AudioFeatures,
    Playlist,
    PlaylistEntry,
    Track,
    UserProfile,
)
from .config import (
    Algorithm,
    GenerationRules,
    HybridConfig,
)
from .errors import CatalogEmptyError, PlaylistEngineError, ProfileUnavailableError
from .playlist_factory import PlaylistFactory, describe_algorithms

from . import features
from . import scoring
from . import strategies
from . import ordering
from . import assembler
from . import history_analyzer
from . import analysis
from . import providers

__all__ = [
    "Album",
    "Artist",
    "AudioFeatures",
    "Playlist",
    "PlaylistEntry",
    "Track",
    "UserProfile",
    "Algorithm",
    "GenerationRules",
    "HybridConfig",
    "CatalogEmptyError",
    "PlaylistEngineError",
    "ProfileUnavailableError",
    "PlaylistFactory",
    "describe_algorithms",
    "features",
    "scoring",
    "strategies",
    "ordering",
    "assembler",
    "history_analyzer",
    "analysis",
    "providers",
]
