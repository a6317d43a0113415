"""
Configuration Loader - Manages YAML configuration and environment variables
"""
import logging
import os
from typing import Any, Dict, Optional

import yaml

from echo_playlists.playlist.config import (
    DEFAULT_TARGET_SIZE,
    MAX_CATALOG_SIZE,
    MOOD_TOLERANCE,
    GenerationRules,
    HybridConfig,
)

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ECHO_PLAYLIST_CONFIG"


class Config:
    """Configuration manager for the playlist engine.

    Every section is optional; a missing key falls back to the engine
    defaults, so Config.default() behaves exactly like an empty file.
    """

    def __init__(self, config_path: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        self.config_path = config_path
        if data is not None:
            self.config = data
        else:
            self.config = self._load_config()
        self._validate_config()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        return cls(data=data or {})

    @classmethod
    def default(cls) -> "Config":
        return cls(data={})

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        """
        Load from config_path, else $ECHO_PLAYLIST_CONFIG, else defaults.

        An explicitly given path (argument or environment) must exist.
        """
        path = config_path or os.getenv(CONFIG_ENV_VAR)
        if not path:
            logger.debug("No configuration file given; using defaults")
            return cls.default()
        return cls(config_path=path)

    def _load_config(self) -> dict:
        """Load configuration from YAML file"""
        if not self.config_path or not os.path.exists(self.config_path):
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        logger.debug(f"Loaded configuration from {self.config_path}")
        return data or {}

    def _validate_config(self):
        """Validate value ranges; construction of the typed views raises ValueError."""
        if not isinstance(self.config, dict):
            raise ValueError(f"Configuration root must be a mapping in {self.config_path}")
        for section in ('generation', 'hybrid', 'logging'):
            if not isinstance(self.config.get(section, {}) or {}, dict):
                raise ValueError(f"Configuration section '{section}' must be a mapping")

        if self.default_target_size <= 0:
            raise ValueError(f"generation.default_target_size must be positive, got {self.default_target_size}")
        if self.max_catalog_size <= 0:
            raise ValueError(f"generation.max_catalog_size must be positive, got {self.max_catalog_size}")
        if not (0.0 <= self.mood_tolerance <= 1.0):
            raise ValueError(f"generation.mood_tolerance must be in [0,1], got {self.mood_tolerance}")

        # Raise early on bad rules or weights
        self.default_rules
        self.hybrid_config

    def _section(self, name: str) -> dict:
        return self.config.get(name) or {}

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get configuration value

        Args:
            section: Configuration section
            key: Configuration key
            default: Default value if not found

        Returns:
            Configuration value or default
        """
        return self._section(section).get(key, default)

    # Generation
    @property
    def default_rules(self) -> GenerationRules:
        """Engine rule defaults with generation.default_rules merged over them"""
        return GenerationRules().merged(self._section('generation').get('default_rules') or {})

    @property
    def default_target_size(self) -> int:
        """Number of tracks requested when the caller gives none"""
        return int(self._section('generation').get('default_target_size', DEFAULT_TARGET_SIZE))

    @property
    def max_catalog_size(self) -> int:
        """Catalog tracks considered per generation"""
        return int(self._section('generation').get('max_catalog_size', MAX_CATALOG_SIZE))

    @property
    def mood_tolerance(self) -> float:
        """Per-dimension tolerance of the mood pre-filter"""
        return float(self._section('generation').get('mood_tolerance', MOOD_TOLERANCE))

    # Hybrid
    @property
    def hybrid_config(self) -> HybridConfig:
        """Hybrid bucket shares (hybrid.weights, in interleaving order)"""
        return HybridConfig.from_mapping(self._section('hybrid').get('weights'))

    # Logging
    @property
    def log_level(self) -> str:
        """Console log level (LOG_LEVEL overrides it at configure time)"""
        return str(self._section('logging').get('level', 'INFO')).upper()

    @property
    def log_file(self) -> Optional[str]:
        return self._section('logging').get('file')

    def __repr__(self) -> str:
        return f"Config(path={self.config_path or '<defaults>'})"
