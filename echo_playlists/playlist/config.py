from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


class Algorithm(str, Enum):
    """Closed set of generation algorithms."""

    SIMILARITY = "similarity"
    MOOD = "mood"
    GENRE = "genre"
    TEMPO = "tempo"
    DISCOVERY = "discovery"
    HISTORY = "history"
    HYBRID = "hybrid"

    @classmethod
    def parse(cls, value: Any) -> "Algorithm":
        """Resolve a user-supplied algorithm name; anything unknown becomes HYBRID."""
        if isinstance(value, Algorithm):
            return value
        if value is None:
            return cls.HYBRID
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.warning(f"Unknown algorithm {value!r}, falling back to {cls.HYBRID.value}")
            return cls.HYBRID


# camelCase names accepted from API payloads
_RULE_ALIASES = {
    "minSimilarity": "min_similarity",
    "maxRepeatArtist": "max_repeat_artist",
    "targetDuration": "target_duration",
    "fadeInOut": "fade_in_out",
    "avoidSkippedTracks": "avoid_skipped_tracks",
    "diversityFactor": "diversity_factor",
    "includeRecentDiscoveries": "include_recent_discoveries",
}


@dataclass(frozen=True)
class GenerationRules:
    """Declarative constraints applied by every builder.

    Only min_similarity, max_repeat_artist and avoid_skipped_tracks affect
    selection. The remaining options are carried into playlist metadata.
    """

    min_similarity: float = 0.7
    max_repeat_artist: int = 2
    target_duration: int = 3_600_000  # ms
    fade_in_out: bool = True
    avoid_skipped_tracks: bool = True
    diversity_factor: float = 0.3
    include_recent_discoveries: bool = True

    def __post_init__(self):
        for f in fields(self):
            _check_rule(f.name, getattr(self, f.name))

    def merged(self, overrides: Optional[Mapping[str, Any]] = None, *, strict: bool = True) -> "GenerationRules":
        """
        Return a copy with user values merged over these ones, key by key.

        With strict=False (per-request overrides) a value that cannot be
        coerced or is out of range keeps the current setting and logs a
        warning. With strict=True (configuration files) it raises ValueError.
        """
        if not overrides:
            return self
        known = {f.name for f in fields(self)}
        updates: Dict[str, Any] = {}
        for key, value in overrides.items():
            name = _RULE_ALIASES.get(key, key)
            if name not in known:
                logger.debug(f"Ignoring unknown generation rule {key!r}")
                continue
            try:
                updates[name] = self._coerce(name, value)
            except (TypeError, ValueError) as e:
                if strict:
                    raise ValueError(f"Invalid generation rule {key!r}: {e}") from e
                logger.warning(f"Ignoring generation rule {key}={value!r} ({e}); keeping {getattr(self, name)!r}")
        return replace(self, **updates)

    def _coerce(self, name: str, value: Any) -> Any:
        if value is None:
            raise TypeError("no value given")
        current = getattr(self, name)
        if isinstance(current, bool):
            coerced = _as_bool(value)
        elif isinstance(current, int):
            coerced = int(value)
        else:
            coerced = float(value)
        _check_rule(name, coerced)
        return coerced

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _check_rule(name: str, value: Any) -> None:
    if name == "max_repeat_artist" and value < 1:
        raise ValueError(f"max_repeat_artist must be >= 1, got {value}")
    if name == "min_similarity" and not (0.0 <= value <= 1.0):
        raise ValueError(f"min_similarity must be in [0,1], got {value}")


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


DEFAULT_HYBRID_WEIGHTS: Tuple[Tuple[Algorithm, float], ...] = (
    (Algorithm.SIMILARITY, 0.4),
    (Algorithm.MOOD, 0.2),
    (Algorithm.DISCOVERY, 0.2),
    (Algorithm.HISTORY, 0.2),
)


@dataclass(frozen=True)
class HybridConfig:
    """Bucket shares for the hybrid blender, in interleaving order.

    The first entry receives any rounding shortfall.
    """

    weights: Tuple[Tuple[Algorithm, float], ...] = DEFAULT_HYBRID_WEIGHTS

    def __post_init__(self):
        if not self.weights:
            raise ValueError("hybrid weights must not be empty")
        for algorithm, share in self.weights:
            if algorithm == Algorithm.HYBRID:
                raise ValueError("hybrid cannot be one of its own buckets")
            if share < 0:
                raise ValueError(f"hybrid weight for {algorithm.value} must be >= 0, got {share}")
        total = sum(share for _, share in self.weights)
        if total > 1.0 + 1e-9:
            raise ValueError(f"hybrid weights must sum to at most 1, got {total:.3f}")

    @classmethod
    def from_mapping(cls, weights: Optional[Mapping[str, float]]) -> "HybridConfig":
        if not weights:
            return cls()
        return cls(weights=tuple((Algorithm(name), float(share)) for name, share in weights.items()))


MOOD_TOLERANCE = 0.3
MAX_CATALOG_SIZE = 5000
DEFAULT_TARGET_SIZE = 30
