from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_DEPTH = 1
DEFAULT_SEED = 0
DEFAULT_WIDTH = 100
DEFAULT_HEIGHT = 100
DEFAULT_SOURCE_ROOT = "crawl-ref/source"
MIN_DIMENSION = 5


class ConfigError(ValueError):
    """Raised when a simulation configuration cannot be built."""


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _env_int(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


@dataclass(frozen=True)
class SimulationConfig:
    source_root: Path
    depth: int = DEFAULT_DEPTH
    seed: int = DEFAULT_SEED
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    branch: Optional[str] = None
    map_name: Optional[str] = None

    @classmethod
    def build(
        cls,
        source_root,
        *,
        depth: int = DEFAULT_DEPTH,
        seed: int = DEFAULT_SEED,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
        branch: Optional[str] = None,
        map_name: Optional[str] = None,
    ) -> "SimulationConfig":
        """Normalise raw values into an immutable config.

        depth is raised to 1 and width/height to 5; blank branch and map
        names become None. A missing source root is fatal.
        """
        if source_root is None or (isinstance(source_root, str) and not source_root.strip()):
            raise ConfigError("source_root must be set")
        return cls(
            source_root=Path(source_root),
            depth=max(1, int(depth)),
            seed=int(seed),
            width=max(MIN_DIMENSION, int(width)),
            height=max(MIN_DIMENSION, int(height)),
            branch=_clean(branch),
            map_name=_clean(map_name),
        )

    @classmethod
    def from_env(cls, **overrides) -> "SimulationConfig":
        """Build from LEVELPREVIEW_* environment variables; non-None overrides win."""
        values = {
            "source_root": os.getenv("LEVELPREVIEW_SOURCE_ROOT", DEFAULT_SOURCE_ROOT),
            "depth": _env_int("LEVELPREVIEW_DEPTH", DEFAULT_DEPTH),
            "seed": _env_int("LEVELPREVIEW_SEED", DEFAULT_SEED),
            "width": _env_int("LEVELPREVIEW_WIDTH", DEFAULT_WIDTH),
            "height": _env_int("LEVELPREVIEW_HEIGHT", DEFAULT_HEIGHT),
            "branch": os.getenv("LEVELPREVIEW_BRANCH"),
            "map_name": os.getenv("LEVELPREVIEW_MAP"),
        }
        for key, value in overrides.items():
            if key not in values:
                raise ConfigError(f"unknown config field: {key}")
            if value is not None:
                values[key] = value
        source_root = values.pop("source_root")
        return cls.build(source_root, **values)

    @property
    def layout_branch(self) -> str:
        """Uppercased branch used for layout dispatch; ``"D"`` when unset."""
        return self.branch.upper() if self.branch else "D"

    @property
    def branch_code(self) -> Optional[str]:
        """Branch prefix (before any ``:``) used to filter vaults."""
        if not self.branch:
            return None
        return self.branch.split(":")[0].strip().upper() or None


__all__ = ["SimulationConfig", "ConfigError", "MIN_DIMENSION", "DEFAULT_SOURCE_ROOT"]
