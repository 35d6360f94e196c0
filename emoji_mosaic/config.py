# emoji_mosaic/config.py
from __future__ import annotations

"""
Run configuration.

MosaicConfig is a frozen value; defaults come from constants.py and the CLI
builds an overridden copy with dataclasses.replace(). validate() is called by
the engine before any container is parsed.
"""

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Iterable, List, Tuple

from .constants import (
    DEFAULT_ALPHA_CUTOFF,
    DEFAULT_ATLAS_COLUMNS,
    DEFAULT_BACKGROUND,
    DEFAULT_CONTAINER_PATH,
    DEFAULT_FIT_RESAMPLE,
    DEFAULT_GRID_DIM,
    DEFAULT_GRID_RESAMPLE,
    DEFAULT_IGNORE_TRANSPARENT,
    DEFAULT_TARGET_SIZE,
    DEFAULT_TILE_EDGE,
    DEFAULT_TILE_RESAMPLE,
)
from .core_types import RGBATuple
from .errors import ConfigurationError

RESAMPLE_NAMES = ("nearest", "box", "bilinear", "bicubic", "lanczos")


@dataclass(frozen=True)
class MosaicConfig:
    target_size: int = DEFAULT_TARGET_SIZE
    grid_dim: int = DEFAULT_GRID_DIM
    tile_edge: int = DEFAULT_TILE_EDGE
    atlas_columns: int = DEFAULT_ATLAS_COLUMNS
    alpha_cutoff: int = DEFAULT_ALPHA_CUTOFF
    ignore_transparent: bool = DEFAULT_IGNORE_TRANSPARENT
    container_path: Path = Path(DEFAULT_CONTAINER_PATH)
    background: RGBATuple = DEFAULT_BACKGROUND
    fit_resample: str = DEFAULT_FIT_RESAMPLE
    grid_resample: str = DEFAULT_GRID_RESAMPLE
    tile_resample: str = DEFAULT_TILE_RESAMPLE
    skip_chance: float = 0.0
    seed: int | None = None

    @property
    def cell_size(self) -> float:
        """Output pixels per grid cell; may be fractional."""
        return self.target_size / float(self.grid_dim)

    def with_overrides(self, **changes: Any) -> "MosaicConfig":
        """Copy with the non-None entries of changes applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def validate(self) -> "MosaicConfig":
        problems: List[str] = []
        for name in ("target_size", "grid_dim", "tile_edge", "atlas_columns"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                problems.append(f"{name} must be a positive integer, got {value!r}")
        if not problems and self.grid_dim > self.target_size:
            problems.append(
                f"grid_dim {self.grid_dim} exceeds target_size {self.target_size}"
            )
        if not 0 <= int(self.alpha_cutoff) <= 255:
            problems.append(f"alpha_cutoff must be in 0..255, got {self.alpha_cutoff}")
        if not 0.0 <= float(self.skip_chance) < 1.0:
            problems.append(f"skip_chance must be in [0, 1), got {self.skip_chance}")
        if len(self.background) != 4 or any(
            not 0 <= int(c) <= 255 for c in self.background
        ):
            problems.append(f"background must be an RGBA tuple, got {self.background}")
        for name in ("fit_resample", "grid_resample", "tile_resample"):
            if getattr(self, name) not in RESAMPLE_NAMES:
                problems.append(f"{name} must be one of {', '.join(RESAMPLE_NAMES)}")
        if problems:
            raise ConfigurationError("; ".join(problems))
        return self

    def summary_pairs(self) -> Iterable[Tuple[str, Any]]:
        """(name, value) pairs for print_config_line()."""
        return [
            ("Size", f"{self.target_size}x{self.target_size}"),
            ("Grid", f"{self.grid_dim}x{self.grid_dim}"),
            ("Cell", round(self.cell_size, 3)),
            ("Tile edge", self.tile_edge),
            ("Columns", self.atlas_columns),
            ("Alpha cutoff", self.alpha_cutoff),
            ("Ignore transparent", self.ignore_transparent),
            ("Skip chance", self.skip_chance),
        ]


DEFAULT_CONFIG = MosaicConfig()

__all__ = ["MosaicConfig", "DEFAULT_CONFIG", "RESAMPLE_NAMES"]
