# emoji_mosaic/atlas.py
from __future__ import annotations

"""
Sprite atlas: every tile packed into one RGBA raster.

Tile i sits at column i % columns, row i // columns; its pixel origin is
(column * edge, row * edge). Cells past the last tile stay (0, 0, 0, 0).
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

import numpy as np
from PIL import Image

from .constants import DEFAULT_ATLAS_COLUMNS
from .core_types import TileBuffer, TileSpec, U8Raster, freeze
from .errors import ConfigurationError


@dataclass(frozen=True, eq=False)
class SpriteAtlas:
    image: U8Raster  # (rows*edge, columns*edge, 4), read-only
    columns: int
    spec: TileSpec

    @property
    def rows(self) -> int:
        return self.image.shape[0] // self.spec.edge if self.spec.edge else 0

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height) in pixels."""
        return int(self.image.shape[1]), int(self.image.shape[0])

    def grid_position(self, index: int) -> Tuple[int, int]:
        """(column, row) of a tile index."""
        if not 0 <= index < self.spec.count:
            raise IndexError(f"tile index {index} out of range 0..{self.spec.count - 1}")
        return index % self.columns, index // self.columns

    def tile_origin(self, index: int) -> Tuple[int, int]:
        """(x, y) pixel origin of a tile."""
        col, row = self.grid_position(index)
        return col * self.spec.edge, row * self.spec.edge

    def tile_rect(self, index: int) -> Tuple[int, int, int, int]:
        """(left, top, right, bottom) box of a tile, right/bottom exclusive."""
        x0, y0 = self.tile_origin(index)
        return x0, y0, x0 + self.spec.edge, y0 + self.spec.edge

    def tile(self, index: int) -> U8Raster:
        """View of one tile's (edge, edge, 4) pixels inside the atlas."""
        x0, y0, x1, y1 = self.tile_rect(index)
        return self.image[y0:y1, x0:x1]


def build_atlas(tiles: TileBuffer, columns: int = DEFAULT_ATLAS_COLUMNS) -> SpriteAtlas:
    """Pack tiles row-major into a columns-wide atlas. Pixels are copied verbatim."""
    if columns <= 0:
        raise ConfigurationError(f"atlas columns must be positive, got {columns}")
    spec = tiles.spec
    edge = spec.edge
    rows = (spec.count + columns - 1) // columns

    sheet = np.zeros((rows * edge, columns * edge, spec.channels), dtype=np.uint8)
    if spec.count:
        # pad the tile list to a full grid, then swap axes into raster order
        padded = np.zeros((rows * columns, edge, edge, spec.channels), dtype=np.uint8)
        padded[: spec.count] = tiles.pixels
        grid = padded.reshape(rows, columns, edge, edge, spec.channels)
        sheet[...] = grid.transpose(0, 2, 1, 3, 4).reshape(sheet.shape)
    return SpriteAtlas(image=freeze(sheet), columns=columns, spec=spec)


def save_atlas(path: Path, atlas: SpriteAtlas) -> Path:
    """Write the atlas as a PNG."""
    if path.suffix.lower() != ".png":
        path = path.with_suffix(".png")
    Image.fromarray(np.ascontiguousarray(atlas.image)).save(path)
    return path


__all__ = ["SpriteAtlas", "build_atlas", "save_atlas"]
