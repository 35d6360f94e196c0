# emoji_mosaic/compositor.py
from __future__ import annotations

"""
Mosaic compositing.

Pipeline per image:
  fit_and_crop   : scale to cover a target square (fill, not letterbox), centre crop
  downsample_grid: resize the square to grid_dim x grid_dim, one sample per cell
  composite      : per visible cell, match the sample to the palette and blit
                   the matched atlas tile, scaled to the cell, onto the canvas

Cells whose sample alpha is 0 keep the background. With skip_chance > 0 a
seeded generator additionally drops that share of cells; the default 0 keeps
the output fully deterministic.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np
from PIL import Image

from .atlas import SpriteAtlas
from .constants import (
    DEFAULT_BACKGROUND,
    DEFAULT_FIT_RESAMPLE,
    DEFAULT_GRID_RESAMPLE,
    DEFAULT_TILE_RESAMPLE,
)
from .core_types import IndexGrid, PaletteArray, RGBATuple, U8Raster
from .errors import ConfigurationError, DecodeError
from .image_io import pillow_resample_from_name
from .matcher import nearest_many


@dataclass(frozen=True, eq=False)
class MosaicResult:
    """One finished mosaic plus the per-cell picks that produced it."""

    image: U8Raster  # (target, target, 4)
    indices: IndexGrid  # (grid, grid), -1 where the cell was skipped
    samples: U8Raster  # (grid, grid, 4) downsampled source

    @property
    def grid_dim(self) -> int:
        return int(self.indices.shape[0])

    @property
    def cells_drawn(self) -> int:
        return int(np.count_nonzero(self.indices >= 0))

    @property
    def cells_skipped(self) -> int:
        return int(self.indices.size) - self.cells_drawn

    def usage(self) -> List[Tuple[int, int]]:
        """(tile index, cell count) sorted by count descending, then index."""
        drawn = self.indices[self.indices >= 0]
        if drawn.size == 0:
            return []
        uniq, counts = np.unique(drawn, return_counts=True)
        order = np.lexsort((uniq, -counts))
        return [(int(uniq[i]), int(counts[i])) for i in order]


def _check_sizes(grid_dim: int, target_size: int) -> None:
    if target_size <= 0 or grid_dim <= 0:
        raise ConfigurationError(
            f"grid_dim and target_size must be positive, got {grid_dim} and {target_size}"
        )
    if grid_dim > target_size:
        raise ConfigurationError(f"grid_dim {grid_dim} exceeds target_size {target_size}")


def fit_and_crop(
    raster: U8Raster, target_size: int, resample: str = DEFAULT_FIT_RESAMPLE
) -> U8Raster:
    """
    Scale by max(target/w, target/h) and centre crop to target x target.

    Resizes straight from the centred source box so the output is always
    exactly covered, whatever the aspect ratio.
    """
    if raster.ndim != 3 or raster.shape[2] != 4:
        raise DecodeError(f"expected an (H, W, 4) RGBA raster, got shape {raster.shape}")
    height, width = int(raster.shape[0]), int(raster.shape[1])
    if width <= 0 or height <= 0:
        raise DecodeError("source raster is empty")
    if target_size <= 0:
        raise ConfigurationError(f"target_size must be positive, got {target_size}")

    scale = max(target_size / width, target_size / height)
    crop_w = target_size / scale
    crop_h = target_size / scale
    left = (width - crop_w) / 2.0
    top = (height - crop_h) / 2.0

    im = Image.fromarray(np.ascontiguousarray(raster, dtype=np.uint8))
    out = im.resize(
        (target_size, target_size),
        resample=pillow_resample_from_name(resample),
        box=(left, top, left + crop_w, top + crop_h),
    )
    return np.array(out, dtype=np.uint8)


def downsample_grid(
    square: U8Raster, grid_dim: int, resample: str = DEFAULT_GRID_RESAMPLE
) -> U8Raster:
    """Resize a square raster to (grid_dim, grid_dim, 4)."""
    if grid_dim <= 0:
        raise ConfigurationError(f"grid_dim must be positive, got {grid_dim}")
    im = Image.fromarray(np.ascontiguousarray(square, dtype=np.uint8))
    small = im.resize((grid_dim, grid_dim), resample=pillow_resample_from_name(resample))
    return np.array(small, dtype=np.uint8)


def cell_bounds(grid_dim: int, target_size: int) -> np.ndarray:
    """
    Pixel edges of the grid, length grid_dim + 1, from 0 to target_size.
    Fractional cell sizes are floored per edge so cells tile without gaps.
    """
    return (np.arange(grid_dim + 1, dtype=np.int64) * target_size) // grid_dim


def match_cells(
    samples: U8Raster,
    palette: PaletteArray,
    *,
    skip_chance: float = 0.0,
    seed: Optional[int] = None,
) -> IndexGrid:
    """Tile index per cell; -1 where alpha is 0 or the cell was randomly skipped."""
    grid_h, grid_w = samples.shape[:2]
    visible = samples[..., 3] > 0
    if skip_chance > 0.0:
        rng = np.random.default_rng(seed)
        visible &= rng.random((grid_h, grid_w)) >= skip_chance

    indices = np.full((grid_h, grid_w), -1, dtype=np.int32)
    if np.any(visible):
        indices[visible] = nearest_many(samples[visible][:, :3], palette)
    return indices


def composite(
    source: U8Raster,
    palette: PaletteArray,
    atlas: SpriteAtlas,
    grid_dim: int,
    target_size: int,
    *,
    background: RGBATuple = DEFAULT_BACKGROUND,
    fit_resample: str = DEFAULT_FIT_RESAMPLE,
    grid_resample: str = DEFAULT_GRID_RESAMPLE,
    tile_resample: str = DEFAULT_TILE_RESAMPLE,
    skip_chance: float = 0.0,
    seed: Optional[int] = None,
) -> MosaicResult:
    """
    Build one mosaic. Reads palette and atlas only; every buffer written here
    is private to the call, so calls may run concurrently on a shared atlas.
    """
    _check_sizes(grid_dim, target_size)
    if palette.shape[0] == 0:
        raise ConfigurationError("palette is empty")
    if palette.shape[0] != atlas.spec.count:
        raise ConfigurationError(
            f"palette has {palette.shape[0]} entries but the atlas holds {atlas.spec.count} tiles"
        )

    square = fit_and_crop(source, target_size, fit_resample)
    samples = downsample_grid(square, grid_dim, grid_resample)
    indices = match_cells(samples, palette, skip_chance=skip_chance, seed=seed)

    canvas = Image.new("RGBA", (target_size, target_size), tuple(background))
    sheet = Image.fromarray(np.ascontiguousarray(atlas.image))
    tile_filter = pillow_resample_from_name(tile_resample)
    edges = cell_bounds(grid_dim, target_size)
    scaled: Dict[Tuple[int, int, int], Image.Image] = {}

    for gy, gx in zip(*np.nonzero(indices >= 0)):
        tile_idx = int(indices[gy, gx])
        x0, x1 = int(edges[gx]), int(edges[gx + 1])
        y0, y1 = int(edges[gy]), int(edges[gy + 1])
        key = (tile_idx, x1 - x0, y1 - y0)
        tile_im = scaled.get(key)
        if tile_im is None:
            tile_im = sheet.crop(atlas.tile_rect(tile_idx)).resize(
                (key[1], key[2]), resample=tile_filter
            )
            scaled[key] = tile_im
        canvas.alpha_composite(tile_im, dest=(x0, y0))

    return MosaicResult(
        image=np.array(canvas, dtype=np.uint8), indices=indices, samples=samples
    )


__all__ = [
    "MosaicResult",
    "fit_and_crop",
    "downsample_grid",
    "cell_bounds",
    "match_cells",
    "composite",
]
