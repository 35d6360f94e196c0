# emoji_mosaic/palette.py
from __future__ import annotations

"""
Per-tile representative colours.

extract_palette(tiles, *, ignore_transparent, alpha_cutoff) -> float32 [N,3]
  Mean RGB over each tile's pixels. With ignore_transparent, pixels whose
  alpha <= alpha_cutoff are left out. A tile with no included pixel gets
  (0, 0, 0).
"""

from typing import Any, List, Tuple

import numpy as np

from .constants import DEFAULT_ALPHA_CUTOFF, DEFAULT_IGNORE_TRANSPARENT
from .core_types import PaletteArray, TileBuffer, freeze


def extract_palette(
    tiles: TileBuffer,
    *,
    ignore_transparent: bool = DEFAULT_IGNORE_TRANSPARENT,
    alpha_cutoff: int = DEFAULT_ALPHA_CUTOFF,
) -> PaletteArray:
    spec = tiles.spec
    if spec.count == 0:
        return freeze(np.zeros((0, 3), dtype=np.float32))

    flat = tiles.pixels.reshape(spec.count, spec.pixels_per_tile, spec.channels)
    rgb = flat[..., :3].astype(np.float64)

    if ignore_transparent:
        included = flat[..., 3] > np.uint8(alpha_cutoff)
    else:
        included = np.ones(flat.shape[:2], dtype=bool)

    counts = included.sum(axis=1).astype(np.float64)
    sums = (rgb * included[..., None]).sum(axis=1)

    means = np.zeros((spec.count, 3), dtype=np.float64)
    has_pixels = counts > 0
    means[has_pixels] = sums[has_pixels] / counts[has_pixels, None]
    return freeze(means.astype(np.float32))


def empty_tile_indices(
    tiles: TileBuffer,
    *,
    ignore_transparent: bool = DEFAULT_IGNORE_TRANSPARENT,
    alpha_cutoff: int = DEFAULT_ALPHA_CUTOFF,
) -> np.ndarray:
    """Indices of tiles whose every pixel is excluded by the alpha cutoff."""
    if not ignore_transparent or tiles.spec.count == 0:
        return np.zeros((0,), dtype=np.int64)
    alpha = tiles.pixels[..., 3].reshape(tiles.spec.count, -1)
    return np.flatnonzero(~np.any(alpha > np.uint8(alpha_cutoff), axis=1))


def palette_summary(palette: PaletteArray, n_empty: int) -> List[Tuple[str, Any]]:
    """(name, value) pairs describing a palette, for config/debug lines."""
    if palette.shape[0] == 0:
        return [("Tiles", 0)]
    lum = palette @ np.array([0.299, 0.587, 0.114], dtype=np.float32)
    return [
        ("Tiles", int(palette.shape[0])),
        ("Fully transparent", int(n_empty)),
        ("Luma min", float(lum.min())),
        ("Luma max", float(lum.max())),
    ]


__all__ = ["extract_palette", "empty_tile_indices", "palette_summary"]
