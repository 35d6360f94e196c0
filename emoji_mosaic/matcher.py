# emoji_mosaic/matcher.py
from __future__ import annotations

"""
Nearest palette entry by squared Euclidean RGB distance.

Linear scan over the palette. Ties go to the lowest index (np.argmin returns
the first minimum). Cost is queries x palette size; past a few tens of
thousands of tiles a k-d tree or colour-bucket grid would be the next step.
"""

import numpy as np

from .core_types import PaletteArray

# bound the (queries, palette) distance matrix to roughly this many floats
_CHUNK_ELEMS = 1 << 20


def nearest(rgb, palette: PaletteArray) -> int:
    """Index of the palette row closest to a single RGB triple."""
    if palette.shape[0] == 0:
        raise ValueError("palette is empty")
    query = np.asarray(rgb, dtype=np.float64).reshape(3)
    diff = palette.astype(np.float64, copy=False) - query
    dist2 = np.einsum("ij,ij->i", diff, diff)
    return int(np.argmin(dist2))


def nearest_many(rgbs: np.ndarray, palette: PaletteArray) -> np.ndarray:
    """Vectorised nearest() over (Q, 3) queries. Returns int32 [Q]."""
    if palette.shape[0] == 0:
        raise ValueError("palette is empty")
    queries = np.asarray(rgbs, dtype=np.float64).reshape(-1, 3)
    pal = palette.astype(np.float64, copy=False)
    out = np.empty((queries.shape[0],), dtype=np.int32)

    step = max(1, _CHUNK_ELEMS // max(1, pal.shape[0]))
    for start in range(0, queries.shape[0], step):
        chunk = queries[start : start + step]
        diff = pal[None, :, :] - chunk[:, None, :]
        dist2 = np.sum(diff * diff, axis=2)
        out[start : start + step] = np.argmin(dist2, axis=1)
    return out


__all__ = ["nearest", "nearest_many"]
