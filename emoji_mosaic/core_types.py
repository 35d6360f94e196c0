# emoji_mosaic/core_types.py
from __future__ import annotations

"""
Core type aliases and small value objects shared by every stage.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from numpy.typing import NDArray

from .constants import F32_DESCRIPTORS, TILE_CHANNELS

# Basic aliases

RGBTuple = Tuple[int, int, int]
RGBATuple = Tuple[int, int, int, int]
Shape = Tuple[int, ...]

U8Raster = NDArray[np.uint8]  # (H, W, 4) RGBA
U8Tiles = NDArray[np.uint8]  # (N, E, E, 4)
PaletteArray = NDArray[np.float32]  # (N, 3) mean RGB per tile
IndexGrid = NDArray[np.int32]  # (G, G) tile index per cell, -1 = skipped

# Value objects


@dataclass(frozen=True)
class ContainerHeader:
    """Fixed preamble of a container: version and where the payload starts."""

    major: int
    minor: int
    header_len: int
    data_offset: int


@dataclass(frozen=True)
class ArrayMetadata:
    """Typed view of the structured-text header block."""

    descr: str
    fortran_order: bool
    shape: Shape

    @property
    def is_float(self) -> bool:
        return self.descr in F32_DESCRIPTORS

    @property
    def itemsize(self) -> int:
        return 4 if self.is_float else 1

    @property
    def element_count(self) -> int:
        n = 1
        for dim in self.shape:
            n *= dim
        return n


@dataclass(frozen=True)
class TileSpec:
    """
    Shape contract handed from the parser to the palette / atlas builders.
    Built once from the validated header so later stages never re-derive it.
    """

    count: int
    edge: int
    channels: int = TILE_CHANNELS

    @property
    def pixels_per_tile(self) -> int:
        return self.edge * self.edge

    @property
    def bytes_per_tile(self) -> int:
        return self.pixels_per_tile * self.channels

    @property
    def shape(self) -> Shape:
        return (self.count, self.edge, self.edge, self.channels)


@dataclass(frozen=True, eq=False)
class TileBuffer:
    """Decoded tiles as a read-only uint8 (N, E, E, 4) array plus their spec."""

    pixels: U8Tiles
    spec: TileSpec

    def tile(self, index: int) -> U8Raster:
        return self.pixels[index]


def freeze(array: np.ndarray) -> np.ndarray:
    """Mark an array read-only and return it."""
    array.flags.writeable = False
    return array


def coerce_to_rgb_tuple(value) -> RGBTuple:
    """Round a 3-length row (float or int) to an (int, int, int) tuple."""
    row = np.asarray(value, dtype=np.float64).reshape(-1)
    if row.size < 3:
        raise ValueError("array too small for RGB")
    return (
        int(round(float(row[0]))),
        int(round(float(row[1]))),
        int(round(float(row[2]))),
    )


def rgb_to_hex(rgb: RGBTuple) -> str:
    """RGB tuple to lowercase hex string '#rrggbb'."""
    return f"#{rgb[0]:02x}{rgb[1]:02x}{rgb[2]:02x}"


__all__ = [
    "RGBTuple",
    "RGBATuple",
    "Shape",
    "U8Raster",
    "U8Tiles",
    "PaletteArray",
    "IndexGrid",
    "ContainerHeader",
    "ArrayMetadata",
    "TileSpec",
    "TileBuffer",
    "freeze",
    "coerce_to_rgb_tuple",
    "rgb_to_hex",
]
