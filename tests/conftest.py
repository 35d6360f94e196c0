"""Shared test fixtures and synthetic container builders."""

from __future__ import annotations

import io
import struct

import numpy as np
import pytest
from PIL import Image

from emoji_mosaic.config import MosaicConfig
from emoji_mosaic.container import encode_container

EDGE = 16


def raw_container(
    header_text: str,
    payload: bytes = b"",
    *,
    major: int = 1,
    minor: int = 0,
    magic: bytes = b"\x93NUMPY",
) -> bytes:
    """Assemble container bytes by hand, with no padding of the header text."""
    raw = header_text.encode("latin-1")
    if major == 1:
        length = struct.pack("<H", len(raw))
    else:
        length = struct.pack("<I", len(raw))
    return magic + bytes((major, minor)) + length + raw + payload


def u8_header(shape, descr: str = "|u1", fortran: bool = False) -> str:
    return f"{{'descr': '{descr}', 'fortran_order': {fortran}, 'shape': {tuple(shape)}, }}"


def solid_tiles(colours, edge: int = EDGE) -> np.ndarray:
    """(N, edge, edge, 4) uint8 stack of solid RGBA tiles."""
    tiles = np.zeros((len(colours), edge, edge, 4), dtype=np.uint8)
    for i, rgba in enumerate(colours):
        tiles[i, :, :] = rgba
    return tiles


def png_bytes(rgba: np.ndarray) -> bytes:
    buf = io.BytesIO()
    Image.fromarray(rgba.astype(np.uint8)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def rgb_tiles() -> np.ndarray:
    return solid_tiles(
        [
            (255, 0, 0, 255),
            (0, 255, 0, 255),
            (0, 0, 255, 255),
            (255, 255, 255, 255),
            (0, 0, 0, 255),
        ]
    )


@pytest.fixture
def rgb_container(rgb_tiles) -> bytes:
    return encode_container(rgb_tiles)


@pytest.fixture
def small_config() -> MosaicConfig:
    return MosaicConfig(target_size=40, grid_dim=4, tile_edge=EDGE, atlas_columns=2)
