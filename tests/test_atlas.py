"""Tests for sprite atlas packing."""

from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from emoji_mosaic.atlas import build_atlas, save_atlas
from emoji_mosaic.core_types import TileBuffer, TileSpec
from emoji_mosaic.errors import ConfigurationError

from .conftest import EDGE


def _numbered_tiles(count: int, edge: int = 4) -> TileBuffer:
    pixels = np.zeros((count, edge, edge, 4), dtype=np.uint8)
    for i in range(count):
        pixels[i, ..., 0] = i % 256
        pixels[i, ..., 1] = i // 256
        pixels[i, ..., 3] = 255
    pixels[:, 0, 0, 2] = 7  # marks each tile's top-left pixel
    return TileBuffer(pixels=pixels, spec=TileSpec(count=count, edge=edge))


class TestBuildAtlas:
    def test_dimensions_round_rows_up(self):
        atlas = build_atlas(_numbered_tiles(10), columns=4)
        assert atlas.size == (16, 12)
        assert atlas.rows == 3

    def test_grid_position_row_major(self):
        atlas = build_atlas(_numbered_tiles(130, edge=2), columns=64)
        assert atlas.grid_position(0) == (0, 0)
        assert atlas.grid_position(63) == (63, 0)
        assert atlas.grid_position(65) == (1, 1)
        assert atlas.tile_origin(65) == (2, 2)
        assert atlas.tile_rect(129) == (2, 4, 4, 6)

    def test_pixels_copied_verbatim(self):
        tiles = _numbered_tiles(7)
        atlas = build_atlas(tiles, columns=3)
        for i in range(7):
            np.testing.assert_array_equal(atlas.tile(i), tiles.pixels[i])

    def test_partial_row_left_transparent(self):
        atlas = build_atlas(_numbered_tiles(5), columns=3)
        x0, y0 = 1 * 4, 1 * 4  # tile 4 sits in cell (1, 1); cell (2, 1) is unused
        assert atlas.image[y0, x0, 3] == 255
        unused = atlas.image[4:8, 8:12]
        assert not unused.any()

    def test_atlas_read_only(self):
        atlas = build_atlas(_numbered_tiles(2), columns=2)
        with pytest.raises(ValueError):
            atlas.image[0, 0, 0] = 1

    def test_out_of_range_index(self):
        atlas = build_atlas(_numbered_tiles(2), columns=2)
        with pytest.raises(IndexError):
            atlas.grid_position(2)

    def test_bad_columns(self):
        with pytest.raises(ConfigurationError):
            build_atlas(_numbered_tiles(2), columns=0)

    def test_default_layout_for_16px_tiles(self, rgb_tiles):
        atlas = build_atlas(TileBuffer(pixels=rgb_tiles, spec=TileSpec(5, EDGE)))
        assert atlas.size == (64 * EDGE, EDGE)


class TestSaveAtlas:
    def test_writes_png(self, tmp_path):
        atlas = build_atlas(_numbered_tiles(3), columns=2)
        path = save_atlas(tmp_path / "sheet.bin", atlas)
        assert path.suffix == ".png"
        with Image.open(path) as im:
            assert im.mode == "RGBA"
            assert im.size == atlas.size
