"""Tests for run configuration."""

from __future__ import annotations

import pytest

from emoji_mosaic.config import DEFAULT_CONFIG, MosaicConfig
from emoji_mosaic.errors import ConfigurationError


class TestMosaicConfig:
    def test_defaults(self):
        cfg = DEFAULT_CONFIG.validate()
        assert (cfg.target_size, cfg.grid_dim, cfg.tile_edge, cfg.atlas_columns) == (900, 75, 16, 64)
        assert cfg.cell_size == 12.0
        assert cfg.alpha_cutoff == 10
        assert cfg.ignore_transparent is True
        assert cfg.container_path.name == "emojis_16.npy"

    @pytest.mark.parametrize(
        "changes",
        [
            {"target_size": 0},
            {"grid_dim": -3},
            {"tile_edge": 0},
            {"atlas_columns": 0},
            {"grid_dim": 901},
            {"alpha_cutoff": 256},
            {"skip_chance": 1.0},
            {"background": (0, 0, 0)},
            {"tile_resample": "sinc"},
            {"grid_dim": 2.5},
        ],
    )
    def test_invalid(self, changes):
        with pytest.raises(ConfigurationError):
            MosaicConfig(**changes).validate()

    def test_with_overrides_ignores_none(self):
        cfg = DEFAULT_CONFIG.with_overrides(grid_dim=30, tile_edge=None)
        assert cfg.grid_dim == 30
        assert cfg.tile_edge == 16
        assert DEFAULT_CONFIG.grid_dim == 75

    def test_summary_pairs(self):
        pairs = dict(DEFAULT_CONFIG.summary_pairs())
        assert pairs["Grid"] == "75x75"
        assert pairs["Ignore transparent"] is True
