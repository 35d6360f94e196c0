# emoji_mosaic/engine.py
from __future__ import annotations

"""
Engine lifecycle.

initialise_engine(container_bytes, config) -> MosaicEngine
  Parse tiles, extract the palette, build the atlas. Raises on any failure and
  publishes nothing partial.

MosaicEngine
  Immutable, ready to render. Safe to share across threads: render() only
  reads the palette and atlas.

UninitializedEngine
  The not-ready state, carrying the reason initialisation failed.

MosaicSession
  Holds one EngineState. submit() is refused until the engine is ready; a
  failed request leaves the previous result in place.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, ClassVar, Optional, Union

import numpy as np

from .atlas import SpriteAtlas, build_atlas
from .compositor import MosaicResult, composite
from .config import DEFAULT_CONFIG, MosaicConfig
from .container import decode_tiles, load_container
from .core_types import PaletteArray, TileBuffer, U8Raster
from .errors import EngineNotReadyError, FormatError, MosaicError
from .image_io import decode_image_bytes, load_image_rgba
from .palette import empty_tile_indices, extract_palette, palette_summary
from .utils import debug_log, error, key_value_pairs_to_string


@dataclass(frozen=True, eq=False)
class MosaicEngine:
    config: MosaicConfig
    tiles: TileBuffer
    palette: PaletteArray
    atlas: SpriteAtlas

    ready: ClassVar[bool] = True

    @property
    def tile_count(self) -> int:
        return self.tiles.spec.count

    def render(self, raster: U8Raster) -> MosaicResult:
        cfg = self.config
        return composite(
            raster,
            self.palette,
            self.atlas,
            cfg.grid_dim,
            cfg.target_size,
            background=cfg.background,
            fit_resample=cfg.fit_resample,
            grid_resample=cfg.grid_resample,
            tile_resample=cfg.tile_resample,
            skip_chance=cfg.skip_chance,
            seed=cfg.seed,
        )

    def render_bytes(self, data: bytes) -> MosaicResult:
        return self.render(decode_image_bytes(data))

    def render_file(self, path: Path) -> MosaicResult:
        return self.render(load_image_rgba(path))


@dataclass(frozen=True)
class UninitializedEngine:
    reason: str = "not initialised"

    ready: ClassVar[bool] = False


EngineState = Union[UninitializedEngine, MosaicEngine]


def initialise_engine(
    container_bytes: bytes,
    config: MosaicConfig = DEFAULT_CONFIG,
    *,
    debug: bool = False,
) -> MosaicEngine:
    config.validate()
    tiles = decode_tiles(container_bytes, config.tile_edge)
    if tiles.spec.count == 0:
        raise FormatError("container holds no tiles")

    palette = extract_palette(
        tiles,
        ignore_transparent=config.ignore_transparent,
        alpha_cutoff=config.alpha_cutoff,
    )
    atlas = build_atlas(tiles, config.atlas_columns)

    if debug:
        n_empty = empty_tile_indices(
            tiles,
            ignore_transparent=config.ignore_transparent,
            alpha_cutoff=config.alpha_cutoff,
        ).size
        debug_log(key_value_pairs_to_string(palette_summary(palette, n_empty)))
        width, height = atlas.size
        debug_log(
            key_value_pairs_to_string(
                [("Atlas", f"{width}x{height}"), ("Rows", atlas.rows), ("Columns", atlas.columns)]
            )
        )
    return MosaicEngine(config=config, tiles=tiles, palette=palette, atlas=atlas)


def load_engine(config: MosaicConfig = DEFAULT_CONFIG, *, debug: bool = False) -> MosaicEngine:
    """Read config.container_path and initialise from it."""
    config.validate()
    return initialise_engine(load_container(config.container_path), config, debug=debug)


@dataclass
class MosaicSession:
    state: EngineState = field(default_factory=UninitializedEngine)
    last_result: Optional[MosaicResult] = None
    last_error: Optional[MosaicError] = None

    @property
    def ready(self) -> bool:
        return self.state.ready

    def initialise(
        self, container_bytes: bytes, config: MosaicConfig = DEFAULT_CONFIG
    ) -> EngineState:
        try:
            self.state = initialise_engine(container_bytes, config)
        except MosaicError as exc:
            self.state = UninitializedEngine(reason=str(exc))
            error(f"emoji library init failed: {exc}")
        return self.state

    def engine(self) -> MosaicEngine:
        if not isinstance(self.state, MosaicEngine):
            raise EngineNotReadyError(f"emoji library not ready: {self.state.reason}")
        return self.state

    def submit(self, image_bytes: bytes) -> MosaicResult:
        """Render one uploaded image. On failure the previous result is kept."""
        engine = self.engine()
        return self._record(lambda: engine.render_bytes(image_bytes))

    def submit_raster(self, raster: U8Raster) -> MosaicResult:
        engine = self.engine()
        return self._record(lambda: engine.render(np.asarray(raster, dtype=np.uint8)))

    def _record(self, run: Callable[[], MosaicResult]) -> MosaicResult:
        try:
            result = run()
        except MosaicError as exc:
            self.last_error = exc
            raise
        self.last_result = result
        self.last_error = None
        return result


__all__ = [
    "MosaicEngine",
    "UninitializedEngine",
    "EngineState",
    "initialise_engine",
    "load_engine",
    "MosaicSession",
]
