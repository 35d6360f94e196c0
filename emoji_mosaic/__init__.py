# emoji_mosaic/__init__.py
"""
emoji_mosaic package.

Purpose:
  Turn a photo into a fixed-size mosaic of emoji tiles. See emojify.py for CLI.

Public API:
  initialise_engine : container bytes + config -> MosaicEngine (palette + atlas)
  load_engine       : same, reading config.container_path
  MosaicEngine      : ready engine; render(raster) -> MosaicResult
  MosaicSession     : readiness gate that keeps the last good result
  MosaicConfig      : run configuration with validate()
  container         : array container reader / writer
  palette, atlas, matcher, compositor : the individual pipeline stages
  errors            : FormatError, TruncatedDataError, DecodeError, ConfigurationError

Quick start:
  from emoji_mosaic import MosaicConfig, load_engine
  engine = load_engine(MosaicConfig(container_path=Path("emojis_16.npy")))
  result = engine.render_file(Path("photo.jpg"))
"""

__version__ = "0.1.0"

from . import atlas
from . import compositor
from . import container
from . import core_types
from . import errors
from . import matcher
from . import palette
from . import utils

from .config import DEFAULT_CONFIG, MosaicConfig
from .engine import (
    EngineState,
    MosaicEngine,
    MosaicSession,
    UninitializedEngine,
    initialise_engine,
    load_engine,
)
from .errors import (
    ConfigurationError,
    DecodeError,
    EngineNotReadyError,
    FormatError,
    MosaicError,
    TruncatedDataError,
)

__all__ = [
    "__version__",
    "atlas",
    "compositor",
    "container",
    "core_types",
    "errors",
    "matcher",
    "palette",
    "utils",
    "DEFAULT_CONFIG",
    "MosaicConfig",
    "EngineState",
    "MosaicEngine",
    "MosaicSession",
    "UninitializedEngine",
    "initialise_engine",
    "load_engine",
    "ConfigurationError",
    "DecodeError",
    "EngineNotReadyError",
    "FormatError",
    "MosaicError",
    "TruncatedDataError",
]
