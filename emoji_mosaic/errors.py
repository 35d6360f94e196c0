# emoji_mosaic/errors.py
from __future__ import annotations

"""
Error taxonomy.

  MosaicError          : base class for everything raised by this package
  FormatError          : malformed container (magic, version, header, dtype, order, shape)
  TruncatedDataError   : payload shorter than the declared shape
  DecodeError          : input image could not be decoded
  ConfigurationError   : invalid grid / tile / column / size parameters
  EngineNotReadyError  : a mosaic was requested before the engine initialised
"""


class MosaicError(ValueError):
    """Base class for emoji_mosaic errors."""


class FormatError(MosaicError):
    pass


class TruncatedDataError(MosaicError):
    def __init__(self, expected: int, available: int) -> None:
        super().__init__(
            f"payload too short: shape needs {expected:,} bytes, found {available:,}"
        )
        self.expected = expected
        self.available = available


class DecodeError(MosaicError):
    pass


class ConfigurationError(MosaicError):
    pass


class EngineNotReadyError(MosaicError):
    pass


__all__ = [
    "MosaicError",
    "FormatError",
    "TruncatedDataError",
    "DecodeError",
    "ConfigurationError",
    "EngineNotReadyError",
]
