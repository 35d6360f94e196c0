# emoji_mosaic/container.py
from __future__ import annotations

"""
Array container reader and writer (the .npy layout).

Layout:
  magic[6] = b"\\x93NUMPY"
  major(u8) minor(u8)
  header_len: u16 LE (major 1) or u32 LE (major 2/3)
  header text (latin-1 for 1/2, utf-8 for 3), space padded, newline terminated
  raw payload, row-major

Exports:
  read_header(data) -> ContainerHeader
  parse_container(data) -> (ArrayMetadata, memoryview payload)
  tile_spec_from_metadata(meta, tile_edge) -> TileSpec
  decode_tiles(data, tile_edge) -> TileBuffer
  float_to_u8(values) -> uint8 array
  encode_container(array, version=None) -> bytes
  load_container(path) -> bytes
"""

import io
import struct
from pathlib import Path
from typing import Optional, Tuple

import numpy as np

from .constants import (
    DTYPE_F32,
    F32_DESCRIPTORS,
    FLOAT_NORMALISED_MAX,
    FLOAT_SCALE_SAMPLE,
    HEADER_LEN_FIELDS,
    MAGIC,
    TILE_CHANNELS,
    U8_DESCRIPTORS,
)
from .core_types import ArrayMetadata, ContainerHeader, TileBuffer, TileSpec, freeze
from .errors import ConfigurationError, FormatError, TruncatedDataError
from .header_text import parse_array_metadata

_PREAMBLE_LEN = len(MAGIC) + 2


def read_header(data: bytes) -> ContainerHeader:
    """Validate magic and version and locate the header text and payload."""
    if len(data) < _PREAMBLE_LEN or bytes(data[: len(MAGIC)]) != MAGIC:
        raise FormatError("not an array container (bad magic)")

    major = data[len(MAGIC)]
    minor = data[len(MAGIC) + 1]
    if major not in HEADER_LEN_FIELDS:
        raise FormatError(f"unsupported container version {major}.{minor}")

    field_offset, field_fmt = HEADER_LEN_FIELDS[major]
    text_start = field_offset + struct.calcsize(field_fmt)
    if len(data) < text_start:
        raise FormatError("container ends inside the header length field")
    (header_len,) = struct.unpack_from(field_fmt, data, field_offset)
    if text_start + header_len > len(data):
        raise FormatError(
            f"header length {header_len} runs past the end of the data ({len(data)} bytes)"
        )
    return ContainerHeader(
        major=major,
        minor=minor,
        header_len=int(header_len),
        data_offset=text_start + int(header_len),
    )


def parse_container(data: bytes) -> Tuple[ArrayMetadata, memoryview]:
    """
    Decode the header and return (metadata, payload view).

    Only row-major uint8 and little-endian float32 arrays are accepted.
    The payload view is not length-checked here; see decode_tiles().
    """
    header = read_header(data)
    raw_text = bytes(data[header.data_offset - header.header_len : header.data_offset])
    encoding = "utf-8" if header.major == 3 else "latin-1"
    try:
        text = raw_text.decode(encoding)
    except UnicodeDecodeError as exc:
        raise FormatError(f"header is not valid {encoding} text") from exc

    meta = parse_array_metadata(text)
    if meta.fortran_order:
        raise FormatError("column-major (fortran_order) arrays are not supported")
    if meta.descr not in U8_DESCRIPTORS and meta.descr not in F32_DESCRIPTORS:
        raise FormatError(
            f"unsupported dtype {meta.descr!r}; expected uint8 (u1) or float32 (<f4)"
        )
    return meta, memoryview(data)[header.data_offset :]


def tile_spec_from_metadata(meta: ArrayMetadata, tile_edge: int) -> TileSpec:
    """Check the shape is (N, edge, edge, 4) and return the matching TileSpec."""
    shape = meta.shape
    if len(shape) != 4:
        raise FormatError(
            f"expected a 4-D shape (N, {tile_edge}, {tile_edge}, {TILE_CHANNELS}), got {shape}"
        )
    _count, height, width, channels = shape
    if height != tile_edge or width != tile_edge or channels != TILE_CHANNELS:
        raise FormatError(
            f"unexpected shape {shape}; expected (N, {tile_edge}, {tile_edge}, {TILE_CHANNELS})"
        )
    return TileSpec(count=int(shape[0]), edge=tile_edge, channels=TILE_CHANNELS)


def float_to_u8(values: np.ndarray) -> np.ndarray:
    """
    Convert float samples to uint8.

    One global decision: if the max of the first FLOAT_SCALE_SAMPLE values is
    <= FLOAT_NORMALISED_MAX the whole buffer is treated as 0..1 and scaled by
    255. Then clamp to 0..255 and round half up. Mixed-scale buffers are
    misread; that is a known limitation of the heuristic. NaN becomes 0.
    """
    vals = np.nan_to_num(np.asarray(values, dtype=np.float32), nan=0.0)
    sample = vals.reshape(-1)[:FLOAT_SCALE_SAMPLE]
    if sample.size and float(sample.max()) <= FLOAT_NORMALISED_MAX:
        vals = vals * np.float32(255.0)
    vals = np.clip(vals, 0.0, 255.0)
    return (vals + np.float32(0.5)).astype(np.uint8)


def decode_tiles(data: bytes, tile_edge: int) -> TileBuffer:
    """
    Parse a container of RGBA tiles into a read-only TileBuffer.

    Raises FormatError for header/shape problems and TruncatedDataError when the
    payload is shorter than the declared shape. Extra trailing bytes are ignored.
    """
    if tile_edge <= 0:
        raise ConfigurationError(f"tile edge must be positive, got {tile_edge}")
    meta, payload = parse_container(data)
    spec = tile_spec_from_metadata(meta, tile_edge)

    n_elems = meta.element_count
    needed = n_elems * meta.itemsize
    if len(payload) < needed:
        raise TruncatedDataError(needed, len(payload))

    if n_elems == 0:
        pixels = np.zeros(spec.shape, dtype=np.uint8)
    elif meta.is_float:
        floats = np.frombuffer(payload, dtype=DTYPE_F32, count=n_elems)
        pixels = float_to_u8(floats)
    else:
        pixels = np.frombuffer(payload, dtype=np.uint8, count=n_elems).copy()
    return TileBuffer(pixels=freeze(pixels.reshape(spec.shape)), spec=spec)


def encode_container(array: np.ndarray, version: Optional[int] = None) -> bytes:
    """
    Serialise a uint8 or float32 array as a row-major container.

    Floats of either byte order are stored little-endian. version None lets
    numpy pick the smallest version that fits the header.
    """
    arr = np.ascontiguousarray(array)
    if arr.dtype.kind == "f" and arr.dtype.itemsize == 4:
        arr = arr.astype(DTYPE_F32, copy=False)
    elif arr.dtype != np.uint8:
        raise FormatError(f"cannot encode dtype {arr.dtype}; use uint8 or float32")
    if version is not None and version not in HEADER_LEN_FIELDS:
        raise FormatError(f"unsupported container version {version}")

    buf = io.BytesIO()
    np.lib.format.write_array(
        buf, arr, version=None if version is None else (version, 0), allow_pickle=False
    )
    return buf.getvalue()


def load_container(path: Path) -> bytes:
    """Read container bytes from disk."""
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise ConfigurationError(f"cannot read container {path}: {exc}") from exc


__all__ = [
    "read_header",
    "parse_container",
    "tile_spec_from_metadata",
    "float_to_u8",
    "decode_tiles",
    "encode_container",
    "load_container",
]
