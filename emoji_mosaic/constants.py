"""
Defaults and fixed values used across the project.

- Output / grid / tile defaults (DEFAULT_*)
- Container format constants (MAGIC, header offsets, dtype tags)
- Float scale detection knobs (FLOAT_*)
"""
from __future__ import annotations

from typing import Tuple

# =========================
# Mosaic defaults
# =========================
DEFAULT_TARGET_SIZE = 900  # output edge in pixels
DEFAULT_GRID_DIM = 75  # 75x75 cells -> 12px cells at 900
DEFAULT_TILE_EDGE = 16  # emojis_16.npy
DEFAULT_ATLAS_COLUMNS = 64

DEFAULT_IGNORE_TRANSPARENT = True
DEFAULT_ALPHA_CUTOFF = 10  # alpha <= cutoff is left out of the mean

DEFAULT_CONTAINER_PATH = "emojis_16.npy"
DEFAULT_BACKGROUND: Tuple[int, int, int, int] = (255, 255, 255, 255)

DEFAULT_FIT_RESAMPLE = "bilinear"
DEFAULT_GRID_RESAMPLE = "box"
DEFAULT_TILE_RESAMPLE = "bilinear"

TILE_CHANNELS = 4  # RGBA
OUTPUT_SUFFIX = "_emoji"
IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".webp", ".bmp", ".gif"}

# =========================
# Container format
# =========================
MAGIC = b"\x93NUMPY"
# major version -> (length field offset, length field struct format)
HEADER_LEN_FIELDS = {
    1: (8, "<H"),
    2: (8, "<I"),
    3: (8, "<I"),
}

DTYPE_F32 = "<f4"
# '|' and '<' are both valid byte-order marks for single-byte types
U8_DESCRIPTORS = {"|u1", "<u1", ">u1", "=u1", "u1"}
F32_DESCRIPTORS = {"<f4"}

# =========================
# Float -> uint8 conversion
# =========================
FLOAT_SCALE_SAMPLE = 5000  # leading elements inspected
FLOAT_NORMALISED_MAX = 1.5  # sampled max <= this -> values are 0..1
