# emoji_mosaic/image_io.py
from __future__ import annotations

import io
from pathlib import Path
from typing import Iterable, List

import numpy as np
from PIL import Image, ImageOps

from .core_types import U8Raster, U8Tiles
from .errors import ConfigurationError, DecodeError

"""
Image I/O helpers: decode to RGBA in sRGB, save PNG, resample lookup.
"""

try:
    from PIL import ImageCms  # ICC conversion if profile present
except ImportError:  # pragma: no cover
    ImageCms = None  # type: ignore[assignment]


def pillow_resample_from_name(name: str) -> Image.Resampling:
    """Map a string to a Pillow resampling filter enum."""
    table = {
        "nearest": Image.Resampling.NEAREST,
        "box": Image.Resampling.BOX,
        "bilinear": Image.Resampling.BILINEAR,
        "bicubic": Image.Resampling.BICUBIC,
        "lanczos": Image.Resampling.LANCZOS,
    }
    try:
        return table[name]
    except KeyError:
        raise ConfigurationError(f"unknown resample filter {name!r}") from None


def _convert_to_srgb_rgba(im: Image.Image) -> Image.Image:
    im = ImageOps.exif_transpose(im)
    icc_bytes = im.info.get("icc_profile")

    if icc_bytes and ImageCms is not None:
        try:
            src_prof = ImageCms.ImageCmsProfile(io.BytesIO(icc_bytes))
            dst_prof = ImageCms.createProfile("sRGB")
            im2 = ImageCms.profileToProfile(
                im,
                src_prof,
                dst_prof,
                renderingIntent=ImageCms.Intent.PERCEPTUAL,
                outputMode="RGBA",
            )
            if im2 is not None:
                return im2
        except (ImageCms.PyCMSError, OSError, ValueError):
            pass
    return im.convert("RGBA")


def _decode(source) -> U8Raster:
    try:
        with Image.open(source) as im0:
            im0.load()
            im = _convert_to_srgb_rgba(im0)
    except Exception as exc:
        # Pillow plugins raise anything from OSError to struct.error on bad input
        raise DecodeError(f"cannot decode image: {exc}") from exc
    arr = np.array(im, dtype=np.uint8)
    if arr.ndim != 3 or arr.shape[0] == 0 or arr.shape[1] == 0:
        raise DecodeError(f"decoded image has no pixels (shape {arr.shape})")
    return arr


def decode_image_bytes(data: bytes) -> U8Raster:
    """Decode compressed image bytes to a uint8 (H, W, 4) RGBA raster."""
    return _decode(io.BytesIO(data))


def load_image_rgba(path: Path) -> U8Raster:
    """Load an image file as a uint8 (H, W, 4) RGBA raster."""
    return _decode(Path(path))


def save_png_rgba(path: Path, rgba: U8Raster) -> Path:
    """Save an RGBA raster as PNG; forces a .png suffix."""
    if path.suffix.lower() != ".png":
        path = path.with_suffix(".png")
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(np.ascontiguousarray(rgba, dtype=np.uint8)).save(path)
    return path


def square_pad(im: Image.Image, bg=(0, 0, 0, 0)) -> Image.Image:
    """Centre an image on a transparent square canvas of its longer side."""
    width, height = im.size
    side = max(width, height)
    if width == height:
        return im
    canvas = Image.new("RGBA", (side, side), bg)
    canvas.paste(im, ((side - width) // 2, (side - height) // 2))
    return canvas


def load_tile_images(paths: Iterable[Path], edge: int) -> U8Tiles:
    """
    Load emoji images as a uint8 (N, edge, edge, 4) stack, in the given order.
    Non-square images are padded with transparency before the LANCZOS resize.
    """
    if edge <= 0:
        raise ConfigurationError(f"tile edge must be positive, got {edge}")
    tiles: List[np.ndarray] = []
    for path in paths:
        im = Image.fromarray(load_image_rgba(path))
        im = square_pad(im).resize((edge, edge), resample=Image.Resampling.LANCZOS)
        tiles.append(np.array(im, dtype=np.uint8))
    if not tiles:
        return np.zeros((0, edge, edge, 4), dtype=np.uint8)
    return np.stack(tiles, axis=0)


__all__ = [
    "pillow_resample_from_name",
    "decode_image_bytes",
    "load_image_rgba",
    "save_png_rgba",
    "square_pad",
    "load_tile_images",
]
