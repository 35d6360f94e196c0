# emoji_mosaic/utils.py
from __future__ import annotations

"""
Shared utilities for emoji_mosaic.

Duration formatting, tile usage reporting, and tidy print-based logging used by
the CLI and the engine's debug output.
"""

import sys
from typing import Any, Iterable, List, Tuple

import numpy as np

from .core_types import PaletteArray, coerce_to_rgb_tuple, rgb_to_hex


#  Time formatting


def format_seconds_compact(seconds: float) -> str:
    """Human-friendly seconds: '<ms>ms', '<s>s', or 'Mm Ss'."""
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f}ms"
    if seconds < 60.0:
        return f"{seconds:.3f}s"
    minutes = int(seconds // 60)
    return f"{minutes}m {seconds - 60 * minutes:.1f}s"


def format_total_duration_compact(seconds: float) -> str:
    """Compact total duration: 'Mm Ss', 'Ss.s', or 'ms'."""
    if seconds >= 60.0:
        minutes = int(seconds // 60)
        rem = int(round(seconds - 60 * minutes))
        return f"{minutes}m {rem}s"
    if seconds >= 1.0:
        return f"{seconds:.1f}s"
    return f"{seconds * 1000.0:.1f}ms"


#  Reports


def tile_usage_report(
    usage: Iterable[Tuple[int, int]], palette: PaletteArray, top_k: int = 10
) -> List[Tuple[int, str, int]]:
    """
    Top tiles by cell count as (tile index, mean colour hex, cells).
    usage is MosaicResult.usage(): (index, count) pairs, most used first.
    """
    report: List[Tuple[int, str, int]] = []
    for tile_idx, count in list(usage)[:top_k]:
        hex_str = rgb_to_hex(coerce_to_rgb_tuple(palette[tile_idx]))
        report.append((int(tile_idx), hex_str, int(count)))
    return report


def enable_line_buffered_stdout() -> None:
    """Enable line-buffered stdout when supported."""
    reconfig = getattr(sys.stdout, "reconfigure", None)
    if callable(reconfig):
        try:
            reconfig(line_buffering=True, write_through=True)
        except (OSError, ValueError):
            pass


# Pretty logging


def format_bool_on_off(value: Any) -> str:
    """Flags such as Ignore transparent read 'on'/'off' in config lines."""
    if isinstance(value, bool):
        return "on" if value else "off"
    return str(value)


def format_number_compact(value: Any) -> str:
    """Counts as 3,600; floats such as Skip chance 0.250 print as 0.25."""
    if isinstance(value, (int, np.integer)) and not isinstance(value, bool):
        return f"{int(value):,}"
    if isinstance(value, (float, np.floating)):
        return f"{float(value):.3f}".rstrip("0").rstrip(".")
    return str(value)


def key_value_pairs_to_string(
    pairs: Iterable[Tuple[str, Any]], sep: str = "  ", eq: str = ": "
) -> str:
    """Join pairs as 'Emoji: 3,600  Load: 41.2ms'."""
    out: List[str] = []
    for name, value in pairs:
        display = (
            format_bool_on_off(value)
            if isinstance(value, bool)
            else format_number_compact(value)
        )
        out.append(f"{name}{eq}{display}")
    return sep.join(out)


def print_config_line(
    section: str, pairs: Iterable[Tuple[str, Any]], debug: bool
) -> None:
    """
    One tagged line per stage of a run:
      [mosaic] Size: 900x900  Grid: 75x75  Cell: 12  Tile edge: 16
      [library] Container: emojis_16.npy  Emoji: 3,600  Load: 41.2ms
    """
    line = f"[{section}] {key_value_pairs_to_string(pairs)}"
    (debug_log if debug else log)(line)


def print_banner(title: str) -> None:
    """Header printed before each rendered image's report."""
    print(f"\n=== {title} ===", flush=True)


def log(message: str) -> None:
    print(message, flush=True)


def debug_log(message: str) -> None:
    """Palette, atlas and tile usage details shown with --debug."""
    print(f"[debug] {message}", flush=True)


def warn(message: str) -> None:
    print(f"[warn] {message}", flush=True)


def error(message: str) -> None:
    """stderr; per-image failures are prefixed with the file name."""
    print(f"[error] {message}", file=sys.stderr, flush=True)


__all__ = [
    "format_seconds_compact",
    "format_total_duration_compact",
    "tile_usage_report",
    "enable_line_buffered_stdout",
    "format_bool_on_off",
    "format_number_compact",
    "key_value_pairs_to_string",
    "print_config_line",
    "print_banner",
    "log",
    "debug_log",
    "warn",
    "error",
]
