#!/usr/bin/env python3
"""
emojify.py
Turn photos into fixed-size emoji mosaics, and pack emoji PNGs into a tile container.

Usage:
  python emojify.py render INPUT [--outdir DIR] [--container emojis_16.npy] [--size 900] [--grid 75]
                    [--edge 16] [--columns 64] [--alpha-cutoff 10] [--keep-transparent]
                    [--skip-chance P --seed S] [--jobs N] [--save-atlas PATH] [--debug]
  python emojify.py pack EMOJI_DIR [--out emojis_16.npy] [--edge 16]

Render:
  INPUT is an image or a folder of images. Each output is written as
  <stem>_emoji.png next to the input or in --outdir. Folder mode skips files
  that are already outputs. The emoji library is loaded once and shared.

Pack:
  Every image in EMOJI_DIR (sorted by name) is padded square, resized to
  EDGE x EDGE and stored as one (N, EDGE, EDGE, 4) uint8 container.

Exit status:
  0 success, 1 when any image failed, 2 when the emoji library could not load.
"""

from __future__ import annotations

import argparse
import os
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from emoji_mosaic.atlas import save_atlas
from emoji_mosaic.compositor import MosaicResult
from emoji_mosaic.config import DEFAULT_CONFIG, RESAMPLE_NAMES, MosaicConfig
from emoji_mosaic.constants import IMAGE_EXTS, OUTPUT_SUFFIX
from emoji_mosaic.container import encode_container
from emoji_mosaic.engine import MosaicEngine, load_engine
from emoji_mosaic.errors import MosaicError
from emoji_mosaic.image_io import load_tile_images, save_png_rgba
from emoji_mosaic.utils import (
    # formatting
    format_seconds_compact,
    format_total_duration_compact,
    tile_usage_report,
    # pretty logging
    print_banner,
    print_config_line,
    key_value_pairs_to_string,
    log,
    debug_log,
    warn,
    error,
    enable_line_buffered_stdout,
)

# CLI args & small helpers


def parse_cli_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="emojify",
        description="Build emoji mosaics from photos, or pack emoji images into a tile container.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render image(s) as emoji mosaics")
    render.add_argument("src", type=Path, help="Input image or folder")
    render.add_argument(
        "--outdir", type=Path, default=None, help="Output directory (optional)"
    )
    render.add_argument(
        "--container",
        type=Path,
        default=DEFAULT_CONFIG.container_path,
        help="Emoji tile container (.npy)",
    )
    render.add_argument("--size", type=int, default=None, help="Output edge in pixels")
    render.add_argument("--grid", type=int, default=None, help="Cells per side")
    render.add_argument("--edge", type=int, default=None, help="Tile edge in the container")
    render.add_argument("--columns", type=int, default=None, help="Atlas columns")
    render.add_argument(
        "--alpha-cutoff",
        type=int,
        default=None,
        help="Alpha <= cutoff is ignored when averaging tile colours",
    )
    render.add_argument(
        "--keep-transparent",
        action="store_true",
        help="Average every tile pixel, including transparent ones",
    )
    render.add_argument(
        "--tile-resample",
        choices=RESAMPLE_NAMES,
        default=None,
        help="Filter used to scale tiles to the cell size",
    )
    render.add_argument(
        "--skip-chance",
        type=float,
        default=None,
        help="Randomly leave this share of cells empty (0 disables)",
    )
    render.add_argument("--seed", type=int, default=None, help="Seed for --skip-chance")
    render.add_argument(
        "--jobs", type=int, default=2, help="Files processed in parallel"
    )
    render.add_argument(
        "--save-atlas", type=Path, default=None, help="Also write the sprite atlas PNG"
    )
    render.add_argument("--debug", action="store_true", help="Verbose details")

    pack = sub.add_parser("pack", help="Pack a folder of emoji images into a container")
    pack.add_argument("src", type=Path, help="Folder of emoji images")
    pack.add_argument(
        "--out",
        type=Path,
        default=DEFAULT_CONFIG.container_path,
        help="Container path to write",
    )
    pack.add_argument(
        "--edge", type=int, default=DEFAULT_CONFIG.tile_edge, help="Tile edge in pixels"
    )
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> MosaicConfig:
    return DEFAULT_CONFIG.with_overrides(
        container_path=args.container,
        target_size=args.size,
        grid_dim=args.grid,
        tile_edge=args.edge,
        atlas_columns=args.columns,
        alpha_cutoff=args.alpha_cutoff,
        ignore_transparent=False if args.keep_transparent else None,
        tile_resample=args.tile_resample,
        skip_chance=args.skip_chance,
        seed=args.seed,
    )


def list_images(folder: Path) -> List[Path]:
    files = [
        p
        for p in folder.iterdir()
        if p.is_file()
        and p.suffix.lower() in IMAGE_EXTS
        and not p.stem.endswith(OUTPUT_SUFFIX)
    ]
    files.sort(key=lambda p: p.name.lower())
    return files


# Per-file processing


@dataclass
class RenderOutcome:
    src: Path
    dst: Path
    seconds: float
    result: Optional[MosaicResult] = None
    failure: Optional[MosaicError] = None


def _render_one(engine: MosaicEngine, src: Path, outdir: Optional[Path]) -> RenderOutcome:
    """Render and save one image. Prints nothing so it can run on a worker thread."""
    t0 = time.perf_counter()
    dst = (outdir or src.parent) / f"{src.stem}{OUTPUT_SUFFIX}.png"
    try:
        result = engine.render_file(src)
        dst = save_png_rgba(dst, result.image)
    except MosaicError as exc:
        return RenderOutcome(src, dst, time.perf_counter() - t0, failure=exc)
    except OSError as exc:
        return RenderOutcome(
            src, dst, time.perf_counter() - t0, failure=MosaicError(f"cannot write {dst}: {exc}")
        )
    return RenderOutcome(src, dst, time.perf_counter() - t0, result=result)


def _report(engine: MosaicEngine, outcome: RenderOutcome, debug: bool) -> None:
    print_banner(outcome.src.name)
    if outcome.failure is not None or outcome.result is None:
        error(f"{outcome.src.name}: {outcome.failure}")
        return

    result = outcome.result
    size = engine.config.target_size
    log(
        f"Wrote {outcome.dst.name} | size={size}x{size} | grid={result.grid_dim}x{result.grid_dim}"
        f" | cells={result.cells_drawn:,} | skipped={result.cells_skipped:,}"
    )
    usage = result.usage()
    log(f"Distinct emoji: {len(usage):,}")
    if debug:
        debug_log("most used tiles:")
        for tile_idx, hex_code, count in tile_usage_report(usage, engine.palette):
            debug_log(f"  -> #{tile_idx:<5d} {hex_code}: cells={count:,}")
        debug_log(f"render {format_seconds_compact(outcome.seconds)}")
    else:
        log(f"Total time {format_total_duration_compact(outcome.seconds)}")


def run_render(args: argparse.Namespace) -> int:
    try:
        config = config_from_args(args).validate()
    except MosaicError as exc:
        error(str(exc))
        return 2
    print_config_line("mosaic", config.summary_pairs(), debug=False)

    src = args.src
    if not src.exists():
        error(f"not found: {src}")
        return 2

    t0 = time.perf_counter()
    try:
        engine = load_engine(config, debug=args.debug)
    except MosaicError as exc:
        error(f"emoji library not ready: {exc}")
        return 2
    print_config_line(
        "library",
        [
            ("Container", config.container_path.name),
            ("Emoji", engine.tile_count),
            ("Load", format_seconds_compact(time.perf_counter() - t0)),
        ],
        debug=False,
    )

    if args.save_atlas is not None:
        atlas_path = save_atlas(args.save_atlas, engine.atlas)
        log(f"Atlas written to {atlas_path}")

    if src.is_dir():
        files = list_images(src)
        if not files:
            warn(f"no images in {src}")
            return 0
    else:
        files = [src]

    if args.outdir is not None:
        args.outdir.mkdir(parents=True, exist_ok=True)

    jobs = max(1, min(int(args.jobs), len(files)))
    if args.debug:
        debug_log(
            key_value_pairs_to_string(
                [("Images", len(files)), ("Jobs", jobs), ("CPU cores", os.cpu_count() or 1)]
            )
        )

    failures = 0
    if jobs == 1:
        for p in files:
            outcome = _render_one(engine, p, args.outdir)
            _report(engine, outcome, args.debug)
            failures += outcome.failure is not None
    else:
        # the engine is read-only, so workers share it; reports print in input order
        with ThreadPoolExecutor(max_workers=jobs) as ex:
            futures = [ex.submit(_render_one, engine, p, args.outdir) for p in files]
            for fut in futures:
                outcome = fut.result()
                _report(engine, outcome, args.debug)
                failures += outcome.failure is not None

    if failures:
        warn(f"{failures} of {len(files)} image(s) failed")
        return 1
    return 0


def run_pack(args: argparse.Namespace) -> int:
    src = args.src
    if not src.is_dir():
        error(f"not a folder: {src}")
        return 2
    files = list_images(src)
    if not files:
        error(f"no images in {src}")
        return 2

    t0 = time.perf_counter()
    try:
        tiles = load_tile_images(files, args.edge)
        data = encode_container(tiles)
    except MosaicError as exc:
        error(str(exc))
        return 1
    args.out.parent.mkdir(parents=True, exist_ok=True)
    args.out.write_bytes(data)
    log(
        key_value_pairs_to_string(
            [
                ("Packed", len(files)),
                ("Edge", args.edge),
                ("Bytes", len(data)),
                ("Time", format_total_duration_compact(time.perf_counter() - t0)),
            ]
        )
    )
    log(f"Wrote {args.out}")
    return 0


# Entry point


def main(argv: Optional[List[str]] = None) -> int:
    enable_line_buffered_stdout()
    args = parse_cli_args(argv)
    if args.command == "pack":
        return run_pack(args)
    return run_render(args)


if __name__ == "__main__":
    sys.exit(main())
