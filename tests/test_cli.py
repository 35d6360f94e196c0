"""Tests for the emojify command line."""

from __future__ import annotations

import struct

import numpy as np
import pytest
from PIL import Image, ImageOps

import emojify
from emoji_mosaic.container import decode_tiles

from .conftest import EDGE


def _write_png(path, rgba, size=(20, 20)):
    arr = np.zeros((size[1], size[0], 4), dtype=np.uint8)
    arr[:, :] = rgba
    Image.fromarray(arr).save(path)
    return path


@pytest.fixture
def emoji_dir(tmp_path):
    folder = tmp_path / "emoji"
    folder.mkdir()
    _write_png(folder / "b_green.png", (0, 255, 0, 255))
    _write_png(folder / "a_red.png", (255, 0, 0, 255))
    _write_png(folder / "c_blue.png", (0, 0, 255, 255))
    (folder / "notes.txt").write_text("ignored")
    return folder


@pytest.fixture
def container_path(tmp_path, emoji_dir):
    out = tmp_path / "lib" / "emojis_16.npy"
    assert emojify.main(["pack", str(emoji_dir), "--out", str(out), "--edge", str(EDGE)]) == 0
    return out


class TestPack:
    def test_packs_sorted_images(self, container_path):
        tiles = decode_tiles(container_path.read_bytes(), EDGE)
        assert tiles.spec.count == 3
        # sorted by name: a_red, b_green, c_blue
        assert tuple(tiles.tile(0)[8, 8]) == (255, 0, 0, 255)
        assert tuple(tiles.tile(1)[8, 8]) == (0, 255, 0, 255)
        assert tuple(tiles.tile(2)[8, 8]) == (0, 0, 255, 255)

    def test_missing_folder(self, tmp_path, capsys):
        assert emojify.main(["pack", str(tmp_path / "none")]) == 2
        assert "[error]" in capsys.readouterr().err


class TestRender:
    def test_single_image(self, tmp_path, container_path, capsys):
        photo = _write_png(tmp_path / "photo.png", (250, 5, 5, 255), size=(50, 30))
        outdir = tmp_path / "out"
        code = emojify.main(
            [
                "render", str(photo),
                "--container", str(container_path),
                "--size", "32", "--grid", "4",
                "--outdir", str(outdir),
                "--jobs", "1",
            ]
        )
        assert code == 0
        out_file = outdir / "photo_emoji.png"
        with Image.open(out_file) as im:
            assert im.size == (32, 32)
            assert im.mode == "RGBA"
        out = capsys.readouterr().out
        assert "=== photo.png ===" in out
        assert "Wrote photo_emoji.png" in out
        assert "[mosaic] Size: 32x32" in out

    def test_folder_with_bad_image(self, tmp_path, container_path, capsys):
        src = tmp_path / "photos"
        src.mkdir()
        _write_png(src / "one.png", (0, 0, 255, 255))
        _write_png(src / "two.png", (0, 255, 0, 255))
        _write_png(src / "old_emoji.png", (0, 255, 0, 255))
        (src / "broken.jpg").write_bytes(b"not a jpeg")
        code = emojify.main(
            [
                "render", str(src),
                "--container", str(container_path),
                "--size", "16", "--grid", "2",
                "--jobs", "3",
                "--debug",
            ]
        )
        assert code == 1
        assert (src / "one_emoji.png").exists()
        assert (src / "two_emoji.png").exists()
        assert not (src / "old_emoji_emoji.png").exists()
        captured = capsys.readouterr()
        assert "broken.jpg" in captured.err
        assert "1 of 3 image(s) failed" in captured.out

    def test_unexpected_decoder_error_does_not_stop_batch(
        self, tmp_path, container_path, capsys, monkeypatch
    ):
        src = tmp_path / "photos"
        src.mkdir()
        _write_png(src / "a.png", (0, 0, 255, 255), size=(30, 20))
        _write_png(src / "b.png", (0, 255, 0, 255))
        original = ImageOps.exif_transpose

        def exif_transpose(im):
            if im.size == (30, 20):
                raise struct.error("bad EXIF")
            return original(im)

        monkeypatch.setattr(ImageOps, "exif_transpose", exif_transpose)
        code = emojify.main(
            [
                "render", str(src),
                "--container", str(container_path),
                "--size", "16", "--grid", "2",
                "--jobs", "2",
            ]
        )
        assert code == 1
        assert not (src / "a_emoji.png").exists()
        assert (src / "b_emoji.png").exists()
        captured = capsys.readouterr()
        assert "a.png: cannot decode image: bad EXIF" in captured.err
        assert "=== b.png ===" in captured.out
        assert "1 of 2 image(s) failed" in captured.out

    def test_missing_container(self, tmp_path, capsys):
        photo = _write_png(tmp_path / "photo.png", (1, 2, 3, 255))
        code = emojify.main(
            ["render", str(photo), "--container", str(tmp_path / "missing.npy")]
        )
        assert code == 2
        assert "emoji library not ready" in capsys.readouterr().err

    def test_invalid_config(self, tmp_path, container_path):
        photo = _write_png(tmp_path / "photo.png", (1, 2, 3, 255))
        code = emojify.main(
            ["render", str(photo), "--container", str(container_path), "--grid", "0"]
        )
        assert code == 2

    def test_save_atlas(self, tmp_path, container_path):
        photo = _write_png(tmp_path / "photo.png", (1, 2, 3, 255))
        atlas = tmp_path / "atlas.png"
        code = emojify.main(
            [
                "render", str(photo),
                "--container", str(container_path),
                "--size", "8", "--grid", "2", "--columns", "2",
                "--save-atlas", str(atlas),
            ]
        )
        assert code == 0
        with Image.open(atlas) as im:
            assert im.size == (2 * EDGE, 2 * EDGE)
