"""Tests for building target palettes from files, tokens and images."""

import logging

import pytest
from PIL import Image

from gif_recolor.core.color import Color
from gif_recolor.core.errors import EmptyPaletteError, PaletteError
from gif_recolor.core.palette import (
    load_palette_from_args, load_palette_from_file, load_palette_from_image,
    parse_palette_lines, resolve_palette,
)


RED = Color(255, 0, 0)
BLUE = Color(0, 0, 255)


def test_file_skips_blank_lines_and_keeps_order(tmp_path):
    path = tmp_path / 'colors.txt'
    path.write_text("#FF0000\n\n   \n  0000ff  \n")
    assert load_palette_from_file(path) == [RED, BLUE]


def test_file_invalid_lines_warn_with_line_number(tmp_path, caplog):
    path = tmp_path / 'colors.txt'
    path.write_text("#FF0000\nnot-a-color\n\n#12345\n#0000FF\n")

    with caplog.at_level(logging.WARNING, logger='gif_recolor.core.palette'):
        palette = load_palette_from_file(path)

    assert palette == [RED, BLUE]
    messages = [r.getMessage() for r in caplog.records]
    assert "Invalid hex color 'not-a-color' on line 2" in messages
    assert "Invalid hex color '#12345' on line 4" in messages


def test_file_with_byte_order_mark(tmp_path):
    path = tmp_path / 'colors.txt'
    path.write_bytes(b'\xef\xbb\xbf#FF0000\r\n#0000FF\r\n')
    assert load_palette_from_file(path) == [RED, BLUE]


def test_file_without_valid_colors_is_fatal(tmp_path):
    path = tmp_path / 'colors.txt'
    path.write_text("\nnope\n")
    with pytest.raises(EmptyPaletteError, match="No valid colors found"):
        load_palette_from_file(path)


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_palette_from_file(tmp_path / 'missing.txt')


def test_parse_lines_keeps_duplicates():
    assert parse_palette_lines(['#ff0000', '#ff0000']) == [RED, RED]


def test_args_policy(caplog):
    with caplog.at_level(logging.WARNING, logger='gif_recolor.core.palette'):
        palette = load_palette_from_args(['#FF0000', 'bogus', '0000FF'])

    assert palette == [RED, BLUE]
    assert [r.getMessage() for r in caplog.records] == ["Invalid hex color 'bogus'"]


def test_args_without_valid_colors_is_fatal():
    with pytest.raises(EmptyPaletteError, match="No valid colors provided"):
        load_palette_from_args(['xyz', '#12'])


def test_image_colors_in_first_seen_order(tmp_path):
    img = Image.new('RGB', (3, 2), (0, 255, 0))
    img.putpixel((0, 0), (0, 0, 255))
    img.putpixel((1, 0), (255, 0, 0))
    img.putpixel((2, 1), (0, 0, 255))
    path = tmp_path / 'swatch.png'
    img.save(path)

    assert load_palette_from_image(path) == [BLUE, RED, Color(0, 255, 0)]


def test_image_with_too_many_colors(tmp_path):
    img = Image.new('RGB', (4, 1))
    for x in range(4):
        img.putpixel((x, 0), (x * 10, 0, 0))
    path = tmp_path / 'many.png'
    img.save(path)

    with pytest.raises(PaletteError):
        load_palette_from_image(path, max_colors=3)


def test_resolve_prefers_existing_file(tmp_path):
    path = tmp_path / 'colors.txt'
    path.write_text("#0000FF\n")
    assert resolve_palette(tokens=[str(path), '#FF0000']) == [BLUE]


def test_resolve_hex_tokens(tmp_path):
    assert resolve_palette(tokens=['#FF0000', '#0000FF']) == [RED, BLUE]


def test_resolve_explicit_file_and_preset(tmp_path):
    path = tmp_path / 'colors.txt'
    path.write_text("#FF0000\n")
    assert resolve_palette(palette_file=path) == [RED]

    gameboy = resolve_palette(preset='gameboy', presets_dir=tmp_path)
    assert gameboy[0] == Color(15, 56, 15)
    assert len(gameboy) == 4


def test_resolve_rejects_mixed_sources(tmp_path):
    with pytest.raises(PaletteError):
        resolve_palette(tokens=['#FF0000'], preset='gameboy')
    with pytest.raises(PaletteError):
        resolve_palette(palette_file='a.txt', preset='gameboy')


def test_resolve_unknown_preset(tmp_path):
    with pytest.raises(PaletteError, match="not found"):
        resolve_palette(preset='no-such-palette', presets_dir=tmp_path)


def test_resolve_nothing_given():
    with pytest.raises(EmptyPaletteError):
        resolve_palette()
