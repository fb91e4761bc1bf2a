"""Tests for built-in and YAML user palettes."""

import logging

import pytest
import yaml

from gif_recolor.core import presets
from gif_recolor.core.color import Color
from gif_recolor.core.errors import EmptyPaletteError
from gif_recolor.core.presets import PaletteManager, PalettePreset


def test_builtin_palettes_load(tmp_path):
    manager = PaletteManager(tmp_path)
    assert {'gameboy', 'nes', 'pico8', 'endesga32', 'grayscale'} <= set(manager.list_all())
    pico8 = manager.get('pico8')
    assert len(pico8.colors) == 16
    assert pico8.colors[8] == Color(255, 0, 77)
    assert manager.is_builtin('pico8')


def test_missing_user_dir_is_not_created(tmp_path):
    user_dir = tmp_path / 'palettes'
    PaletteManager(user_dir)
    assert not user_dir.exists()


def test_single_palette_file(tmp_path):
    (tmp_path / 'sunset.yaml').write_text(yaml.safe_dump({
        'description': 'Warm evening',
        'colors': ['#ff7e5f', 'feb47b'],
    }))
    manager = PaletteManager(tmp_path)
    sunset = manager.get('sunset')
    assert sunset.description == 'Warm evening'
    assert sunset.colors == [Color(0xFF, 0x7E, 0x5F), Color(0xFE, 0xB4, 0x7B)]
    assert not manager.is_builtin('sunset')


def test_multi_palette_file_overrides_builtin(tmp_path):
    (tmp_path / 'mine.yaml').write_text(yaml.safe_dump({
        'palettes': {
            'gameboy': {'colors': ['#000000', '#ffffff']},
            'mono': {'colors': ['#000000']},
        }
    }))
    manager = PaletteManager(tmp_path)
    assert manager.get('gameboy').colors == [Color(0, 0, 0), Color(255, 255, 255)]
    assert manager.get('mono').colors == [Color(0, 0, 0)]
    assert not manager.is_builtin('gameboy')


def test_bad_files_are_skipped_with_warning(tmp_path, caplog):
    (tmp_path / 'broken.yaml').write_text("colors: [unclosed\n")
    (tmp_path / 'empty.yaml').write_text("colors: ['nope']\n")
    (tmp_path / 'list.yaml').write_text("- '#000000'\n")
    (tmp_path / 'good.yaml').write_text("colors: ['#010203']\n")

    with caplog.at_level(logging.WARNING, logger='gif_recolor.core.presets'):
        manager = PaletteManager(tmp_path)

    assert manager.get('good').colors == [Color(1, 2, 3)]
    assert manager.get('broken') is None
    assert manager.get('empty') is None
    assert manager.get('list') is None
    assert len([r for r in caplog.records if r.levelno == logging.WARNING]) >= 3


def test_from_dict_requires_a_color():
    with pytest.raises(EmptyPaletteError):
        PalettePreset.from_dict('x', {'colors': []})


def test_save_and_delete(tmp_path):
    user_dir = tmp_path / 'palettes'
    manager = PaletteManager(user_dir)
    preset = PalettePreset('duo', [Color(1, 2, 3), Color(250, 251, 252)], 'Two tone')

    path = manager.save_palette(preset)
    assert path == user_dir / 'duo.yaml'
    assert yaml.safe_load(path.read_text()) == {
        'colors': ['#010203', '#fafbfc'],
        'description': 'Two tone',
    }

    reloaded = PaletteManager(user_dir).get('duo')
    assert reloaded.colors == preset.colors

    assert manager.delete_palette('duo')
    assert not path.exists()
    assert manager.get('duo') is None
    assert not manager.delete_palette('gameboy')


def test_delete_palette_from_multi_palette_file(tmp_path):
    bundle = tmp_path / 'bundle.yaml'
    bundle.write_text(yaml.safe_dump({
        'palettes': {
            'retro': {'colors': ['#000000']},
            'mono': {'colors': ['#ffffff']},
        }
    }))
    manager = PaletteManager(tmp_path)

    assert manager.delete_palette('retro')
    assert manager.get('retro') is None
    assert yaml.safe_load(bundle.read_text()) == {'palettes': {'mono': {'colors': ['#ffffff']}}}

    reloaded = PaletteManager(tmp_path)
    assert reloaded.get('retro') is None
    assert reloaded.get('mono').colors == [Color(255, 255, 255)]

    assert reloaded.delete_palette('mono')
    assert not bundle.exists()
    assert PaletteManager(tmp_path).get('mono') is None


def test_unquoted_hash_entry_names_the_quoting_problem(tmp_path, caplog):
    (tmp_path / 'warm.yaml').write_text("colors:\n  - #ff0000\n  - '#00ff00'\n")

    with caplog.at_level(logging.WARNING, logger='gif_recolor.core.presets'):
        manager = PaletteManager(tmp_path)

    assert manager.get('warm').colors == [Color(0, 255, 0)]
    messages = [r.getMessage() for r in caplog.records]
    assert any("entry 1" in m and "quote hex colors" in m for m in messages)
    assert not any("'None'" in m for m in messages)


def test_global_manager_uses_env_dir(tmp_path, monkeypatch):
    (tmp_path / 'env.yaml').write_text("colors: ['#abcdef']\n")
    monkeypatch.setenv(presets.PRESETS_ENV_VAR, str(tmp_path))
    monkeypatch.setattr(presets, '_manager', None)

    assert presets.get_preset('env').colors == [Color(0xAB, 0xCD, 0xEF)]
    assert presets.get_preset_manager() is presets.get_preset_manager()
