"""
Palette Presets - named target palettes
Built-in retro palettes plus user palettes stored as YAML files
"""

import logging
import os
import yaml
from pathlib import Path
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field

from .color import Color
from .errors import EmptyPaletteError, PaletteError


logger = logging.getLogger(__name__)

PRESETS_ENV_VAR = 'GIF_RECOLOR_PALETTES'


# ============================================================================
# Preset Data Structures
# ============================================================================

@dataclass
class PalettePreset:
    """A named target palette"""

    name: str
    colors: List[Color] = field(default_factory=list)
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for YAML serialization"""
        data = {'colors': [c.to_hex() for c in self.colors]}
        if self.description:
            data['description'] = self.description
        return data

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> 'PalettePreset':
        """
        Create from a YAML mapping.

        Bad color entries are logged and dropped; a preset left with no
        colors is rejected.
        """
        raw_colors = data.get('colors') or []
        if not isinstance(raw_colors, list):
            raise PaletteError(f"Preset '{name}': 'colors' must be a list")

        colors = []
        for i, value in enumerate(raw_colors, 1):
            if value is None:
                # Unquoted `- #ff0000` is a YAML comment, which leaves an empty entry
                logger.warning(
                    "Empty color in preset '%s' (entry %d); quote hex colors in YAML, e.g. '#ff0000'",
                    name, i
                )
                continue
            color = Color.from_hex(str(value))
            if color is None:
                logger.warning("Invalid hex color '%s' in preset '%s' (entry %d)", value, name, i)
                continue
            colors.append(color)

        if not colors:
            raise EmptyPaletteError(f"No valid colors found in preset '{name}'")

        return cls(name=name, colors=colors, description=str(data.get('description', '')))


# ============================================================================
# Built-in Presets
# ============================================================================

BUILTIN_PALETTES: Dict[str, Dict[str, Any]] = {
    'gameboy': {
        'description': "Original Game Boy 4-shade green",
        'colors': [(15, 56, 15), (48, 98, 48), (139, 172, 15), (155, 188, 15)],
    },
    'nes': {
        'description': "16-color NES subset",
        'colors': [
            (0, 0, 0), (255, 255, 255), (124, 124, 124), (188, 188, 188),
            (0, 120, 248), (0, 88, 248), (104, 68, 252), (216, 0, 204),
            (228, 0, 88), (248, 56, 0), (228, 92, 16), (172, 124, 0),
            (0, 184, 0), (0, 168, 0), (0, 168, 68), (0, 136, 136),
        ],
    },
    'pico8': {
        'description': "PICO-8 fantasy console",
        'colors': [
            (0, 0, 0), (29, 43, 83), (126, 37, 83), (0, 135, 81),
            (171, 82, 54), (95, 87, 79), (194, 195, 199), (255, 241, 232),
            (255, 0, 77), (255, 163, 0), (255, 236, 39), (0, 228, 54),
            (41, 173, 255), (131, 118, 156), (255, 119, 168), (255, 204, 170),
        ],
    },
    'endesga32': {
        'description': "ENDESGA 32",
        'colors': [
            (190, 74, 47), (215, 118, 67), (234, 212, 170), (228, 166, 114),
            (184, 111, 80), (115, 62, 57), (62, 39, 49), (162, 38, 51),
            (228, 59, 68), (247, 118, 34), (254, 174, 52), (254, 231, 97),
            (99, 199, 77), (62, 137, 72), (38, 92, 66), (25, 60, 62),
            (18, 78, 137), (0, 149, 233), (44, 232, 245), (192, 203, 220),
            (139, 155, 180), (90, 105, 136), (58, 68, 102), (38, 43, 68),
            (24, 20, 37), (255, 0, 68), (104, 56, 108), (181, 80, 136),
            (246, 117, 122), (232, 183, 150), (194, 133, 105), (104, 71, 86),
        ],
    },
    'grayscale': {
        'description': "8-step grayscale",
        'colors': [
            (0, 0, 0), (34, 34, 34), (68, 68, 68), (102, 102, 102),
            (136, 136, 136), (170, 170, 170), (204, 204, 204), (255, 255, 255),
        ],
    },
}


def default_presets_dir() -> Path:
    """User palette directory (``$GIF_RECOLOR_PALETTES`` or ~/.gif-recolor/palettes)"""
    override = os.environ.get(PRESETS_ENV_VAR)
    if override:
        return Path(override)
    return Path.home() / '.gif-recolor' / 'palettes'


# ============================================================================
# Preset Manager
# ============================================================================

class PaletteManager:
    """
    Manages loading and saving named palettes.
    """

    def __init__(self, user_presets_dir: Optional[Path] = None):
        """
        Initialize palette manager.

        Args:
            user_presets_dir: Directory for user palettes (default: default_presets_dir())
        """
        self.user_presets_dir = Path(user_presets_dir) if user_presets_dir else default_presets_dir()

        self._builtin: Dict[str, PalettePreset] = {}
        self._user: Dict[str, PalettePreset] = {}
        self._sources: Dict[str, Path] = {}

        self._load_builtin_palettes()
        self._load_user_palettes()

    def _load_builtin_palettes(self) -> None:
        """Load built-in palettes"""
        for name, data in BUILTIN_PALETTES.items():
            self._builtin[name] = PalettePreset(
                name=name,
                colors=[Color(*rgb) for rgb in data['colors']],
                description=data['description'],
            )

    def _load_user_palettes(self) -> None:
        """Load user-defined palettes from YAML files"""
        if not self.user_presets_dir.is_dir():
            return

        for yaml_file in sorted(self.user_presets_dir.glob('*.yaml')):
            try:
                with open(yaml_file, 'r') as f:
                    data = yaml.safe_load(f)

                if not isinstance(data, dict):
                    logger.warning("Ignoring palette file %s: expected a mapping", yaml_file)
                    continue

                if 'palettes' in data:
                    # Multiple palettes in one file
                    for name, palette_data in data['palettes'].items():
                        self._user[name] = PalettePreset.from_dict(name, palette_data)
                        self._sources[name] = yaml_file
                else:
                    name = yaml_file.stem
                    self._user[name] = PalettePreset.from_dict(name, data)
                    self._sources[name] = yaml_file
            except (OSError, yaml.YAMLError, PaletteError, AttributeError) as e:
                logger.warning("Could not load palette file %s: %s", yaml_file, e)

    def get(self, name: str) -> Optional[PalettePreset]:
        """
        Get a palette by name.
        User palettes override built-in palettes with same name.
        """
        return self._user.get(name) or self._builtin.get(name)

    def exists(self, name: str) -> bool:
        return name in self._user or name in self._builtin

    def is_builtin(self, name: str) -> bool:
        return name in self._builtin and name not in self._user

    def list_all(self) -> List[str]:
        """List all palette names"""
        return sorted(set(self._builtin) | set(self._user))

    def save_palette(self, preset: PalettePreset, filename: Optional[str] = None) -> Path:
        """
        Save a user palette to a YAML file.

        Args:
            preset: The palette to save
            filename: Optional filename (default: preset.name.yaml)

        Returns:
            Path to saved file
        """
        filename = filename or f"{preset.name}.yaml"
        if not filename.endswith('.yaml'):
            filename += '.yaml'

        self.user_presets_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.user_presets_dir / filename

        with open(filepath, 'w') as f:
            yaml.safe_dump(preset.to_dict(), f, default_flow_style=False, sort_keys=False)

        self._user[preset.name] = preset
        self._sources[preset.name] = filepath
        logger.debug("Saved palette '%s' to %s", preset.name, filepath)

        return filepath

    def delete_palette(self, name: str) -> bool:
        """
        Delete a user palette.

        Returns:
            True if deleted, False if not found or is builtin
        """
        if name not in self._user:
            return False

        yaml_file = self._sources.pop(name, None)
        if yaml_file is not None and yaml_file.exists():
            self._remove_from_file(yaml_file, name)

        del self._user[name]
        logger.debug("Deleted palette '%s' from %s", name, yaml_file)
        return True

    def _remove_from_file(self, yaml_file: Path, name: str) -> None:
        """Drop one palette from its file, deleting the file once it holds none"""
        with open(yaml_file, 'r') as f:
            data = yaml.safe_load(f)

        bundle = data.get('palettes') if isinstance(data, dict) else None
        if isinstance(bundle, dict):
            bundle.pop(name, None)
            if bundle:
                with open(yaml_file, 'w') as f:
                    yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
                return

        yaml_file.unlink()


# ============================================================================
# Global Instance
# ============================================================================

_manager: Optional[PaletteManager] = None


def get_preset_manager(user_presets_dir: Optional[Path] = None) -> PaletteManager:
    """Get the global palette manager, or a fresh one for an explicit directory"""
    global _manager
    if user_presets_dir is not None:
        return PaletteManager(user_presets_dir)
    if _manager is None:
        _manager = PaletteManager()
    return _manager


def get_preset(name: str) -> Optional[PalettePreset]:
    """Get a palette by name"""
    return get_preset_manager().get(name)
