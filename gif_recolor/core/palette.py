"""
Palette Sources - builds the target palette a GIF is recolored to

A target palette is an ordered, non-empty list of Colors. It can come from:
1. A text file - one hex color per line, blank lines ignored
2. Command-line tokens - one hex color per token
3. An image - its distinct colors in order of first appearance
4. A named preset (see presets.py)

Bad entries are logged and skipped; only an empty result is fatal.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import numpy as np
from PIL import Image

from .color import Color
from .errors import EmptyPaletteError, PaletteError


logger = logging.getLogger(__name__)

Palette = List[Color]


# =============================================================================
# Text sources
# =============================================================================

def parse_palette_lines(lines: Iterable[str], source: str = "palette file") -> Palette:
    """
    Parse one hex color per line.

    Args:
        lines: Raw lines (surrounding whitespace is stripped)
        source: Name used in the error message when nothing parses

    Returns:
        Colors in line order
    """
    palette = []
    for line_num, line in enumerate(lines, 1):
        line = line.strip()
        if not line:
            continue

        color = Color.from_hex(line)
        if color is None:
            logger.warning("Invalid hex color '%s' on line %d", line, line_num)
            continue
        palette.append(color)

    if not palette:
        raise EmptyPaletteError(f"No valid colors found in {source}")

    return palette


def load_palette_from_file(path: str | Path) -> Palette:
    """Load a palette from a text file with one hex color per line"""
    path = Path(path)
    content = path.read_text(encoding='utf-8-sig')
    return parse_palette_lines(content.splitlines())


def load_palette_from_args(tokens: Sequence[str]) -> Palette:
    """Load a palette from hex color tokens given on the command line"""
    palette = []
    for token in tokens:
        color = Color.from_hex(token)
        if color is None:
            logger.warning("Invalid hex color '%s'", token)
            continue
        palette.append(color)

    if not palette:
        raise EmptyPaletteError("No valid colors provided")

    return palette


# =============================================================================
# Image source
# =============================================================================

def load_palette_from_image(path: str | Path, max_colors: int = 256) -> Palette:
    """
    Use the distinct colors of an image as the palette.

    Colors are ordered by first appearance, scanning rows top to bottom,
    so a left-to-right swatch strip keeps its order. Alpha is ignored.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with Image.open(path) as img:
        pixels = np.array(img.convert('RGB'))

    flat = pixels.reshape(-1, 3)
    if len(flat) == 0:
        raise EmptyPaletteError(f"No valid colors found in {path}")

    unique, first_seen = np.unique(flat, axis=0, return_index=True)
    if len(unique) > max_colors:
        raise PaletteError(
            f"Palette image {path} has {len(unique)} colors (max {max_colors})"
        )

    order = np.argsort(first_seen)
    return [Color(int(c[0]), int(c[1]), int(c[2])) for c in unique[order]]


# =============================================================================
# Source selection
# =============================================================================

def resolve_palette(
    tokens: Sequence[str] = (),
    palette_file: Optional[str | Path] = None,
    palette_image: Optional[str | Path] = None,
    preset: Optional[str] = None,
    presets_dir: Optional[Path] = None,
) -> Palette:
    """
    Build the target palette from exactly one source.

    Explicit sources win. Without one, ``tokens`` are read the legacy way:
    if the first token names an existing file it is a palette file,
    otherwise every token is a hex color. A hex token that happens to match
    a file name in the working directory is therefore read as a file.
    """
    explicit = [s for s in (palette_file, palette_image, preset) if s is not None]
    if len(explicit) > 1:
        raise PaletteError("Choose only one of palette file, palette image or preset")
    if explicit and tokens:
        raise PaletteError("Hex colors cannot be combined with another palette source")

    if palette_file is not None:
        return load_palette_from_file(palette_file)
    if palette_image is not None:
        return load_palette_from_image(palette_image)
    if preset is not None:
        from .presets import get_preset_manager
        palette = get_preset_manager(presets_dir).get(preset)
        if palette is None:
            raise PaletteError(f"Palette preset '{preset}' not found")
        return list(palette.colors)

    if not tokens:
        raise EmptyPaletteError("No palette given")
    if Path(tokens[0]).is_file():
        return load_palette_from_file(tokens[0])
    return load_palette_from_args(tokens)
