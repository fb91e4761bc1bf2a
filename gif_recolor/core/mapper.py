"""
Palette Mapper - replaces color table entries with their nearest target color

Color tables are flat byte strings of RGB triples in table order
(entry i lives at bytes 3i..3i+2). Matching uses squared RGB distance
and the lowest palette index wins a tie.
"""

import numpy as np
from typing import Sequence

from .color import Color
from .errors import EmptyPaletteError


def nearest_index(color: Color, palette: Sequence[Color]) -> int:
    """
    Index of the palette entry closest to ``color``.

    Scans in index order and only moves on a strictly smaller distance,
    so among equally distant entries the first one is returned.
    """
    if not palette:
        raise EmptyPaletteError("Cannot match against an empty palette")

    best_index = 0
    best_distance = color.distance_squared(palette[0])
    for i in range(1, len(palette)):
        distance = color.distance_squared(palette[i])
        if distance < best_distance:
            best_index = i
            best_distance = distance
    return best_index


def palette_array(palette: Sequence[Color]) -> np.ndarray:
    """Palette as an (N, 3) int32 array"""
    if not palette:
        raise EmptyPaletteError("Cannot match against an empty palette")
    return np.array([c.as_tuple() for c in palette], dtype=np.int32)


def nearest_indices(source: bytes, palette: Sequence[Color]) -> np.ndarray:
    """
    Nearest palette index for every complete triple in ``source``.

    Vectorized equivalent of calling :func:`nearest_index` per entry;
    ``np.argmin`` returns the first minimum, which keeps the same tie-break.
    """
    targets = palette_array(palette)
    count = len(source) // 3
    if count == 0:
        return np.zeros(0, dtype=np.intp)
    colors = np.frombuffer(bytes(source[:count * 3]), dtype=np.uint8)
    colors = colors.reshape(count, 3).astype(np.int32)

    # (count, N) distance matrix; tables hold at most a few hundred entries
    deltas = colors[:, None, :] - targets[None, :, :]
    distances = np.sum(deltas * deltas, axis=2)
    return np.argmin(distances, axis=1)


def map_color_table(source: bytes, palette: Sequence[Color]) -> bytes:
    """
    Build a new color table where every entry is its nearest palette color.

    A trailing partial triple (1 or 2 bytes) produces no output. The input
    is never modified.
    """
    targets = palette_array(palette)
    indices = nearest_indices(source, palette)
    return targets[indices].astype(np.uint8).tobytes()


def flatten_palette(palette: Sequence[Color]) -> bytes:
    """Palette as a color table, one entry per color in palette order"""
    return bytes(channel for color in palette for channel in color)
