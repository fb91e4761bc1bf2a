"""
GIF Recolor - Core
"""

from .color import Color
from .errors import (
    RecolorError, PaletteError, EmptyPaletteError,
    GifError, DecodeError, EncodeError,
)
from .mapper import nearest_index, nearest_indices, map_color_table, flatten_palette
from .palette import (
    Palette,
    parse_palette_lines,
    load_palette_from_file, load_palette_from_args, load_palette_from_image,
    resolve_palette,
)
from .presets import (
    PalettePreset, PaletteManager, BUILTIN_PALETTES,
    get_preset_manager, get_preset,
)
from .gif import (
    Frame, DisposalMethod, GifDecoder, GifEncoder,
    lzw_decode, lzw_encode, REPEAT_INFINITE,
)
from .remap import (
    RecolorResult,
    build_global_table, remap_frame, remap_stream, recolor_gif,
)

__all__ = [
    'Color',
    # Errors
    'RecolorError', 'PaletteError', 'EmptyPaletteError',
    'GifError', 'DecodeError', 'EncodeError',
    # Mapping
    'nearest_index', 'nearest_indices', 'map_color_table', 'flatten_palette',
    # Palette sources
    'Palette', 'parse_palette_lines',
    'load_palette_from_file', 'load_palette_from_args', 'load_palette_from_image',
    'resolve_palette',
    # Presets
    'PalettePreset', 'PaletteManager', 'BUILTIN_PALETTES',
    'get_preset_manager', 'get_preset',
    # Codec
    'Frame', 'DisposalMethod', 'GifDecoder', 'GifEncoder',
    'lzw_decode', 'lzw_encode', 'REPEAT_INFINITE',
    # Pipeline
    'RecolorResult', 'build_global_table', 'remap_frame', 'remap_stream', 'recolor_gif',
]
