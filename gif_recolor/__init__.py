"""
GIF Recolor - map the colors of an animated GIF onto a target palette
"""

from .core import (
    Color, Frame, GifDecoder, GifEncoder,
    nearest_index, map_color_table, flatten_palette,
    load_palette_from_file, load_palette_from_args, load_palette_from_image,
    resolve_palette, recolor_gif, RecolorResult,
)

__version__ = "0.1.0"
__all__ = [
    'Color',
    'Frame',
    'GifDecoder',
    'GifEncoder',
    'nearest_index',
    'map_color_table',
    'flatten_palette',
    'load_palette_from_file',
    'load_palette_from_args',
    'load_palette_from_image',
    'resolve_palette',
    'recolor_gif',
    'RecolorResult',
    'recolor',
]


def recolor(
    input_path: str,
    output_path: str,
    colors: list = None,
    palette_file: str = None,
    palette_image: str = None,
    preset: str = None,
) -> RecolorResult:
    """
    Recolor a GIF in one call.

    Args:
        input_path: Source GIF
        output_path: Where to write the recolored GIF
        colors: Hex color strings, e.g. ['#ff0000', '#0000ff']
        palette_file: Text file with one hex color per line
        palette_image: Image whose distinct colors form the palette
        preset: Name of a built-in or user palette

    Returns:
        RecolorResult with the frame count and output path
    """
    palette = resolve_palette(
        tokens=colors or (),
        palette_file=palette_file,
        palette_image=palette_image,
        preset=preset,
    )
    return recolor_gif(input_path, output_path, palette)
