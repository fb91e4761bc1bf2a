#!/usr/bin/env python
"""
GIF Recolor CLI - map every color of an animated GIF onto a target palette

Usage:
    gif-recolor <input.gif> <output.gif> <palette.txt|#hex1> [#hex2] ...

Examples:
    gif-recolor input.gif output.gif colors.txt
    gif-recolor input.gif output.gif ff0000 00ff00 0000ff
    gif-recolor input.gif output.gif --preset pico8
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


LOG_FORMAT = '%(levelname)s: %(message)s'


@dataclass
class RecolorConfig:
    """Everything one run needs, taken from the command line"""
    input_path: Path
    output_path: Path
    colors: List[str] = field(default_factory=list)
    palette_file: Optional[Path] = None
    palette_image: Optional[Path] = None
    preset: Optional[str] = None
    progress_every: int = 10

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> 'RecolorConfig':
        return cls(
            input_path=Path(args.input),
            output_path=Path(args.output),
            colors=list(args.palette),
            palette_file=Path(args.palette_file) if args.palette_file else None,
            palette_image=Path(args.palette_image) if args.palette_image else None,
            preset=args.preset,
            progress_every=args.progress_every,
        )

    @property
    def has_palette_source(self) -> bool:
        return bool(self.colors or self.palette_file or self.palette_image or self.preset)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='gif-recolor',
        description="Recolor an animated GIF to the nearest colors of a target palette",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Palette sources:
  A single existing file as the third argument is read as a palette file
  (one hex color per line). Otherwise every remaining argument is a hex
  color. Use --palette-file, --palette-image or --preset to be explicit.

Examples:
  %(prog)s input.gif output.gif colors.txt
  %(prog)s input.gif output.gif "#ff0000" "#00ff00" "#0000ff"
  %(prog)s input.gif output.gif --palette-image swatch.png
  %(prog)s input.gif output.gif --preset gameboy
  %(prog)s --list-palettes
        """
    )

    parser.add_argument(
        'input',
        type=str,
        nargs='?',  # Optional for --list-palettes
        default=None,
        help='Input GIF'
    )

    parser.add_argument(
        'output',
        type=str,
        nargs='?',
        default=None,
        help='Output GIF'
    )

    parser.add_argument(
        'palette',
        type=str,
        nargs='*',
        default=[],
        help='Palette text file, or one or more hex colors (#RRGGBB)'
    )

    parser.add_argument(
        '--palette-file',
        type=str,
        default=None,
        metavar='PATH',
        help='Read the palette from a text file (one hex color per line)'
    )

    parser.add_argument(
        '--palette-image',
        type=str,
        default=None,
        metavar='PATH',
        help='Use the distinct colors of an image as the palette'
    )

    parser.add_argument(
        '--preset',
        type=str,
        default=None,
        metavar='NAME',
        help='Use a named palette (see --list-palettes)'
    )

    parser.add_argument(
        '--list-palettes',
        action='store_true',
        help='List available named palettes and exit'
    )

    parser.add_argument(
        '--progress-every',
        type=int,
        default=10,
        metavar='N',
        help='Log progress every N frames, 0 to disable (default: 10)'
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Show per-frame details and tracebacks'
    )
    verbosity.add_argument(
        '-q', '--quiet',
        action='store_true',
        help='Only show warnings and errors'
    )

    return parser


def configure_logging(verbose: bool = False, quiet: bool = False):
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def list_palettes():
    from .core.presets import get_preset_manager
    manager = get_preset_manager()

    print("Available palettes:\n")
    for name in manager.list_all():
        preset = manager.get(name)
        origin = 'built-in' if manager.is_builtin(name) else 'user'
        print(f"  {name:<16} {len(preset.colors):>3} colors  ({origin}) {preset.description}")
    print(f"\nUser palettes: {manager.user_presets_dir}")


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose, args.quiet)

    if args.list_palettes:
        list_palettes()
        sys.exit(0)

    if not args.input or not args.output:
        parser.error("input and output GIF paths are required")

    config = RecolorConfig.from_args(args)
    if not config.has_palette_source:
        parser.error("a palette file, hex colors, --palette-image or --preset is required")

    # Import here to keep --help fast
    from .core.palette import resolve_palette
    from .core.remap import recolor_gif

    try:
        palette = resolve_palette(
            tokens=config.colors,
            palette_file=config.palette_file,
            palette_image=config.palette_image,
            preset=config.preset,
        )

        print(f"Loaded {len(palette)} colors in target palette")
        for i, color in enumerate(palette, 1):
            print(f"  {i}: {color.to_hex()}")

        result = recolor_gif(
            config.input_path,
            config.output_path,
            palette,
            progress_every=config.progress_every,
        )

        print(f"Successfully processed {result.frame_count} frames")
        print(f"Saved recolored GIF to {result.output_path}")

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()
