"""
Frame Remap Pipeline - recolors a GIF one frame at a time

Only color tables are rewritten. Pixel buffers, timing, disposal,
transparency and geometry pass through unchanged, so the cost per frame
depends on the table size, not the frame size.
"""

import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence

from .color import Color
from .gif import Frame, GifDecoder, GifEncoder, REPEAT_INFINITE
from .mapper import flatten_palette, map_color_table


logger = logging.getLogger(__name__)

PROGRESS_EVERY = 10


@dataclass
class RecolorResult:
    """Summary of a finished recolor run"""
    output_path: Path
    frame_count: int
    local_tables: int
    width: int
    height: int
    global_table_synthesized: bool = False


def build_global_table(source_table: Optional[bytes], palette: Sequence[Color]) -> bytes:
    """
    Global color table for the output.

    A source without a global table (or with an empty one) gets the target
    palette itself, one entry per color in palette order.
    """
    if source_table:
        return map_color_table(source_table, palette)
    return flatten_palette(palette)


def remap_frame(frame: Frame, palette: Sequence[Color]) -> Frame:
    """
    Copy of ``frame`` pointing at recolored colors.

    Frames with a local table get that table mapped to the palette;
    all others use the (already mapped) global table.
    """
    local_table = None
    if frame.palette is not None:
        local_table = map_color_table(frame.palette, palette)
    return dataclasses.replace(frame, palette=local_table)


def remap_stream(
    decoder: GifDecoder,
    encoder: GifEncoder,
    palette: Sequence[Color],
    progress_every: int = PROGRESS_EVERY,
    on_frame: Optional[Callable[[int, Frame], None]] = None,
) -> int:
    """
    Recolor every frame from ``decoder`` into ``encoder`` in order.

    Args:
        decoder: Source positioned after its header
        encoder: Output with its global table and repeat already written
        palette: Target palette
        progress_every: Log progress every N frames (0 disables)
        on_frame: Optional callback with (frame_number, output_frame)

    Returns:
        Number of frames written
    """
    frame_count = 0

    for frame in decoder:
        frame_count += 1
        new_frame = remap_frame(frame, palette)
        encoder.write_frame(new_frame)

        logger.debug(
            "Frame %d: %dx%d at (%d, %d), delay %d, %s table",
            frame_count, frame.width, frame.height, frame.left, frame.top,
            frame.delay, 'local' if frame.palette is not None else 'global'
        )
        if on_frame is not None:
            on_frame(frame_count, new_frame)
        if progress_every and frame_count % progress_every == 0:
            logger.info("Processed %d frames...", frame_count)

    return frame_count


def recolor_gif(
    input_path: str | Path,
    output_path: str | Path,
    palette: Sequence[Color],
    progress_every: int = PROGRESS_EVERY,
) -> RecolorResult:
    """
    Recolor the GIF at ``input_path`` to ``palette`` and write ``output_path``.

    The output always loops forever. Any read or write failure propagates;
    a failure after the output was created leaves it truncated.
    """
    input_path = Path(input_path)
    output_path = Path(output_path)
    local_tables = 0

    def count_local(_number: int, frame: Frame):
        nonlocal local_tables
        if frame.palette is not None:
            local_tables += 1

    with open(input_path, 'rb') as file_in:
        decoder = GifDecoder(file_in)
        global_table = build_global_table(decoder.global_palette, palette)

        with open(output_path, 'wb') as file_out:
            encoder = GifEncoder(file_out, decoder.width, decoder.height, global_table)
            encoder.set_repeat(REPEAT_INFINITE)

            with encoder:
                frame_count = remap_stream(
                    decoder, encoder, palette,
                    progress_every=progress_every,
                    on_frame=count_local,
                )

    return RecolorResult(
        output_path=output_path,
        frame_count=frame_count,
        local_tables=local_tables,
        width=decoder.width,
        height=decoder.height,
        global_table_synthesized=not decoder.global_palette,
    )
