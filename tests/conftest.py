import io

import pytest

from gif_recolor.core.color import Color
from gif_recolor.core.gif import DisposalMethod, Frame, GifEncoder, REPEAT_INFINITE


def encode_gif(frames, width, height, global_palette=None, repeat=None) -> bytes:
    """Serialize frames with the package's own encoder"""
    buffer = io.BytesIO()
    encoder = GifEncoder(buffer, width, height, global_palette)
    if repeat is not None:
        encoder.set_repeat(repeat)
    for frame in frames:
        encoder.write_frame(frame)
    encoder.close()
    return buffer.getvalue()


@pytest.fixture
def red_blue_palette():
    return [Color.from_hex('#FF0000'), Color.from_hex('#0000FF')]


@pytest.fixture
def source_frames():
    """Two 4x2 frames: one on the global table, one with its own table"""
    return [
        Frame(
            width=4, height=2,
            buffer=bytes([0, 1, 1, 0, 1, 0, 0, 1]),
            delay=7,
            dispose=DisposalMethod.BACKGROUND,
            transparent=1,
        ),
        Frame(
            width=2, height=2,
            buffer=bytes([0, 0, 0, 0]),
            delay=12,
            dispose=DisposalMethod.KEEP,
            top=0, left=2,
            interlaced=True,
            needs_user_input=True,
            palette=bytes([0, 0, 0, 0, 0, 0]),
        ),
    ]


@pytest.fixture
def source_gif(tmp_path, source_frames):
    path = tmp_path / 'source.gif'
    path.write_bytes(encode_gif(
        source_frames, 4, 2,
        global_palette=bytes([250, 5, 5, 10, 10, 245]),
        repeat=REPEAT_INFINITE,
    ))
    return path
