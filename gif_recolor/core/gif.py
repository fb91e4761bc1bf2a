"""
GIF Codec - byte-level GIF reader and writer

Works on the container as stored: color tables stay flat RGB byte strings
and frames keep their raw index buffers, so a frame can be read, given a
different color table and written back without touching its pixels.

Block layout follows GIF89a:
    Header, Logical Screen Descriptor, [Global Color Table],
    { Extension | Image Descriptor [Local Color Table] Image Data }*,
    Trailer
"""

import logging
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import BinaryIO, Iterator, Optional

from .errors import DecodeError, EncodeError


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

EXTENSION_INTRODUCER = 0x21
IMAGE_SEPARATOR = 0x2C
TRAILER = 0x3B

GRAPHIC_CONTROL_LABEL = 0xF9
PLAIN_TEXT_LABEL = 0x01
APPLICATION_LABEL = 0xFF

SIGNATURES = (b'GIF87a', b'GIF89a')

MAX_TABLE_ENTRIES = 256
MAX_CODE_SIZE = 12
MAX_CODES = 1 << MAX_CODE_SIZE

# Loop count 0 in the NETSCAPE2.0 extension means loop forever
REPEAT_INFINITE = 0


class DisposalMethod(IntEnum):
    """What happens to a frame's area before the next frame is drawn"""
    ANY = 0
    KEEP = 1
    BACKGROUND = 2
    PREVIOUS = 3

    @classmethod
    def from_bits(cls, value: int) -> 'DisposalMethod':
        # Values 4-7 are reserved; treat them as unspecified
        try:
            return cls(value)
        except ValueError:
            return cls.ANY


@dataclass(frozen=True)
class Frame:
    """
    One image of the animation.

    ``buffer`` holds one color index per pixel in stream order; interlaced
    frames are left interlaced. ``palette`` is the local color table, or
    None when the frame uses the global table.
    """
    width: int
    height: int
    buffer: bytes
    delay: int = 0
    dispose: DisposalMethod = DisposalMethod.ANY
    transparent: Optional[int] = None
    needs_user_input: bool = False
    top: int = 0
    left: int = 0
    interlaced: bool = False
    palette: Optional[bytes] = None


@dataclass(frozen=True)
class _GraphicControl:
    delay: int = 0
    dispose: DisposalMethod = DisposalMethod.ANY
    transparent: Optional[int] = None
    needs_user_input: bool = False


# =============================================================================
# LZW
# =============================================================================

class _BitWriter:
    """Packs variable-width codes least significant bit first"""

    def __init__(self):
        self._bytes = bytearray()
        self._acc = 0
        self._bits = 0

    def write(self, code: int, size: int):
        self._acc |= code << self._bits
        self._bits += size
        while self._bits >= 8:
            self._bytes.append(self._acc & 0xFF)
            self._acc >>= 8
            self._bits -= 8

    def to_bytes(self) -> bytes:
        if self._bits:
            return bytes(self._bytes) + bytes([self._acc & 0xFF])
        return bytes(self._bytes)


def lzw_decode(data: bytes, min_code_size: int) -> bytes:
    """Decompress GIF image data into color indices"""
    clear_code = 1 << min_code_size
    end_code = clear_code + 1
    base_table = [bytes([i]) for i in range(clear_code)] + [b'', b'']

    table = list(base_table)
    code_size = min_code_size + 1
    previous = None
    output = bytearray()

    acc = 0
    bits = 0
    pos = 0
    length = len(data)

    while True:
        while bits < code_size and pos < length:
            acc |= data[pos] << bits
            bits += 8
            pos += 1
        if bits < code_size:
            # Ran out of data without an end code; keep what we have
            break

        code = acc & ((1 << code_size) - 1)
        acc >>= code_size
        bits -= code_size

        if code == clear_code:
            table = list(base_table)
            code_size = min_code_size + 1
            previous = None
            continue
        if code == end_code:
            break

        if code < len(table):
            entry = table[code]
            if previous is not None and len(table) < MAX_CODES:
                table.append(previous + entry[:1])
        elif code == len(table) and previous is not None:
            entry = previous + previous[:1]
            if len(table) < MAX_CODES:
                table.append(entry)
        else:
            raise DecodeError(f"Invalid LZW code {code}")

        output += entry
        previous = entry

        if len(table) == (1 << code_size) and code_size < MAX_CODE_SIZE:
            code_size += 1

    return bytes(output)


def lzw_encode(indices: bytes, min_code_size: int) -> bytes:
    """Compress color indices into GIF image data (without sub-blocks)"""
    clear_code = 1 << min_code_size
    end_code = clear_code + 1

    writer = _BitWriter()
    code_size = min_code_size + 1
    next_code = end_code + 1
    table = {}

    writer.write(clear_code, code_size)

    prefix = None
    for value in indices:
        if prefix is None:
            prefix = value
            continue

        key = (prefix, value)
        code = table.get(key)
        if code is not None:
            prefix = code
            continue

        writer.write(prefix, code_size)
        # Clear one code early; decoders add an entry of their own first
        if next_code < MAX_CODES - 1:
            table[key] = next_code
            next_code += 1
            if next_code > (1 << code_size) and code_size < MAX_CODE_SIZE:
                code_size += 1
        else:
            writer.write(clear_code, code_size)
            table.clear()
            next_code = end_code + 1
            code_size = min_code_size + 1
        prefix = value

    if prefix is not None:
        writer.write(prefix, code_size)
    writer.write(end_code, code_size)

    return writer.to_bytes()


# =============================================================================
# Decoder
# =============================================================================

class GifDecoder:
    """
    Forward-only GIF reader.

    The header is parsed on construction; frames are read one at a time
    with :meth:`read_next_frame` or by iterating the decoder.
    """

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self._finished = False
        self.width = 0
        self.height = 0
        self.background = 0
        self.global_palette: Optional[bytes] = None
        self._read_header()

    def _read(self, size: int) -> bytes:
        data = self._stream.read(size)
        if len(data) != size:
            raise DecodeError("Unexpected end of GIF data")
        return data

    def _read_sub_blocks(self) -> bytes:
        data = bytearray()
        while True:
            size = self._read(1)[0]
            if size == 0:
                return bytes(data)
            data += self._read(size)

    def _read_header(self):
        signature = self._stream.read(6)
        if signature not in SIGNATURES:
            raise DecodeError("Not a valid GIF")

        self.width, self.height, flags, self.background, _aspect = struct.unpack(
            '<HHBBB', self._read(7)
        )
        if flags & 0x80:
            entries = 1 << ((flags & 0x07) + 1)
            self.global_palette = self._read(entries * 3)

        logger.debug(
            "GIF %dx%d, global table: %s",
            self.width, self.height,
            len(self.global_palette) // 3 if self.global_palette else 'none'
        )

    @staticmethod
    def _parse_graphic_control(data: bytes) -> _GraphicControl:
        if len(data) < 4:
            raise DecodeError("Truncated graphic control extension")
        packed, delay, transparent = struct.unpack('<BHB', data[:4])
        return _GraphicControl(
            delay=delay,
            dispose=DisposalMethod.from_bits((packed >> 2) & 0x07),
            transparent=transparent if packed & 0x01 else None,
            needs_user_input=bool(packed & 0x02),
        )

    def _read_image(self, control: _GraphicControl) -> Frame:
        left, top, width, height, flags = struct.unpack('<HHHHB', self._read(9))

        palette = None
        if flags & 0x80:
            entries = 1 << ((flags & 0x07) + 1)
            palette = self._read(entries * 3)

        min_code_size = self._read(1)[0]
        if not 1 <= min_code_size < MAX_CODE_SIZE:
            raise DecodeError(f"Invalid LZW minimum code size {min_code_size}")

        pixels = lzw_decode(self._read_sub_blocks(), min_code_size)
        expected = width * height
        if len(pixels) < expected:
            logger.debug("Frame data short by %d pixels, padding", expected - len(pixels))
            pixels += bytes(expected - len(pixels))
        elif len(pixels) > expected:
            pixels = pixels[:expected]

        return Frame(
            width=width,
            height=height,
            buffer=pixels,
            delay=control.delay,
            dispose=control.dispose,
            transparent=control.transparent,
            needs_user_input=control.needs_user_input,
            top=top,
            left=left,
            interlaced=bool(flags & 0x40),
            palette=palette,
        )

    def read_next_frame(self) -> Optional[Frame]:
        """Next frame, or None once the trailer is reached"""
        if self._finished:
            return None

        control = _GraphicControl()
        while True:
            block = self._read(1)[0]
            if block == EXTENSION_INTRODUCER:
                label = self._read(1)[0]
                data = self._read_sub_blocks()
                if label == GRAPHIC_CONTROL_LABEL:
                    control = self._parse_graphic_control(data)
                elif label == PLAIN_TEXT_LABEL:
                    # A control block before plain text applies to the text only
                    control = _GraphicControl()
            elif block == IMAGE_SEPARATOR:
                return self._read_image(control)
            elif block == TRAILER:
                self._finished = True
                return None
            else:
                raise DecodeError(f"Unknown block type 0x{block:02x}")

    def __iter__(self) -> Iterator[Frame]:
        while True:
            frame = self.read_next_frame()
            if frame is None:
                return
            yield frame


# =============================================================================
# Encoder
# =============================================================================

def _table_bits(table: bytes) -> int:
    """Size field bits for a color table (entries are padded to 2**bits)"""
    if len(table) % 3:
        raise EncodeError(f"Color table length {len(table)} is not a multiple of 3")
    entries = len(table) // 3
    if entries == 0:
        raise EncodeError("Color table is empty")
    if entries > MAX_TABLE_ENTRIES:
        raise EncodeError(f"Color table has {entries} entries (max {MAX_TABLE_ENTRIES})")
    return max(1, (entries - 1).bit_length())


def _pad_table(table: bytes, bits: int) -> bytes:
    return table + bytes((1 << bits) * 3 - len(table))


def _check_u16(name: str, value: int):
    if not 0 <= value <= 0xFFFF:
        raise EncodeError(f"{name} out of range: {value}")


class GifEncoder:
    """
    Sequential GIF89a writer.

    Writes the header and global color table immediately. Call
    :meth:`set_repeat` before the first frame, then :meth:`write_frame`
    per frame and :meth:`close` to write the trailer. The stream itself is
    left open.
    """

    def __init__(
        self,
        stream: BinaryIO,
        width: int,
        height: int,
        global_palette: Optional[bytes] = None,
    ):
        _check_u16("Width", width)
        _check_u16("Height", height)

        self._stream = stream
        self.width = width
        self.height = height
        self.global_palette = global_palette or None
        self._global_bits = None
        self._frames_written = 0
        self._closed = False

        flags = 0
        if self.global_palette:
            self._global_bits = _table_bits(self.global_palette)
            flags = 0x80 | (0x07 << 4) | (self._global_bits - 1)

        self._stream.write(SIGNATURES[1])
        self._stream.write(struct.pack('<HHBBB', width, height, flags, 0, 0))
        if self.global_palette:
            self._stream.write(_pad_table(self.global_palette, self._global_bits))

    @property
    def frames_written(self) -> int:
        return self._frames_written

    def set_repeat(self, count: int = REPEAT_INFINITE):
        """Write the NETSCAPE2.0 loop extension (0 loops forever)"""
        if self._frames_written:
            raise EncodeError("Repeat must be set before the first frame")
        _check_u16("Repeat count", count)
        self._stream.write(bytes([EXTENSION_INTRODUCER, APPLICATION_LABEL, 11]))
        self._stream.write(b'NETSCAPE2.0')
        self._stream.write(bytes([3, 1]) + struct.pack('<H', count) + b'\x00')

    def write_frame(self, frame: Frame):
        """Append one frame"""
        if self._closed:
            raise EncodeError("Encoder is closed")

        for name in ('left', 'top', 'width', 'height', 'delay'):
            _check_u16(name.capitalize(), getattr(frame, name))
        if len(frame.buffer) != frame.width * frame.height:
            raise EncodeError(
                f"Frame buffer has {len(frame.buffer)} pixels, "
                f"expected {frame.width}x{frame.height}"
            )
        if frame.transparent is not None and not 0 <= frame.transparent <= 255:
            raise EncodeError(f"Transparent index out of range: {frame.transparent}")

        if frame.palette:
            table_bits = _table_bits(frame.palette)
        elif self._global_bits is not None:
            table_bits = self._global_bits
        else:
            raise EncodeError("Frame has no local color table and there is no global table")

        # Indices past the end of the table are kept as they are
        max_index = max(frame.buffer) if frame.buffer else 0
        min_code_size = max(2, table_bits, max_index.bit_length())

        self._write_graphic_control(frame)

        flags = 0
        if frame.interlaced:
            flags |= 0x40
        if frame.palette:
            flags |= 0x80 | (table_bits - 1)
        self._stream.write(bytes([IMAGE_SEPARATOR]))
        self._stream.write(struct.pack(
            '<HHHHB', frame.left, frame.top, frame.width, frame.height, flags
        ))
        if frame.palette:
            self._stream.write(_pad_table(frame.palette, table_bits))

        self._stream.write(bytes([min_code_size]))
        self._write_sub_blocks(lzw_encode(frame.buffer, min_code_size))
        self._frames_written += 1

    def _write_graphic_control(self, frame: Frame):
        packed = (int(frame.dispose) & 0x07) << 2
        if frame.needs_user_input:
            packed |= 0x02
        if frame.transparent is not None:
            packed |= 0x01
        self._stream.write(bytes([EXTENSION_INTRODUCER, GRAPHIC_CONTROL_LABEL, 4]))
        self._stream.write(struct.pack(
            '<BHB', packed, frame.delay, frame.transparent or 0
        ))
        self._stream.write(b'\x00')

    def _write_sub_blocks(self, data: bytes):
        for start in range(0, len(data), 255):
            chunk = data[start:start + 255]
            self._stream.write(bytes([len(chunk)]))
            self._stream.write(chunk)
        self._stream.write(b'\x00')

    def close(self):
        """Write the trailer; further frames are rejected"""
        if not self._closed:
            self._stream.write(bytes([TRAILER]))
            self._closed = True

    def __enter__(self) -> 'GifEncoder':
        return self

    def __exit__(self, exc_type, exc, tb):
        # A failed run leaves the output truncated, without a trailer
        if exc_type is None:
            self.close()
