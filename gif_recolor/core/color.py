"""
Color Model - 8-bit RGB values, hex parsing and distance
"""

import re
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple


_HEX_DIGITS = re.compile(r'[0-9a-fA-F]{6}')


@dataclass(frozen=True)
class Color:
    """An immutable RGB color with 0-255 channels"""
    r: int
    g: int
    b: int

    def __post_init__(self):
        for name in ('r', 'g', 'b'):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                raise ValueError(f"Channel {name} out of range: {value}")

    @classmethod
    def from_hex(cls, text: str) -> Optional['Color']:
        """
        Parse ``RRGGBB`` or ``#RRGGBB``.

        Only one leading ``#`` is stripped. Anything other than exactly six
        hex digits after that gives ``None`` so the caller decides how
        serious a bad value is.
        """
        if text.startswith('#'):
            text = text[1:]
        if not _HEX_DIGITS.fullmatch(text):
            return None
        return cls(int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))

    @classmethod
    def from_bytes(cls, triple: Sequence[int]) -> 'Color':
        """Build a color from one 3-byte color table entry"""
        r, g, b = triple
        return cls(r, g, b)

    def distance_squared(self, other: 'Color') -> int:
        """Squared euclidean distance in RGB space (0..195075)"""
        dr = self.r - other.r
        dg = self.g - other.g
        db = self.b - other.b
        return dr * dr + dg * dg + db * db

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)

    def to_hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"

    def __iter__(self) -> Iterator[int]:
        return iter((self.r, self.g, self.b))

    def __str__(self) -> str:
        return self.to_hex()
