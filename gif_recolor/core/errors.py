"""
Error types shared by the palette loaders, the GIF codec and the remap pipeline
"""


class RecolorError(Exception):
    """Base class for every fatal recolor failure"""


# =============================================================================
# Palette errors
# =============================================================================

class PaletteError(RecolorError):
    """A target palette could not be built"""


class EmptyPaletteError(PaletteError, ValueError):
    """No usable colors in a palette"""


# =============================================================================
# Codec errors
# =============================================================================

class GifError(RecolorError):
    """Raised by the GIF reader and writer"""


class DecodeError(GifError):
    """Malformed or truncated GIF input"""


class EncodeError(GifError):
    """A frame or color table cannot be written as GIF"""
