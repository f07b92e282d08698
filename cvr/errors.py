from __future__ import annotations


class PngError(RuntimeError):
    """Base class for failures of the PNG adapter."""


class DecodeError(PngError):
    pass


class EncodeError(PngError):
    pass


class UnsupportedColorType(PngError):
    def __init__(self, color_type: int) -> None:
        super().__init__(f"Unsupported PNG color type: {color_type!r}. Only RGB and RGBA are supported.")
        self.color_type = color_type


class UnsupportedBitDepth(PngError):
    def __init__(self, bit_depth: int) -> None:
        super().__init__(f"Unsupported PNG bit depth: {bit_depth!r}. Only 8-bit images are supported.")
        self.bit_depth = bit_depth
