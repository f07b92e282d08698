from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel


class ColorType(IntEnum):
    GREYSCALE = 0
    RGB = 2
    INDEXED = 3
    GREYSCALE_ALPHA = 4
    RGBA = 6


class PngInfo(BaseModel):
    color_type: ColorType
    bit_depth: int
    height: int
    width: int

    @property
    def alpha(self) -> bool:
        return self.color_type in (ColorType.GREYSCALE_ALPHA, ColorType.RGBA)

    @property
    def channels(self) -> int:
        return {
            ColorType.GREYSCALE: 1,
            ColorType.RGB: 3,
            ColorType.INDEXED: 1,
            ColorType.GREYSCALE_ALPHA: 2,
            ColorType.RGBA: 4,
        }[self.color_type]
