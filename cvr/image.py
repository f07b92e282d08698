from __future__ import annotations

from typing import Iterable, Optional, Sequence, Union

import numpy as np
from PIL import Image

from .pipeline.channels import ChannelIter, Triple

BufferLike = Union[bytes, bytearray, memoryview, Sequence[int], np.ndarray]


def _as_u8(data: BufferLike) -> np.ndarray:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return np.frombuffer(data, dtype=np.uint8)
    return np.asarray(data, dtype=np.uint8).reshape(-1)


def _check_dims(height: int, width: int) -> int:
    if height < 0 or width < 0:
        raise ValueError(f"Image dimensions must be non-negative, got {height}x{width}.")
    return height * width


def _read_only(channel: np.ndarray) -> np.ndarray:
    channel.flags.writeable = False
    return channel


class RgbImage:
    """An 8-bit RGB image stored in planar (channel-major) layout.

    Each channel is a separate uint8 array of ``height * width`` samples in
    row-major pixel order. The image owns copies of its channels and never
    exposes them writable, so an ``RgbImage`` is immutable once built.

    Most libraries (Pillow, imageio, pypng) work with densely packed
    ``[R0, G0, B0, R1, G1, B1, ...]`` data instead; ``from_packed_buf`` and
    ``to_packed_buf`` convert between the two layouts.
    """

    def __init__(
        self,
        r: Optional[BufferLike] = None,
        g: Optional[BufferLike] = None,
        b: Optional[BufferLike] = None,
        height: int = 0,
        width: int = 0,
    ) -> None:
        total = _check_dims(height, width)
        channels = [np.zeros(0, dtype=np.uint8) if c is None else np.array(_as_u8(c), dtype=np.uint8) for c in (r, g, b)]
        for name, channel in zip("rgb", channels):
            if channel.size != total:
                raise ValueError(
                    f"Channel {name} holds {channel.size} samples, expected {total} for a {height}x{width} image."
                )
        self._r, self._g, self._b = (_read_only(c) for c in channels)
        self._height = height
        self._width = width

    @classmethod
    def _adopt(cls, r: np.ndarray, g: np.ndarray, b: np.ndarray, height: int, width: int) -> "RgbImage":
        # Takes ownership of freshly allocated channels without copying them again.
        img = cls.__new__(cls)
        img._r, img._g, img._b = _read_only(r), _read_only(g), _read_only(b)
        img._height = height
        img._width = width
        return img

    @classmethod
    def from_packed_buf(cls, buf: BufferLike, height: int, width: int) -> "RgbImage":
        """Deinterleave a packed RGB buffer into a new image.

        The buffer is copied. Bytes past ``3 * height * width`` are ignored.
        """
        total = _check_dims(height, width)
        data = _as_u8(buf)
        if data.size < 3 * total:
            raise ValueError(
                f"Packed buffer holds {data.size} bytes, need {3 * total} for a {height}x{width} RGB image."
            )
        pixels = data[: 3 * total].reshape(total, 3)
        return cls._adopt(
            pixels[:, 0].copy(), pixels[:, 1].copy(), pixels[:, 2].copy(), height, width
        )

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "RgbImage":
        arr = np.asarray(arr)
        if arr.ndim != 3 or arr.shape[2] < 3:
            raise ValueError(f"Expected an (H, W, 3) array, got shape {arr.shape}.")
        height, width = arr.shape[:2]
        rgb = arr[..., :3].astype(np.uint8, copy=False)
        return cls._adopt(
            rgb[..., 0].flatten(), rgb[..., 1].flatten(), rgb[..., 2].flatten(), height, width
        )

    @classmethod
    def from_pil(cls, image: Image.Image) -> "RgbImage":
        image = image.convert("RGB")
        return cls.from_array(np.asarray(image))

    @classmethod
    def from_triples(cls, triples: Iterable[Triple], height: int, width: int) -> "RgbImage":
        """Collect 8-bit (R, G, B) triples, e.g. the tail of a pipeline, into an image."""
        total = _check_dims(height, width)
        pixels = np.fromiter(
            (sample for triple in triples for sample in triple), dtype=np.uint8, count=3 * total
        )
        return cls.from_packed_buf(pixels, height, width)

    def to_packed_buf(self) -> bytes:
        return np.stack([self._r, self._g, self._b], axis=-1).tobytes()

    def to_array(self) -> np.ndarray:
        return np.stack([self._r, self._g, self._b], axis=-1).reshape(self._height, self._width, 3)

    def to_pil(self) -> Image.Image:
        return Image.fromarray(self.to_array())

    def pixels(self) -> ChannelIter:
        return ChannelIter(self.r(), self.g(), self.b())

    def r(self) -> np.ndarray:
        return self._r.view()

    def g(self) -> np.ndarray:
        return self._g.view()

    def b(self) -> np.ndarray:
        return self._b.view()

    def height(self) -> int:
        return self._height

    def width(self) -> int:
        return self._width

    def total(self) -> int:
        """Number of pixels, named after OpenCV's ``Mat::total``."""
        return self._height * self._width

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RgbImage):
            return NotImplemented
        return (
            self._height == other._height
            and self._width == other._width
            and np.array_equal(self._r, other._r)
            and np.array_equal(self._g, other._g)
            and np.array_equal(self._b, other._b)
        )

    def __repr__(self) -> str:
        return f"RgbImage(height={self._height}, width={self._width})"


def new_empty_image() -> RgbImage:
    return RgbImage()


def image_from_packed(buf: BufferLike, height: int, width: int) -> RgbImage:
    return RgbImage.from_packed_buf(buf, height, width)


def image_to_packed(img: RgbImage) -> bytes:
    return img.to_packed_buf()
