from __future__ import annotations

from typing import Iterable, Iterator, Sequence, Tuple

from .linearization import linear_to_srgb, srgb_to_linear

Triple = Tuple[float, float, float]


class _Chainable:
    """Pipeline stage whose output is a stream of (R, G, B) triples."""

    def __iter__(self) -> Iterator[Triple]:
        return self

    def srgb_to_linear(self) -> "SRGBToLinear":
        return SRGBToLinear(self)

    def linear_to_srgb(self) -> "LinearToSRGB":
        return LinearToSRGB(self)

    def greyscale(self) -> "Greyscale":
        return Greyscale(self)


class ChannelIter(_Chainable):
    """Zip three channel arrays into per-pixel triples.

    Iteration stops as soon as the shortest channel is exhausted. Like any
    iterator it can only be consumed once.
    """

    def __init__(self, r: Sequence, g: Sequence, b: Sequence) -> None:
        self._pixels = zip(r, g, b)

    def __next__(self) -> Triple:
        return next(self._pixels)


class SRGBToLinear(_Chainable):
    def __init__(self, triples: Iterable[Triple]) -> None:
        self._upstream = iter(triples)

    def __next__(self) -> Tuple[float, float, float]:
        r, g, b = next(self._upstream)
        return srgb_to_linear(r), srgb_to_linear(g), srgb_to_linear(b)


class LinearToSRGB(_Chainable):
    def __init__(self, triples: Iterable[Triple]) -> None:
        self._upstream = iter(triples)

    def __next__(self) -> Tuple[int, int, int]:
        r, g, b = next(self._upstream)
        return linear_to_srgb(r), linear_to_srgb(g), linear_to_srgb(b)


class Greyscale:
    """Reduce 8-bit triples to a single intensity per pixel.

    The reduction passes the red component through unchanged. It is a
    stand-in for a weighted luma sum and callers rely on it as-is.
    """

    def __init__(self, triples: Iterable[Triple]) -> None:
        self._upstream = iter(triples)

    def __iter__(self) -> Iterator[int]:
        return self

    def __next__(self) -> int:
        r, _g, _b = next(self._upstream)
        return r
