from __future__ import annotations

import logging
import os
import zlib
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Union

import numpy as np
import png

from cvr.config import BIT_DEPTH, PNG_COMPRESSION
from .errors import DecodeError, EncodeError, UnsupportedBitDepth, UnsupportedColorType
from .image import RgbImage
from .models import ColorType, PngInfo

logger = logging.getLogger(__name__)

Source = Union[BinaryIO, bytes, bytearray, memoryview, str, os.PathLike]
Sink = Union[BinaryIO, str, os.PathLike]

_CODEC_ERRORS = (png.Error, zlib.error, OSError, EOFError)


@contextmanager
def _open_reader(source: Source) -> Iterator[png.Reader]:
    if isinstance(source, (bytes, bytearray, memoryview)):
        yield png.Reader(bytes=bytes(source))
    elif isinstance(source, (str, os.PathLike)):
        with open(source, "rb") as fp:
            yield png.Reader(file=fp)
    else:
        yield png.Reader(file=source)


@contextmanager
def _open_sink(sink: Sink) -> Iterator[BinaryIO]:
    if isinstance(sink, (str, os.PathLike)):
        try:
            with open(sink, "wb") as fp:
                yield fp
        except BaseException:
            # Leave no truncated PNG behind.
            Path(sink).unlink(missing_ok=True)
            raise
    else:
        yield sink


def _read_info(reader: png.Reader) -> PngInfo:
    reader.preamble()
    return PngInfo(
        color_type=ColorType(reader.color_type),
        bit_depth=reader.bitdepth,
        height=reader.height,
        width=reader.width,
    )


def _validate(info: PngInfo) -> None:
    if info.color_type not in (ColorType.RGB, ColorType.RGBA):
        raise UnsupportedColorType(info.color_type)
    if info.bit_depth != BIT_DEPTH:
        raise UnsupportedBitDepth(info.bit_depth)


def _demux_rows(reader: png.Reader, info: PngInfo) -> RgbImage:
    # pypng cannot strip alpha while decoding, so RGBA rows arrive with a
    # 4-byte stride and only the first three samples of each pixel are kept.
    _width, _height, rows, _meta = reader.read()
    channels = info.channels
    if info.alpha:
        logger.info("Discarding alpha channel of %dx%d PNG", info.width, info.height)

    total = info.height * info.width
    try:
        r = np.zeros(total, dtype=np.uint8)
        g = np.zeros(total, dtype=np.uint8)
        b = np.zeros(total, dtype=np.uint8)
    except (MemoryError, ValueError) as exc:
        raise png.FormatError(f"Cannot allocate a {info.width}x{info.height} image") from exc

    received = 0
    for row in rows:
        if received == info.height:
            raise png.FormatError(f"IDAT holds more than the {info.height} rows declared in IHDR")
        pixels = np.frombuffer(row, dtype=np.uint8).reshape(info.width, channels)
        start = received * info.width
        stop = start + info.width
        r[start:stop] = pixels[:, 0]
        g[start:stop] = pixels[:, 1]
        b[start:stop] = pixels[:, 2]
        received += 1

    if received != info.height:
        raise png.FormatError(f"IDAT holds {received} rows, IHDR declares {info.height}")

    return RgbImage(r, g, b, height=info.height, width=info.width)


def read_png_info(source: Source) -> PngInfo:
    """Read only the PNG header, without decoding or validating pixel data."""
    try:
        with _open_reader(source) as reader:
            return _read_info(reader)
    except _CODEC_ERRORS as exc:
        logger.debug("PNG header read failed: %s", exc)
        raise DecodeError(f"Failed to read PNG header: {exc}") from exc


def read_rgb8(source: Source) -> RgbImage:
    """Decode an 8-bit RGB or RGBA PNG into a planar ``RgbImage``.

    ``source`` may be a binary file object, the encoded bytes, or a path.
    Any alpha channel is dropped. Color type and bit depth are checked before
    pixel data is decoded.

    Raises:
        UnsupportedColorType: the PNG is not RGB or RGBA.
        UnsupportedBitDepth: the PNG is not 8 bits per sample.
        DecodeError: the stream could not be read or is malformed.
    """
    try:
        with _open_reader(source) as reader:
            info = _read_info(reader)
            logger.debug(
                "Decoding %dx%d PNG, color type %s, bit depth %d",
                info.width,
                info.height,
                info.color_type.name,
                info.bit_depth,
            )
            _validate(info)
            return _demux_rows(reader, info)
    except _CODEC_ERRORS as exc:
        logger.debug("PNG decode failed: %s", exc)
        raise DecodeError(f"Failed to decode PNG: {exc}") from exc


def write_rgb8(img: RgbImage, sink: Sink) -> None:
    """Encode ``img`` as an 8-bit RGB PNG (no alpha) into ``sink``.

    Raises:
        EncodeError: the codec rejected the image or the sink failed.
    """
    height, width = img.height(), img.width()
    packed = img.to_packed_buf()
    stride = 3 * width
    rows = (packed[i * stride:(i + 1) * stride] for i in range(height))
    logger.debug("Encoding %dx%d RGB PNG", width, height)
    try:
        writer = png.Writer(
            width=width,
            height=height,
            greyscale=False,
            alpha=False,
            bitdepth=BIT_DEPTH,
            compression=PNG_COMPRESSION,
        )
        with _open_sink(sink) as fp:
            writer.write(fp, rows)
    except _CODEC_ERRORS as exc:
        logger.debug("PNG encode failed: %s", exc)
        raise EncodeError(f"Failed to encode {width}x{height} PNG: {exc}") from exc
