from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from cvr.image import RgbImage, image_from_packed, image_to_packed, new_empty_image


def test_from_packed_buf() -> None:
    buf = bytes([1, 2, 3, 4, 5, 6, 7, 8, 9])
    img = RgbImage.from_packed_buf(buf, 1, 3)

    assert img.r().tolist() == [1, 4, 7]
    assert img.g().tolist() == [2, 5, 8]
    assert img.b().tolist() == [3, 6, 9]
    assert img.height() == 1
    assert img.width() == 3
    assert img.total() == 3


def test_to_packed_buf() -> None:
    buf = bytes([1, 2, 3, 4, 5, 6, 7, 8, 9])
    packed = RgbImage.from_packed_buf(buf, 1, 3).to_packed_buf()
    assert isinstance(packed, bytes)
    assert packed == buf


def test_square_image_channels_and_round_trip() -> None:
    buf = bytes(range(1, 28))
    img = image_from_packed(buf, 3, 3)

    assert img.r().tolist() == [1, 4, 7, 10, 13, 16, 19, 22, 25]
    assert img.g().tolist() == [2, 5, 8, 11, 14, 17, 20, 23, 26]
    assert img.b().tolist() == [3, 6, 9, 12, 15, 18, 21, 24, 27]
    assert image_to_packed(img) == buf


@pytest.mark.parametrize("height, width", [(1, 1), (4, 7), (16, 3), (0, 5)])
def test_channel_indexing_matches_packed_layout(height: int, width: int) -> None:
    rng = np.random.default_rng(height * 31 + width)
    buf = rng.integers(0, 256, size=height * width * 3, dtype=np.uint8).tobytes()
    img = RgbImage.from_packed_buf(buf, height, width)

    assert img.height() * img.width() == img.total()
    for i in range(img.total()):
        assert img.r()[i] == buf[3 * i]
        assert img.g()[i] == buf[3 * i + 1]
        assert img.b()[i] == buf[3 * i + 2]
    assert img.to_packed_buf() == buf


def test_accepts_lists_and_arrays() -> None:
    expected = RgbImage.from_packed_buf(bytes(range(6)), 1, 2)
    assert RgbImage.from_packed_buf(list(range(6)), 1, 2) == expected
    assert RgbImage.from_packed_buf(np.arange(6, dtype=np.uint8), 1, 2) == expected
    assert RgbImage.from_packed_buf(bytearray(range(6)), 1, 2) == expected


def test_excess_bytes_are_ignored() -> None:
    img = RgbImage.from_packed_buf(bytes(range(11)), 1, 3)
    assert img.to_packed_buf() == bytes(range(9))


def test_undersized_buffer_rejected() -> None:
    with pytest.raises(ValueError):
        RgbImage.from_packed_buf(bytes(8), 1, 3)


def test_negative_dimensions_rejected() -> None:
    with pytest.raises(ValueError):
        RgbImage.from_packed_buf(b"", -1, 3)


def test_empty_image() -> None:
    for img in (RgbImage(), new_empty_image()):
        assert img.height() == 0
        assert img.width() == 0
        assert img.total() == 0
        assert img.r().size == img.g().size == img.b().size == 0
        assert img.to_packed_buf() == b""


def test_construction_copies_input() -> None:
    buf = bytearray(range(1, 10))
    img = RgbImage.from_packed_buf(buf, 1, 3)
    buf[0] = 99
    assert img.r().tolist() == [1, 4, 7]

    r = np.array([1, 2], dtype=np.uint8)
    img = RgbImage(r, [3, 4], [5, 6], height=1, width=2)
    r[0] = 42
    assert img.r().tolist() == [1, 2]


def test_channels_are_read_only_and_unaliased() -> None:
    img = RgbImage.from_packed_buf(bytes(range(1, 10)), 1, 3)
    with pytest.raises(ValueError):
        img.r()[0] = 0
    assert not np.shares_memory(img.r(), img.g())
    assert not np.shares_memory(img.g(), img.b())


def test_mismatched_channel_lengths_rejected() -> None:
    with pytest.raises(ValueError):
        RgbImage([1, 2], [3], [4, 5], height=1, width=2)
    with pytest.raises(ValueError):
        RgbImage([1, 2], [3, 4], [5, 6], height=2, width=2)


def test_array_conversion() -> None:
    arr = np.arange(2 * 3 * 3, dtype=np.uint8).reshape(2, 3, 3)
    img = RgbImage.from_array(arr)
    assert (img.height(), img.width()) == (2, 3)
    assert img.to_packed_buf() == arr.tobytes()
    np.testing.assert_array_equal(img.to_array(), arr)


def test_from_array_drops_alpha() -> None:
    rgba = np.zeros((1, 2, 4), dtype=np.uint8)
    rgba[..., 3] = 255
    rgba[0, 1, :3] = [9, 8, 7]
    img = RgbImage.from_array(rgba)
    assert img.to_packed_buf() == bytes([0, 0, 0, 9, 8, 7])


def test_from_array_rejects_bad_shape() -> None:
    with pytest.raises(ValueError):
        RgbImage.from_array(np.zeros((4, 4), dtype=np.uint8))


def test_pil_conversion() -> None:
    img = RgbImage.from_packed_buf(bytes(range(1, 28)), 3, 3)
    pil = img.to_pil()
    assert pil.mode == "RGB"
    assert pil.size == (3, 3)
    assert pil.getpixel((1, 0)) == (4, 5, 6)
    assert RgbImage.from_pil(pil) == img

    rgba = Image.new("RGBA", (2, 1), (10, 20, 30, 0))
    assert RgbImage.from_pil(rgba).to_packed_buf() == bytes([10, 20, 30, 10, 20, 30])


def test_from_triples() -> None:
    img = RgbImage.from_triples([(1, 2, 3), (4, 5, 6)], 1, 2)
    assert img.to_packed_buf() == bytes(range(1, 7))
    with pytest.raises(ValueError):
        RgbImage.from_triples([(1, 2, 3)], 1, 2)


def test_equality() -> None:
    a = RgbImage.from_packed_buf(bytes(range(6)), 1, 2)
    assert a == RgbImage.from_packed_buf(bytes(range(6)), 1, 2)
    assert a != RgbImage.from_packed_buf(bytes(range(6)), 2, 1)
    assert a != RgbImage.from_packed_buf(bytes(range(1, 7)), 1, 2)


def test_images_are_unhashable() -> None:
    with pytest.raises(TypeError):
        hash(RgbImage())
