"""Tests for ima2dicom/pixels.py."""

import numpy as np
import pytest

from ima2dicom.errors import PixelReadError
from ima2dicom.pixels import (
    PIXEL_BLOCK_SIZE,
    extract_pixels,
    read_pixel_block,
    swap_byte_order,
)


def _write_ima(path, block: bytes, header: bytes = b"SIEMENS-HEADER" * 100) -> None:
    """Write a fake IMA file: arbitrary header followed by the pixel block."""
    path.write_bytes(header + block)


class TestConstants:
    def test_block_is_512_square_16_bit(self):
        assert PIXEL_BLOCK_SIZE == 512 * 512 * 2


class TestSwapByteOrder:
    def test_swaps_each_sample(self):
        assert swap_byte_order(b"\x01\x02\x03\x04") == b"\x02\x01\x04\x03"

    def test_involution_on_full_block(self):
        rng = np.random.default_rng(7)
        data = rng.integers(0, 256, size=PIXEL_BLOCK_SIZE, dtype=np.uint8).tobytes()
        swapped = swap_byte_order(data)
        assert swapped != data
        assert swap_byte_order(swapped) == data

    def test_zero_buffer_unchanged(self):
        zeros = bytes(PIXEL_BLOCK_SIZE)
        assert swap_byte_order(zeros) == zeros

    def test_big_endian_sample_becomes_little_endian(self):
        big_endian = np.array([1000, -1024], dtype=">i2").tobytes()
        little = np.frombuffer(swap_byte_order(big_endian), dtype="<i2")
        assert little.tolist() == [1000, -1024]

    def test_odd_length_rejected(self):
        with pytest.raises(ValueError):
            swap_byte_order(b"\x01\x02\x03")


class TestReadPixelBlock:
    def test_reads_trailing_block(self, tmp_path):
        block = bytes(range(256)) * (PIXEL_BLOCK_SIZE // 256)
        path = tmp_path / "slice.ima"
        _write_ima(path, block)
        assert read_pixel_block(path) == block

    def test_file_exactly_block_size(self, tmp_path):
        path = tmp_path / "slice.ima"
        _write_ima(path, b"\x07" * PIXEL_BLOCK_SIZE, header=b"")
        assert len(read_pixel_block(path)) == PIXEL_BLOCK_SIZE

    def test_custom_size(self, tmp_path):
        path = tmp_path / "small.ima"
        path.write_bytes(b"HEADER" + b"\xaa\xbb\xcc\xdd")
        assert read_pixel_block(path, size=4) == b"\xaa\xbb\xcc\xdd"

    def test_short_file_fails(self, tmp_path):
        path = tmp_path / "short.ima"
        path.write_bytes(bytes(PIXEL_BLOCK_SIZE - 1))
        with pytest.raises(PixelReadError, match="smaller than"):
            read_pixel_block(path)

    def test_empty_file_fails(self, tmp_path):
        path = tmp_path / "empty.ima"
        path.write_bytes(b"")
        with pytest.raises(PixelReadError):
            read_pixel_block(path)

    def test_missing_file_fails(self, tmp_path):
        with pytest.raises(PixelReadError) as excinfo:
            read_pixel_block(tmp_path / "nope.ima")
        assert excinfo.value.path.endswith("nope.ima")


class TestExtractPixels:
    def test_swap_always_applied(self, tmp_path):
        block = b"\x12\x34" * (PIXEL_BLOCK_SIZE // 2)
        path = tmp_path / "slice.ima"
        _write_ima(path, block)
        assert extract_pixels(path) == b"\x34\x12" * (PIXEL_BLOCK_SIZE // 2)
