"""
pixels.py - Pull raw pixel data out of a legacy IMA file.

The IMA header is undocumented, but every file ends with a fixed
512 x 512 block of 16-bit samples.  We read that trailing block and
swap the two bytes of every sample.

The swap is applied unconditionally.  There is no marker in the file
that says which byte order was used; swapping was validated empirically
against scanner output, so it is treated as a fixed transformation.
"""

import logging
import os
from pathlib import Path
from typing import Union

import numpy as np

from ima2dicom.errors import PixelReadError

logger = logging.getLogger(__name__)

WIDTH = 512
HEIGHT = 512
BYTES_PER_PIXEL = 2
PIXEL_BLOCK_SIZE = WIDTH * HEIGHT * BYTES_PER_PIXEL


def read_pixel_block(path: Union[str, Path], size: int = PIXEL_BLOCK_SIZE) -> bytes:
    """
    Read the last *size* bytes of *path*.

    Raises
    ------
    PixelReadError
        If the file is shorter than *size*, the read comes back short,
        or the file cannot be opened.
    """
    try:
        with open(path, "rb") as f:
            length = os.fstat(f.fileno()).st_size
            if length < size:
                raise PixelReadError(
                    str(path),
                    f"file is {length} bytes, smaller than the {size}-byte pixel block",
                )
            f.seek(length - size, os.SEEK_SET)
            data = f.read(size)
    except OSError as exc:
        raise PixelReadError(str(path), str(exc)) from exc

    if len(data) != size:
        raise PixelReadError(str(path), f"short read: got {len(data)} of {size} bytes")

    logger.debug("Read %d pixel bytes at offset %d from %s", size, length - size, path)
    return data


def swap_byte_order(data: bytes) -> bytes:
    """Swap the two bytes of every 16-bit sample.  Applying it twice is a no-op."""
    if len(data) % BYTES_PER_PIXEL:
        raise ValueError(f"buffer length {len(data)} is not a whole number of 16-bit samples")
    return np.frombuffer(data, dtype=np.uint16).byteswap().tobytes()


def extract_pixels(path: Union[str, Path]) -> bytes:
    """Read the pixel block of an IMA file and return it in little-endian order."""
    return swap_byte_order(read_pixel_block(path))
