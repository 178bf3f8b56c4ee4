"""Pixel-format correction for decoder output.

Slide decoders write pixels as packed 32-bit ARGB words in host memory,
so the byte layout of a buffer depends on the machine's byte order. The
conversion here is a pure function of the buffer and an explicit byte
order; detect it once with ``native_byteorder()`` and pass it along.
"""

from __future__ import annotations

import sys
from typing import Literal

import numpy as np
from numpy.typing import NDArray

ByteOrder = Literal["little", "big"]

# Byte positions of R, G, B, A inside one packed ARGB word in memory
_RGBA_BYTE_ORDER: dict[str, tuple[int, int, int, int]] = {
    "little": (2, 1, 0, 3),  # memory: B G R A
    "big": (1, 2, 3, 0),  # memory: A R G B
}


def native_byteorder() -> ByteOrder:
    """Return the byte order of the running interpreter's host."""
    return "little" if sys.byteorder == "little" else "big"


def argb_to_rgba(
    buffer: bytes | bytearray | memoryview | NDArray[np.uint8],
    width: int,
    height: int,
    byteorder: ByteOrder,
) -> NDArray[np.uint8]:
    """Reorder packed ARGB pixel words into an RGBA byte array.

    Args:
        buffer: Raw pixel memory, 4 bytes per pixel, row-major.
        width: Image width in pixels.
        height: Image height in pixels.
        byteorder: Byte order the words were written in.

    Returns:
        Array of shape (height, width, 4) with channels R, G, B, A.

    Raises:
        ValueError: If the buffer length does not match width * height * 4,
            or the byte order is unknown.
    """
    try:
        order = _RGBA_BYTE_ORDER[byteorder]
    except KeyError:
        raise ValueError(f"Unknown byte order {byteorder!r}") from None

    raw = np.frombuffer(buffer, dtype=np.uint8)
    expected = width * height * 4
    if raw.size != expected:
        raise ValueError(
            f"Buffer holds {raw.size} bytes, expected {expected} "
            f"for {width}x{height} ARGB pixels"
        )
    return raw.reshape(height, width, 4)[:, :, order].copy()


def pack_argb(rgba: NDArray[np.uint8]) -> NDArray[np.uint32]:
    """Pack an (H, W, 4) RGBA array into ARGB words, one per pixel."""
    channels = rgba.astype(np.uint32)
    return (
        (channels[:, :, 3] << 24)
        | (channels[:, :, 0] << 16)
        | (channels[:, :, 1] << 8)
        | channels[:, :, 2]
    )
