"""Floating-point RGB image buffer with PNG output."""

from __future__ import annotations

import struct
import zlib

import numpy as np

_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
_CHANNELS = 3


def _chunk(tag: bytes, payload: bytes) -> bytes:
    crc = zlib.crc32(tag + payload) & 0xFFFFFFFF
    return struct.pack(">I", len(payload)) + tag + payload + struct.pack(">I", crc)


class Image:
    """Width x height grid of RGB colours stored as floats, row 0 on top."""

    def __init__(self, width: int, height: int) -> None:
        if width < 0 or height < 0:
            raise ValueError(f"invalid image size {width}x{height}")
        self.width = width
        self.height = height
        self.pixels = np.zeros((height, width, _CHANNELS), dtype=np.float64)

    def _check(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} image")

    def get(self, x: int, y: int) -> np.ndarray:
        """Return a copy of the colour at ``(x, y)``."""
        self._check(x, y)
        return self.pixels[y, x].copy()

    def set(self, x: int, y: int, color) -> None:
        """Store ``color`` at ``(x, y)``."""
        self._check(x, y)
        self.pixels[y, x] = color

    def fill(self, color) -> None:
        """Set every pixel to ``color``."""
        self.pixels[...] = color

    def size(self) -> int:
        """Return the number of pixels."""
        return self.width * self.height

    def _rgb_array(self) -> np.ndarray:
        scaled = np.nan_to_num(self.pixels * 255.0)
        return np.clip(scaled, 0.0, 255.0).astype(np.uint8)

    def to_rgb_bytes(self) -> bytes:
        """Return 8-bit RGB bytes, row by row; channel values are truncated."""
        return self._rgb_array().tobytes()

    def save(self, path: str) -> None:
        """Write the image as an 8-bit RGB PNG file."""
        rows = self._rgb_array().reshape(self.height, self.width * _CHANNELS)
        filtered = np.hstack([np.zeros((self.height, 1), dtype=np.uint8), rows])
        header = struct.pack(">IIBBBBB", self.width, self.height, 8, 2, 0, 0, 0)
        data = b"".join(
            (
                _PNG_SIGNATURE,
                _chunk(b"IHDR", header),
                _chunk(b"IDAT", zlib.compress(filtered.tobytes(), 9)),
                _chunk(b"IEND", b""),
            )
        )
        with open(path, "wb") as handle:
            handle.write(data)