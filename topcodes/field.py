"""Pixel fields for one scan session.

A scan works on two phases of the same image:

- ``PixelField`` holds the raw RGB pixels exactly as supplied by the
  caller. It is never modified.
- ``ThresholdedField`` holds the binary classification, the candidate
  centre flags and the running intensity averages produced by the
  thresholding pass. Only the thresholder builds one, so the decoder can
  never sample un-thresholded data.

Both phases can be viewed as packed 32-bit words (``words``), which is
what the plain-text diagnostic dump prints.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

# All pixels are assumed to be opaque
OPAQUE = 0xFF000000

WHITE_BIT = 24
FLAG_BIT = 25
AVERAGE_MASK = 0xFFFFFF


@dataclass(frozen=True, eq=False)
class PixelField:
    """Raw RGB pixels of a single image.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        rgb: ``(height, width, 3)`` uint8 array, row-major.
    """

    width: int
    height: int
    rgb: np.ndarray

    @classmethod
    def from_rgb(cls, buffer, width: int, height: int) -> PixelField:
        """Build a field from an interleaved RGB8 buffer.

        Args:
            buffer: ``bytes``, ``bytearray``, ``memoryview`` or a uint8
                numpy array holding ``width * height * 3`` values.
            width: Image width in pixels.
            height: Image height in pixels.

        Raises:
            ValueError: If a dimension is not positive or the buffer
                length does not match the dimensions.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}")

        if isinstance(buffer, np.ndarray):
            data = np.ascontiguousarray(buffer, dtype=np.uint8).reshape(-1)
        else:
            data = np.frombuffer(bytes(buffer), dtype=np.uint8)

        expected = width * height * 3
        if data.size != expected:
            raise ValueError(
                f"Image buffer (size={data.size}) does not match the provided "
                f"width ({width}) and height ({height}); expected {expected} bytes"
            )

        rgb = data.reshape(height, width, 3).copy()
        rgb.flags.writeable = False
        return cls(width=width, height=height, rgb=rgb)

    @property
    def intensity(self) -> np.ndarray:
        """Per-pixel intensity ``(R + G + B) // 3`` as an int array."""
        return self.rgb.astype(np.int32).sum(axis=2) // 3

    @property
    def words(self) -> np.ndarray:
        """Packed ``0xFF000000 | R << 16 | G << 8 | B`` words, row-major."""
        rgb = self.rgb.astype(np.uint32)
        packed = OPAQUE | (rgb[..., 0] << 16) | (rgb[..., 1] << 8) | rgb[..., 2]
        return packed.reshape(-1)


@dataclass(frozen=True, eq=False)
class ThresholdedField:
    """Binary image plus candidate flags produced by the thresholder.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        bw: ``(height, width)`` uint8 array, 1 for white and 0 for black.
        flags: ``(height, width)`` bool array of candidate bullseye centres.
        avg: ``(height, width)`` int array of the running intensity sum
            recorded at each pixel.
    """

    width: int
    height: int
    bw: np.ndarray
    flags: np.ndarray
    avg: np.ndarray

    @property
    def words(self) -> np.ndarray:
        """Packed ``flag << 25 | white << 24 | avg`` words, row-major."""
        packed = (
            (self.flags.astype(np.uint32) << FLAG_BIT)
            | (self.bw.astype(np.uint32) << WHITE_BIT)
            | (self.avg.astype(np.uint32) & AVERAGE_MASK)
        )
        return packed.reshape(-1)

    def get_bw(self, x: int, y: int) -> int:
        """Binary value of pixel (x, y): 1 for white, 0 for black."""
        return int(self.bw[y, x])

    def _in_interior(self, x: int, y: int) -> bool:
        return 1 <= x < self.width - 1 and 1 <= y < self.height - 1

    def sample_3x3(self, x: int, y: int) -> int:
        """Average of the 3x3 block around (x, y), scaled to 0 (black) .. 255 (white).

        Points on or outside the image border read as black.
        """
        if not self._in_interior(x, y):
            return 0
        whites = int(self.bw[y - 1 : y + 2, x - 1 : x + 2].sum())
        return 255 * whites // 9

    def bw_3x3(self, x: int, y: int) -> int:
        """Majority vote of the 3x3 block around (x, y): 1 for white, 0 for black.

        Points on or outside the image border read as black.
        """
        if not self._in_interior(x, y):
            return 0
        whites = int(self.bw[y - 1 : y + 2, x - 1 : x + 2].sum())
        return 1 if whites >= 5 else 0

    def dist(self, x: int, y: int, dx: int, dy: int) -> int:
        """Count pixels from (x, y) along (dx, dy) until the colour changes.

        Returns -1 if the image border is reached first.
        """
        start = self.bw_3x3(x, y)
        i = x + dx
        j = y + dy
        while 1 < i < self.width - 1 and 1 < j < self.height - 1:
            if self.bw_3x3(i, j) != start:
                return abs(i - x) + abs(j - y)
            i += dx
            j += dy
        return -1
