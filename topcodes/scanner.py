"""Scanner facade: threshold an image and return the TopCodes found in it.

The scanner does a single sweep of the image, one horizontal line at a
time, looking for bullseye patterns. Where the black and white runs meet
the ring ratio constraints, the pixel is tested as the center of a
candidate TopCode.
"""

from __future__ import annotations

import io
from pathlib import Path

import structlog
from PIL import Image

from .detector import find_codes
from .field import PixelField, ThresholdedField
from .renderer import render_png, render_ppm
from .symbol import TopCode
from .thresholder import DEFAULT_MAX_UNIT, max_unit_for_diameter, threshold

logger = structlog.get_logger(__name__)


class Scanner:
    """Scans one image for TopCodes.

    Args:
        buffer: Interleaved RGB8 pixels, ``width * height * 3`` bytes.
        width: Image width in pixels.
        height: Image height in pixels.

    Raises:
        ValueError: If the buffer does not match the dimensions.
    """

    def __init__(self, buffer, width: int, height: int) -> None:
        self.field = PixelField.from_rgb(buffer, width, height)
        self.max_unit = DEFAULT_MAX_UNIT
        self.thresholded: ThresholdedField | None = None
        self.candidate_count = 0
        self.tested_count = 0

    @property
    def width(self) -> int:
        return self.field.width

    @property
    def height(self) -> int:
        return self.field.height

    def set_max_code_diameter(self, diameter: float) -> None:
        """Set the largest symbol diameter (in pixels) the scanner will accept.

        A value close to the real symbol size reduces false positives and
        the number of candidates tested. Too low a value stops valid
        symbols from being recognized. Applies to subsequent scans.
        """
        self.max_unit = max_unit_for_diameter(diameter)

    def scan(self) -> list[TopCode]:
        """Scan the image and return all TopCodes found, in discovery order."""
        thresholded = threshold(self.field, self.max_unit)
        self.thresholded = thresholded.field
        self.candidate_count = thresholded.candidate_count

        detected = find_codes(thresholded.field)
        self.tested_count = detected.tested_count

        logger.info(
            "scan_complete",
            width=self.width,
            height=self.height,
            candidates=self.candidate_count,
            tested=self.tested_count,
            found=len(detected.symbols),
            codes=[symbol.code for symbol in detected.symbols],
        )
        return detected.symbols

    def _dump_field(self) -> PixelField | ThresholdedField:
        return self.thresholded if self.thresholded is not None else self.field

    def write_thresholding_ppm(self, path: str | Path) -> Path:
        """Write the current field as a plain-text PPM.

        Before the first scan this is the raw image, afterwards the
        thresholded field.
        """
        path = Path(path)
        path.write_text(render_ppm(self._dump_field()))
        return path

    def write_thresholding_image(self, path: str | Path) -> Path:
        """Write the current field as a PNG (binary after a scan)."""
        path = Path(path)
        path.write_bytes(render_png(self._dump_field()))
        return path


def load_rgb(image_bytes: bytes) -> tuple[bytes, int, int]:
    """Decode PNG, JPEG or WebP bytes into an RGB8 buffer.

    Returns:
        Tuple of (rgb buffer, width, height).

    Raises:
        ValueError: If the bytes are not a readable image.
    """
    try:
        img = Image.open(io.BytesIO(image_bytes)).convert("RGB")
    except Exception as e:
        raise ValueError(f"Cannot open image: {e}") from e
    return img.tobytes(), img.width, img.height


def scan_image(image_bytes: bytes, max_diameter: float | None = None) -> list[TopCode]:
    """Load an encoded image and scan it for TopCodes."""
    buffer, width, height = load_rgb(image_bytes)
    scanner = Scanner(buffer, width, height)
    if max_diameter is not None:
        scanner.set_max_code_diameter(max_diameter)
    return scanner.scan()
