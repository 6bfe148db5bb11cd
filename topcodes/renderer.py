"""Diagnostic dumps of a pixel field.

Two formats:
- Plain PPM (``P3``): one ``R G B`` line per pixel, unpacked from the
  field's packed 32-bit words. For a thresholded field the colour
  channels hold the running average, not the original image.
- PNG: the original colours for a raw field, or the binary image for a
  thresholded field, with candidate centres optionally highlighted.
"""

from __future__ import annotations

import io

import numpy as np
import structlog
from PIL import Image

from .field import PixelField, ThresholdedField

logger = structlog.get_logger(__name__)

# Colour used to mark candidate centre pixels
CANDIDATE_COLOR = (255, 0, 0)


def render_ppm(field: PixelField | ThresholdedField) -> str:
    """Render a field as a plain-text PPM document."""
    words = field.words
    r = (words >> 16) & 0xFF
    g = (words >> 8) & 0xFF
    b = words & 0xFF

    lines = [f"P3\n{field.width}\t{field.height}\n255\n"]
    lines.extend(f"{rv} {gv} {bv}\n" for rv, gv, bv in zip(r.tolist(), g.tolist(), b.tolist()))
    return "".join(lines)


def render_png(field: PixelField | ThresholdedField, show_candidates: bool = False) -> bytes:
    """Render a field as a PNG image.

    Args:
        field: Raw or thresholded field.
        show_candidates: Paint flagged candidate pixels in ``CANDIDATE_COLOR``
            (thresholded fields only).

    Returns:
        PNG image bytes.
    """
    if isinstance(field, ThresholdedField):
        gray = (field.bw * 255).astype(np.uint8)
        rgb = np.stack([gray, gray, gray], axis=2)
        if show_candidates:
            rgb[field.flags] = CANDIDATE_COLOR
    else:
        rgb = np.array(field.rgb, dtype=np.uint8)

    buf = io.BytesIO()
    Image.fromarray(rgb).save(buf, format="PNG")
    png_bytes = buf.getvalue()

    logger.debug("png_rendered", width=field.width, height=field.height, bytes=len(png_bytes))
    return png_bytes
