"""Adaptive thresholding with an embedded bullseye scan.

Implements Wellner's adaptive thresholding ("Adaptive Thresholding for
the DigitalDesk", EuroPARC Technical Report EPC-93-110): rows are walked
in serpentine order and every pixel is compared with a decayed running
average of the pixels before it, blended with the average stored for the
pixel above.

While a row is being classified, a small state machine measures the run
lengths of black / white / black regions. A run whose proportions match
the rings around a TopCode bullseye flags the pixels at the middle of the
white run as a candidate centre.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass

import numpy as np
import structlog

from .field import AVERAGE_MASK, PixelField, ThresholdedField

logger = structlog.get_logger(__name__)

# Default maximum width of a ring in pixels (a 640 pixel wide symbol)
DEFAULT_MAX_UNIT = 80

# Number of pixels in the running average
AVERAGE_WINDOW = 30

# Pixels must be this close to the local average to count as white
THRESHOLD_BIAS = 0.975

# Initial value of the running sum
INITIAL_SUM = 128


class RingState(enum.Enum):
    """Where the row scan is relative to a possible bullseye."""

    SEEK_FIRST_BLACK = enum.auto()
    IN_FIRST_BLACK = enum.auto()
    IN_WHITE_RING = enum.auto()
    IN_SECOND_BLACK = enum.auto()


@dataclass
class ThresholdResult:
    """Output of a thresholding pass.

    Attributes:
        field: Thresholded field with candidate flags set.
        candidate_count: Number of flagged pixels (3 per accepted run).
    """

    field: ThresholdedField
    candidate_count: int


def max_unit_for_diameter(diameter: float) -> int:
    """Largest ring width allowed for symbols up to ``diameter`` pixels across."""
    if diameter <= 0:
        raise ValueError(f"Maximum code diameter must be positive, got {diameter}")
    return math.ceil(diameter / 8)


def is_bullseye(b1: int, w1: int, b2: int, max_unit: int) -> bool:
    """Check black / white / black run lengths against bullseye proportions."""
    return (
        2 <= b1 <= max_unit
        and 2 <= b2 <= max_unit
        and w1 <= 2 * max_unit
        and abs(b1 + b2 - w1) <= min(b1 + b2, w1)
        and abs(b1 - b2) <= min(b1, b2)
    )


def threshold(field: PixelField, max_unit: int = DEFAULT_MAX_UNIT) -> ThresholdResult:
    """Binarize a raw field and flag candidate bullseye centres.

    Args:
        field: Raw pixel field.
        max_unit: Largest ring width (pixels) accepted by the bullseye scan.

    Returns:
        ThresholdResult holding the new field and the candidate count.
    """
    width, height = field.width, field.height
    s = AVERAGE_WINDOW

    intensity = field.intensity.tolist()
    bw = [[0] * width for _ in range(height)]
    flags = [[False] * width for _ in range(height)]
    avg = [[0] * width for _ in range(height)]

    total = INITIAL_SUM
    candidates = 0

    for j in range(height):
        forward = j % 2 == 0
        columns = range(width) if forward else range(width - 1, -1, -1)
        row_in = intensity[j]
        row_bw = bw[j]
        row_avg = avg[j]
        above = avg[j - 1] if j > 0 else None

        state = RingState.SEEK_FIRST_BLACK
        b1 = w1 = b2 = 0

        for i in columns:
            a = row_in[i]
            total += a - total // s

            if above is not None:
                limit = (total + above[i]) // (2 * s)
            else:
                limit = total // s

            white = 0 if a < limit * THRESHOLD_BIAS else 1
            row_bw[i] = white
            row_avg[i] = total & AVERAGE_MASK

            if state is RingState.SEEK_FIRST_BLACK:
                if not white:
                    state = RingState.IN_FIRST_BLACK
                    b1, w1, b2 = 1, 0, 0
            elif state is RingState.IN_FIRST_BLACK:
                if white:
                    state = RingState.IN_WHITE_RING
                    w1 = 1
                else:
                    b1 += 1
            elif state is RingState.IN_WHITE_RING:
                if white:
                    w1 += 1
                else:
                    state = RingState.IN_SECOND_BLACK
                    b2 = 1
            elif not white:
                b2 += 1
            else:
                if is_bullseye(b1, w1, b2, max_unit):
                    back = 1 + b2 + w1 // 2
                    centre = i - back if forward else i + back
                    for k in range(max(centre - 1, 0), min(centre + 2, width)):
                        flags[j][k] = True
                    candidates += 3
                state = RingState.IN_WHITE_RING
                b1, w1, b2 = b2, 1, 0

    result = ThresholdedField(
        width=width,
        height=height,
        bw=np.array(bw, dtype=np.uint8),
        flags=np.array(flags, dtype=bool),
        avg=np.array(avg, dtype=np.int64),
    )

    logger.debug(
        "threshold_complete",
        width=width,
        height=height,
        max_unit=max_unit,
        candidate_count=candidates,
    )
    return ThresholdResult(field=result, candidate_count=candidates)
