"""Decoder for a single TopCode candidate.

Decodes a symbol from any point inside its bullseye by:
1. Refining the center from the distances to the bullseye edge
2. Measuring the ring width (unit) along the four cardinal directions
3. For each trial unit (+-5%, +-10%) and sector offset (tenths of a sector):
   a. Sample 8 points across the symbol along each of the 13 sector rays
   b. Check the white / black ring structure and score the contrast
   c. Read one bit per sector from the data ring and validate the checksum
4. Re-read with the best scoring trial and rotate the code to its
   canonical (smallest) form, which also fixes the orientation

A failed decode is not an error: the symbol comes back with ``code`` set
to None and the caller drops it.
"""

from __future__ import annotations

import math

import structlog

from .bits import ARC, SECTORS, WIDTH, checksum, format_bits, rotate_lowest
from .field import ThresholdedField
from .symbol import TopCode

logger = structlog.get_logger(__name__)

# Furthest distance searched for the edge of the first black ring
MAX_PIXELS = 100

# Trial unit adjustments, in steps of 5% of the measured unit
UNIT_STEPS = range(-2, 3)
UNIT_STEP = 0.05

# Trial rotations, in tenths of a sector
ARC_STEPS = range(10)
ARC_STEP = 0.1

# Rotation of the first sector boundary relative to the reported orientation
ORIENTATION_OFFSET = 0.65


def _round(value: float) -> int:
    """Round half away from zero."""
    return int(math.floor(value + 0.5)) if value >= 0 else -int(math.floor(-value + 0.5))


def read_unit(field: ThresholdedField, symbol: TopCode) -> float:
    """Measure the ring width of a symbol centred at (symbol.x, symbol.y).

    Counts the pixels from the center to the outer edge of the first black
    ring (two units) to the north, south, east and west.

    Returns:
        The unit in pixels, or -1.0 if an edge was not found within
        ``MAX_PIXELS`` or the image border, or if the horizontal and
        vertical readings disagree by more than one unit.
    """
    sx = _round(symbol.x)
    sy = _round(symbol.y)

    # (dx, dy) -> [still in the bullseye, distance to the end of the black ring]
    probes = {
        (-1, 0): [True, 0],
        (1, 0): [True, 0],
        (0, -1): [True, 0],
        (0, 1): [True, 0],
    }

    for i in range(1, MAX_PIXELS + 1):
        if sx < 1 + i or sx + i >= field.width - 1 or sy < 1 + i or sy + i >= field.height - 1:
            return -1.0

        for (dx, dy), probe in probes.items():
            if probe[1] > 0:
                continue
            sample = field.bw_3x3(sx + dx * i, sy + dy * i)
            if probe[0] and sample == 0:
                probe[0] = False
            elif not probe[0] and sample == 1:
                probe[1] = i

        if all(probe[1] > 0 for probe in probes.values()):
            left = probes[(-1, 0)][1]
            right = probes[(1, 0)][1]
            up = probes[(0, -1)][1]
            down = probes[(0, 1)][1]
            unit = (left + right + up + down) / 8
            if abs(left + right - up - down) > unit:
                return -1.0
            return unit

    return -1.0


def read_code(field: ThresholdedField, symbol: TopCode, unit: float, arc_adjustment: float) -> int:
    """Read the 13 data sectors with a trial unit and rotation.

    Sets ``symbol.code`` to the raw (unrotated) bits on success and clears
    it otherwise.

    Returns:
        Confidence of the reading, or 0 if the ring structure or the
        checksum did not match.
    """
    core = symbol.core
    confidence = 0
    bits = 0

    for sector in range(SECTORS - 1, -1, -1):
        angle = ARC * sector + arc_adjustment
        dx = math.cos(angle)
        dy = math.sin(angle)

        # Take 8 samples across the diameter of the symbol
        for i in range(WIDTH):
            dist = (i - 3.5) * unit
            sx = _round(symbol.x + dx * dist)
            sy = _round(symbol.y + dy * dist)
            core[i] = field.sample_3x3(sx, sy)

        # White rings
        if core[1] <= 128 or core[3] <= 128 or core[4] <= 128 or core[6] <= 128:
            symbol.code = None
            return 0

        # Black ring
        if core[2] > 128 or core[5] > 128:
            symbol.code = None
            return 0

        confidence += core[1] + core[3] + core[4] + core[6]
        confidence += (255 - core[2]) + (255 - core[5])

        # Data ring
        confidence += abs(core[7] * 2 - 255)

        # Opposite data ring
        confidence += 255 - (core[0] * 2 - 255)

        bits = (bits << 1) | (1 if core[7] > 128 else 0)

    if checksum(bits):
        symbol.code = bits
        return confidence

    symbol.code = None
    return 0


def decode(field: ThresholdedField, cx: int, cy: int, symbol: TopCode | None = None) -> TopCode:
    """Decode a symbol given any point (cx, cy) inside its bullseye.

    Args:
        field: Thresholded field to sample.
        cx: Seed column.
        cy: Seed row.
        symbol: Symbol to update in place. A new one is created if omitted.

    Returns:
        The symbol, with ``code`` set to the canonical code or None.
    """
    if symbol is None:
        symbol = TopCode()

    up = field.dist(cx, cy, 0, -1)
    down = field.dist(cx, cy, 0, 1)
    left = field.dist(cx, cy, -1, 0)
    right = field.dist(cx, cy, 1, 0)

    symbol.set_location(cx + (right - left) / 6, cy + (down - up) / 6)
    symbol.code = None
    symbol.unit = read_unit(field, symbol)

    if symbol.unit < 0:
        logger.debug("decode_unit_rejected", cx=cx, cy=cy)
        return symbol

    max_c = 0
    max_a = 0.0
    max_u = 0.0

    # Keep the unit and rotation adjustment with the highest confidence
    for u in UNIT_STEPS:
        for a in ARC_STEPS:
            arc_adjustment = a * ARC * ARC_STEP
            unit = symbol.unit + symbol.unit * UNIT_STEP * u
            c = read_code(field, symbol, unit, arc_adjustment)
            if c > max_c:
                max_c = c
                max_a = arc_adjustment
                max_u = unit

    if max_c == 0:
        symbol.code = None
        logger.debug("decode_no_confident_trial", cx=cx, cy=cy, unit=round(symbol.unit, 2))
        return symbol

    symbol.unit = max_u
    read_code(field, symbol, symbol.unit, max_a)
    if symbol.code is None:
        return symbol

    code, steps = rotate_lowest(symbol.code)
    symbol.code = code
    symbol.orientation = -steps * ARC + (max_a - ARC * ORIENTATION_OFFSET)

    logger.debug(
        "decode_success",
        code=code,
        bits=format_bits(code),
        confidence=max_c,
        x=round(symbol.x, 2),
        y=round(symbol.y, 2),
        unit=round(symbol.unit, 3),
    )
    return symbol
