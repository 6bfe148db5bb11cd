"""Bit utilities for the TopCode symbol format.

A TopCode carries 13 bits in its outer data ring, one bit per sector.
A pattern is only valid when exactly 5 of its 13 bits are set, and it
is reported in canonical form: the smallest of its 13 cyclic rotations.
"""

from __future__ import annotations

import math

# Number of sectors in the data ring
SECTORS = 13

# Width of a symbol in units (ring widths)
WIDTH = 8

# Span of a data sector in radians
ARC = 2 * math.pi / SECTORS

# Fixed number of set bits in every valid code
CHECKSUM_BITS = 5

CODE_MASK = (1 << SECTORS) - 1


def checksum(bits: int) -> bool:
    """Return True if exactly 5 of the low 13 bits are set."""
    return bin(bits & CODE_MASK).count("1") == CHECKSUM_BITS


def rotate_lowest(bits: int) -> tuple[int, int]:
    """Find the smallest cyclic rotation of a 13-bit pattern.

    Args:
        bits: Code as read from the data ring (low 13 bits used).

    Returns:
        Tuple of (smallest rotation, number of left rotations that
        produced it). The count is 0 when the input is already minimal.
    """
    lowest = bits
    steps = 0
    for i in range(1, SECTORS + 1):
        bits = ((bits << 1) & CODE_MASK) | (bits >> (SECTORS - 1))
        if bits < lowest:
            lowest = bits
            steps = i
    return lowest, steps


def format_bits(bits: int) -> str:
    """Render the low 13 bits in nibble groups, e.g. ``0 0000 0001 1111 = 31``."""
    out = []
    for i in range(SECTORS - 1, -1, -1):
        out.append("1" if (bits >> i) & 1 else "0")
        if i % 4 == 0:
            out.append(" ")
    return f"{''.join(out)}= {bits}"
