"""Second pass over a thresholded field: pick and decode candidates.

A flagged pixel becomes a candidate only when its four direct neighbours
are flagged too. Candidates are decoded in raster order and the first
symbol found at a location wins: later candidates inside the bullseye of
an accepted symbol are skipped without decoding.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

import structlog

from .decoder import decode
from .field import ThresholdedField
from .symbol import TopCode

logger = structlog.get_logger(__name__)

# Rows this close to the top or bottom edge are never tested
EDGE_MARGIN = 2


@dataclass(frozen=True)
class Candidate:
    """A pixel that may be the center of a TopCode."""

    x: int
    y: int


@dataclass
class DetectionResult:
    """Symbols accepted by a candidate pass.

    Attributes:
        symbols: Decoded symbols in discovery order.
        tested_count: Number of candidates that were decoded.
    """

    symbols: list[TopCode] = field(default_factory=list)
    tested_count: int = 0


def iter_candidates(thresholded: ThresholdedField) -> Iterator[Candidate]:
    """Yield flagged pixels whose 4-neighbourhood is flagged, in raster order."""
    flags = thresholded.flags
    for j in range(EDGE_MARGIN, thresholded.height - EDGE_MARGIN):
        row, above, below = flags[j], flags[j - 1], flags[j + 1]
        for i in row[1:-1].nonzero()[0] + 1:
            if row[i - 1] and row[i + 1] and above[i] and below[i]:
                yield Candidate(int(i), j)


def overlaps(symbols: list[TopCode], candidate: Candidate) -> bool:
    """Return True if the candidate lies in the bullseye of any symbol."""
    return any(symbol.in_bullseye(candidate.x, candidate.y) for symbol in symbols)


def find_codes(thresholded: ThresholdedField) -> DetectionResult:
    """Decode every non-overlapping candidate in the field.

    Args:
        thresholded: Field produced by the thresholding pass.

    Returns:
        DetectionResult with the valid symbols in discovery order.
    """
    result = DetectionResult()

    for candidate in iter_candidates(thresholded):
        if overlaps(result.symbols, candidate):
            continue

        result.tested_count += 1
        symbol = decode(thresholded, candidate.x, candidate.y)
        if symbol.is_valid:
            result.symbols.append(symbol)

    logger.debug(
        "find_codes_complete",
        tested_count=result.tested_count,
        found=len(result.symbols),
    )
    return result
