"""The decoded TopCode symbol.

TopCodes (Tangible Object Placement Codes) are black-and-white circular
fiducials designed to be recognized quickly by low-resolution cameras
with poor optics. The format is based on the open SpotCode format.

Each symbol encodes a 13-bit number in a single data ring on its outer
edge: a white sector is a one, a black sector a zero. Moving inwards from
the data ring are a white ring, a black ring and a white bullseye, each
one unit wide (the bullseye is one unit in radius), for a total diameter
of 8 units.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .bits import WIDTH

# Default diameter of a symbol in pixels
DEFAULT_DIAMETER = 72.0


@dataclass
class TopCode:
    """A TopCode symbol found in an image.

    Attributes:
        code: Canonical 13-bit code, or None if the symbol did not decode.
        unit: Width of a single ring in pixels.
        orientation: Angular orientation of the symbol in radians.
        x: Horizontal center of the symbol in pixels.
        y: Vertical center of the symbol in pixels.
        core: Sample buffer reused while reading sectors.
    """

    code: int | None = None
    unit: float = DEFAULT_DIAMETER / WIDTH
    orientation: float = 0.0
    x: float = 0.0
    y: float = 0.0
    core: list[int] = field(default_factory=lambda: [0] * WIDTH, repr=False, compare=False)

    @property
    def radius(self) -> float:
        """Radius of the whole symbol in pixels."""
        return self.unit * WIDTH / 2

    @property
    def is_valid(self) -> bool:
        """True if the symbol decoded to a code."""
        return self.code is not None

    def set_location(self, x: float, y: float) -> None:
        self.x = x
        self.y = y

    def in_bullseye(self, px: float, py: float) -> bool:
        """Return True if (px, py) lies inside the bullseye."""
        return (self.x - px) ** 2 + (self.y - py) ** 2 <= self.unit * self.unit

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "x": self.x,
            "y": self.y,
            "unit": self.unit,
            "orientation": self.orientation,
            "radius": self.radius,
        }
