"""TopCodes -- scanner for circular black/white fiducial markers.

Finds TopCode symbols in RGB images from noisy, unevenly lit,
low-resolution cameras and decodes each symbol's 13-bit code, center,
ring width and orientation.

Typical use:

    from topcodes import Scanner

    scanner = Scanner(rgb_bytes, width, height)
    for symbol in scanner.scan():
        print(symbol.code, symbol.x, symbol.y, symbol.orientation)

TopCodes were designed by Michael Horn; the symbol format is based on
the open SpotCode format.
"""

from .scanner import Scanner, scan_image
from .symbol import TopCode

__all__ = ["Scanner", "TopCode", "scan_image"]
