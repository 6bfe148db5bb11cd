#!/usr/bin/env python3
"""Basic usage example for TopCodes.

Scans an image file and prints every TopCode found in it, then writes
the thresholded image next to it for inspection.

Usage:
    python examples/basic_usage.py photo.png [max_diameter]
"""

import sys
import os

# Add parent directory to path for direct script execution
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from topcodes.scanner import Scanner, load_rgb


def main(path, max_diameter=None):
    with open(path, "rb") as f:
        buffer, width, height = load_rgb(f.read())

    print("=" * 60)
    print(f"Scanning {path} ({width}x{height})")
    print("=" * 60)

    scanner = Scanner(buffer, width, height)
    if max_diameter is not None:
        scanner.set_max_code_diameter(max_diameter)

    topcodes = scanner.scan()
    print(f"  Candidates:  {scanner.candidate_count}")
    print(f"  Tested:      {scanner.tested_count}")
    print(f"  Found:       {len(topcodes)}")

    for code in topcodes:
        print(
            f"  code={code.code:5d}  x={code.x:7.1f}  y={code.y:7.1f}  "
            f"unit={code.unit:5.2f}  orientation={code.orientation:+.3f}"
        )

    out = os.path.splitext(path)[0] + "-thresholded.png"
    scanner.write_thresholding_image(out)
    print(f"  Thresholded: {out}")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    main(sys.argv[1], float(sys.argv[2]) if len(sys.argv) > 2 else None)
