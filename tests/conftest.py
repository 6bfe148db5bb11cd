"""Shared fixtures: synthetic TopCode images."""

import io
import math

import numpy as np
import pytest
from PIL import Image

from topcodes.bits import ARC, SECTORS

WHITE = 255
BLACK = 0

# (code, cx, cy, unit) of the markers in the three-symbol fixture, top to bottom
FIXTURE_MARKERS = [
    (55, 90, 60, 5),
    (31, 220, 150, 5),
    (93, 120, 240, 5),
]
FIXTURE_SIZE = (320, 300)


def blank(width, height, level=WHITE):
    return np.full((height, width, 3), level, dtype=np.uint8)


def draw_topcode(img, cx, cy, unit, code, rotation=0.0, white=WHITE, black=BLACK):
    """Paint a TopCode with its center on pixel (cx, cy).

    Sector ``s`` of the data ring spans angles ``[s*ARC, (s+1)*ARC)`` after
    ``rotation`` and is white when bit ``s`` of the code is set.
    """
    h, w = img.shape[:2]
    ys, xs = np.mgrid[0:h, 0:w]
    dx = xs - cx
    dy = ys - cy
    d = np.hypot(dx, dy)

    angle = np.mod(np.arctan2(dy, dx) - rotation, 2 * math.pi)
    sector = np.minimum((angle / ARC).astype(int), SECTORS - 1)
    data_white = ((code >> sector) & 1).astype(bool)

    img[d < 4 * unit] = white
    img[(d >= 3 * unit) & (d < 4 * unit) & ~data_white] = black
    img[(d >= unit) & (d < 2 * unit)] = black
    return img


def to_png(img):
    buf = io.BytesIO()
    Image.fromarray(img).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def painter():
    return draw_topcode


@pytest.fixture
def canvas():
    return blank


@pytest.fixture(scope="session")
def fixture_image():
    """The three-marker fixture as an (height, width, 3) array."""
    width, height = FIXTURE_SIZE
    img = blank(width, height)
    for code, cx, cy, unit in FIXTURE_MARKERS:
        draw_topcode(img, cx, cy, unit, code)
    return img


@pytest.fixture(scope="session")
def fixture_png(fixture_image):
    return to_png(fixture_image)


@pytest.fixture
def png_encoder():
    return to_png


@pytest.fixture(scope="session")
def fixture_markers():
    return FIXTURE_MARKERS
