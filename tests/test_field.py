"""Tests for raw and thresholded pixel fields."""

import numpy as np
import pytest

from topcodes.field import PixelField, ThresholdedField


def make_thresholded(bw):
    bw = np.array(bw, dtype=np.uint8)
    h, w = bw.shape
    return ThresholdedField(
        width=w,
        height=h,
        bw=bw,
        flags=np.zeros((h, w), dtype=bool),
        avg=np.zeros((h, w), dtype=np.int64),
    )


class TestPixelField:
    def test_from_bytes(self):
        buffer = bytes([10, 20, 30, 40, 50, 60])
        field = PixelField.from_rgb(buffer, 2, 1)
        assert field.width == 2
        assert field.height == 1
        assert field.rgb.shape == (1, 2, 3)
        assert field.rgb[0, 1].tolist() == [40, 50, 60]

    def test_from_numpy(self):
        img = np.zeros((4, 5, 3), dtype=np.uint8)
        img[2, 3] = (255, 128, 0)
        field = PixelField.from_rgb(img, 5, 4)
        assert field.rgb[2, 3].tolist() == [255, 128, 0]

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError, match="does not match"):
            PixelField.from_rgb(bytes(10), 2, 2)

    def test_non_positive_dimensions_raise(self):
        with pytest.raises(ValueError, match="positive"):
            PixelField.from_rgb(b"", 0, 5)

    def test_intensity(self):
        field = PixelField.from_rgb(bytes([255, 255, 255, 10, 20, 31]), 2, 1)
        assert field.intensity.tolist() == [[255, 20]]

    def test_words_packing(self):
        field = PixelField.from_rgb(bytes([0x12, 0x34, 0x56]), 1, 1)
        assert int(field.words[0]) == 0xFF123456

    def test_compares_by_identity(self):
        field = PixelField.from_rgb(bytes(12), 2, 2)
        other = PixelField.from_rgb(bytes(12), 2, 2)
        assert field == field
        assert field != other
        assert len({field, other}) == 2

    def test_raw_pixels_are_read_only(self):
        field = PixelField.from_rgb(bytes(12), 2, 2)
        with pytest.raises(ValueError):
            field.rgb[0, 0, 0] = 1


class TestThresholdedField:
    def test_compares_by_identity(self):
        field = make_thresholded([[1, 0], [0, 1]])
        assert field == field
        assert field != make_thresholded([[1, 0], [0, 1]])
        assert hash(field) == hash(field)

    def test_words_packing(self):
        field = ThresholdedField(
            width=2,
            height=1,
            bw=np.array([[1, 0]], dtype=np.uint8),
            flags=np.array([[True, False]]),
            avg=np.array([[7650, 0x1ABCDEF]], dtype=np.int64),
        )
        words = field.words.tolist()
        assert words[0] == (1 << 25) | (1 << 24) | 7650
        assert words[1] == 0xABCDEF

    def test_sample_3x3_scale(self):
        bw = np.ones((5, 5), dtype=np.uint8)
        bw[1, 1] = 0
        field = make_thresholded(bw)
        assert field.sample_3x3(3, 3) == 255
        assert field.sample_3x3(2, 2) == 255 * 8 // 9

    def test_samples_outside_interior_are_black(self):
        field = make_thresholded(np.ones((5, 5)))
        assert field.sample_3x3(0, 2) == 0
        assert field.sample_3x3(2, 4) == 0
        assert field.sample_3x3(-3, 2) == 0
        assert field.bw_3x3(4, 2) == 0

    def test_bw_3x3_majority(self):
        bw = np.ones((5, 5), dtype=np.uint8)
        bw[1:3, 1:3] = 0  # 4 black in the block around (2, 2)
        field = make_thresholded(bw)
        assert field.bw_3x3(2, 2) == 1
        bw[3, 1] = 0
        field = make_thresholded(bw)
        assert field.bw_3x3(2, 2) == 0

    def test_dist_to_colour_change(self):
        bw = np.ones((9, 20), dtype=np.uint8)
        bw[:, 12:] = 0
        field = make_thresholded(bw)
        # Majority flips once the block is centred on column 12
        assert field.dist(5, 4, 1, 0) == 7
        assert field.dist(15, 4, -1, 0) == 4

    def test_dist_reaches_border(self):
        field = make_thresholded(np.ones((9, 20)))
        assert field.dist(5, 4, 0, 1) == -1
