"""Tests for TopCode bit utilities."""

import math

import pytest

from topcodes.bits import ARC, CODE_MASK, SECTORS, checksum, format_bits, rotate_lowest


def rotate_left(bits, n):
    for _ in range(n):
        bits = ((bits << 1) & CODE_MASK) | (bits >> (SECTORS - 1))
    return bits


class TestChecksum:
    def test_five_bits_is_valid(self):
        assert checksum(0b111011)

    def test_three_bits_is_invalid(self):
        assert not checksum(0b10101)

    def test_exhaustive(self):
        for bits in range(1 << SECTORS):
            assert checksum(bits) == (bin(bits).count("1") == 5), bits

    def test_ignores_bits_above_13(self):
        assert checksum(0b11111 | (1 << 13))
        assert not checksum(0b1111 | (1 << 14))


class TestRotateLowest:
    @pytest.mark.parametrize("code", [31, 55, 93])
    def test_all_rotations_give_minimum(self, code):
        rotations = [rotate_left(code, n) for n in range(SECTORS)]
        expected = min(rotations)
        for bits in rotations:
            lowest, _ = rotate_lowest(bits)
            assert lowest == expected

    def test_steps_undo_rotation(self):
        bits = rotate_left(55, 4)
        lowest, steps = rotate_lowest(bits)
        assert lowest == 55
        assert rotate_left(bits, steps) == 55
        assert steps == SECTORS - 4

    def test_idempotent(self):
        lowest, _ = rotate_lowest(rotate_left(0b1011100100000, 7))
        again, steps = rotate_lowest(lowest)
        assert again == lowest
        assert steps == 0

    def test_already_minimal_has_zero_steps(self):
        assert rotate_lowest(31) == (31, 0)


class TestFormatBits:
    def test_formats_nibbles(self):
        assert format_bits(31) == "0 0000 0001 1111 = 31"

    def test_high_bit(self):
        assert format_bits(1 << 12) == "1 0000 0000 0000 = 4096"


class TestConstants:
    def test_arc_covers_circle(self):
        assert math.isclose(ARC * SECTORS, 2 * math.pi)
