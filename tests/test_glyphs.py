"""Tests for bitmap digit drawing."""
import numpy as np

from pbnart.glyphs import (
    DIGIT_BITMAPS,
    GLYPH_HEIGHT,
    GLYPH_WIDTH,
    draw_digit,
    draw_number,
    scale_bitmap,
)
from pbnart.types import BLANK_COLOR, BORDER_COLOR, LabelStyle

GRAY = (128, 128, 128, 255)


def canvas(width=30, height=20):
    image = np.empty((height, width, 4), dtype=np.uint8)
    image[:] = GRAY
    return image


def is_color(image, color):
    return np.all(image == color, axis=2)


class TestBitmaps:
    """Test the digit font."""

    def test_all_digits_present(self):
        """Ten 5x7 glyphs."""
        assert sorted(DIGIT_BITMAPS) == list(range(10))
        for bitmap in DIGIT_BITMAPS.values():
            assert bitmap.shape == (GLYPH_HEIGHT, GLYPH_WIDTH)
            assert bitmap.dtype == bool
            assert bitmap.any()

    def test_scale_keeps_every_other_pixel(self):
        """Scale 0.5 keeps rows and columns 0, 2, 4, ..."""
        scaled = scale_bitmap(DIGIT_BITMAPS[8], 0.5)
        assert scaled.shape == (4, 3)
        np.testing.assert_array_equal(scaled, DIGIT_BITMAPS[8][::2, ::2])

    def test_scale_one_unchanged(self):
        """No downscale at full size."""
        assert scale_bitmap(DIGIT_BITMAPS[3], 1.0) is DIGIT_BITMAPS[3]


class TestDrawDigit:
    """Test single-digit drawing."""

    def test_outlined_face_and_outline(self):
        """White face pixels match the glyph; outline is black."""
        image = canvas()
        draw_digit(image, 7, 10, 10)

        face = is_color(image, BLANK_COLOR)
        assert face.sum() == DIGIT_BITMAPS[7].sum()
        np.testing.assert_array_equal(face[7:14, 8:13], DIGIT_BITMAPS[7])
        assert is_color(image, BORDER_COLOR).any()

    def test_compact_is_black(self):
        """Compact digits are black only, top-left at (cx-1, cy-2)."""
        image = canvas()
        draw_digit(image, 0, 10, 10, style=LabelStyle.COMPACT)

        expected = DIGIT_BITMAPS[0][::2, ::2]
        np.testing.assert_array_equal(is_color(image, BORDER_COLOR)[8:12, 9:12], expected)
        assert is_color(image, BORDER_COLOR).sum() == expected.sum()
        assert not is_color(image, BLANK_COLOR).any()

    def test_clipped_at_corner(self):
        """Glyphs partly outside the image are clipped, not an error."""
        image = canvas(4, 4)
        draw_digit(image, 8, 0, 0)
        assert is_color(image, BLANK_COLOR).any()

    def test_fully_outside(self):
        """Nothing drawn when the glyph is off-image."""
        image = canvas(4, 4)
        draw_digit(image, 8, 100, 100)
        assert is_color(image, GRAY).all()

    def test_non_digit_ignored(self):
        """Values outside 0-9 draw nothing."""
        image = canvas()
        draw_digit(image, 12, 10, 10)
        assert is_color(image, GRAY).all()


class TestDrawNumber:
    """Test multi-digit numbers."""

    def test_two_digits_side_by_side(self):
        """12 is drawn as 1 at x-3 and 2 at x+3."""
        image = canvas()
        draw_number(image, 12, 15, 10)

        expected = canvas()
        draw_digit(expected, 1, 12, 10)
        draw_digit(expected, 2, 18, 10)
        np.testing.assert_array_equal(image, expected)

    def test_compact_two_digits_closer(self):
        """Compact digits sit at x-2 and x+2."""
        image = canvas()
        draw_number(image, 34, 15, 10, style=LabelStyle.COMPACT)

        expected = canvas()
        draw_digit(expected, 3, 13, 10, style=LabelStyle.COMPACT)
        draw_digit(expected, 4, 17, 10, style=LabelStyle.COMPACT)
        np.testing.assert_array_equal(image, expected)

    def test_single_digit(self):
        """Numbers below 10 use one glyph."""
        image = canvas()
        draw_number(image, 6, 15, 10)

        expected = canvas()
        draw_digit(expected, 6, 15, 10)
        np.testing.assert_array_equal(image, expected)
