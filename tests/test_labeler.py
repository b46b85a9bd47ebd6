"""Tests for region discovery and number stamping."""
import numpy as np

from pbnart.glyphs import DIGIT_BITMAPS
from pbnart.labeler import find_regions, label_regions
from pbnart.types import BLANK_COLOR, BORDER_COLOR, LabelStyle

GRAY = (128, 128, 128, 255)


def gray_image(width, height):
    image = np.empty((height, width, 4), dtype=np.uint8)
    image[:] = GRAY
    return image


class TestFindRegions:
    """Test connected-component discovery."""

    def test_min_area_threshold(self):
        """A 150-pixel region is kept, a 99-pixel one is dropped."""
        labels = np.zeros((3, 83), dtype=np.int64)
        labels[:, 50:] = 1  # 3 x 33 = 99 pixels

        regions = find_regions(labels)

        assert len(regions) == 1
        region = regions[0]
        assert region.label == 0
        assert region.area == 150
        assert region.color_number == 1
        # Floor mean of x in 0..49 and y in 0..2
        assert region.centroid == (24, 1)

    def test_exactly_min_area_kept(self):
        """The threshold is inclusive."""
        assert len(find_regions(np.zeros((10, 10), dtype=np.int64))) == 1

    def test_four_connectivity(self):
        """Diagonal neighbors are separate regions."""
        labels = np.array([[0, 1], [1, 0]])
        regions = find_regions(labels, min_area=1)
        assert len(regions) == 4

    def test_same_label_split_regions(self):
        """One label in two places gives two regions."""
        labels = np.array([[0, 1, 0]])
        assert [r.label for r in find_regions(labels, min_area=1)] == [0, 1, 0]

    def test_row_major_discovery_order(self):
        """Regions are ordered by their first pixel."""
        labels = np.array([
            [5, 5, 2],
            [7, 7, 2],
        ])
        assert [r.label for r in find_regions(labels, min_area=1)] == [5, 2, 7]

    def test_color_numbers_lookup(self):
        """Numbers come from the lookup when given."""
        labels = np.full((10, 10), 2, dtype=np.int64)
        numbers = np.array([9, 8, 4])
        assert find_regions(labels, color_numbers=numbers)[0].color_number == 4

    def test_empty_map(self):
        """Zero area means no regions."""
        assert find_regions(np.zeros((0, 4), dtype=np.int64)) == []


class TestLabelRegions:
    """Test numeral stamping."""

    def test_stamp_at_centroid(self):
        """A 150-pixel region gets its number centered on the centroid."""
        image = gray_image(10, 15)
        labels = np.full((15, 10), 4, dtype=np.int64)

        result = label_regions(image, labels)

        # Number 5 centered at (4, 7): glyph top-left (2, 4)
        glyph = DIGIT_BITMAPS[5]
        face = result[4:11, 2:7]
        assert np.all(face[glyph] == BLANK_COLOR)
        # Left of the glyph's first column lies on the outline
        assert tuple(result[4, 1]) == BORDER_COLOR
        # Far corner untouched
        assert tuple(result[14, 9]) == GRAY

    def test_small_region_not_stamped(self):
        """A 99-pixel region is left as is."""
        image = gray_image(11, 9)
        result = label_regions(image, np.zeros((9, 11), dtype=np.int64))
        np.testing.assert_array_equal(result, image)

    def test_input_not_modified(self):
        """Stamping works on a copy."""
        image = gray_image(12, 12)
        original = image.copy()
        label_regions(image, np.zeros((12, 12), dtype=np.int64))
        np.testing.assert_array_equal(image, original)

    def test_compact_style_is_black_only(self):
        """Compact numerals are plain black with no white face."""
        image = gray_image(12, 12)
        result = label_regions(image, np.zeros((12, 12), dtype=np.int64), style=LabelStyle.COMPACT)

        changed = np.any(result != image, axis=2)
        assert changed.any()
        assert np.all(result[changed] == BORDER_COLOR)
        assert not np.any(np.all(result == BLANK_COLOR, axis=2))
