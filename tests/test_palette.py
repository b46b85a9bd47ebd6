"""Tests for palette construction and quantization."""
import numpy as np

from pbnart.palette import (
    build_palette,
    kmeans_pp,
    nearest_palette_indices,
    quantize_seeds,
    sample_colors,
)
from pbnart.types import NEUTRAL_GRAY, Seed

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


def palette_set(palette):
    return {tuple(int(c) for c in row) for row in palette}


class TestSampleColors:
    """Test strided color sampling."""

    def test_stride_ten_on_large_image(self, solid):
        """Every 10th pixel on each axis of a 200x150 image."""
        colors = sample_colors(solid(200, 150))
        assert colors.shape == (20 * 15, 4)

    def test_row_major_order(self):
        """Samples are taken row by row."""
        image = np.zeros((200, 200, 4), dtype=np.uint8)
        image[0, 10] = (1, 2, 3, 4)
        image[10, 0] = (5, 6, 7, 8)

        colors = sample_colors(image)
        assert tuple(colors[1]) == (1, 2, 3, 4)
        assert tuple(colors[20]) == (5, 6, 7, 8)

    def test_small_image_uses_smaller_stride(self, split):
        """A 10x2 image samples every pixel."""
        colors = sample_colors(split(10, 2))
        assert colors.shape == (20, 4)

    def test_empty_image(self):
        """Zero-area input yields no samples."""
        assert sample_colors(np.zeros((0, 8, 4), dtype=np.uint8)).shape == (0, 4)


class TestKMeansPP:
    """Test k-means++ clustering."""

    def test_identical_colors(self, rng):
        """Copies of one color give centroids all equal to it."""
        colors = np.tile(np.array([[10, 20, 30, 255]], dtype=np.uint8), (400, 1))
        centroids = kmeans_pp(colors, 4, rng)

        assert centroids.shape == (4, 4)
        assert centroids.dtype == np.uint8
        assert np.all(centroids == [10, 20, 30, 255])

    def test_two_clusters_separated(self, rng):
        """Two well separated groups each get a centroid."""
        colors = np.array([RED] * 30 + [BLUE] * 30, dtype=np.uint8)
        centroids = kmeans_pp(colors, 2, rng)
        assert palette_set(centroids) == {RED, BLUE}

    def test_integer_mean(self, rng):
        """Cluster centroids are the floor mean of their members."""
        colors = np.array([[0, 0, 0, 255], [1, 1, 1, 255], [250, 250, 250, 255]], dtype=np.uint8)
        centroids = kmeans_pp(colors, 2, rng)
        assert palette_set(centroids) == {(0, 0, 0, 255), (250, 250, 250, 255)}


class TestBuildPalette:
    """Test palette building."""

    def test_gray_fallback(self, rng):
        """No samples gives one neutral gray entry."""
        palette = build_palette(np.zeros((0, 5, 4), dtype=np.uint8), 8, rng)
        assert palette.tolist() == [list(NEUTRAL_GRAY)]

    def test_small_sample_returned_as_is(self, red_image, rng):
        """K at least the sample count returns the samples."""
        palette = build_palette(red_image, 20, rng)
        assert palette.shape == (16, 4)
        assert np.all(palette == RED)

    def test_palette_size_bounded(self, photo_like_image, rng):
        """At most K entries."""
        palette = build_palette(photo_like_image, 5, rng)
        assert palette.shape == (5, 4)

    def test_red_blue(self, red_blue_image, rng):
        """Half red, half blue at K=2 gives red and blue."""
        palette = build_palette(red_blue_image, 2, rng)
        assert palette_set(palette) == {RED, BLUE}


class TestQuantize:
    """Test nearest-palette mapping."""

    def test_first_minimum_wins(self):
        """Equidistant entries resolve to the lower index."""
        palette = np.array([[0, 0, 0, 255], [10, 10, 10, 255]], dtype=np.uint8)
        colors = np.array([[5, 5, 5, 255]], dtype=np.uint8)
        assert nearest_palette_indices(colors, palette).tolist() == [0]

    def test_alpha_ignored(self):
        """Alpha does not affect distance."""
        palette = np.array([[0, 0, 0, 0], [200, 0, 0, 255]], dtype=np.uint8)
        colors = np.array([[10, 0, 0, 255]], dtype=np.uint8)
        assert nearest_palette_indices(colors, palette).tolist() == [0]

    def test_quantize_seeds(self):
        """Seeds take the palette color and record the entry."""
        palette = np.array([RED, BLUE], dtype=np.uint8)
        seeds = [
            Seed(x=1, y=2, color=(240, 10, 10, 255), index=0),
            Seed(x=3, y=4, color=(10, 10, 200, 255), index=1),
        ]

        quantized = quantize_seeds(seeds, palette)

        assert [s.color for s in quantized] == [RED, BLUE]
        assert [s.palette_index for s in quantized] == [0, 1]
        assert [(s.x, s.y, s.index) for s in quantized] == [(1, 2, 0), (3, 4, 1)]
        # Originals untouched
        assert seeds[0].palette_index is None

    def test_idempotent(self, photo_like_image, rng):
        """Quantizing twice changes nothing."""
        palette = build_palette(photo_like_image, 6, rng)
        seeds = [
            Seed(x=x, y=0, color=tuple(int(c) for c in photo_like_image[0, x]), index=x)
            for x in range(photo_like_image.shape[1])
        ]
        once = quantize_seeds(seeds, palette)
        assert quantize_seeds(once, palette) == once

    def test_empty_seeds(self):
        """No seeds, no work."""
        assert quantize_seeds([], np.array([RED], dtype=np.uint8)) == []
