"""Palette construction with k-means++ and color quantization."""
import logging
from dataclasses import replace
from typing import List, Sequence

import numpy as np

from pbnart.types import ImageArray, NEUTRAL_GRAY, Seed

logger = logging.getLogger(__name__)

SAMPLE_STEP = 10
MAX_ITERATIONS = 15

# Rows of the (colors x palette) distance matrix evaluated at once
_CHUNK_SIZE = 16384


def sample_colors(image: ImageArray, step: int = SAMPLE_STEP) -> np.ndarray:
    """
    Take every ``step``-th pixel along each axis, row by row.

    Axes shorter than ``step * step`` pixels use a proportionally smaller
    stride so small images still yield more than a single sample.

    Returns:
        (N, 4) uint8 array of sampled RGBA colors
    """
    height, width = image.shape[:2]
    step_y = step if height >= step * step else max(1, height // step)
    step_x = step if width >= step * step else max(1, width // step)
    return image[::step_y, ::step_x].reshape(-1, 4).copy()


def nearest_palette_indices(colors: np.ndarray, palette: np.ndarray) -> np.ndarray:
    """
    Index of the nearest palette entry for each color.

    Distance is the squared difference of R, G and B; alpha is ignored.
    Ties go to the lowest palette index.

    Args:
        colors: (N, C) array, C >= 3
        palette: (K, C) array, C >= 3

    Returns:
        (N,) int64 array
    """
    rgb = np.asarray(colors, dtype=np.int64)[:, :3]
    entries = np.asarray(palette, dtype=np.int64)[:, :3]
    indices = np.empty(len(rgb), dtype=np.int64)

    for start in range(0, len(rgb), _CHUNK_SIZE):
        chunk = rgb[start:start + _CHUNK_SIZE]
        diff = chunk[:, np.newaxis, :] - entries[np.newaxis, :, :]
        indices[start:start + _CHUNK_SIZE] = np.argmin((diff * diff).sum(axis=2), axis=1)

    return indices


def _squared_distances(colors: np.ndarray, color: np.ndarray) -> np.ndarray:
    diff = colors[:, :3] - color[:3]
    return (diff * diff).sum(axis=1)


def kmeans_pp(colors: np.ndarray, k: int, rng: np.random.Generator) -> np.ndarray:
    """
    Cluster colors into ``k`` centroids with k-means++ seeding.

    Seeding picks the first centroid uniformly, then each next centroid with
    probability proportional to its squared RGB distance to the nearest
    centroid chosen so far. Refinement runs at most ``MAX_ITERATIONS``
    rounds and stops once no centroid moves. A centroid that attracts no
    colors keeps its previous value.

    Args:
        colors: (N, 4) array of RGBA colors, N >= k >= 1
        k: Number of clusters
        rng: Source of randomness

    Returns:
        (k, 4) uint8 array of centroids in creation order
    """
    colors = np.asarray(colors, dtype=np.int64)
    n = len(colors)

    centroids = [colors[rng.integers(n)]]
    min_dist = _squared_distances(colors, centroids[0])

    while len(centroids) < k:
        cumulative = np.cumsum(min_dist)
        target = rng.random() * cumulative[-1]
        choice = min(int(np.searchsorted(cumulative, target, side="left")), n - 1)
        centroids.append(colors[choice])
        min_dist = np.minimum(min_dist, _squared_distances(colors, colors[choice]))

    centroids = np.array(centroids, dtype=np.int64)

    for iteration in range(MAX_ITERATIONS):
        labels = nearest_palette_indices(colors, centroids)

        sums = np.zeros_like(centroids)
        np.add.at(sums, labels, colors)
        counts = np.bincount(labels, minlength=k)

        filled = counts > 0
        updated = centroids.copy()
        updated[filled] = sums[filled] // counts[filled, np.newaxis]

        if np.array_equal(updated, centroids):
            logger.debug(f"k-means converged after {iteration + 1} iterations")
            break
        centroids = updated

    return centroids.astype(np.uint8)


def build_palette(image: ImageArray, n_colors: int, rng: np.random.Generator) -> np.ndarray:
    """
    Build a representative palette of at most ``n_colors`` entries.

    Args:
        image: (H, W, 4) uint8 pixel buffer
        n_colors: Requested palette size
        rng: Source of randomness for k-means++ seeding

    Returns:
        (K, 4) uint8 array; entry i is shown to the user as color i + 1
    """
    colors = sample_colors(image)

    if len(colors) == 0:
        logger.warning("No colors sampled, falling back to neutral gray palette")
        return np.array([NEUTRAL_GRAY], dtype=np.uint8)

    if n_colors >= len(colors):
        logger.info(f"Palette uses all {len(colors)} sampled colors")
        return colors

    palette = kmeans_pp(colors, n_colors, rng)
    logger.info(f"Built {len(palette)}-color palette from {len(colors)} samples")
    return palette


def quantize_seeds(seeds: Sequence[Seed], palette: np.ndarray) -> List[Seed]:
    """
    Replace each seed's color with its nearest palette entry.

    Coordinates and index are preserved; ``palette_index`` records the entry.
    """
    if not seeds:
        return []

    colors = np.array([seed.color for seed in seeds], dtype=np.int64)
    indices = nearest_palette_indices(colors, palette)

    return [
        replace(seed, color=tuple(int(c) for c in palette[i]), palette_index=int(i))
        for seed, i in zip(seeds, indices)
    ]
