"""Parallel nearest-seed rasterization."""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional, Sequence, Tuple

import numpy as np

from pbnart.kdtree import KDTree
from pbnart.progress import ProgressReporter
from pbnart.types import ImageArray, ParameterError, RGBA, Seed

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 8


def row_bands(height: int, workers: int) -> List[Tuple[int, int]]:
    """
    Split ``height`` rows into ``workers`` contiguous [start, end) bands.

    Each band holds ``ceil(height / workers)`` rows; trailing bands may be
    shorter or empty when rows run out.
    """
    rows_per_worker = -(-height // workers)
    bands = []
    for w in range(workers):
        start = min(w * rows_per_worker, height)
        end = min((w + 1) * rows_per_worker, height)
        bands.append((start, end))
    return bands


def _rasterize_band(
    start: int,
    end: int,
    width: int,
    tree: KDTree,
    colors: np.ndarray,
    image: ImageArray,
    seed_map: np.ndarray,
    fill: Optional[RGBA],
) -> int:
    """Fill rows [start, end) of the shared output arrays."""
    if start >= end:
        return 0

    ys, xs = np.mgrid[start:end, 0:width]
    nearest = tree.nearest_many(xs, ys)
    seed_map[start:end] = nearest
    if fill is None:
        image[start:end] = colors[nearest]
    else:
        image[start:end] = fill
    return end - start


def rasterize(
    shape: Tuple[int, int],
    seeds: Sequence[Seed],
    tree: KDTree,
    workers: int = DEFAULT_WORKERS,
    fill: Optional[RGBA] = None,
    progress: Optional[ProgressReporter] = None,
) -> Tuple[ImageArray, np.ndarray]:
    """
    Color every pixel with the color of its nearest seed.

    Rows are partitioned into one contiguous band per worker. Workers share
    the read-only tree and seed colors and write only their own rows, so the
    output needs no locking. Returns after all workers have finished.

    Args:
        shape: (height, width) of the output
        seeds: Seeds whose ``index`` equals their position in the sequence
        tree: Spatial index built over ``seeds``
        workers: Number of parallel workers
        fill: If given, paint every pixel this color instead of the seed
            color (the seed-index map is still computed)
        progress: Receives one update per finished worker

    Returns:
        Tuple of (image, seed_map):
        - image: (H, W, 4) uint8 raster
        - seed_map: (H, W) int64 nearest-seed index per pixel

    Raises:
        ParameterError: If workers < 1
    """
    if workers < 1:
        raise ParameterError(f"workers must be at least 1, got {workers}")

    height, width = shape
    image = np.zeros((height, width, 4), dtype=np.uint8)
    seed_map = np.zeros((height, width), dtype=np.int64)

    if seeds:
        colors = np.array([seed.color for seed in seeds], dtype=np.uint8)
    else:
        colors = np.zeros((1, 4), dtype=np.uint8)

    bands = row_bands(height, workers)
    completed = 0

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [
            executor.submit(
                _rasterize_band, start, end, width, tree, colors, image, seed_map, fill
            )
            for start, end in bands
        ]

        for future in as_completed(futures):
            # Re-raises any worker exception
            future.result()
            completed += 1
            if progress is not None:
                progress.worker_done(completed, len(bands))

    logger.debug(f"Rasterized {width}x{height} with {len(seeds)} seeds on {workers} workers")
    return image, seed_map
