"""Connected-region discovery and color-number stamping."""
import logging
from typing import List, Optional

import numpy as np
from skimage import measure

from pbnart.glyphs import COMPACT_SCALE, draw_number
from pbnart.types import ImageArray, LabelStyle, Region

logger = logging.getLogger(__name__)

MIN_REGION_AREA = 100


def find_regions(
    label_map: np.ndarray,
    min_area: int = MIN_REGION_AREA,
    color_numbers: Optional[np.ndarray] = None,
) -> List[Region]:
    """
    Find 4-connected components of equal labels.

    Args:
        label_map: (H, W) non-negative integer label per pixel
        min_area: Components with fewer pixels are dropped
        color_numbers: Lookup from label value to the 1-based number shown
            on the region; defaults to ``label + 1``

    Returns:
        Regions in row-major order of each component's first pixel, with
        the integer (floor) mean of member coordinates as centroid
    """
    label_map = np.asarray(label_map, dtype=np.int64)
    if label_map.size == 0:
        return []

    # Shift by one so label 0 is not treated as background
    components = measure.label(label_map + 1, connectivity=1, background=0)
    # Component ids follow raster order of first appearance
    flat = components.ravel()
    count = int(flat.max())

    ys, xs = np.indices(label_map.shape)
    areas = np.bincount(flat, minlength=count + 1)
    sum_x = np.bincount(flat, weights=xs.ravel(), minlength=count + 1)
    sum_y = np.bincount(flat, weights=ys.ravel(), minlength=count + 1)

    # Every pixel is foreground, so ids run 1..count with no gaps
    _, first_pixel = np.unique(flat, return_index=True)
    labels = label_map.ravel()

    regions = []
    for component in range(1, count + 1):
        area = int(areas[component])
        if area < min_area:
            continue
        label = int(labels[first_pixel[component - 1]])
        number = label + 1 if color_numbers is None else int(color_numbers[label])
        # Coordinates are exact integers, so the sums are exact too
        cx = int(sum_x[component]) // area
        cy = int(sum_y[component]) // area
        regions.append(Region(label=label, color_number=number, centroid=(cx, cy), area=area))

    logger.debug(f"{count} components, {len(regions)} with at least {min_area} pixels")
    return regions


def label_regions(
    image: ImageArray,
    label_map: np.ndarray,
    color_numbers: Optional[np.ndarray] = None,
    style: LabelStyle = LabelStyle.OUTLINED,
    min_area: int = MIN_REGION_AREA,
    scale: float = COMPACT_SCALE,
) -> ImageArray:
    """
    Stamp each large enough region with its color number at its centroid.

    Args:
        image: (H, W, 4) uint8 raster (not modified)
        label_map: (H, W) region identity per pixel
        color_numbers: Lookup from label to 1-based color number
        style: Glyph style
        min_area: Smallest region that gets a number
        scale: Downscale for compact glyphs

    Returns:
        Labeled copy of ``image``
    """
    result = image.copy()
    regions = find_regions(label_map, min_area, color_numbers)

    for region in regions:
        cx, cy = region.centroid
        draw_number(result, region.color_number, cx, cy, style, scale)

    logger.info(f"Labeled {len(regions)} regions")
    return result
