"""Per-pixel palette quantization (grid mode)."""
import logging
from typing import Optional

import numpy as np

from pbnart.palette import nearest_palette_indices
from pbnart.types import BLANK_COLOR, ImageArray, RGBA

logger = logging.getLogger(__name__)


def quantize_pixels(image: ImageArray, palette: np.ndarray) -> np.ndarray:
    """
    Map every pixel to its nearest palette entry.

    Returns:
        (H, W) int64 array of palette indices
    """
    height, width = image.shape[:2]
    indices = nearest_palette_indices(image.reshape(-1, 4), palette)
    return indices.reshape(height, width)


def render_grid(palette_indices: np.ndarray, palette: np.ndarray,
                fill: Optional[RGBA] = None) -> ImageArray:
    """Paint each pixel with its palette color, or ``fill`` when given."""
    height, width = palette_indices.shape
    if fill is not None:
        image = np.empty((height, width, 4), dtype=np.uint8)
        image[:] = fill
        return image
    return np.asarray(palette, dtype=np.uint8)[palette_indices]


def blank_fill(show_colors: bool) -> Optional[RGBA]:
    """Fill color for uncolored output, None when regions keep their colors."""
    return None if show_colors else BLANK_COLOR
