"""Edge detection used to bias seed placement toward detail."""
import numpy as np
from scipy import ndimage

from pbnart.types import ImageArray

# Perceptual luminance weights for R, G, B
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])

MAX_CHANNEL_VALUE = 255.0


def luminance(image: ImageArray) -> np.ndarray:
    """Weighted RGB sum per pixel; alpha is ignored."""
    return image[..., :3].astype(np.float64) @ LUMA_WEIGHTS


def compute_edge_map(image: ImageArray) -> np.ndarray:
    """
    Compute a Sobel gradient-magnitude weight field.

    Args:
        image: (H, W, 4) uint8 pixel buffer

    Returns:
        (H, W) float64 array of magnitudes divided by the channel range.
        The outermost 1-pixel ring is left at 0.
    """
    height, width = image.shape[:2]
    edge_map = np.zeros((height, width), dtype=np.float64)

    if height < 3 or width < 3:
        return edge_map

    gray = luminance(image)
    gx = ndimage.sobel(gray, axis=1)
    gy = ndimage.sobel(gray, axis=0)

    magnitude = np.hypot(gx, gy) / MAX_CHANNEL_VALUE
    edge_map[1:-1, 1:-1] = magnitude[1:-1, 1:-1]

    return edge_map
