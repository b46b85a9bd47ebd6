"""Raster image ingestion, resizing and encoding."""
import base64
import io
import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image
from PIL import ImageOps

from pbnart.types import ImageArray, ImageLoadError, ParameterError

logger = logging.getLogger(__name__)


def load_image(path: Union[str, Path]) -> ImageArray:
    """
    Load a raster image file as an RGBA pixel buffer.

    Args:
        path: Path to image file (PNG, JPEG, GIF, ...)

    Returns:
        (H, W, 4) uint8 array

    Raises:
        FileNotFoundError: If file doesn't exist
        ImageLoadError: If file cannot be decoded
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    if not path.is_file():
        raise ImageLoadError(f"Path is not a file: {path}")

    try:
        with Image.open(path) as img:
            fmt = img.format
            # Apply EXIF orientation transformation to handle rotation
            img = ImageOps.exif_transpose(img)
            if img.mode != "RGBA":
                img = img.convert("RGBA")
            pixels = np.array(img, dtype=np.uint8)
    except (IOError, OSError) as e:
        raise ImageLoadError(f"Failed to load image {path}: {e}") from e

    logger.info(f"Image decoded: format={fmt}, size={pixels.shape[1]}x{pixels.shape[0]}")
    return pixels


def ingest_from_array(image: np.ndarray) -> ImageArray:
    """
    Normalize an in-memory image to an RGBA uint8 pixel buffer.

    Args:
        image: Grayscale (H, W), RGB (H, W, 3) or RGBA (H, W, 4) array,
            uint8, other integers in 0..255, or float in [0, 1]

    Returns:
        (H, W, 4) uint8 array (a copy; the input is never modified)

    Raises:
        ParameterError: If the array shape is unsupported or has zero area
    """
    image = np.asarray(image)

    if image.ndim == 2:
        # Grayscale - convert to RGB
        image = np.stack([image] * 3, axis=-1)

    if image.ndim != 3:
        raise ParameterError(f"Expected 2D or 3D image array, got {image.ndim}D")

    if image.shape[0] == 0 or image.shape[1] == 0:
        raise ParameterError(
            f"Image must have non-zero area, got {image.shape[1]}x{image.shape[0]}"
        )

    channels = image.shape[2]
    if channels not in (3, 4):
        raise ParameterError(f"Expected 3 or 4 channels, got {channels}")

    if image.dtype != np.uint8:
        is_float = np.issubdtype(image.dtype, np.floating)
        image = image.astype(np.float64)
        # Only floats in [0, 1] are rescaled; integers are already 0..255
        if is_float and image.max() <= 1.0:
            image = image * 255.0
        image = np.clip(np.rint(image), 0, 255).astype(np.uint8)

    if channels == 3:
        alpha = np.full(image.shape[:2] + (1,), 255, dtype=np.uint8)
        return np.concatenate([image, alpha], axis=2)

    return image.copy()


def validate_image(image: np.ndarray) -> None:
    """Reject buffers the pipeline cannot process.

    Raises:
        ParameterError: If the buffer is not (H, W, 4) uint8 with H, W > 0
    """
    if not isinstance(image, np.ndarray) or image.ndim != 3 or image.shape[2] != 4:
        shape = getattr(image, "shape", None)
        raise ParameterError(f"Image must be an (H, W, 4) RGBA array, got shape {shape}")
    if image.dtype != np.uint8:
        raise ParameterError(f"Image must be uint8, got {image.dtype}")
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise ParameterError(
            f"Image must have non-zero area, got {image.shape[1]}x{image.shape[0]}"
        )


def downsample_image(image: ImageArray, max_dimension: int) -> ImageArray:
    """
    Shrink an image so neither side exceeds ``max_dimension``.

    The larger side is scaled to exactly ``max_dimension`` and the other side
    proportionally (integer division). Images already within the cap are
    returned unchanged.
    """
    height, width = image.shape[:2]

    if width <= max_dimension and height <= max_dimension:
        return image

    if width > height:
        new_width = max_dimension
        new_height = max(1, (height * max_dimension) // width)
    else:
        new_height = max_dimension
        new_width = max(1, (width * max_dimension) // height)

    logger.info(f"Image downsampled: {width}x{height} -> {new_width}x{new_height}")
    return resize_bilinear(image, new_width, new_height)


def resize_bilinear(image: ImageArray, new_width: int, new_height: int) -> ImageArray:
    """
    Resize with bilinear interpolation.

    Output pixel (x, y) samples the source at (x * W/new_W, y * H/new_H)
    and blends its four surrounding pixels; neighbors past the last
    row/column are clamped.
    """
    old_height, old_width = image.shape[:2]

    src_x = np.arange(new_width, dtype=np.float64) * (old_width / new_width)
    src_y = np.arange(new_height, dtype=np.float64) * (old_height / new_height)

    x1 = src_x.astype(np.int64)
    y1 = src_y.astype(np.int64)
    x2 = np.minimum(x1 + 1, old_width - 1)
    y2 = np.minimum(y1 + 1, old_height - 1)

    wx = (src_x - x1)[np.newaxis, :, np.newaxis]
    wy = (src_y - y1)[:, np.newaxis, np.newaxis]

    pixels = image.astype(np.float64)
    top = pixels[y1][:, x1] * (1 - wx) + pixels[y1][:, x2] * wx
    bottom = pixels[y2][:, x1] * (1 - wx) + pixels[y2][:, x2] * wx
    blended = top * (1 - wy) + bottom * wy

    return np.clip(np.floor(blended), 0, 255).astype(np.uint8)


def save_image(image: ImageArray, path: Union[str, Path]) -> Path:
    """Write a pixel buffer to disk; format follows the file extension."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.fromarray(image)
    if path.suffix.lower() in (".jpg", ".jpeg"):
        # JPEG has no alpha channel
        img = img.convert("RGB")
    img.save(path)
    return path


def encode_png_base64(image: ImageArray) -> str:
    """Encode a pixel buffer as base64 PNG, the form web front ends consume."""
    buffer = io.BytesIO()
    Image.fromarray(image).save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")
