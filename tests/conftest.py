"""Pytest configuration and fixtures."""

import numpy as np
import pytest

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


def solid_image(width: int, height: int, color=RED) -> np.ndarray:
    """(H, W, 4) uint8 image of a single color."""
    image = np.empty((height, width, 4), dtype=np.uint8)
    image[:] = color
    return image


def split_image(width: int, height: int, left=RED, right=BLUE) -> np.ndarray:
    """Left half ``left``, right half ``right``."""
    image = solid_image(width, height, left)
    image[:, width // 2:] = right
    return image


@pytest.fixture
def rng():
    """Seeded random generator for reproducible tests."""
    return np.random.default_rng(12345)


@pytest.fixture
def red_image():
    """4x4 solid red image."""
    return solid_image(4, 4)


@pytest.fixture
def red_blue_image():
    """10x2 image, red on the left half, blue on the right."""
    return split_image(10, 2)


@pytest.fixture
def photo_like_image(rng):
    """64x48 image with blocks of color, a gradient and some noise."""
    h, w = 48, 64
    image = np.zeros((h, w, 4), dtype=np.uint8)
    image[..., 3] = 255
    image[:, :32, 0] = 200
    image[:24, 32:, 1] = 180
    image[24:, 32:, 2] = np.linspace(60, 240, w - 32, dtype=np.uint8)
    noise = rng.integers(0, 20, size=(h, w, 3), dtype=np.uint8)
    image[..., :3] = np.clip(image[..., :3].astype(np.int64) + noise, 0, 255).astype(np.uint8)
    return image


@pytest.fixture
def solid():
    """Factory for single-color images."""
    return solid_image


@pytest.fixture
def split():
    """Factory for two-color half/half images."""
    return split_image
