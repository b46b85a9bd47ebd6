"""5x7 bitmap digits for stamping color numbers."""
import numpy as np

from pbnart.types import BLANK_COLOR, BORDER_COLOR, ImageArray, LabelStyle, RGBA

GLYPH_WIDTH = 5
GLYPH_HEIGHT = 7

# Default downscale for compact labels; rows/columns are kept every int(1/scale)
COMPACT_SCALE = 0.5

_DIGIT_ROWS = {
    0: [".###.",
        "#...#",
        "#..##",
        "#.#.#",
        "##..#",
        "#...#",
        ".###."],
    1: ["..#..",
        ".##..",
        "..#..",
        "..#..",
        "..#..",
        "..#..",
        ".###."],
    2: [".###.",
        "#...#",
        "....#",
        "...#.",
        "..#..",
        ".#...",
        "#####"],
    3: [".###.",
        "#...#",
        "....#",
        "..##.",
        "....#",
        "#...#",
        ".###."],
    4: ["...#.",
        "..##.",
        ".#.#.",
        "#..#.",
        "#####",
        "...#.",
        "...#."],
    5: ["#####",
        "#....",
        "####.",
        "....#",
        "....#",
        "#...#",
        ".###."],
    6: ["..##.",
        ".#...",
        "#....",
        "####.",
        "#...#",
        "#...#",
        ".###."],
    7: ["#####",
        "....#",
        "...#.",
        "..#..",
        ".#...",
        ".#...",
        ".#..."],
    8: [".###.",
        "#...#",
        "#...#",
        ".###.",
        "#...#",
        "#...#",
        ".###."],
    9: [".###.",
        "#...#",
        "#...#",
        ".####",
        "....#",
        "...#.",
        ".##.."],
}

DIGIT_BITMAPS = {
    digit: np.array([[c == "#" for c in row] for row in rows], dtype=bool)
    for digit, rows in _DIGIT_ROWS.items()
}


def draw_bitmap(image: ImageArray, bitmap: np.ndarray, left: int, top: int, color: RGBA) -> None:
    """Set the pixels of ``bitmap`` at (left, top) to ``color``, clipped to the image."""
    height, width = image.shape[:2]
    rows, cols = np.nonzero(bitmap)
    xs = cols + left
    ys = rows + top
    inside = (xs >= 0) & (xs < width) & (ys >= 0) & (ys < height)
    image[ys[inside], xs[inside]] = color


def scale_bitmap(bitmap: np.ndarray, scale: float) -> np.ndarray:
    """Keep every ``int(1/scale)``-th row and column; scale >= 1 is a no-op."""
    if scale >= 1.0:
        return bitmap
    stride = max(1, int(1.0 / scale))
    return bitmap[::stride, ::stride]


def draw_digit(image: ImageArray, digit: int, cx: int, cy: int,
               style: LabelStyle = LabelStyle.OUTLINED,
               scale: float = COMPACT_SCALE) -> None:
    """Draw one digit centered at (cx, cy). Digits outside 0-9 are ignored."""
    bitmap = DIGIT_BITMAPS.get(digit)
    if bitmap is None:
        return

    if style == LabelStyle.COMPACT:
        draw_bitmap(image, scale_bitmap(bitmap, scale), cx - 1, cy - 2, BORDER_COLOR)
        return

    left = cx - GLYPH_WIDTH // 2
    top = cy - GLYPH_HEIGHT // 2
    # Outline: the glyph shifted to all 8 neighbors, then the face on top
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            if dx == 0 and dy == 0:
                continue
            draw_bitmap(image, bitmap, left + dx, top + dy, BORDER_COLOR)
    draw_bitmap(image, bitmap, left, top, BLANK_COLOR)


def draw_number(image: ImageArray, number: int, cx: int, cy: int,
                style: LabelStyle = LabelStyle.OUTLINED,
                scale: float = COMPACT_SCALE) -> None:
    """
    Stamp ``number`` centered at (cx, cy) in place.

    Numbers 10-99 are drawn as two digits side by side; larger numbers use
    only their last two digits, which cannot occur with at most 64 colors.
    """
    if number >= 10:
        offset = 2 if style == LabelStyle.COMPACT else 3
        tens, ones = (number // 10) % 10, number % 10
        draw_digit(image, tens, cx - offset, cy, style, scale)
        draw_digit(image, ones, cx + offset, cy, style, scale)
    else:
        draw_digit(image, number, cx, cy, style, scale)
