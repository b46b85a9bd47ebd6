"""Core types for the paint-by-numbers pipeline."""
from dataclasses import dataclass, field
from typing import Optional, List, Tuple
from enum import Enum
import numpy as np

# Type aliases
ImageArray = np.ndarray
RGBA = Tuple[int, int, int, int]

# Parameter bounds accepted by the pipeline entry point
MIN_POINTS = 1
MAX_POINTS = 50000
MIN_COLORS = 2
MAX_COLORS = 64
MIN_BORDER_WIDTH = 0
MAX_BORDER_WIDTH = 5
MIN_DIMENSION = 256
MAX_DIMENSION = 4096

# Labels do not fit legibly between borders wider than this
MAX_LABELED_BORDER_WIDTH = 2

NEUTRAL_GRAY: RGBA = (128, 128, 128, 255)
BORDER_COLOR: RGBA = (0, 0, 0, 255)
BLANK_COLOR: RGBA = (255, 255, 255, 255)


class RenderMode(Enum):
    """How regions are formed."""
    VORONOI = "voronoi"
    GRID = "grid"


class LabelStyle(Enum):
    """How color numbers are drawn."""
    OUTLINED = "outlined"  # white digits, 1px black outline
    COMPACT = "compact"    # small black digits, no outline


class PaintByNumbersError(Exception):
    """Base exception for paint-by-numbers errors."""
    pass


class ParameterError(PaintByNumbersError, ValueError):
    """Raised when a pipeline parameter or input buffer is out of bounds."""
    pass


class ImageLoadError(PaintByNumbersError):
    """Raised when an image file cannot be decoded."""
    pass


@dataclass(frozen=True)
class Seed:
    """A sampled image location defining one tessellation region.

    ``index`` is the region identity used by the spatial index, the
    rasterizer and the labeler. It is assigned once, in draw order.
    """
    x: int
    y: int
    color: RGBA
    index: int
    palette_index: Optional[int] = None


@dataclass
class Region:
    """Connected set of pixels sharing one label."""
    label: int
    color_number: int
    centroid: Tuple[int, int]  # x, y
    area: int


@dataclass(frozen=True)
class ProgressEvent:
    """Stage progress notification."""
    stage: str
    percent: int


@dataclass
class PaintResult:
    """Output of a pipeline run."""
    image: ImageArray        # (H, W, 4) uint8
    palette: np.ndarray      # (K, 4) uint8, row i is color number i + 1
    label_map: Optional[np.ndarray] = None  # seed or palette index per pixel
    seeds: List[Seed] = field(default_factory=list)

    @property
    def width(self) -> int:
        return int(self.image.shape[1])

    @property
    def height(self) -> int:
        return int(self.image.shape[0])


def check_range(name: str, value: int, low: int, high: int) -> None:
    if not low <= value <= high:
        raise ParameterError(f"{name} must be between {low} and {high}, got {value}")


@dataclass
class PaintConfig:
    """Configuration for the paint-by-numbers pipeline."""
    # Tessellation
    n_points: int = 2000
    mode: RenderMode = RenderMode.VORONOI

    # Palette
    n_colors: int = 12

    # Output
    border_width: int = 1
    show_colors: bool = True  # False renders flat white regions for coloring in
    label_style: LabelStyle = LabelStyle.OUTLINED
    min_region_area: int = 100

    # Input
    max_dimension: int = 2048

    # Performance
    workers: int = 8

    # Reproducibility
    random_seed: Optional[int] = None

    def validate(self) -> None:
        """Check every bound before any pipeline work starts.

        Raises:
            ParameterError: naming the first violated bound
        """
        check_range("n_points", self.n_points, MIN_POINTS, MAX_POINTS)
        check_range("n_colors", self.n_colors, MIN_COLORS, MAX_COLORS)
        check_range("border_width", self.border_width, MIN_BORDER_WIDTH, MAX_BORDER_WIDTH)
        check_range("max_dimension", self.max_dimension, MIN_DIMENSION, MAX_DIMENSION)
        if self.workers < 1:
            raise ParameterError(f"workers must be at least 1, got {self.workers}")
        if self.min_region_area < 1:
            raise ParameterError(
                f"min_region_area must be at least 1, got {self.min_region_area}"
            )
        if not isinstance(self.mode, RenderMode):
            raise ParameterError(f"mode must be a RenderMode, got {self.mode!r}")
        if not isinstance(self.label_style, LabelStyle):
            raise ParameterError(f"label_style must be a LabelStyle, got {self.label_style!r}")
