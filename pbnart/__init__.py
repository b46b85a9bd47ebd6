"""pbnart: paint-by-numbers art from raster images.

Edge-weighted Voronoi tessellation, k-means++ palettes, parallel
rasterization and numbered region labels.
"""
from pbnart.types import (
    LabelStyle,
    PaintByNumbersError,
    PaintConfig,
    PaintResult,
    ParameterError,
    ImageLoadError,
    ProgressEvent,
    Region,
    RenderMode,
    Seed,
)
from pbnart.pipeline import PaintByNumbersPipeline, convert, paint_grid, paint_voronoi

__version__ = "0.1.0"

__all__ = [
    "LabelStyle",
    "PaintByNumbersError",
    "PaintConfig",
    "PaintResult",
    "ParameterError",
    "ImageLoadError",
    "ProgressEvent",
    "Region",
    "RenderMode",
    "Seed",
    "PaintByNumbersPipeline",
    "convert",
    "paint_grid",
    "paint_voronoi",
]
