"""Main pipeline orchestrator for pbnart."""
import logging
from typing import List, Optional, Tuple, Union

import numpy as np

from pbnart.borders import render_borders, render_grid_borders
from pbnart.edges import compute_edge_map
from pbnart.grid import blank_fill, quantize_pixels, render_grid
from pbnart.kdtree import KDTree
from pbnart.labeler import MIN_REGION_AREA, label_regions
from pbnart.palette import build_palette, quantize_seeds
from pbnart import progress as stages
from pbnart.progress import ProgressReporter, ProgressSink
from pbnart.rasterizer import DEFAULT_WORKERS, rasterize
from pbnart.raster_ingest import downsample_image, ingest_from_array, validate_image
from pbnart.sampler import sample_seeds
from pbnart.types import (
    ImageArray,
    LabelStyle,
    MAX_LABELED_BORDER_WIDTH,
    PaintByNumbersError,
    PaintConfig,
    PaintResult,
    ParameterError,
    RenderMode,
)

logger = logging.getLogger(__name__)

DebugStages = List[Tuple[str, np.ndarray]]


def _edge_preview(edge_map: np.ndarray) -> np.ndarray:
    """Edge weights stretched to a viewable 8-bit grayscale image."""
    peak = edge_map.max()
    if peak <= 0:
        return np.zeros(edge_map.shape, dtype=np.uint8)
    return (edge_map * (255.0 / peak)).astype(np.uint8)


def paint_voronoi(
    image: ImageArray,
    n_points: int,
    n_colors: int,
    border_width: int = 1,
    show_colors: bool = True,
    label_style: LabelStyle = LabelStyle.OUTLINED,
    workers: int = DEFAULT_WORKERS,
    min_region_area: int = MIN_REGION_AREA,
    rng: Optional[np.random.Generator] = None,
    progress: Optional[ProgressReporter] = None,
    debug_stages: Optional[DebugStages] = None,
) -> PaintResult:
    """
    Render a nearest-seed paint-by-numbers image.

    Runs palette, edge detection, sampling, seed quantization, spatial
    indexing, parallel rasterization, borders and labels in that order.
    Parameters are not range-checked here; see :class:`PaintByNumbersPipeline`
    for the validated entry point.

    Args:
        image: (H, W, 4) uint8 pixel buffer (not modified)
        n_points: Number of seeds
        n_colors: Requested palette size
        border_width: Border width; labels are skipped above 2
        show_colors: False paints every region white
        label_style: Glyph style for color numbers
        workers: Rasterization worker count
        min_region_area: Smallest region that gets a number
        rng: Source of randomness; a fresh unseeded generator if None
        progress: Stage progress reporter
        debug_stages: If given, intermediate images are appended to it

    Returns:
        PaintResult with the image, palette, quantized seeds and seed map
    """
    rng = rng if rng is not None else np.random.default_rng()
    progress = progress or ProgressReporter()
    height, width = image.shape[:2]

    progress.milestone(stages.PALETTE)
    palette = build_palette(image, n_colors, rng)

    progress.milestone(stages.EDGES)
    edge_map = compute_edge_map(image)
    if debug_stages is not None:
        debug_stages.append(("2_edges", _edge_preview(edge_map)))

    progress.milestone(stages.SAMPLING)
    seeds = sample_seeds(image, n_points, rng, edge_map=edge_map)

    progress.milestone(stages.QUANTIZING)
    seeds = quantize_seeds(seeds, palette)

    progress.milestone(stages.INDEXING)
    tree = KDTree(seeds)
    logger.debug(f"Spatial index over {len(tree)} seeds, depth {tree.depth()}")

    progress.milestone(stages.REGIONS)
    raster, seed_map = rasterize(
        (height, width), seeds, tree,
        workers=workers, fill=blank_fill(show_colors), progress=progress,
    )
    if debug_stages is not None:
        debug_stages.append(("3_regions", raster))

    progress.milestone(stages.BORDERS)
    result = render_borders(raster, seed_map, border_width)
    if debug_stages is not None:
        debug_stages.append(("4_borders", result))

    if border_width <= MAX_LABELED_BORDER_WIDTH:
        progress.milestone(stages.NUMBERS)
        color_numbers = np.array([seed.palette_index + 1 for seed in seeds], dtype=np.int64)
        result = label_regions(result, seed_map, color_numbers, label_style, min_region_area)
    else:
        logger.info(f"Skipping labels for border width {border_width}")

    progress.milestone(stages.COMPLETE)
    logger.info(
        f"Voronoi render complete: {width}x{height}, {len(seeds)} seeds, "
        f"{len(palette)} colors"
    )
    return PaintResult(image=result, palette=palette, label_map=seed_map, seeds=seeds)


def paint_grid(
    image: ImageArray,
    n_colors: int,
    border_width: int = 1,
    show_colors: bool = True,
    label_style: LabelStyle = LabelStyle.OUTLINED,
    min_region_area: int = MIN_REGION_AREA,
    rng: Optional[np.random.Generator] = None,
    progress: Optional[ProgressReporter] = None,
    debug_stages: Optional[DebugStages] = None,
) -> PaintResult:
    """
    Render a per-pixel paint-by-numbers image.

    Every pixel takes its nearest palette color; regions are runs of equal
    palette index. Parameters are not range-checked here.
    """
    rng = rng if rng is not None else np.random.default_rng()
    progress = progress or ProgressReporter()
    height, width = image.shape[:2]

    progress.milestone(stages.PALETTE)
    palette = build_palette(image, n_colors, rng)

    progress.milestone(stages.GRID_QUANTIZING)
    palette_indices = quantize_pixels(image, palette)
    raster = render_grid(palette_indices, palette, fill=blank_fill(show_colors))
    if debug_stages is not None:
        debug_stages.append(("3_regions", raster))

    progress.milestone(stages.BORDERS)
    result = render_grid_borders(raster, palette_indices, border_width)
    if debug_stages is not None:
        debug_stages.append(("4_borders", result))

    if border_width <= MAX_LABELED_BORDER_WIDTH:
        progress.milestone(stages.NUMBERS)
        result = label_regions(result, palette_indices, None, label_style, min_region_area)
    else:
        logger.info(f"Skipping labels for border width {border_width}")

    progress.milestone(stages.COMPLETE)
    logger.info(f"Grid render complete: {width}x{height}, {len(palette)} colors")
    return PaintResult(image=result, palette=palette, label_map=palette_indices)


class PaintByNumbersPipeline:
    """Validated paint-by-numbers pipeline."""

    def __init__(self, config: Optional[PaintConfig] = None):
        """Initialize pipeline with configuration.

        Args:
            config: Pipeline configuration. Uses defaults if None.
        """
        self.config = config or PaintConfig()
        self.debug_stages: DebugStages = []

    def run(
        self,
        image: np.ndarray,
        progress: Optional[Union[ProgressSink, ProgressReporter]] = None,
        debug: bool = False,
    ) -> PaintResult:
        """Process an image through the pipeline.

        Args:
            image: (H, W, 3) or (H, W, 4) array; grayscale is also accepted
            progress: Optional callable receiving ProgressEvent objects on a
                background thread, or a ProgressReporter owned by the caller
            debug: If True, keep intermediate images in ``debug_stages``

        Returns:
            PaintResult

        Raises:
            ParameterError: If the config or the image is out of bounds
            PaintByNumbersError: If processing fails
        """
        config = self.config
        config.validate()
        pixels = ingest_from_array(image)
        validate_image(pixels)

        self.debug_stages = []
        stages_out = self.debug_stages if debug else None

        if isinstance(progress, ProgressReporter):
            reporter = progress
        else:
            reporter = ProgressReporter(progress)

        try:
            pixels = downsample_image(pixels, config.max_dimension)
            if debug:
                self.debug_stages.append(("1_input", pixels))

            rng = np.random.default_rng(config.random_seed)

            if config.mode == RenderMode.GRID:
                return paint_grid(
                    pixels,
                    config.n_colors,
                    border_width=config.border_width,
                    show_colors=config.show_colors,
                    label_style=config.label_style,
                    min_region_area=config.min_region_area,
                    rng=rng,
                    progress=reporter,
                    debug_stages=stages_out,
                )

            return paint_voronoi(
                pixels,
                config.n_points,
                config.n_colors,
                border_width=config.border_width,
                show_colors=config.show_colors,
                label_style=config.label_style,
                workers=config.workers,
                min_region_area=config.min_region_area,
                rng=rng,
                progress=reporter,
                debug_stages=stages_out,
            )

        except PaintByNumbersError:
            raise
        except Exception as e:
            raise PaintByNumbersError(f"Pipeline processing failed: {e}") from e
        finally:
            # Reporters created here stop once their queued events are delivered
            if reporter is not progress:
                reporter.close()


def convert(
    image: np.ndarray,
    progress: Optional[Union[ProgressSink, ProgressReporter]] = None,
    **params,
) -> PaintResult:
    """Convert an image to paint-by-numbers art.

    Convenience function for one-off processing. ``params`` are
    :class:`PaintConfig` fields; ``mode`` and ``label_style`` may be given
    as strings.

    Example:
        >>> result = convert(pixels, n_points=3000, n_colors=16)
        >>> result = convert(pixels, mode="grid", border_width=0)
    """
    try:
        if isinstance(params.get("mode"), str):
            params["mode"] = RenderMode(params["mode"])
        if isinstance(params.get("label_style"), str):
            params["label_style"] = LabelStyle(params["label_style"])
    except ValueError as e:
        raise ParameterError(str(e)) from e

    pipeline = PaintByNumbersPipeline(PaintConfig(**params))
    return pipeline.run(image, progress=progress)
