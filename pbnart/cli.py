"""Command-line interface for pbnart."""
import argparse
import logging
import sys
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Optional

from pbnart.palette_info import palette_to_json
from pbnart.pipeline import PaintByNumbersPipeline
from pbnart.progress import ProgressReporter
from pbnart.raster_ingest import load_image, save_image
from pbnart.types import (
    LabelStyle,
    PaintByNumbersError,
    PaintConfig,
    ProgressEvent,
    RenderMode,
)

# Longest wait for queued progress lines after a finished run
PROGRESS_FLUSH_SECONDS = 1.0


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    defaults = PaintConfig()
    parser = argparse.ArgumentParser(
        prog="pbnart",
        description="Turn a photo into paint-by-numbers art",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Voronoi regions (default)
  pbnart photo.jpg -o photo_pbn.png
  pbnart photo.jpg --points 5000 --colors 24 --border-width 2

  # Grid mode, uncolored template to paint in
  pbnart photo.jpg --mode grid --blank

  # Palette sheet and intermediate stages
  pbnart photo.jpg --palette-json palette.json --save-stages stages/
        """,
    )

    parser.add_argument("input", help="Input image file path")

    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output image path (default: <input>_pbn.png)",
    )

    parser.add_argument(
        "-n",
        "--points",
        type=int,
        default=defaults.n_points,
        help=f"Number of Voronoi seeds (default: {defaults.n_points})",
    )

    parser.add_argument(
        "-c",
        "--colors",
        type=int,
        default=defaults.n_colors,
        help=f"Palette size (default: {defaults.n_colors})",
    )

    parser.add_argument(
        "-b",
        "--border-width",
        type=int,
        default=defaults.border_width,
        help=f"Border width in pixels, 0 disables (default: {defaults.border_width})",
    )

    parser.add_argument(
        "--max-dimension",
        type=int,
        default=defaults.max_dimension,
        help=f"Downsample so neither side exceeds this (default: {defaults.max_dimension})",
    )

    parser.add_argument(
        "-m",
        "--mode",
        choices=[m.value for m in RenderMode],
        default=defaults.mode.value,
        help="Region layout: voronoi (default) or grid",
    )

    parser.add_argument(
        "--blank", action="store_true", help="Render white regions for coloring in"
    )

    parser.add_argument(
        "--compact-labels",
        action="store_true",
        help="Small black numbers without outline",
    )

    parser.add_argument(
        "--seed", type=int, default=None, help="Random seed for reproducible output"
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=defaults.workers,
        help=f"Rasterization threads (default: {defaults.workers})",
    )

    parser.add_argument(
        "--palette-json", default=None, help="Write the palette (hex and CMYK) as JSON"
    )

    parser.add_argument(
        "--save-stages", default=None, help="Directory for intermediate stage images"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Give up after this many seconds",
    )

    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    return parser


def save_debug_stages(pipeline: PaintByNumbersPipeline, stage_dir: str) -> None:
    """Save debug stage images.

    Args:
        pipeline: Pipeline instance with debug_stages
        stage_dir: Directory for the stage PNGs
    """
    debug_dir = Path(stage_dir)
    debug_dir.mkdir(parents=True, exist_ok=True)

    for stage_name, stage_image in pipeline.debug_stages:
        debug_file = debug_dir / f"{stage_name}.png"
        save_image(stage_image, debug_file)
        print(f"  Saved debug stage: {debug_file}")


def print_progress(event: ProgressEvent) -> None:
    print(f"  [{event.percent:3d}%] {event.stage}")


def main(args: Optional[list] = None) -> int:
    """Main entry point for CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    logging.basicConfig(
        level=logging.INFO if parsed.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    input_path = Path(parsed.input)
    if parsed.output:
        output_path = Path(parsed.output)
    else:
        output_path = input_path.with_name(f"{input_path.stem}_pbn.png")

    config = PaintConfig(
        n_points=parsed.points,
        n_colors=parsed.colors,
        border_width=parsed.border_width,
        max_dimension=parsed.max_dimension,
        show_colors=not parsed.blank,
        mode=RenderMode(parsed.mode),
        label_style=LabelStyle.COMPACT if parsed.compact_labels else LabelStyle.OUTLINED,
        workers=parsed.workers,
        random_seed=parsed.seed,
    )
    pipeline = PaintByNumbersPipeline(config)
    debug = parsed.save_stages is not None

    reporter = ProgressReporter(print_progress)
    executor = ThreadPoolExecutor(max_workers=1)
    try:
        config.validate()

        print(f"Processing: {parsed.input}")
        print(f"  Mode: {config.mode.value}")
        print(f"  Colors: {config.n_colors}")
        if config.mode == RenderMode.VORONOI:
            print(f"  Points: {config.n_points}")

        image = load_image(input_path)
        future = executor.submit(pipeline.run, image, reporter, debug)
        # The worker thread is abandoned on timeout; it finishes in the background
        result = future.result(timeout=parsed.timeout)
        reporter.close()
        reporter.wait(timeout=PROGRESS_FLUSH_SECONDS)

        save_image(result.image, output_path)
        print(f"  Output saved: {output_path} ({result.width}x{result.height})")

        if parsed.palette_json:
            palette_path = Path(parsed.palette_json)
            palette_path.parent.mkdir(parents=True, exist_ok=True)
            palette_path.write_text(palette_to_json(result.palette))
            print(f"  Palette saved: {palette_path} ({len(result.palette)} colors)")

        if debug:
            save_debug_stages(pipeline, parsed.save_stages)

        return 0

    except FutureTimeoutError:
        print(f"Error: processing exceeded {parsed.timeout}s timeout", file=sys.stderr)
        return 1
    except (PaintByNumbersError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        reporter.close()
        executor.shutdown(wait=False)


if __name__ == "__main__":
    sys.exit(main())
