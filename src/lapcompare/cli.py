#!/usr/bin/env python3
"""
Lap Comparison Tool
This script loads two laps (GPX or CSV with latitude, longitude and a metric
such as speed), matches every sample of the reference lap to the closest
sample of the other lap by location, and renders the aligned metric and the
cumulative distances as a chart image plus an interactive HTML map.

Requirements:
    pip install gpxpy folium shapely pyproj matplotlib

"""

from typing import List, Optional
import webbrowser
import argparse
import logging
import sys
import os
from gpxpy import gpx

from . import __version__
from . import charts
from . import visualization
from .comparison import LapComparison, compare_laps
from .config import LapCompareConfig
from .errors import LapCompareError
from .file_utils import generate_output_filename
from .lap import Lap
from .matching import MATCH_METHODS
from .metrics import collect_metrics, log_metrics

# Configure logging
logger = logging.getLogger("lapcompare")


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command-line argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description="Compare two laps sample-for-sample by location",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "reference",
        type=str,
        nargs="?",
        help="Reference lap file (GPX or CSV)",
    )
    parser.add_argument(
        "other",
        type=str,
        nargs="?",
        help="Lap file to compare against the reference (GPX or CSV)",
    )
    parser.add_argument(
        "--metric",
        type=str,
        default="speed",
        help="Metric to compare (CSV column name, or speed/elevation for GPX; default: speed)",
    )
    parser.add_argument(
        "--matcher",
        type=str,
        default="scan",
        choices=MATCH_METHODS,
        help="Nearest-point search method (default: scan)",
    )
    parser.add_argument(
        "--chart",
        type=str,
        default=None,
        help="Output chart image (default: auto-generated from the lap filenames)",
    )
    parser.add_argument(
        "--map",
        type=str,
        default=None,
        help="Output HTML map file (default: auto-generated from the lap filenames)",
    )
    parser.add_argument(
        "--no-map",
        action="store_true",
        help="Don't create the HTML map",
    )
    parser.add_argument(
        "--bbox-buffer",
        type=float,
        default=20.0,
        help="Map margin around the laps in meters (default: 20)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set logging level (default: WARNING)",
    )
    parser.add_argument(
        "--no-open",
        action="store_true",
        help="Don't automatically open the HTML map in browser",
    )
    parser.add_argument(
        "--metrics",
        action="store_true",
        help="Output structured metrics after processing",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"lapcompare {__version__}",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> LapCompareConfig:
    """Build a LapCompareConfig from parsed arguments."""
    return LapCompareConfig(
        metric=args.metric,
        matcher=args.matcher,
        bbox_buffer=args.bbox_buffer,
        log_level=args.log_level,
        metrics=args.metrics,
    )


def determine_output_filename(
    args: argparse.Namespace, output_arg: Optional[str], extension: str
) -> str:
    """
    Determine the output filename to use.

    Args:
        args: Parsed arguments holding the lap filenames
        output_arg: Explicit output filename (None if not specified)
        extension: Extension for auto-generated names

    Returns:
        Output filename to use

    Raises:
        RuntimeError: If auto-generation fails
        ValueError: If constructed filename would be illegal
    """
    if output_arg is not None:
        return output_arg

    try:
        return generate_output_filename(args.reference, args.other, extension)
    except (RuntimeError, ValueError) as e:
        logger.error(f"Failed to generate output filename: {e}")
        raise


def open_file_in_browser(filename: str) -> None:
    """
    Open the specified file in the default browser.

    Args:
        filename: Path to the file to open
    """
    abs_path = os.path.abspath(filename)
    try:
        webbrowser.open(f"file://{abs_path}")
        logger.debug(f"Opening {abs_path} in your default browser...")
    except Exception as e:
        logger.warning(f"Could not automatically open browser: {e}")
        logger.warning(f"Please manually open {abs_path}")


def setup_logging(config: LapCompareConfig) -> None:
    """Setup logging configuration."""
    level = getattr(logging, config.log_level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Configure the root logger so all modules inherit the configuration
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    # Suppress overly verbose third-party logging
    logging.getLogger("matplotlib").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


def load_lap(filename: str, metric: str) -> Lap:
    """
    Load a lap, logging and exiting on failure.

    Args:
        filename: Path to the lap file
        metric: Metric to load

    Returns:
        Loaded Lap
    """
    try:
        lap = Lap.from_file(filename, metric=metric)
    except FileNotFoundError:
        logger.error(f"Lap file not found: {filename}")
        sys.exit(1)
    except PermissionError:
        logger.error(f"Cannot read lap file (permission denied): {filename}")
        sys.exit(1)
    except gpx.GPXException as e:
        logger.error(f"Invalid GPX file {filename}: {e}")
        sys.exit(1)
    except ValueError as e:
        logger.error(f"Invalid lap file {filename}: {e}")
        sys.exit(1)
    logger.info(f"Loaded lap {lap.name!r} with {len(lap)} samples")
    return lap


def print_summary(comparison: LapComparison) -> None:
    """
    Print a short summary of the comparison.

    Args:
        comparison: LapComparison to summarise
    """
    metrics = collect_metrics(comparison)
    reference = comparison.reference
    other = comparison.other
    metric = reference.metric

    name_width = max(len(reference.name), len(other.name), len("Reference"))
    lines: List[str] = [
        f"Lap comparison in UTM zone {comparison.zone} (EPSG:{comparison.zone.epsg}):",
        f"  {reference.name or 'Reference':<{name_width}}  {metrics.reference_samples:6d} samples  "
        f"{metrics.reference_length / 1000:7.3f} km  mean {metric} {metrics.mean_reference_value:.2f}",
        f"  {other.name or 'Other':<{name_width}}  {metrics.other_samples:6d} samples  "
        f"{metrics.other_length / 1000:7.3f} km  mean {metric} {metrics.mean_matched_value:.2f} (matched)",
        f"  Mean {metric} difference: {metrics.mean_delta:+.2f}; largest "
        f"{metrics.max_abs_delta:.2f} at sample {metrics.max_abs_delta_index}",
    ]
    for line in lines:
        print(line)


def main(argv: Optional[List[str]] = None):
    """
    Parses command-line arguments, loads both laps, aligns them by location,
    and writes the comparison chart and map.
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.reference or not args.other:
        parser.print_help()
        sys.exit(1)

    config = config_from_args(args)
    setup_logging(config)

    reference = load_lap(args.reference, config.metric)
    other = load_lap(args.other, config.metric)

    try:
        comparison = compare_laps(reference, other, method=config.matcher)
    except LapCompareError as e:
        logger.error(f"Could not compare laps: {e}")
        sys.exit(1)

    print_summary(comparison)

    try:
        chart_filename = determine_output_filename(args, args.chart, ".png")
    except (RuntimeError, ValueError):
        sys.exit(1)

    map_filename = None
    if not args.no_map:
        try:
            map_filename = determine_output_filename(args, args.map, ".html")
        except (RuntimeError, ValueError):
            # Release the empty file reserved for the chart
            if args.chart is None:
                os.remove(chart_filename)
            sys.exit(1)

    try:
        charts.create_comparison_charts(comparison, chart_filename, config)
    except Exception as e:
        logger.error(f"Failed to create charts: {e}")
        sys.exit(1)
    print(f"Charts written to {chart_filename}")

    if map_filename is not None:
        try:
            visualization.create_comparison_map(comparison, map_filename, config)
        except Exception as e:
            logger.error(f"Failed to create map: {e}")
            sys.exit(1)
        print(f"Map written to {map_filename}")

    log_metrics(collect_metrics(comparison), config)

    if map_filename is not None and not args.no_open:
        open_file_in_browser(map_filename)


if __name__ == "__main__":
    main()
