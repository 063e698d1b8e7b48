#!/usr/bin/env python3
"""
Filename utilities for generating output filenames.
"""

import os
import logging

logger = logging.getLogger(__name__)

LAP_EXTENSIONS = (".gpx", ".csv")
MAX_NUMBERED_VARIANTS = 99


def _lap_base_name(filename: str) -> str:
    base = os.path.basename(filename)
    stem, ext = os.path.splitext(base)
    if ext.lower() in LAP_EXTENSIONS:
        return stem
    return base


def _reserve(candidate: str) -> bool:
    """Create candidate exclusively. Returns False if it already exists."""
    try:
        with open(candidate, "x"):
            pass
        return True
    except FileExistsError:
        return False
    except OSError as e:
        logger.error(f"Cannot create file {candidate}: {e}")
        raise ValueError(f"Cannot create file: {e}")


def generate_output_filename(
    reference_filename: str, other_filename: str, extension: str
) -> str:
    """
    Generates an output filename and reserves it by creating an empty file.

    Strategy:
    1. Drop .gpx/.csv extensions (case-insensitive) from both lap names
    2. Name the file "<reference> vs <other> comparison<extension>" next to the reference lap
    3. If that file exists, try " (1)", " (2)", etc. (by attempting to create exclusively)

    Args:
        reference_filename: Path to the reference lap file
        other_filename: Path to the other lap file
        extension: Output extension including the dot, e.g. ".html"

    Returns:
        Safe output filename that has been created as an empty file to reserve its name

    Raises:
        RuntimeError: If no available filename is found
        ValueError: If a filename cannot be created (e.g., permissions or an invalid name)
    """
    output_dir = os.path.dirname(reference_filename)
    base_output = (
        f"{_lap_base_name(reference_filename)} vs "
        f"{_lap_base_name(other_filename)} comparison"
    )

    candidate = os.path.join(output_dir, base_output + extension)
    if _reserve(candidate):
        return candidate

    for i in range(1, MAX_NUMBERED_VARIANTS + 1):
        candidate = os.path.join(output_dir, f"{base_output} ({i}){extension}")
        if _reserve(candidate):
            return candidate

    logger.error(
        f"Could not find an available filename after {MAX_NUMBERED_VARIANTS} attempts. "
        f"Please clean up your output directory or name the output explicitly."
    )
    raise RuntimeError(
        f"No available filename found after {MAX_NUMBERED_VARIANTS} attempts"
    )
