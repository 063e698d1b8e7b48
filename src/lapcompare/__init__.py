#!/usr/bin/env python3
"""
Lapcompare - compare two laps of the same course by location.

This package projects GPS laps into a local UTM plane, matches every sample
of a reference lap to the closest sample of another lap, and computes
cumulative distances so a metric such as speed can be compared side by side.
"""
import importlib.metadata

__version__ = importlib.metadata.version("lapcompare")

# Import main classes for public API
from .errors import (
    EmptyOtherTrackError,
    EmptyTrackError,
    InvalidCoordinateError,
    LapCompareError,
    LengthMismatchError,
)
from .geometry import PlanarPoint, Position, UtmZone, project_track, select_utm_zone
from .matching import match_by_proximity, nearest_indices
from .distance import cumulative_distance
from .lap import Lap
from .comparison import LapComparison, compare_laps

__all__ = [
    "EmptyOtherTrackError",
    "EmptyTrackError",
    "InvalidCoordinateError",
    "LapCompareError",
    "LengthMismatchError",
    "PlanarPoint",
    "Position",
    "UtmZone",
    "project_track",
    "select_utm_zone",
    "match_by_proximity",
    "nearest_indices",
    "cumulative_distance",
    "Lap",
    "LapComparison",
    "compare_laps",
]
