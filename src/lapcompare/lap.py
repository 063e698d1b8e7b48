#!/usr/bin/env python3
"""
Lap data model: an ordered sequence of positions with one scalar value per sample.
"""

from typing import Iterator, List, Optional, Sequence, TextIO, Tuple
import csv
import logging
import math
import os

import gpxpy
import gpxpy.gpx

from .errors import EmptyTrackError, LengthMismatchError
from .distance import cumulative_distance
from .geometry import (
    PlanarPoint,
    Position,
    UtmZone,
    project_track,
    select_utm_zone,
)

logger = logging.getLogger(__name__)

LATITUDE_COLUMNS = ("lat", "latitude")
LONGITUDE_COLUMNS = ("lon", "lng", "long", "longitude")
GPX_METRICS = ("speed", "elevation")


class Lap:
    """Represents one pass over a course with a per-sample metric."""

    def __init__(
        self,
        positions: Sequence[Position],
        values: Sequence[float],
        name: str = "",
        metric: str = "speed",
    ):
        """Initializes a Lap object.

        Args:
            positions: Position objects in recording order.
            values: Metric value for each position.
            name: Display name of the lap.
            metric: Name of the metric carried by values.

        Raises:
            EmptyTrackError: If positions is empty.
            LengthMismatchError: If positions and values differ in length.
            InvalidCoordinateError: If any position is out of range or non-finite.
        """
        if not positions:
            raise EmptyTrackError(f"Lap {name!r} has no samples")
        if len(positions) != len(values):
            raise LengthMismatchError(
                f"Lap {name!r} has {len(positions)} positions but {len(values)} values"
            )

        self.positions: Tuple[Position, ...] = tuple(positions)
        self.values: Tuple[float, ...] = tuple(float(v) for v in values)
        self.name = name
        self.metric = metric

        self.zone: UtmZone = select_utm_zone(self.positions[0])
        self.planar_points: List[PlanarPoint] = project_track(self.positions, self.zone)
        self._distances: Optional[List[float]] = None

    def project(self, zone: Optional[UtmZone] = None) -> List[PlanarPoint]:
        """
        Project this lap into the given zone.

        Args:
            zone: Target zone. Defaults to the zone of the lap's first position.

        Returns:
            List of PlanarPoint, index-aligned with the lap's positions
        """
        if zone is None or zone == self.zone:
            return list(self.planar_points)
        return project_track(self.positions, zone)

    @property
    def cumulative_distance(self) -> List[float]:
        """Cumulative distance in metres along the lap, in its own zone."""
        if self._distances is None:
            self._distances = cumulative_distance(self.planar_points)
        return self._distances

    @property
    def length(self) -> float:
        """Total lap length in metres."""
        return self.cumulative_distance[-1]

    def get_bbox(self, buffer: float = 0.0) -> Tuple[float, float, float, float]:
        """
        Get bounding box for this lap, optionally with a buffer.

        Args:
            buffer: Buffer distance in meters (default: 0.0)

        Returns:
            Tuple of (south, west, north, east) in decimal degrees
        """
        latitudes = [pos.latitude for pos in self.positions]
        longitudes = [pos.longitude for pos in self.positions]
        min_lat, max_lat = min(latitudes), max(latitudes)
        min_lon, max_lon = min(longitudes), max(longitudes)

        # 1 degree latitude ≈ 111 km; longitude shrinks with latitude
        avg_lat = (min_lat + max_lat) / 2
        lat_buffer = buffer / 111000.0
        lon_buffer = buffer / (111000.0 * max(abs(math.cos(math.radians(avg_lat))), 1e-6))

        return (
            max(-90.0, min_lat - lat_buffer),
            max(-180.0, min_lon - lon_buffer),
            min(90.0, max_lat + lat_buffer),
            min(180.0, max_lon + lon_buffer),
        )

    @classmethod
    def from_csv(
        cls, file_input: TextIO, name: str = "", metric: str = "speed"
    ) -> "Lap":
        """
        Parse delimited text with a header row into a lap.

        Latitude and longitude columns are found by name. If the header names
        neither, the first three columns are read as latitude, longitude and metric.

        Args:
            file_input: File-like object containing CSV data
            name: Display name of the lap
            metric: Name of the metric column

        Returns:
            Lap object

        Raises:
            ValueError: If the header or a row cannot be interpreted
        """
        reader = csv.reader(file_input)
        header = next(reader, None)
        if header is None:
            raise EmptyTrackError(f"Lap {name!r} file is empty")

        lat_col, lon_col, metric_col = _resolve_csv_columns(header, metric)
        required = max(lat_col, lon_col, metric_col)

        positions = []
        values = []
        for row in reader:
            if not row or all(not cell.strip() for cell in row):
                continue
            if len(row) <= required:
                raise ValueError(
                    f"Line {reader.line_num}: expected at least {required + 1} columns, got {len(row)}"
                )
            try:
                positions.append(
                    Position(
                        latitude=float(row[lat_col]),
                        longitude=float(row[lon_col]),
                    )
                )
                values.append(float(row[metric_col]))
            except ValueError as e:
                raise ValueError(f"Line {reader.line_num}: {e}") from e

        lap = cls(positions, values, name=name, metric=metric)
        logger.debug(f"Parsed {len(lap)} samples from CSV for lap {name!r}")
        return lap

    @classmethod
    def from_gpx(
        cls, file_input: TextIO, name: str = "", metric: str = "speed"
    ) -> "Lap":
        """
        Parse a GPX file and concatenate all tracks/segments into a single lap.

        Speed comes from each point's own speed element when present, otherwise
        it is estimated by gpxpy from the neighbouring timestamps.

        Args:
            file_input: File-like object containing GPX data
            name: Display name of the lap
            metric: "speed" or "elevation"

        Returns:
            Lap object

        Raises:
            ValueError: If metric is unsupported or a point lacks it
            gpxpy.gpx.GPXException: If GPX file is malformed.
        """
        if metric not in GPX_METRICS:
            raise ValueError(
                f"GPX laps support metrics {', '.join(GPX_METRICS)}, not {metric!r}"
            )

        gpx_data = gpxpy.parse(file_input)

        positions = []
        values = []
        for track in gpx_data.tracks:
            for segment in track.segments:
                for i, point in enumerate(segment.points):
                    value = _gpx_point_value(segment, i, metric)
                    if value is None:
                        raise ValueError(
                            f"GPX point at ({point.latitude}, {point.longitude}) has no {metric}"
                        )
                    positions.append(
                        Position(latitude=point.latitude, longitude=point.longitude)
                    )
                    values.append(value)

        lap = cls(positions, values, name=name, metric=metric)
        logger.debug(f"Parsed {len(lap)} track points from GPX for lap {name!r}")
        return lap

    @classmethod
    def from_file(cls, filename: str, metric: str = "speed") -> "Lap":
        """
        Load a lap from a GPX or CSV file, chosen by extension.

        Args:
            filename: Path to a .gpx file or delimited text file
            metric: Metric to load

        Returns:
            Lap named after the file

        Raises:
            FileNotFoundError: If file doesn't exist.
            PermissionError: If file can't be read.
            ValueError: If file contents are invalid.
            gpxpy.gpx.GPXException: If GPX file is malformed.
        """
        name = os.path.splitext(os.path.basename(filename))[0]
        logger.debug(f"Reading lap file: {filename}")
        with open(filename, "r", encoding="utf-8-sig", newline="") as f:
            if filename.lower().endswith(".gpx"):
                return cls.from_gpx(f, name=name, metric=metric)
            return cls.from_csv(f, name=name, metric=metric)

    def __len__(self) -> int:
        """Return number of samples in lap."""
        return len(self.positions)

    def __getitem__(self, index):
        """Allow indexing into positions."""
        return self.positions[index]

    def __iter__(self) -> Iterator[Position]:
        """Allow iteration over positions."""
        return iter(self.positions)

    def __repr__(self) -> str:
        return f"Lap(name={self.name!r}, samples={len(self)}, metric={self.metric!r})"


def _find_column(header: Sequence[str], names: Sequence[str]) -> Optional[int]:
    normalized = [cell.lstrip("\ufeff").strip().lower() for cell in header]
    for name in names:
        if name in normalized:
            return normalized.index(name)
    return None


def _resolve_csv_columns(header: Sequence[str], metric: str) -> Tuple[int, int, int]:
    """Return (latitude, longitude, metric) column indices for a CSV header."""
    lat_col = _find_column(header, LATITUDE_COLUMNS)
    lon_col = _find_column(header, LONGITUDE_COLUMNS)

    if lat_col is None and lon_col is None:
        logger.debug(
            f"CSV header {header} names no coordinate columns; "
            f"reading columns 0, 1, 2 as latitude, longitude, {metric}"
        )
        return 0, 1, 2

    metric_col = _find_column(header, (metric.strip().lower(),))
    if lat_col is None or lon_col is None or metric_col is None:
        raise ValueError(
            f"CSV header {header} must name latitude, longitude and {metric!r} columns"
        )
    return lat_col, lon_col, metric_col


def _gpx_point_value(
    segment: gpxpy.gpx.GPXTrackSegment, index: int, metric: str
) -> Optional[float]:
    point = segment.points[index]
    if metric == "elevation":
        return point.elevation
    if point.speed is not None:
        return point.speed
    return segment.get_speed(index)
