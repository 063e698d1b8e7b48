"""
Projection utilities for turning geodetic lap positions into planar metres.

A lap is projected into a single UTM zone chosen from its first position.
Laps are geographically small, so points that stray into a neighbouring
zone are still projected with the first point's zone.
"""

from typing import List, NamedTuple, Optional, Sequence
import logging
import math

import pyproj

from .errors import EmptyTrackError, InvalidCoordinateError

logger = logging.getLogger(__name__)

NORTH = "north"
SOUTH = "south"


class Position(NamedTuple):
    """Represents a geographic position with latitude and longitude."""

    latitude: float
    longitude: float


class PlanarPoint(NamedTuple):
    """A projected position in metres."""

    x: float
    y: float


class UtmZone(NamedTuple):
    """UTM zone number and hemisphere used to project a lap."""

    number: int
    hemisphere: str

    @property
    def epsg(self) -> int:
        """EPSG code of the WGS84 / UTM zone (326zz north, 327zz south)."""
        base = 32600 if self.hemisphere == NORTH else 32700
        return base + self.number

    @property
    def proj_string(self) -> str:
        south = " +south" if self.hemisphere == SOUTH else ""
        return f"+proj=utm +zone={self.number}{south} +datum=WGS84 +units=m +no_defs"

    def __str__(self) -> str:
        return f"{self.number}{'N' if self.hemisphere == NORTH else 'S'}"


def validate_position(position: Position, index: int = 0) -> None:
    """
    Check that a position has finite, in-range coordinates.

    Args:
        position: Position to check
        index: Sample index, used in the error message

    Raises:
        InvalidCoordinateError: If latitude or longitude is non-finite or out of range
    """
    latitude, longitude = position.latitude, position.longitude
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        raise InvalidCoordinateError(
            f"Point {index} has a non-finite coordinate ({latitude}, {longitude})"
        )
    if not -90.0 <= latitude <= 90.0:
        raise InvalidCoordinateError(
            f"Point {index} latitude {latitude} is outside [-90, 90]"
        )
    if not -180.0 <= longitude <= 180.0:
        raise InvalidCoordinateError(
            f"Point {index} longitude {longitude} is outside [-180, 180]"
        )


def select_utm_zone(position: Position) -> UtmZone:
    """
    Select the UTM zone containing the given position.

    Args:
        position: Position in decimal degrees

    Returns:
        UtmZone with a zone number in [1, 60]
    """
    number = int(math.floor((position.longitude + 180.0) / 6.0)) + 1
    # Longitude +180 belongs to the last zone
    number = max(1, min(number, 60))
    hemisphere = NORTH if position.latitude >= 0 else SOUTH
    return UtmZone(number, hemisphere)


def create_utm_projection(zone: UtmZone) -> pyproj.Proj:
    """
    Create a UTM projection for the given zone on the WGS84 ellipsoid.

    Args:
        zone: Zone number and hemisphere

    Returns:
        pyproj.Proj object for the zone
    """
    return pyproj.Proj(zone.proj_string)


def project_track(
    positions: Sequence[Position], zone: Optional[UtmZone] = None
) -> List[PlanarPoint]:
    """
    Project an ordered sequence of positions into planar UTM coordinates.

    Args:
        positions: Positions in decimal degrees
        zone: Zone to project into. If None, the zone of the first position is used.

    Returns:
        List of PlanarPoint, index-aligned with positions

    Raises:
        EmptyTrackError: If positions is empty
        InvalidCoordinateError: If any position is invalid
    """
    if not positions:
        raise EmptyTrackError("Cannot project an empty track")

    for i, position in enumerate(positions):
        validate_position(position, i)

    if zone is None:
        zone = select_utm_zone(positions[0])

    _warn_on_zone_drift(positions, zone)

    projection = create_utm_projection(zone)
    lons = [pos.longitude for pos in positions]
    lats = [pos.latitude for pos in positions]
    x_coords, y_coords = projection(lons, lats)

    logger.debug(f"Projected {len(positions)} points into UTM zone {zone}")
    return [PlanarPoint(float(x), float(y)) for x, y in zip(x_coords, y_coords)]


def _warn_on_zone_drift(positions: Sequence[Position], zone: UtmZone) -> None:
    """Log a warning if some positions naturally belong to another zone."""
    outside = sum(1 for pos in positions if select_utm_zone(pos) != zone)
    if outside:
        logger.warning(
            f"{outside} of {len(positions)} points lie outside UTM zone {zone}; "
            f"projecting them into zone {zone} anyway"
        )
