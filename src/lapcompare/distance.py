"""
Cumulative distance along a projected lap.
"""

from typing import List, Sequence
import logging
import math

from .errors import EmptyTrackError
from .geometry import PlanarPoint

logger = logging.getLogger(__name__)


def cumulative_distance(track: Sequence[PlanarPoint]) -> List[float]:
    """
    Calculate the running path length along a projected lap.

    Args:
        track: Projected points in metres

    Returns:
        List of distances in metres, one per point, starting at 0.0

    Raises:
        EmptyTrackError: If track is empty
    """
    if not track:
        raise EmptyTrackError("Cannot compute cumulative distance of an empty track")

    distances = [0.0]
    cumulative = 0.0

    for i in range(1, len(track)):
        x1, y1 = track[i - 1]
        x2, y2 = track[i]
        cumulative += math.sqrt((x2 - x1) ** 2 + (y2 - y1) ** 2)
        distances.append(cumulative)

    return distances

