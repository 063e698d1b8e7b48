"""
Compare two laps sample-for-sample by location.
"""

from typing import List, NamedTuple
import logging

from .distance import cumulative_distance
from .geometry import UtmZone
from .lap import Lap
from .matching import SCAN, match_by_proximity

logger = logging.getLogger(__name__)


class LapComparison(NamedTuple):
    """Aligned series produced by comparing two laps."""

    reference: Lap
    other: Lap
    zone: UtmZone
    sample_index: List[int]  # 0..N-1 over the reference lap
    reference_values: List[float]
    matched_values: List[float]  # other lap's value at its closest point
    reference_distance: List[float]  # meters
    other_distance: List[float]  # meters

    def deltas(self) -> List[float]:
        """Matched minus reference value at each reference sample."""
        return [m - r for m, r in zip(self.matched_values, self.reference_values)]


def compare_laps(reference: Lap, other: Lap, method: str = SCAN) -> LapComparison:
    """
    Align the other lap's values to the reference lap by spatial proximity.

    Both laps are projected into the zone of the reference lap's first point.

    Args:
        reference: Lap whose samples define the comparison axis
        other: Lap whose values are carried over
        method: Nearest-neighbour search method ("scan" or "strtree")

    Returns:
        LapComparison with index-aligned series
    """
    zone = reference.zone
    if other.zone != zone:
        logger.warning(
            f"Lap {other.name!r} starts in UTM zone {other.zone}, "
            f"projecting it into reference zone {zone}"
        )

    reference_points = reference.project(zone)
    other_points = other.project(zone)

    matched = match_by_proximity(
        reference_points, other_points, other.values, method=method
    )

    comparison = LapComparison(
        reference=reference,
        other=other,
        zone=zone,
        sample_index=list(range(len(reference))),
        reference_values=list(reference.values),
        matched_values=matched,
        reference_distance=cumulative_distance(reference_points),
        other_distance=cumulative_distance(other_points),
    )

    logger.debug(
        f"Compared {reference.name!r} ({len(reference)} samples, "
        f"{comparison.reference_distance[-1]:.1f} m) with {other.name!r} "
        f"({len(other)} samples, {comparison.other_distance[-1]:.1f} m) in zone {zone}"
    )
    return comparison
