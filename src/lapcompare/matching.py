"""
Nearest-neighbour matching between two projected laps.

For every point of the reference lap, find the closest point of the other
lap and carry over that point's value. Ties go to the lowest index in the
other lap.
"""

from typing import List, Optional, Sequence, Tuple
import logging

from shapely.geometry import Point
from shapely.strtree import STRtree

from .errors import EmptyOtherTrackError, LengthMismatchError
from .geometry import PlanarPoint

logger = logging.getLogger(__name__)

SCAN = "scan"
STRTREE = "strtree"
MATCH_METHODS = (SCAN, STRTREE)


def nearest_indices(
    reference: Sequence[PlanarPoint],
    other: Sequence[PlanarPoint],
    method: str = SCAN,
) -> List[int]:
    """
    Find the index of the closest other-lap point for each reference point.

    Args:
        reference: Projected reference lap
        other: Projected lap to search
        method: "scan" for the exhaustive O(n*m) scan, "strtree" for a
                shapely STRtree query. Both give identical results.

    Returns:
        List of indices into other, one per reference point

    Raises:
        EmptyOtherTrackError: If other is empty
        ValueError: If method is unknown
    """
    if not other:
        raise EmptyOtherTrackError("Cannot match against an empty track")
    if method == SCAN:
        return _scan_nearest(reference, other)
    if method == STRTREE:
        return _strtree_nearest(reference, other)
    raise ValueError(
        f"Unknown match method {method!r}; expected one of {', '.join(MATCH_METHODS)}"
    )


def match_by_proximity(
    reference: Sequence[PlanarPoint],
    other: Sequence[PlanarPoint],
    other_values: Sequence[float],
    method: str = SCAN,
) -> List[float]:
    """
    Map each reference point to the value of its closest point in the other lap.

    Args:
        reference: Projected reference lap
        other: Projected lap carrying the values
        other_values: One value per point of other
        method: Search method, see nearest_indices

    Returns:
        List of values, one per reference point

    Raises:
        EmptyOtherTrackError: If other is empty
        LengthMismatchError: If other and other_values differ in length
    """
    if not other:
        raise EmptyOtherTrackError("Cannot match against an empty track")
    if len(other) != len(other_values):
        raise LengthMismatchError(
            f"Track has {len(other)} points but {len(other_values)} values"
        )

    indices = nearest_indices(reference, other, method)
    logger.debug(
        f"Matched {len(reference)} reference points against {len(other)} points ({method})"
    )
    return [other_values[j] for j in indices]


def _scan_nearest(
    reference: Sequence[PlanarPoint], other: Sequence[PlanarPoint]
) -> List[int]:
    """Exhaustive nearest search keeping the first minimum found."""
    result = []
    for px, py in reference:
        min_dist = float("inf")
        min_index = 0
        for j, (qx, qy) in enumerate(other):
            dx = px - qx
            dy = py - qy
            dist = dx * dx + dy * dy
            # Strict comparison keeps the lowest index on ties
            if dist < min_dist:
                min_dist = dist
                min_index = j
        result.append(min_index)
    return result


def _strtree_nearest(
    reference: Sequence[PlanarPoint], other: Sequence[PlanarPoint]
) -> List[int]:
    """
    Nearest search through a shapely STRtree.

    GEOS ranks candidates by rounded euclidean distance, so distinct squared
    distances can come back as equals. The candidates are re-ranked on exact
    squared distance, then by lowest index, to pick the same point as the scan.
    """
    if not reference:
        return []

    tree = STRtree([Point(x, y) for x, y in other])
    input_idx, tree_idx = tree.query_nearest(
        [Point(x, y) for x, y in reference], all_matches=True
    )

    best: List[Optional[Tuple[float, int]]] = [None] * len(reference)
    for i, j in zip(input_idx, tree_idx):
        i, j = int(i), int(j)
        px, py = reference[i]
        qx, qy = other[j]
        dx = px - qx
        dy = py - qy
        candidate = (dx * dx + dy * dy, j)
        if best[i] is None or candidate < best[i]:
            best[i] = candidate

    missing = [i for i, match in enumerate(best) if match is None]
    if missing:
        raise ValueError(
            f"Spatial index found no nearest point for reference points {missing}"
        )
    return [match[1] for match in best]
