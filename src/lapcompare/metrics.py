"""
Module for collecting and logging summary metrics of a lap comparison.
"""

from typing import NamedTuple
import logging

from .comparison import LapComparison
from .config import LapCompareConfig

logger = logging.getLogger(__name__)


class ComparisonMetrics(NamedTuple):
    """Container for comparison summary data."""

    reference_samples: int
    other_samples: int
    reference_length: float  # meters
    other_length: float  # meters
    mean_reference_value: float
    mean_matched_value: float
    mean_delta: float
    max_abs_delta: float
    max_abs_delta_index: int


def collect_metrics(comparison: LapComparison) -> ComparisonMetrics:
    """
    Collect summary metrics from a comparison.

    Args:
        comparison: LapComparison to summarise

    Returns:
        ComparisonMetrics containing all collected metrics
    """
    n = len(comparison.sample_index)
    deltas = comparison.deltas()

    max_abs_delta_index = max(range(n), key=lambda i: abs(deltas[i]))

    return ComparisonMetrics(
        reference_samples=n,
        other_samples=len(comparison.other),
        reference_length=comparison.reference_distance[-1],
        other_length=comparison.other_distance[-1],
        mean_reference_value=sum(comparison.reference_values) / n,
        mean_matched_value=sum(comparison.matched_values) / n,
        mean_delta=sum(deltas) / n,
        max_abs_delta=abs(deltas[max_abs_delta_index]),
        max_abs_delta_index=max_abs_delta_index,
    )


def log_metrics(metrics: ComparisonMetrics, config: LapCompareConfig) -> None:
    """
    Log detailed metrics after the comparison has been rendered.

    Args:
        metrics: ComparisonMetrics to log
        config: LapCompareConfig containing the metrics flag
    """
    if not config.metrics:
        return

    logger.debug("=== LAPCOMPARE_METRICS ===")
    for key, value in metrics._asdict().items():
        if isinstance(value, float):
            logger.debug(f"{key}={value:.3f}")
        else:
            logger.debug(f"{key}={value}")
    logger.debug("=== END_LAPCOMPARE_METRICS ===")
