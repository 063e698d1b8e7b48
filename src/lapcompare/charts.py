#!/usr/bin/env python3
"""
Comparison charts rendered with matplotlib.
"""

import logging

from matplotlib.figure import Figure

from .comparison import LapComparison
from .config import LapCompareConfig

logger = logging.getLogger(__name__)

REFERENCE_COLOR = "#2E86AB"
OTHER_COLOR = "#D23C4C"


def create_comparison_charts(
    comparison: LapComparison,
    output_filename: str,
    config: LapCompareConfig,
) -> Figure:
    """
    Plot the metric comparison and cumulative distances, save as an image.

    The top panel shows the reference lap's values and the other lap's
    location-matched values over the reference sample index. The bottom panel
    shows each lap's cumulative distance over its own sample index.

    Args:
        comparison: LapComparison to plot
        output_filename: Path where the image should be saved
        config: LapCompareConfig with chart size settings

    Returns:
        The matplotlib Figure that was saved
    """
    reference = comparison.reference
    other = comparison.other
    metric_label = reference.metric.capitalize()

    fig = Figure(figsize=(config.chart_width, config.chart_height))
    value_ax, distance_ax = fig.subplots(2, 1)

    value_ax.set_title(f"Lap {metric_label} Comparison")
    value_ax.plot(
        comparison.sample_index,
        comparison.reference_values,
        color=REFERENCE_COLOR,
        linewidth=1.0,
        label=reference.name or "Reference",
    )
    value_ax.plot(
        comparison.sample_index,
        comparison.matched_values,
        color=OTHER_COLOR,
        linewidth=1.0,
        label=f"{other.name or 'Other'} (closest)",
    )
    value_ax.set_xlabel("Sample Index")
    value_ax.set_ylabel(metric_label)
    value_ax.grid(True, alpha=0.3)
    value_ax.legend(fontsize=8)

    distance_ax.set_title("Cumulative Distance")
    distance_ax.plot(
        comparison.sample_index,
        comparison.reference_distance,
        color=REFERENCE_COLOR,
        linewidth=1.0,
        label=reference.name or "Reference",
    )
    distance_ax.plot(
        range(len(comparison.other_distance)),
        comparison.other_distance,
        color=OTHER_COLOR,
        linewidth=1.0,
        label=other.name or "Other",
    )
    distance_ax.set_xlabel("Sample Index")
    distance_ax.set_ylabel("Distance (m)")
    distance_ax.grid(True, alpha=0.3)
    distance_ax.legend(fontsize=8)

    fig.tight_layout()
    fig.savefig(output_filename, dpi=config.chart_dpi)

    logger.debug(f"Charts saved to {output_filename}")
    return fig
