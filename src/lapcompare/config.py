from dataclasses import dataclass


@dataclass
class LapCompareConfig:
    """Configuration for the lapcompare CLI."""

    metric: str = "speed"
    matcher: str = "scan"
    bbox_buffer: float = 20.0
    log_level: str = "WARNING"
    metrics: bool = False
    chart_width: float = 10.0
    chart_height: float = 8.0
    chart_dpi: int = 100
