"""Error types raised by the lap alignment core."""


class LapCompareError(ValueError):
    """Base class for input validation failures."""


class InvalidCoordinateError(LapCompareError):
    """Raised when a latitude/longitude is out of range or not finite."""


class EmptyTrackError(LapCompareError):
    """Raised when an operation needs at least one sample and got none."""


class EmptyOtherTrackError(EmptyTrackError):
    """Raised when there are no candidate points to match against."""


class LengthMismatchError(LapCompareError):
    """Raised when two index-aligned sequences have different lengths."""


__all__ = [
    "LapCompareError",
    "InvalidCoordinateError",
    "EmptyTrackError",
    "EmptyOtherTrackError",
    "LengthMismatchError",
]
