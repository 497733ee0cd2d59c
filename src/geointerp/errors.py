class GeoInterpError(Exception):
    """Base class for all interpolation errors."""


class ValidationError(GeoInterpError, ValueError):
    """Bad configuration or input: empty sample set, non-positive parameters, duplicates."""


class DimensionMismatchError(ValidationError):
    """Coordinates with inconsistent dimensionality."""


class InsufficientDataError(GeoInterpError):
    """Too few points for the requested statistic or model."""
