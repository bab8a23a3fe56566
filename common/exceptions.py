"""
Exception Hierarchy for Geodesic Computations.

Every library error subclasses both ``GeodesyError`` and the matching
built-in exception, so callers may catch either. Geometric degeneracies
(poles, antipodal or coincident points) are never errors; they are
resolved as special cases by the solvers.
"""


class GeodesyError(Exception):
    """Base exception for all geodesy errors."""


class InvalidEllipsoidError(GeodesyError, ValueError):
    """Ellipsoid parameters do not describe an ellipsoid of revolution.

    Raised when the equatorial radius is not finite and positive, or when
    the flattening is 1 or larger (the polar semi-axis is not positive).
    """


class OutOfRangeError(GeodesyError, ValueError):
    """A coordinate lies outside its admissible range.

    The solvers themselves propagate NaN for out-of-range latitudes; this
    error is reserved for caller-level containers which validate eagerly.
    """


class UnknownMeasureError(GeodesyError, ValueError):
    """Distance measure name is not one of the supported measures."""


class ConsistencyError(GeodesyError):
    """A consistency check failed while the checker runs in strict mode."""
