"""
Direct Geodesic Problem.

Given a starting point, an azimuth and a distance (or an arc length on the
auxiliary sphere), find the end point and the azimuth there. The problem is
solved by setting up a :class:`GeodesicLine` for the requested quantities
and evaluating a single position on it.

References
----------
- Karney, C.F.F. (2013). Algorithms for geodesics. J. Geodesy, 87(1), 43-55,
  Sec. 3.
"""

from common.types import GeodesicResult
from geospatial.capabilities import Capability, Flags
from geospatial.ellipsoid import Ellipsoid
from geospatial.geodesic_line import GeodesicLine


def general_direct(
    ellipsoid: Ellipsoid,
    lat1: float,
    lon1: float,
    azi1: float,
    s12_a12: float,
    caps: Capability = Capability.STANDARD,
    flags: Flags = Flags.NONE,
) -> GeodesicResult:
    """Solve the direct geodesic problem.

    Parameters
    ----------
    ellipsoid : Ellipsoid
        Ellipsoid to solve on.
    lat1, lon1 : float
        Starting point in degrees.
    azi1 : float
        Azimuth at the starting point in degrees.
    s12_a12 : float
        Distance to travel, or the arc length in degrees when
        ``Flags.ARC_MODE`` is set. Negative values travel backwards.
    caps : Capability
        Quantities to compute.
    flags : Flags
        ``ARC_MODE`` and/or ``LONG_UNROLL``. With ``LONG_UNROLL`` the
        longitude changes continuously along the geodesic, so
        ``lon2 - lon1`` counts the times it wrapped around the ellipsoid.

    Returns
    -------
    GeodesicResult
        Requested quantities and ``a12``.

    Examples
    --------
    >>> r = general_direct(WGS84, 40, -75, -10, 2e7, flags=Flags.LONG_UNROLL)
    >>> round(r.lon2)
    -254
    """
    arcmode = Flags.ARC_MODE in flags
    line_caps = caps if arcmode else caps | Capability.DISTANCE_IN
    line = GeodesicLine(ellipsoid, lat1, lon1, azi1, line_caps)
    return line.general_position(flags, s12_a12, caps)


def direct(
    ellipsoid: Ellipsoid,
    lat1: float,
    lon1: float,
    azi1: float,
    s12: float,
) -> GeodesicResult:
    """End point and azimuth after travelling s12 from (lat1, lon1) along azi1.

    Examples
    --------
    >>> r = direct(WGS84, 40.64, -73.78, 45.0, 10e6)
    >>> round(r.lat2, 5), round(r.lon2, 5)
    (32.6211, 49.05249)
    """
    return general_direct(ellipsoid, lat1, lon1, azi1, s12, Capability.STANDARD)


def arc_direct(
    ellipsoid: Ellipsoid,
    lat1: float,
    lon1: float,
    azi1: float,
    a12: float,
    caps: Capability = Capability.STANDARD,
) -> GeodesicResult:
    """Direct problem with the arc length a12 (degrees) given instead of a distance."""
    return general_direct(ellipsoid, lat1, lon1, azi1, a12, caps, Flags.ARC_MODE)
