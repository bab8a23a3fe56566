"""
Distance Calculations on the Ellipsoid.

This module is the convenience layer over the geodesic solvers: radian
wrappers for single point pairs, batched distances, interpolation along a
geodesic, and ``geodist`` distance matrices with a choice of measure.

Measures
--------
geodesic
    Shortest path on the ellipsoid (this library's inverse solver).
    Accurate to round-off for any pair of points.
haversine
    Great-circle distance on a sphere of radius a = 6378137 m.
vincenty
    Great-circle distance on the same sphere by the Vincenty
    atan2 formula, better conditioned for antipodal points.
cheap
    Mapbox cheap-ruler flat-earth approximation with WGS84 local scale
    factors at a reference latitude. Fast and accurate to ~0.1% below
    100 km; unsuitable beyond that.

Why Simpler Models Are Approximate
----------------------------------
A sphere of equatorial radius overestimates polar distances by up to
0.3% (and more for a mean radius at low latitudes). The flat-earth
approximation grows without bound in error with distance.

References
----------
- Karney, C.F.F. (2013). Algorithms for geodesics. Journal of Geodesy, 87(1), 43-55.
- Vincenty, T. (1975). Direct and inverse solutions of geodesics on the
  ellipsoid with application of nested equations. Survey Review 23(176).
- Mapbox cheap-ruler: https://github.com/mapbox/cheap-ruler
"""

import math
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from common.constants import GeodesyConstants
from common.exceptions import OutOfRangeError, UnknownMeasureError
from common.logging_config import get_logger
from common.types import GeoCoordinate
from common.units import convert_length, ensure_magnitude, validate_units
from geospatial.capabilities import Capability
from geospatial.direct import direct
from geospatial.ellipsoid import Ellipsoid, WGS84
from geospatial.geodesic_line import inverse_line
from geospatial.inverse import general_inverse, inverse

logger = get_logger(__name__)

MEASURES = ("geodesic", "haversine", "vincenty", "cheap")

# Distance beyond which the cheap measure is reported as inaccurate
CHEAP_MAX_DISTANCE_M = 100_000.0

_SPHERE_RADIUS = GeodesyConstants.SPHERICAL_MEASURE_RADIUS.value


@dataclass
class InverseSummary:
    """Distance and azimuths between two points.

    Attributes
    ----------
    distance_m : float
        Geodesic (shortest path) distance in meters.
    azimuth_forward_rad : float
        Forward azimuth (direction from point 1 to point 2) in radians,
        measured clockwise from north, in [0, 2π).
    azimuth_back_rad : float
        Back azimuth (direction from point 2 to point 1) in radians,
        measured clockwise from north, in [0, 2π).
    """
    distance_m: float
    azimuth_forward_rad: float
    azimuth_back_rad: float


# =============================================================================
# Radian wrappers
# =============================================================================

def geodesic_inverse(
    lat1_rad: float,
    lon1_rad: float,
    lat2_rad: float,
    lon2_rad: float,
    ellipsoid: Ellipsoid = WGS84,
) -> InverseSummary:
    """Solve the inverse geodesic problem with angles in radians.

    Parameters
    ----------
    lat1_rad, lon1_rad : float
        First point in radians.
    lat2_rad, lon2_rad : float
        Second point in radians.
    ellipsoid : Ellipsoid
        Ellipsoid to solve on (WGS84 by default).

    Returns
    -------
    InverseSummary
        Distance in meters, forward and back azimuths in radians.

    Examples
    --------
    >>> # New York to London
    >>> import numpy as np
    >>> result = geodesic_inverse(
    ...     np.radians(40.7128), np.radians(-74.0060),  # NYC
    ...     np.radians(51.5074), np.radians(-0.1278)   # London
    ... )
    >>> print(f"Distance: {result.distance_m / 1000:.1f} km")
    Distance: 5585.2 km
    """
    r = inverse(ellipsoid, math.degrees(lat1_rad), math.degrees(lon1_rad),
                math.degrees(lat2_rad), math.degrees(lon2_rad))
    two_pi = 2 * math.pi
    return InverseSummary(
        distance_m=r.s12,
        azimuth_forward_rad=math.radians(r.azi1) % two_pi,
        azimuth_back_rad=math.radians(r.azi2 + 180) % two_pi,
    )


@validate_units({'distance_m': 'm'})
def geodesic_direct(
    lat1_rad: float,
    lon1_rad: float,
    azimuth_rad: float,
    distance_m: Union[float, Any],
    ellipsoid: Ellipsoid = WGS84,
) -> Tuple[float, float, float]:
    """Solve the direct geodesic problem with angles in radians.

    Parameters
    ----------
    lat1_rad, lon1_rad : float
        Starting point in radians.
    azimuth_rad : float
        Forward azimuth in radians (clockwise from north).
    distance_m : float or pint.Quantity
        Distance to travel; bare numbers are meters.
    ellipsoid : Ellipsoid
        Ellipsoid to solve on.

    Returns
    -------
    Tuple[float, float, float]
        (lat2_rad, lon2_rad, back_azimuth_rad): endpoint and the direction
        from the endpoint back to the start, in [0, 2π).

    Examples
    --------
    >>> # Travel 1000 km due east from the equator
    >>> import numpy as np
    >>> lat, lon, az = geodesic_direct(0.0, 0.0, np.pi/2, 1_000_000)
    >>> print(f"Endpoint: {np.degrees(lat):.4f}°, {np.degrees(lon):.4f}°")
    Endpoint: 0.0000°, 8.9832°
    """
    s12 = ensure_magnitude(distance_m, "m")
    r = direct(ellipsoid, math.degrees(lat1_rad), math.degrees(lon1_rad),
               math.degrees(azimuth_rad), s12)
    back = math.radians(r.azi2 + 180) % (2 * math.pi)
    return math.radians(r.lat2), math.radians(r.lon2), back


def geodesic_distance(
    lat1_rad: float,
    lon1_rad: float,
    lat2_rad: float,
    lon2_rad: float,
    ellipsoid: Ellipsoid = WGS84,
) -> float:
    """Geodesic distance in meters between two points given in radians."""
    return geodesic_inverse(lat1_rad, lon1_rad, lat2_rad, lon2_rad, ellipsoid).distance_m


def distance_between(
    p1: GeoCoordinate,
    p2: GeoCoordinate,
    ellipsoid: Ellipsoid = WGS84,
) -> float:
    """Geodesic distance between two coordinates (degrees)."""
    r = general_inverse(ellipsoid, p1.latitude, p1.longitude,
                        p2.latitude, p2.longitude, Capability.DISTANCE)
    return r.s12


def geodesic_distance_batch(
    lat1_rad: ArrayLike,
    lon1_rad: ArrayLike,
    lat2_rad: ArrayLike,
    lon2_rad: ArrayLike,
    ellipsoid: Ellipsoid = WGS84,
) -> NDArray[np.float64]:
    """Geodesic distances for arrays of point pairs.

    Parameters
    ----------
    lat1_rad, lon1_rad : array_like
        First points in radians.
    lat2_rad, lon2_rad : array_like
        Second points in radians.
    ellipsoid : Ellipsoid
        Ellipsoid to solve on.

    Returns
    -------
    ndarray
        Geodesic distances in meters, with the broadcast shape of the inputs.

    Notes
    -----
    Inputs are broadcast against each other, so one point may be paired
    with many.
    """
    lat1, lon1, lat2, lon2 = np.broadcast_arrays(
        np.degrees(lat1_rad), np.degrees(lon1_rad),
        np.degrees(lat2_rad), np.degrees(lon2_rad),
    )
    out = np.empty(lat1.shape, dtype=np.float64)
    for idx in np.ndindex(lat1.shape):
        out[idx] = general_inverse(ellipsoid, float(lat1[idx]), float(lon1[idx]),
                                   float(lat2[idx]), float(lon2[idx]),
                                   Capability.DISTANCE).s12
    return out


def compute_azimuth(
    lat1_rad: float,
    lon1_rad: float,
    lat2_rad: float,
    lon2_rad: float,
    ellipsoid: Ellipsoid = WGS84,
) -> float:
    """Forward azimuth from point 1 to point 2, radians clockwise from north in [0, 2π)."""
    return geodesic_inverse(lat1_rad, lon1_rad, lat2_rad, lon2_rad, ellipsoid).azimuth_forward_rad


def interpolate_geodesic(
    lat1_rad: float,
    lon1_rad: float,
    lat2_rad: float,
    lon2_rad: float,
    num_points: int,
    ellipsoid: Ellipsoid = WGS84,
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Interpolate points along the geodesic between two endpoints.

    Parameters
    ----------
    lat1_rad, lon1_rad : float
        First point in radians.
    lat2_rad, lon2_rad : float
        Second point in radians.
    num_points : int
        Number of points including endpoints (at least 2).
    ellipsoid : Ellipsoid
        Ellipsoid to solve on.

    Returns
    -------
    Tuple[ndarray, ndarray]
        (latitudes_rad, longitudes_rad) of points equally spaced in
        distance. Longitudes are reduced to (-π, π].
    """
    line = inverse_line(
        ellipsoid,
        math.degrees(lat1_rad), math.degrees(lon1_rad),
        math.degrees(lat2_rad), math.degrees(lon2_rad),
        Capability.STANDARD | Capability.DISTANCE_IN,
    )
    pts = line.waypoints(num_points)
    return np.radians(pts[:, 0]), np.radians(pts[:, 1])


def compute_heading_change(heading1_rad: float, heading2_rad: float) -> float:
    """Signed change in heading (turn angle).

    Returns
    -------
    float
        Heading change in radians, in [-π, π). Positive is a clockwise
        (rightward) turn.
    """
    return float(np.mod(heading2_rad - heading1_rad + np.pi, 2 * np.pi) - np.pi)


# =============================================================================
# Approximate measures (degrees in, meters out, vectorised)
# =============================================================================

def haversine_distance(lat1, lon1, lat2, lon2) -> NDArray[np.float64]:
    """Great-circle distance by the haversine formula.

    Parameters
    ----------
    lat1, lon1, lat2, lon2 : array_like
        Coordinates in degrees; broadcast against each other.

    Returns
    -------
    ndarray
        Distance in meters on a sphere of radius 6378137 m.
    """
    lat1, lon1, lat2, lon2 = (np.asarray(v, dtype=np.float64)
                              for v in (lat1, lon1, lat2, lon2))
    sin_dlat = np.sin(np.radians(lat2 - lat1) / 2)
    sin_dlon = np.sin(np.radians(lon2 - lon1) / 2)
    h = sin_dlat ** 2 + np.cos(np.radians(lat1)) * np.cos(np.radians(lat2)) * sin_dlon ** 2
    return 2 * _SPHERE_RADIUS * np.arcsin(np.sqrt(np.minimum(h, 1.0)))


def vincenty_distance(lat1, lon1, lat2, lon2) -> NDArray[np.float64]:
    """Great-circle distance by the spherical Vincenty formula.

    Same sphere as :func:`haversine_distance`, evaluated with atan2 so
    that nearly antipodal points keep full precision.
    """
    phi1, lam1, phi2, lam2 = (np.radians(np.asarray(v, dtype=np.float64))
                              for v in (lat1, lon1, lat2, lon2))
    dlam = lam2 - lam1
    num = np.hypot(np.cos(phi2) * np.sin(dlam),
                   np.cos(phi1) * np.sin(phi2) - np.sin(phi1) * np.cos(phi2) * np.cos(dlam))
    den = np.sin(phi1) * np.sin(phi2) + np.cos(phi1) * np.cos(phi2) * np.cos(dlam)
    return _SPHERE_RADIUS * np.arctan2(num, den)


def cheap_scale_factors(ref_lat: float, ellipsoid: Ellipsoid = WGS84) -> Tuple[float, float]:
    """Meters per degree of longitude and latitude at ``ref_lat``.

    Returns
    -------
    Tuple[float, float]
        (kx, ky) from the ellipsoid's prime-vertical and meridional radii
        of curvature.
    """
    coslat = math.cos(math.radians(ref_lat))
    w2 = 1 / (1 - ellipsoid.e2 * (1 - coslat * coslat))
    w = math.sqrt(w2)
    m = math.radians(1) * ellipsoid.a
    return m * w * coslat, m * w * w2 * (1 - ellipsoid.e2)


def cheap_distance(lat1, lon1, lat2, lon2, ref_lat: Optional[float] = None) -> NDArray[np.float64]:
    """Flat-earth (cheap ruler) distance.

    Parameters
    ----------
    lat1, lon1, lat2, lon2 : array_like
        Coordinates in degrees; broadcast against each other.
    ref_lat : float, optional
        Latitude at which the scale factors are evaluated. Defaults to the
        midpoint of the latitude range of all points.

    Returns
    -------
    ndarray
        Distance in meters.
    """
    lat1, lon1, lat2, lon2 = (np.asarray(v, dtype=np.float64)
                              for v in (lat1, lon1, lat2, lon2))
    if ref_lat is None:
        lats = np.concatenate([lat1.ravel(), lat2.ravel()])
        ref_lat = (np.nanmin(lats) + np.nanmax(lats)) / 2
    kx, ky = cheap_scale_factors(float(ref_lat))
    # wrap longitude differences to [-180, 180)
    dlon = np.mod(lon2 - lon1 + 180.0, 360.0) - 180.0
    return np.hypot(dlon * kx, (lat2 - lat1) * ky)


# =============================================================================
# Distance matrices
# =============================================================================

_LON_PATTERN = re.compile(r"^x|x$|^lon|lon$", re.IGNORECASE)
_LAT_PATTERN = re.compile(r"^y|y$|^lat|lat$", re.IGNORECASE)
_LON_EXCLUDE = re.compile(r"^x[a-z]|[a-z]x$|^lon[a-z]|[a-z]lon$", re.IGNORECASE)
_LAT_EXCLUDE = re.compile(r"^y[a-z]|[a-z]y$|^lat[a-z]|[a-z]lat$", re.IGNORECASE)


def _find_key(names, pattern, exclude, axis):
    matches = [n for n in names if pattern.search(n)]
    if len(matches) > 1:
        matches = [n for n in matches if not exclude.search(n)]
    if len(matches) != 1:
        raise ValueError(
            f"Unable to determine the {axis} column from {list(names)}; "
            f"try renaming the columns"
        )
    return matches[0]


def as_lonlat(obj: Union[ArrayLike, Mapping[str, ArrayLike]]) -> NDArray[np.float64]:
    """Convert coordinates to an (n, 2) array of longitude, latitude.

    Parameters
    ----------
    obj : array_like or mapping
        An (n, k >= 2) array whose first two columns are longitude and
        latitude, a single (lon, lat) pair, or a mapping of column names to
        arrays where the longitude and latitude columns are recognised by
        name ('x'/'lon'/'longitude' and 'y'/'lat'/'latitude').

    Returns
    -------
    ndarray
        Shape (n, 2) float array.

    Raises
    ------
    ValueError
        If the shape or the column names cannot be interpreted.
    OutOfRangeError
        If a latitude lies outside [-90, 90].
    """
    if isinstance(obj, Mapping):
        names = [str(k) for k in obj.keys()]
        lon_key = _find_key(names, _LON_PATTERN, _LON_EXCLUDE, "longitude")
        lat_key = _find_key(names, _LAT_PATTERN, _LAT_EXCLUDE, "latitude")
        xy = np.column_stack([np.asarray(obj[lon_key], dtype=np.float64).ravel(),
                              np.asarray(obj[lat_key], dtype=np.float64).ravel()])
    else:
        xy = np.asarray(obj, dtype=np.float64)
        if xy.ndim == 1:
            xy = xy.reshape(1, -1)
        if xy.ndim != 2 or xy.shape[1] < 2:
            raise ValueError(
                f"Coordinates must have shape (n, 2) ordered lon, lat; got {xy.shape}"
            )
        xy = xy[:, :2]
    lat = xy[:, 1]
    if np.any(np.abs(lat[~np.isnan(lat)]) > 90):
        raise OutOfRangeError("Latitudes must lie within [-90, 90] degrees")
    return xy


def _pair_distances(lat1, lon1, lat2, lon2, measure, ellipsoid, ref_lat=None):
    """Distances between broadcast coordinate arrays for one measure."""
    if measure == "haversine":
        return haversine_distance(lat1, lon1, lat2, lon2)
    if measure == "vincenty":
        return vincenty_distance(lat1, lon1, lat2, lon2)
    if measure == "cheap":
        return cheap_distance(lat1, lon1, lat2, lon2, ref_lat)
    lat1, lon1, lat2, lon2 = np.broadcast_arrays(lat1, lon1, lat2, lon2)
    out = np.empty(lat1.shape, dtype=np.float64)
    for idx in np.ndindex(lat1.shape):
        out[idx] = general_inverse(ellipsoid, float(lat1[idx]), float(lon1[idx]),
                                   float(lat2[idx]), float(lon2[idx]),
                                   Capability.DISTANCE).s12
    return out


def geodist(
    x: Union[ArrayLike, Mapping[str, ArrayLike]],
    y: Optional[Union[ArrayLike, Mapping[str, ArrayLike]]] = None,
    *,
    sequential: bool = False,
    pad: bool = False,
    measure: str = "geodesic",
    ellipsoid: Ellipsoid = WGS84,
    units: str = "m",
) -> NDArray[np.float64]:
    """Distance matrices between sets of points.

    Parameters
    ----------
    x : array_like or mapping
        Points as (n, 2) longitude, latitude (see :func:`as_lonlat`).
    y : array_like or mapping, optional
        Second set of m points. If given, the n x m cross-distance matrix
        is returned.
    sequential : bool
        If True return the n - 1 distances between consecutive points of
        ``x``. ``y`` is ignored.
    pad : bool
        With ``sequential``, prepend NaN so the result has length n.
    measure : str
        One of 'geodesic', 'haversine', 'vincenty' or 'cheap'.
    ellipsoid : Ellipsoid
        Ellipsoid for the geodesic measure.
    units : str
        Length unit of the result (e.g. 'km', 'mile').

    Returns
    -------
    ndarray
        (n, n) symmetric matrix with zero diagonal, (n, m) cross matrix, or
        the sequential vector.

    Raises
    ------
    UnknownMeasureError
        If ``measure`` is not supported.
    OutOfRangeError
        If a latitude lies outside [-90, 90].

    Examples
    --------
    >>> x = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0]])
    >>> geodist(x, sequential=True, units="km").round(3)
    array([111.319, 110.574])
    """
    if measure not in MEASURES:
        raise UnknownMeasureError(
            f"Unknown measure '{measure}'; expected one of {', '.join(MEASURES)}"
        )
    xy = as_lonlat(x)
    n = xy.shape[0]

    if sequential:
        if y is not None:
            logger.warning("Sequential distances are calculated along 'x' only")
        ref_lat = _mid_latitude(xy)
        if n < 2:
            d = np.empty(0, dtype=np.float64)
        else:
            d = _pair_distances(xy[:-1, 1], xy[:-1, 0], xy[1:, 1], xy[1:, 0],
                                measure, ellipsoid, ref_lat)
        if pad:
            d = np.concatenate([[np.nan], d])
    elif y is None:
        logger.debug(f"Computing {n} x {n} {measure} distance matrix")
        ref_lat = _mid_latitude(xy)
        d = np.zeros((n, n), dtype=np.float64)
        i, j = np.triu_indices(n, k=1)
        upper = _pair_distances(xy[i, 1], xy[i, 0], xy[j, 1], xy[j, 0],
                                measure, ellipsoid, ref_lat)
        d[i, j] = upper
        d[j, i] = upper
    else:
        xy2 = as_lonlat(y)
        logger.debug(f"Computing {n} x {xy2.shape[0]} {measure} distance matrix")
        ref_lat = _mid_latitude(np.vstack([xy, xy2]))
        d = _pair_distances(xy[:, None, 1], xy[:, None, 0], xy2[None, :, 1], xy2[None, :, 0],
                            measure, ellipsoid, ref_lat)

    if measure == "cheap" and d.size and np.nanmax(d, initial=0.0) > CHEAP_MAX_DISTANCE_M:
        logger.warning(
            "Maximum distance is > 100km. The 'cheap' measure is inaccurate over "
            "such large distances; consider a different measure"
        )
    if units != "m":
        d = np.asarray(convert_length(d, units))
    return d


def _mid_latitude(xy: NDArray[np.float64]) -> float:
    lat = xy[:, 1]
    if lat.size == 0 or np.all(np.isnan(lat)):
        return 0.0
    return float((np.nanmin(lat) + np.nanmax(lat)) / 2)
