"""
Geodesic Polygon Area and Perimeter.

Vertices (or edges given as azimuth and length) are accumulated one at a
time; the polygon is closed implicitly by a geodesic back to the first
vertex. Each edge contributes the area between it and the equator, and
these contributions are summed exactly. Polygons that encircle a pole are
recognised by counting how often the edges cross the prime meridian.

Sign Convention
---------------
Counter-clockwise traversal gives a positive area. With ``sign=True``
the area is reported in (-A/2, A/2], otherwise in [0, A), where A is the
total area of the ellipsoid.

References
----------
- Karney, C.F.F. (2013). Algorithms for geodesics. J. Geodesy, 87(1), 43-55,
  Sec. 6.
- Shewchuk, J.R. (1997). Adaptive precision floating-point arithmetic.
  Discrete Comput. Geom. 18(3), 305-363.
"""

import math
from typing import Optional, Sequence, Tuple, Union

from common.logging_config import get_logger
from common.types import PolygonResult
from common.units import convert_area, convert_length
from geospatial.capabilities import Capability, Flags
from geospatial.direct import general_direct
from geospatial.ellipsoid import Ellipsoid
from geospatial.geomath import ang_diff, ang_normalize, error_free_sum
from geospatial.inverse import general_inverse

logger = get_logger(__name__)


class Accumulator:
    """Sum of floats held as an unevaluated pair (s, t) with s + t exact.

    Examples
    --------
    >>> acc = Accumulator()
    >>> for x in (1e20, 1.0, -1e20):
    ...     acc.add(x)
    >>> acc.sum()
    1.0
    """

    def __init__(self, y: Union[float, 'Accumulator'] = 0.0):
        self.set(y)

    def set(self, y: Union[float, 'Accumulator']) -> None:
        """Reset to a number or to a copy of another accumulator."""
        if isinstance(y, Accumulator):
            self._s, self._t = y._s, y._t
        else:
            self._s, self._t = float(y), 0.0

    def add(self, y: float) -> None:
        """Add y to the sum."""
        y, u = error_free_sum(y, self._t)
        self._s, self._t = error_free_sum(y, self._s)
        # s + t + u is now the exact sum; fold u back in
        if self._s == 0:
            self._s = u
        else:
            self._t += u

    def sum(self, y: float = 0.0) -> float:
        """Current sum, optionally plus y (without modifying the accumulator)."""
        if y == 0:
            return self._s
        b = Accumulator(self)
        b.add(y)
        return b._s

    def negate(self) -> None:
        self._s *= -1
        self._t *= -1


def _transit(lon1: float, lon2: float) -> int:
    """Signed crossing of the prime meridian by the edge lon1 -> lon2.

    Returns 1 for an eastward crossing, -1 for westward and 0 otherwise.
    """
    lon1 = ang_normalize(lon1)
    lon2 = ang_normalize(lon2)
    lon12, _ = ang_diff(lon1, lon2)
    if lon1 <= 0 and lon2 > 0 and lon12 > 0:
        return 1
    if lon2 <= 0 and lon1 > 0 and lon12 < 0:
        return -1
    return 0


def _transit_direct(lon1: float, lon2: float) -> int:
    """Crossing count for an edge whose end longitude is unrolled."""
    lon1 = math.fmod(lon1, 720.0)
    lon2 = math.fmod(lon2, 720.0)
    return (int((-360 < lon2 <= 0) or lon2 > 360)
            - int((-360 < lon1 <= 0) or lon1 > 360))


class PolygonArea:
    """Accumulate the vertices of a geodesic polygon or polyline.

    Parameters
    ----------
    ellipsoid : Ellipsoid
        Ellipsoid the polygon lies on.
    polyline : bool
        If True only the length of the open path is tracked and the area
        is NaN.

    Notes
    -----
    Instances are not thread-safe; use one accumulator per caller.

    Examples
    --------
    >>> poly = PolygonArea(WGS84)
    >>> for lat, lon in [(0, -1), (-1, 0), (0, 1), (1, 0)]:
    ...     poly.add_point(lat, lon)
    >>> result = poly.compute()
    >>> round(result.perimeter, 4), round(result.area)
    (627598.2731, 24619419146)
    """

    def __init__(self, ellipsoid: Ellipsoid, polyline: bool = False):
        self.ellipsoid = ellipsoid
        self.polyline = polyline
        self.area0 = ellipsoid.area
        self._caps = Capability.LATITUDE | Capability.LONGITUDE | Capability.DISTANCE
        self._flags = Flags.NONE
        if not polyline:
            self._caps |= Capability.AREA
            self._flags = Flags.LONG_UNROLL
        self._areasum = Accumulator()
        self._perimetersum = Accumulator()
        self.clear()

    def clear(self) -> None:
        """Remove all vertices."""
        self.num = 0
        self._crossings = 0
        self._areasum.set(0)
        self._perimetersum.set(0)
        self._lat0 = self._lon0 = self.lat1 = self.lon1 = math.nan
        logger.debug("Polygon accumulator cleared")

    def add_point(self, lat: float, lon: float) -> None:
        """Append a vertex; lat in [-90, 90] degrees."""
        if self.num == 0:
            self._lat0 = self.lat1 = lat
            self._lon0 = self.lon1 = lon
        else:
            r = general_inverse(self.ellipsoid, self.lat1, self.lon1, lat, lon, self._caps)
            self._perimetersum.add(r.s12)
            if not self.polyline:
                self._areasum.add(r.S12)
                self._crossings += _transit(self.lon1, lon)
            self.lat1 = lat
            self.lon1 = lon
        self.num += 1

    def add_edge(self, azi: float, s: float) -> None:
        """Append the vertex reached by travelling s along azimuth azi.

        Ignored until a first vertex has been added.
        """
        if self.num == 0:
            return
        r = general_direct(self.ellipsoid, self.lat1, self.lon1, azi, s,
                           self._caps, self._flags)
        self._perimetersum.add(s)
        if not self.polyline:
            self._areasum.add(r.S12)
            self._crossings += _transit_direct(self.lon1, r.lon2)
        self.lat1 = r.lat2
        self.lon1 = r.lon2
        self.num += 1

    def compute(self, reverse: bool = False, sign: bool = True) -> PolygonResult:
        """Close the polygon and return its perimeter and area.

        Parameters
        ----------
        reverse : bool
            If True clockwise traversal counts as positive.
        sign : bool
            If True return a signed area in (-A/2, A/2]; otherwise the
            area of the region to the left of the path, in [0, A).

        Returns
        -------
        PolygonResult
            The accumulator is not modified.
        """
        if self.num < 2:
            return PolygonResult(self.num, 0.0, math.nan if self.polyline else 0.0)

        if self.polyline:
            return PolygonResult(self.num, self._perimetersum.sum(), math.nan)

        r = general_inverse(self.ellipsoid, self.lat1, self.lon1,
                            self._lat0, self._lon0, self._caps)
        perimeter = self._perimetersum.sum(r.s12)
        tempsum = Accumulator(self._areasum)
        tempsum.add(r.S12)
        crossings = self._crossings + _transit(self.lon1, self._lon0)
        area = self._reduce_area(tempsum, crossings, reverse, sign)
        logger.debug(f"Closed polygon with {self.num} vertices, {crossings} crossings")
        return PolygonResult(self.num, perimeter, area, crossings)

    def test_point(
        self, lat: float, lon: float, reverse: bool = False, sign: bool = True
    ) -> PolygonResult:
        """Result if (lat, lon) were added as the next vertex.

        The accumulator is not modified.
        """
        if self.num == 0:
            return PolygonResult(1, 0.0, math.nan if self.polyline else 0.0)

        perimeter = self._perimetersum.sum()
        tempsum = Accumulator(0.0 if self.polyline else self._areasum)
        crossings = self._crossings
        legs = [(self.lat1, self.lon1, lat, lon)]
        if not self.polyline:
            legs.append((lat, lon, self._lat0, self._lon0))
        for lat_a, lon_a, lat_b, lon_b in legs:
            r = general_inverse(self.ellipsoid, lat_a, lon_a, lat_b, lon_b, self._caps)
            perimeter += r.s12
            if not self.polyline:
                tempsum.add(r.S12)
                crossings += _transit(lon_a, lon_b)

        if self.polyline:
            return PolygonResult(self.num + 1, perimeter, math.nan)
        area = self._reduce_area(tempsum, crossings, reverse, sign)
        return PolygonResult(self.num + 1, perimeter, area, crossings)

    def test_edge(
        self, azi: float, s: float, reverse: bool = False, sign: bool = True
    ) -> PolygonResult:
        """Result if the edge (azi, s) were added next.

        The accumulator is not modified. Without a first vertex the
        perimeter and area are NaN.
        """
        if self.num == 0:
            return PolygonResult(0, math.nan, math.nan)
        num = self.num + 1
        perimeter = self._perimetersum.sum() + s
        if self.polyline:
            return PolygonResult(num, perimeter, math.nan)

        tempsum = Accumulator(self._areasum)
        crossings = self._crossings
        r = general_direct(self.ellipsoid, self.lat1, self.lon1, azi, s,
                           self._caps, self._flags)
        tempsum.add(r.S12)
        crossings += _transit_direct(self.lon1, r.lon2)
        back = general_inverse(self.ellipsoid, r.lat2, r.lon2,
                               self._lat0, self._lon0, self._caps)
        perimeter += back.s12
        tempsum.add(back.S12)
        crossings += _transit(r.lon2, self._lon0)
        area = self._reduce_area(tempsum, crossings, reverse, sign)
        return PolygonResult(num, perimeter, area, crossings)

    def _reduce_area(self, tempsum: Accumulator, crossings: int,
                     reverse: bool, sign: bool) -> float:
        # an odd number of crossings means the path winds around a pole
        if crossings & 1:
            tempsum.add((1 if tempsum.sum() < 0 else -1) * self.area0 / 2)
        # the edge sums run clockwise positive
        if not reverse:
            tempsum.negate()
        if sign:
            if tempsum.sum() > self.area0 / 2:
                tempsum.add(-self.area0)
            elif tempsum.sum() <= -self.area0 / 2:
                tempsum.add(self.area0)
        else:
            if tempsum.sum() >= self.area0:
                tempsum.add(-self.area0)
            elif tempsum.sum() < 0:
                tempsum.add(self.area0)
        return 0.0 + tempsum.sum()


# =============================================================================
# Functional interface
# =============================================================================

def polygon_add(polygon: PolygonArea, lat: float, lon: float) -> PolygonArea:
    """Add a vertex to ``polygon`` and return it for chaining."""
    polygon.add_point(lat, lon)
    return polygon


def polygon_compute(
    polygon: PolygonArea, reverse: bool = False, sign: bool = True
) -> PolygonResult:
    """Close ``polygon`` and return its perimeter and area."""
    return polygon.compute(reverse, sign)


def polygon_area_perimeter(
    ellipsoid: Ellipsoid,
    lats: Sequence[float],
    lons: Sequence[float],
    length_unit: Optional[str] = None,
) -> Tuple[float, float]:
    """Signed area and perimeter of the polygon with the given vertices.

    Parameters
    ----------
    ellipsoid : Ellipsoid
        Ellipsoid the polygon lies on.
    lats, lons : sequence of float
        Vertex latitudes and longitudes in degrees, in traversal order. The
        closing edge back to the first vertex is implied.
    length_unit : str, optional
        If given, the perimeter is returned in this unit and the area in
        its square (e.g. 'km' gives km and km**2).

    Returns
    -------
    Tuple[float, float]
        (area, perimeter); counter-clockwise traversal gives a positive area.

    Raises
    ------
    ValueError
        If the coordinate sequences differ in length or the unit is not a
        length.
    """
    if len(lats) != len(lons):
        raise ValueError(
            f"Latitude and longitude counts differ: {len(lats)} vs {len(lons)}"
        )
    polygon = PolygonArea(ellipsoid)
    for lat, lon in zip(lats, lons):
        polygon_add(polygon, float(lat), float(lon))
    result = polygon_compute(polygon)
    area, perimeter = result.area, result.perimeter
    if length_unit is not None:
        perimeter = convert_length(perimeter, length_unit)
        area = convert_area(area, f"{length_unit}**2")
    return area, perimeter
