"""
Geodesic Lines on the Ellipsoid.

A geodesic line is fixed by a starting point and azimuth. Once the
per-line quantities are set up (the equatorial azimuth, the arc to the
first equator crossing and the series coefficients for the capabilities
requested) any number of positions along it can be evaluated cheaply,
either by distance or by arc length on the auxiliary sphere.

Scientific Context
------------------
Domain: Geodesy
Model: Auxiliary-sphere mapping of the ellipsoidal geodesic; distance,
longitude, reduced-length and area integrals as order-6 series.

References
----------
- Karney, C.F.F. (2013). Algorithms for geodesics. J. Geodesy, 87(1), 43-55,
  Sec. 3 (direct problem) and Sec. 6 (area).
"""

import math
from typing import List, Optional

import numpy as np

from common.constants import TINY
from common.logging_config import get_logger
from common.types import GeodesicResult
from geospatial import series
from geospatial.capabilities import (
    Capability, Flags, SeriesFamily, LENGTHS, DIFFERENTIALS,
    closure, required_series,
)
from geospatial.ellipsoid import Ellipsoid
from geospatial.geomath import (
    ang_normalize, ang_round, atan2d, lat_fix, norm, sincosd, sq,
)
from geospatial.inverse import _gen_inverse

logger = get_logger(__name__)


class GeodesicLine:
    """A geodesic starting at (lat1, lon1) with azimuth azi1.

    Instances are immutable and may be shared between threads.

    Parameters
    ----------
    ellipsoid : Ellipsoid
        Ellipsoid the line lies on.
    lat1, lon1 : float
        Starting point in degrees; latitudes outside [-90, 90] yield NaN.
    azi1 : float
        Azimuth at the starting point in degrees.
    caps : Capability
        Quantities later positions may request. Only the series they need
        are built. Latitude and azimuth are always available.

    Attributes
    ----------
    s13, a13 : float or None
        Reference distance and arc set by :func:`direct_line`,
        :func:`arc_direct_line` and :func:`inverse_line`.

    Examples
    --------
    >>> line = GeodesicLine(WGS84, 40.64, -73.78, 45.0)
    >>> p = line.position(10e6)
    >>> round(p.lat2, 5), round(p.lon2, 5)
    (32.6211, 49.05249)
    """

    __slots__ = (
        "ellipsoid", "lat1", "lon1", "azi1", "salp1", "calp1", "caps",
        "s13", "a13",
        "_dn1", "_salp0", "_calp0", "_ssig1", "_csig1", "_somg1", "_comg1",
        "_k2", "_stau1", "_ctau1",
        "_a1m1", "_c1a", "_b11", "_c1pa", "_a2m1", "_c2a", "_b21",
        "_c3a", "_a3c", "_b31", "_c4a", "_a4", "_b41",
    )

    def __init__(
        self,
        ellipsoid: Ellipsoid,
        lat1: float,
        lon1: float,
        azi1: float,
        caps: Capability = Capability.ALL,
        *,
        salp1: float = math.nan,
        calp1: float = math.nan,
        s13: Optional[float] = None,
        a13: Optional[float] = None,
    ):
        set_ = self._set
        caps = closure(caps)
        families = required_series(caps)
        set_("ellipsoid", ellipsoid)
        set_("caps", caps)
        set_("lat1", lat_fix(lat1))
        set_("lon1", lon1)
        if math.isnan(salp1) or math.isnan(calp1):
            set_("azi1", ang_normalize(azi1))
            salp1, calp1 = sincosd(ang_round(azi1))
        else:
            set_("azi1", azi1)
        set_("salp1", salp1)
        set_("calp1", calp1)

        sbet1, cbet1 = sincosd(ang_round(self.lat1))
        sbet1 *= ellipsoid.f1
        sbet1, cbet1 = norm(sbet1, cbet1)
        # cbet1 = +tiny at the poles
        cbet1 = max(TINY, cbet1)
        set_("_dn1", math.sqrt(1 + ellipsoid.ep2 * sq(sbet1)))

        # sin(alp1) * cos(bet1) = sin(alp0)
        salp0 = salp1 * cbet1
        calp0 = math.hypot(calp1, salp1 * sbet1)
        set_("_salp0", salp0)
        set_("_calp0", calp0)
        # tan(sig1) = tan(bet1) / cos(alp1); tan(omg1) = sin(alp0) tan(sig1)
        csig1 = comg1 = cbet1 * calp1 if sbet1 != 0 or calp1 != 0 else 1.0
        ssig1, csig1 = norm(sbet1, csig1)
        set_("_ssig1", ssig1)
        set_("_csig1", csig1)
        set_("_somg1", salp0 * sbet1)
        set_("_comg1", comg1)

        k2 = sq(calp0) * ellipsoid.ep2
        set_("_k2", k2)
        eps = series.eps_from_k2(k2)

        for name in ("_stau1", "_ctau1", "_a1m1", "_c1a", "_b11", "_c1pa",
                     "_a2m1", "_c2a", "_b21", "_c3a", "_a3c", "_b31",
                     "_c4a", "_a4", "_b41"):
            set_(name, None)

        if SeriesFamily.C1 in families:
            c1a = series.c1(eps)
            b11 = series.sin_cos_series(True, ssig1, csig1, c1a)
            s, c = math.sin(b11), math.cos(b11)
            set_("_a1m1", series.a1m1(eps))
            set_("_c1a", c1a)
            set_("_b11", b11)
            # tau1 = sig1 + B11
            set_("_stau1", ssig1 * c + csig1 * s)
            set_("_ctau1", csig1 * c - ssig1 * s)

        if SeriesFamily.C1P in families:
            set_("_c1pa", series.c1p(eps))

        if SeriesFamily.C2 in families:
            c2a = series.c2(eps)
            set_("_a2m1", series.a2m1(eps))
            set_("_c2a", c2a)
            set_("_b21", series.sin_cos_series(True, ssig1, csig1, c2a))

        if SeriesFamily.C3 in families:
            c3a = series.eval_c3(ellipsoid, eps)
            set_("_c3a", c3a)
            set_("_a3c", -ellipsoid.f * salp0 * series.eval_a3(ellipsoid, eps))
            set_("_b31", series.sin_cos_series(True, ssig1, csig1, c3a))

        if SeriesFamily.C4 in families:
            c4a = series.eval_c4(ellipsoid, eps)
            set_("_c4a", c4a)
            # a^2 e^2 cos(alp0) sin(alp0)
            set_("_a4", sq(ellipsoid.a) * calp0 * salp0 * ellipsoid.e2)
            set_("_b41", series.sin_cos_series(False, ssig1, csig1, c4a))

        if a13 is not None:
            set_("a13", a13)
            set_("s13", self._gen_position(True, a13, Capability.DISTANCE, Flags.NONE).s12)
        elif s13 is not None:
            set_("s13", s13)
            set_("a13", self._gen_position(False, s13, Capability.NONE, Flags.NONE).a12)
        else:
            set_("s13", None)
            set_("a13", None)

    def _set(self, name, value):
        object.__setattr__(self, name, value)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __repr__(self):
        return (f"GeodesicLine(ellipsoid={self.ellipsoid.name!r}, lat1={self.lat1}, "
                f"lon1={self.lon1}, azi1={self.azi1}, s13={self.s13})")

    # =========================================================================
    # Position evaluation
    # =========================================================================

    def position(
        self,
        s12: float,
        caps: Capability = Capability.STANDARD,
        flags: Flags = Flags.NONE,
    ) -> GeodesicResult:
        """Point at distance s12 along the line.

        Requires the line to have been built with ``DISTANCE_IN``; otherwise
        the position fields of the result are NaN.
        """
        return self._gen_position(False, s12, caps, flags)

    def arc_position(
        self,
        a12: float,
        caps: Capability = Capability.STANDARD,
        flags: Flags = Flags.NONE,
    ) -> GeodesicResult:
        """Point at arc length a12 (degrees) along the line."""
        return self._gen_position(True, a12, caps, flags)

    def general_position(
        self,
        flags: Flags,
        s12_a12: float,
        caps: Capability = Capability.STANDARD,
    ) -> GeodesicResult:
        """Point along the line, by arc if ``Flags.ARC_MODE`` is set else by distance."""
        return self._gen_position(Flags.ARC_MODE in flags, s12_a12, caps, flags)

    def distance_at_arc(self, a12: float) -> float:
        """Distance corresponding to arc length a12 (NaN without ``DISTANCE``)."""
        s12 = self._gen_position(True, a12, Capability.DISTANCE, Flags.NONE).s12
        return math.nan if s12 is None else s12

    def points(
        self,
        n: int,
        caps: Capability = Capability.STANDARD,
        flags: Flags = Flags.NONE,
    ) -> List[GeodesicResult]:
        """Evaluate n equally spaced positions from point 1 to point 3.

        Spacing is by distance when the line supports ``DISTANCE_IN``,
        otherwise by arc length.

        Parameters
        ----------
        n : int
            Number of points including both ends (n >= 2).
        caps : Capability
            Quantities to compute at each point.
        flags : Flags
            ``Flags.LONG_UNROLL`` keeps the longitudes continuous.

        Returns
        -------
        List[GeodesicResult]
            Positions in order along the line.

        Raises
        ------
        ValueError
            If n < 2 or the line has no reference distance or arc.
        """
        if n < 2:
            raise ValueError(f"Need at least 2 points, got {n}")
        if self.a13 is None:
            raise ValueError("Line has no reference point; use direct_line or inverse_line")
        by_distance = (Capability.DISTANCE_IN in self.caps
                       and self.s13 is not None and math.isfinite(self.s13))
        span = self.s13 if by_distance else self.a13
        return [
            self._gen_position(not by_distance, span * i / (n - 1), caps, flags)
            for i in range(n)
        ]

    def waypoints(self, n: int, unroll: bool = False) -> np.ndarray:
        """Latitudes and longitudes of n equally spaced points.

        Returns
        -------
        np.ndarray
            Shape (n, 2) array of (latitude, longitude) in degrees.
        """
        flags = Flags.LONG_UNROLL if unroll else Flags.NONE
        pts = self.points(n, Capability.LATITUDE | Capability.LONGITUDE, flags)
        return np.array([[p.lat2, p.lon2] for p in pts])

    def _gen_position(
        self,
        arcmode: bool,
        s12_a12: float,
        caps: Capability,
        flags: Flags,
    ) -> GeodesicResult:
        outmask = closure(caps) & self.caps
        unroll = Flags.LONG_UNROLL in flags
        result = GeodesicResult(lat1=self.lat1, azi1=self.azi1)
        if Capability.LONGITUDE in outmask:
            result.lon1 = self.lon1 if unroll else ang_normalize(self.lon1)

        if not (arcmode or Capability.DISTANCE_IN in self.caps):
            logger.debug("Distance requested on a line without DISTANCE_IN")
            result.a12 = math.nan
            for cap, names in _OUTPUT_FIELDS:
                if cap in outmask:
                    for name in names:
                        setattr(result, name, math.nan)
            return result

        b = self.ellipsoid.b
        f = self.ellipsoid.f
        b12 = ab1 = 0.0
        if arcmode:
            sig12 = math.radians(s12_a12)
            ssig12, csig12 = sincosd(s12_a12)
        else:
            tau12 = s12_a12 / (b * (1 + self._a1m1))
            s, c = math.sin(tau12), math.cos(tau12)
            # tau2 = tau1 + tau12
            b12 = -series.sin_cos_series(True,
                                         self._stau1 * c + self._ctau1 * s,
                                         self._ctau1 * c - self._stau1 * s,
                                         self._c1pa)
            sig12 = tau12 - (b12 - self._b11)
            ssig12, csig12 = math.sin(sig12), math.cos(sig12)
            if abs(f) > 0.01:
                # One Newton step on sig12 for eccentric ellipsoids
                ssig2 = self._ssig1 * csig12 + self._csig1 * ssig12
                csig2 = self._csig1 * csig12 - self._ssig1 * ssig12
                b12 = series.sin_cos_series(True, ssig2, csig2, self._c1a)
                serr = ((1 + self._a1m1) * (sig12 + (b12 - self._b11))
                        - s12_a12 / b)
                sig12 = sig12 - serr / math.sqrt(1 + self._k2 * sq(ssig2))
                ssig12, csig12 = math.sin(sig12), math.cos(sig12)

        # sig2 = sig1 + sig12
        ssig2 = self._ssig1 * csig12 + self._csig1 * ssig12
        csig2 = self._csig1 * csig12 - self._ssig1 * ssig12
        dn2 = math.sqrt(1 + self._k2 * sq(ssig2))
        if outmask & LENGTHS:
            if arcmode or abs(f) > 0.01:
                b12 = series.sin_cos_series(True, ssig2, csig2, self._c1a)
            ab1 = (1 + self._a1m1) * (b12 - self._b11)
        # sin(bet2) = cos(alp0) * sin(sig2)
        sbet2 = self._calp0 * ssig2
        cbet2 = math.hypot(self._salp0, self._calp0 * csig2)
        if cbet2 == 0:
            # salp0 = 0 and csig2 = 0
            cbet2 = csig2 = TINY
        # tan(alp0) = cos(sig2) * tan(alp2)
        salp2 = self._salp0
        calp2 = self._calp0 * csig2

        if Capability.DISTANCE in outmask:
            result.s12 = b * ((1 + self._a1m1) * sig12 + ab1) if arcmode else s12_a12

        if Capability.LONGITUDE in outmask:
            # tan(omg2) = sin(alp0) * tan(sig2)
            somg2 = self._salp0 * ssig2
            comg2 = csig2
            e = math.copysign(1, self._salp0)
            if unroll:
                omg12 = e * (sig12
                             - (math.atan2(ssig2, csig2)
                                - math.atan2(self._ssig1, self._csig1))
                             + (math.atan2(e * somg2, comg2)
                                - math.atan2(e * self._somg1, self._comg1)))
            else:
                omg12 = math.atan2(somg2 * self._comg1 - comg2 * self._somg1,
                                   comg2 * self._comg1 + somg2 * self._somg1)
            lam12 = omg12 + self._a3c * (
                sig12 + (series.sin_cos_series(True, ssig2, csig2, self._c3a)
                         - self._b31))
            lon12 = math.degrees(lam12)
            if unroll:
                result.lon2 = self.lon1 + lon12
            else:
                result.lon2 = ang_normalize(ang_normalize(self.lon1)
                                            + ang_normalize(lon12))

        if Capability.LATITUDE in outmask:
            result.lat2 = atan2d(sbet2, self.ellipsoid.f1 * cbet2)

        if Capability.AZIMUTH in outmask:
            result.azi2 = atan2d(salp2, calp2)

        if outmask & DIFFERENTIALS:
            b22 = series.sin_cos_series(True, ssig2, csig2, self._c2a)
            ab2 = (1 + self._a2m1) * (b22 - self._b21)
            j12 = (self._a1m1 - self._a2m1) * sig12 + (ab1 - ab2)
            if Capability.REDUCED_LENGTH in outmask:
                # parenthesised products cancel accurately for coincident points
                result.m12 = b * ((dn2 * (self._csig1 * ssig2)
                                   - self._dn1 * (self._ssig1 * csig2))
                                  - self._csig1 * csig2 * j12)
            if Capability.GEODESIC_SCALE in outmask:
                t = (self._k2 * (ssig2 - self._ssig1) * (ssig2 + self._ssig1)
                     / (self._dn1 + dn2))
                result.M12 = csig12 + (t * ssig2 - csig2 * j12) * self._ssig1 / self._dn1
                result.M21 = csig12 - (t * self._ssig1 - self._csig1 * j12) * ssig2 / dn2

        if Capability.AREA in outmask:
            b42 = series.sin_cos_series(False, ssig2, csig2, self._c4a)
            if self._calp0 == 0 or self._salp0 == 0:
                # alp12 = alp2 - alp1
                salp12 = salp2 * self.calp1 - calp2 * self.salp1
                calp12 = calp2 * self.calp1 + salp2 * self.salp1
            else:
                # tan(alp12) in terms of sig1 and sig12, free of cancellation
                if csig12 <= 0:
                    salp12 = self._csig1 * (1 - csig12) + ssig12 * self._ssig1
                else:
                    salp12 = ssig12 * (self._csig1 * ssig12 / (1 + csig12) + self._ssig1)
                salp12 *= self._calp0 * self._salp0
                calp12 = sq(self._salp0) + sq(self._calp0) * self._csig1 * csig2
            result.S12 = (self.ellipsoid.c2 * math.atan2(salp12, calp12)
                          + self._a4 * (b42 - self._b41))

        result.a12 = s12_a12 if arcmode else math.degrees(sig12)
        return result


_OUTPUT_FIELDS = (
    (Capability.LATITUDE, ("lat2",)),
    (Capability.LONGITUDE, ("lon2",)),
    (Capability.AZIMUTH, ("azi2",)),
    (Capability.DISTANCE, ("s12",)),
    (Capability.REDUCED_LENGTH, ("m12",)),
    (Capability.GEODESIC_SCALE, ("M12", "M21")),
    (Capability.AREA, ("S12",)),
)


# =============================================================================
# Line constructors
# =============================================================================

def line_init(
    ellipsoid: Ellipsoid,
    lat1: float,
    lon1: float,
    azi1: float,
    caps: Capability = Capability.ALL,
) -> GeodesicLine:
    """Create a geodesic line with no reference point."""
    return GeodesicLine(ellipsoid, lat1, lon1, azi1, caps)


def _gen_direct_line(ellipsoid, lat1, lon1, azi1, arcmode, s12_a12, caps):
    if not arcmode:
        caps |= Capability.DISTANCE_IN
    salp1, calp1 = sincosd(ang_round(azi1))
    reference = {"a13": s12_a12} if arcmode else {"s13": s12_a12}
    return GeodesicLine(ellipsoid, lat_fix(lat1), lon1, ang_normalize(azi1), caps,
                        salp1=salp1, calp1=calp1, **reference)


def direct_line(
    ellipsoid: Ellipsoid,
    lat1: float,
    lon1: float,
    azi1: float,
    s12: float,
    caps: Capability = Capability.ALL,
) -> GeodesicLine:
    """Create a line from point 1 whose reference point 3 lies at distance s12.

    ``DISTANCE_IN`` is added to ``caps`` so the line can be sampled by distance.
    """
    return _gen_direct_line(ellipsoid, lat1, lon1, azi1, False, s12, caps)


def arc_direct_line(
    ellipsoid: Ellipsoid,
    lat1: float,
    lon1: float,
    azi1: float,
    a12: float,
    caps: Capability = Capability.ALL,
) -> GeodesicLine:
    """Create a line from point 1 whose reference point 3 lies at arc a12 (degrees)."""
    return _gen_direct_line(ellipsoid, lat1, lon1, azi1, True, a12, caps)


def inverse_line(
    ellipsoid: Ellipsoid,
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    caps: Capability = Capability.ALL,
) -> GeodesicLine:
    """Create the shortest line from point 1 to point 2.

    Point 2 becomes the reference point 3 of the line, so ``line.s13`` is
    the geodesic distance and ``line.a13`` the arc between the points.

    Examples
    --------
    >>> line = inverse_line(WGS84, 40.64, -73.78, 1.36, 103.99)
    >>> round(line.s13, 3)
    15347512.941
    """
    sol = _gen_inverse(ellipsoid, lat1, lon1, lat2, lon2, Capability.NONE)
    azi1 = atan2d(sol.salp1, sol.calp1)
    if Capability.DISTANCE_IN in caps:
        caps |= Capability.DISTANCE
    return GeodesicLine(ellipsoid, lat1, lon1, azi1, caps,
                        salp1=sol.salp1, calp1=sol.calp1, a13=sol.a12)
