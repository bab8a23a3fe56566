"""
Inverse Geodesic Problem.

Given two points on the ellipsoid, find the shortest geodesic between
them: its length, the azimuths at both ends and, on request, the reduced
length, the geodesic scales and the area under the geodesic.

Solution Strategy
-----------------
1. Bring the points to a canonical configuration by symmetry transforms
   (swap the points, flip the signs of latitude and longitude difference).
2. Solve the closed-form cases: meridional geodesics (including lines
   through a pole and coincident points), equatorial geodesics, and lines
   short enough for the local spherical approximation.
3. Otherwise find the azimuth alp1 at point 1 for which the geodesic
   reaches the target longitude. The longitude residual has exactly one
   root in (0, pi) with positive slope there, so Newton's method is run
   inside a bracket which shrinks with every evaluation; bisection of the
   bracket takes over when a Newton step leaves it or when the Newton
   budget is exhausted.

Scientific Context
------------------
Domain: Geodesy
Accuracy: round-off limited (15 nm for WGS84), valid for all point pairs
including nearly antipodal ones.

References
----------
- Karney, C.F.F. (2013). Algorithms for geodesics. J. Geodesy, 87(1), 43-55,
  Secs. 4-5.
"""

import math
from typing import List, NamedTuple, Optional, Tuple

from common.constants import (
    DEFAULT_SOLVER_SETTINGS, SolverSettings, TINY, TOL0, TOL1, TOLB, XTHRESH,
)
from common.logging_config import get_logger
from common.types import GeodesicResult, InverseDiagnostics, IterationPhase
from geospatial import series
from geospatial.capabilities import (
    Capability, Flags, DIFFERENTIALS, LENGTHS, closure,
)
from geospatial.ellipsoid import Ellipsoid
from geospatial.geomath import (
    ang_diff, ang_normalize, ang_round, atan2d, cbrt, lat_fix, norm, sincosd, sq,
)

logger = get_logger(__name__)


class _InverseSolution(NamedTuple):
    a12: float
    s12: float
    salp1: float
    calp1: float
    salp2: float
    calp2: float
    m12: float
    M12: float
    M21: float
    S12: float
    diagnostics: InverseDiagnostics


class _Lengths(NamedTuple):
    s12b: float
    m12b: float
    m0: float
    M12: float
    M21: float


def _astroid(x: float, y: float) -> float:
    """Positive root k of k^4 + 2k^3 - (x^2 + y^2 - 1)k^2 - 2y^2 k - y^2 = 0."""
    p = sq(x)
    q = sq(y)
    r = (p + q - 1) / 6
    if q == 0 and r <= 0:
        # y = 0 with |x| <= 1: the solution is k = 0
        return 0.0
    s = p * q / 4
    r2 = sq(r)
    r3 = r * r2
    disc = s * (s + 2 * r3)
    u = r
    if disc >= 0:
        t3 = s + r3
        # pick the sign of the root to avoid cancellation
        t3 += -math.sqrt(disc) if t3 < 0 else math.sqrt(disc)
        t = cbrt(t3)
        u += t + (r2 / t if t != 0 else 0)
    else:
        ang = math.atan2(math.sqrt(-disc), -(s + r3))
        u += 2 * r * math.cos(ang / 3)
    v = math.sqrt(sq(u) + q)
    uv = q / (v - u) if u < 0 else u + v
    w = (uv - q) / (2 * v)
    return uv / (math.sqrt(uv + sq(w)) + w)


def _lengths(
    ellipsoid: Ellipsoid,
    eps: float,
    sig12: float,
    ssig1: float, csig1: float, dn1: float,
    ssig2: float, csig2: float, dn2: float,
    cbet1: float, cbet2: float,
    outmask: Capability,
) -> _Lengths:
    """Distance, reduced length and geodesic scales in units of b."""
    s12b = m12b = m0 = big_m12 = big_m21 = math.nan
    c1a: List[float] = []
    c2a: List[float] = []
    a1 = a2 = m0x = j12 = 0.0
    if outmask & LENGTHS:
        a1 = series.a1m1(eps)
        c1a = series.c1(eps)
        if outmask & DIFFERENTIALS:
            a2 = series.a2m1(eps)
            c2a = series.c2(eps)
            m0x = a1 - a2
            a2 = 1 + a2
        a1 = 1 + a1

    if Capability.DISTANCE in outmask:
        b1 = (series.sin_cos_series(True, ssig2, csig2, c1a)
              - series.sin_cos_series(True, ssig1, csig1, c1a))
        s12b = a1 * (sig12 + b1)
        if outmask & DIFFERENTIALS:
            b2 = (series.sin_cos_series(True, ssig2, csig2, c2a)
                  - series.sin_cos_series(True, ssig1, csig1, c2a))
            j12 = m0x * sig12 + (a1 * b1 - a2 * b2)
    elif outmask & DIFFERENTIALS:
        # combine the two series into one
        for l in range(1, series.N_C2 + 1):
            c2a[l] = a1 * c1a[l] - a2 * c2a[l]
        j12 = m0x * sig12 + (series.sin_cos_series(True, ssig2, csig2, c2a)
                             - series.sin_cos_series(True, ssig1, csig1, c2a))

    if Capability.REDUCED_LENGTH in outmask:
        m0 = m0x
        # parenthesised products cancel accurately for coincident points
        m12b = (dn2 * (csig1 * ssig2) - dn1 * (ssig1 * csig2)
                - csig1 * csig2 * j12)
    if Capability.GEODESIC_SCALE in outmask:
        csig12 = csig1 * csig2 + ssig1 * ssig2
        t = ellipsoid.ep2 * (cbet1 - cbet2) * (cbet1 + cbet2) / (dn1 + dn2)
        big_m12 = csig12 + (t * ssig2 - csig2 * j12) * ssig1 / dn1
        big_m21 = csig12 - (t * ssig1 - csig1 * j12) * ssig2 / dn2
    return _Lengths(s12b, m12b, m0, big_m12, big_m21)


def _inverse_start(
    ellipsoid: Ellipsoid,
    sbet1: float, cbet1: float, dn1: float,
    sbet2: float, cbet2: float, dn2: float,
    lam12: float, slam12: float, clam12: float,
) -> Tuple[float, float, float, float, float, float]:
    """Starting azimuth for the azimuth search.

    Returns ``(sig12, salp1, calp1, salp2, calp2, dnm)``. A non-negative
    ``sig12`` means the line is short enough that the returned values are
    already the solution.
    """
    f = ellipsoid.f
    sig12 = -1.0
    salp2 = calp2 = dnm = math.nan
    # bet12 = bet2 - bet1 in [0, pi); bet12a = bet2 + bet1 in (-pi, 0]
    sbet12 = sbet2 * cbet1 - cbet2 * sbet1
    cbet12 = cbet2 * cbet1 + sbet2 * sbet1
    sbet12a = sbet2 * cbet1
    sbet12a += cbet2 * sbet1

    shortline = cbet12 >= 0 and sbet12 < 0.5 and cbet2 * lam12 < 0.5
    if shortline:
        sbetm2 = sq(sbet1 + sbet2)
        # sin(betm)^2 with betm the mean reduced latitude
        sbetm2 /= sbetm2 + sq(cbet1 + cbet2)
        dnm = math.sqrt(1 + ellipsoid.ep2 * sbetm2)
        omg12 = lam12 / (ellipsoid.f1 * dnm)
        somg12, comg12 = math.sin(omg12), math.cos(omg12)
    else:
        somg12, comg12 = slam12, clam12

    salp1 = cbet2 * somg12
    if comg12 >= 0:
        calp1 = sbet12 + cbet2 * sbet1 * sq(somg12) / (1 + comg12)
    else:
        calp1 = sbet12a - cbet2 * sbet1 * sq(somg12) / (1 - comg12)

    ssig12 = math.hypot(salp1, calp1)
    csig12 = sbet1 * sbet2 + cbet1 * cbet2 * comg12

    if shortline and ssig12 < ellipsoid.etol2:
        # really short lines
        salp2 = cbet1 * somg12
        calp2 = sbet12 - cbet1 * sbet2 * (sq(somg12) / (1 + comg12)
                                          if comg12 >= 0 else 1 - comg12)
        salp2, calp2 = norm(salp2, calp2)
        sig12 = math.atan2(ssig12, csig12)
    elif (abs(ellipsoid.n) >= 0.1
          or csig12 >= 0
          or ssig12 >= 6 * abs(ellipsoid.n) * math.pi * sq(cbet1)):
        # the spherical approximation is good enough to start from
        pass
    else:
        # Nearly antipodal: scale to coordinates (x, y) where the antipode
        # is at the origin and the singular point at (-1, 0).
        lam12x = math.atan2(-slam12, -clam12)  # lam12 - pi
        if f >= 0:
            # x = dlong, y = dlat
            k2 = sq(sbet1) * ellipsoid.ep2
            eps = series.eps_from_k2(k2)
            lamscale = f * cbet1 * series.eval_a3(ellipsoid, eps) * math.pi
            betscale = lamscale * cbet1
            x = lam12x / lamscale
            y = sbet12a / betscale
        else:
            # x = dlat, y = dlong
            cbet12a = cbet2 * cbet1 - sbet2 * sbet1
            bet12a = math.atan2(sbet12a, cbet12a)
            lengths = _lengths(ellipsoid, ellipsoid.n, math.pi + bet12a,
                               sbet1, -cbet1, dn1, sbet2, cbet2, dn2,
                               cbet1, cbet2, Capability.REDUCED_LENGTH)
            x = -1 + lengths.m12b / (cbet1 * cbet2 * lengths.m0 * math.pi)
            betscale = (sbet12a / x if x < -0.01
                        else -f * sq(cbet1) * math.pi)
            lamscale = betscale / cbet1
            y = lam12x / lamscale

        if y > -TOL1 and x > -1 - XTHRESH:
            # strip near the cut
            if f >= 0:
                salp1 = min(1.0, -x)
                calp1 = -math.sqrt(1 - sq(salp1))
            else:
                calp1 = max(0.0 if x > -TOL1 else -1.0, x)
                salp1 = math.sqrt(1 - sq(calp1))
        else:
            k = _astroid(x, y)
            if f >= 0:
                omg12a = lamscale * (-x * k / (1 + k))
            else:
                omg12a = lamscale * (-y * (1 + k) / k)
            somg12, comg12 = math.sin(omg12a), -math.cos(omg12a)
            # spherical estimate of alp1 with omg12 in place of lam12
            salp1 = cbet2 * somg12
            calp1 = sbet12a - cbet2 * sbet1 * sq(somg12) / (1 - comg12)

    # reversed test lets NaN through
    if not salp1 <= 0:
        salp1, calp1 = norm(salp1, calp1)
    else:
        salp1, calp1 = 1.0, 0.0
    return sig12, salp1, calp1, salp2, calp2, dnm


class _Lambda12(NamedTuple):
    lam12: float
    salp2: float
    calp2: float
    sig12: float
    ssig1: float
    csig1: float
    ssig2: float
    csig2: float
    eps: float
    domg12: float
    dlam12: float


def _lambda12(
    ellipsoid: Ellipsoid,
    sbet1: float, cbet1: float, dn1: float,
    sbet2: float, cbet2: float, dn2: float,
    salp1: float, calp1: float,
    slam120: float, clam120: float,
    diffp: bool,
) -> _Lambda12:
    """Longitude residual of the geodesic leaving point 1 at azimuth alp1.

    ``lam12`` is the longitude reached at the latitude of point 2 minus
    the target longitude difference, and ``dlam12`` its derivative with
    respect to alp1 (NaN unless ``diffp``).
    """
    if sbet1 == 0 and calp1 == 0:
        # equatorial line, already handled; break the degeneracy
        calp1 = -TINY

    # sin(alp1) * cos(bet1) = sin(alp0)
    salp0 = salp1 * cbet1
    calp0 = math.hypot(calp1, salp1 * sbet1)  # calp0 > 0

    # tan(bet1) = tan(sig1) * cos(alp1); tan(omg1) = sin(alp0) * tan(sig1)
    ssig1 = sbet1
    somg1 = salp0 * sbet1
    csig1 = comg1 = calp1 * cbet1
    ssig1, csig1 = norm(ssig1, csig1)

    # |bet2| = -bet1 needs exact symmetry to keep Newton regular
    salp2 = salp0 / cbet2 if cbet2 != cbet1 else salp1
    if cbet2 != cbet1 or abs(sbet2) != -sbet1:
        calp2 = math.sqrt(sq(calp1 * cbet1)
                          + ((cbet2 - cbet1) * (cbet1 + cbet2) if cbet1 < -sbet1
                             else (sbet1 - sbet2) * (sbet1 + sbet2))) / cbet2
    else:
        calp2 = abs(calp1)

    ssig2 = sbet2
    somg2 = salp0 * sbet2
    csig2 = comg2 = calp2 * cbet2
    ssig2, csig2 = norm(ssig2, csig2)

    # sig12 = sig2 - sig1 in [0, pi]
    sig12 = math.atan2(max(0.0, csig1 * ssig2 - ssig1 * csig2),
                       csig1 * csig2 + ssig1 * ssig2)
    # omg12 = omg2 - omg1 in [0, pi]
    somg12 = max(0.0, comg1 * somg2 - somg1 * comg2)
    comg12 = comg1 * comg2 + somg1 * somg2
    # eta = omg12 - lam120
    eta = math.atan2(somg12 * clam120 - comg12 * slam120,
                     comg12 * clam120 + somg12 * slam120)

    k2 = sq(calp0) * ellipsoid.ep2
    eps = series.eps_from_k2(k2)
    c3a = series.eval_c3(ellipsoid, eps)
    b312 = (series.sin_cos_series(True, ssig2, csig2, c3a)
            - series.sin_cos_series(True, ssig1, csig1, c3a))
    domg12 = -ellipsoid.f * series.eval_a3(ellipsoid, eps) * salp0 * (sig12 + b312)
    lam12 = eta + domg12

    if diffp:
        if calp2 == 0:
            dlam12 = -2 * ellipsoid.f1 * dn1 / sbet1
        else:
            dlam12 = _lengths(ellipsoid, eps, sig12, ssig1, csig1, dn1,
                              ssig2, csig2, dn2, cbet1, cbet2,
                              Capability.REDUCED_LENGTH).m12b
            dlam12 *= ellipsoid.f1 / (calp2 * cbet2)
    else:
        dlam12 = math.nan

    return _Lambda12(lam12, salp2, calp2, sig12, ssig1, csig1, ssig2, csig2,
                     eps, domg12, dlam12)


def _gen_inverse(
    ellipsoid: Ellipsoid,
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    caps: Capability,
    settings: Optional[SolverSettings] = None,
) -> _InverseSolution:
    """Solve the inverse problem, returning sines and cosines of the azimuths."""
    settings = settings or DEFAULT_SOLVER_SETTINGS
    outmask = closure(caps)
    a12 = s12 = m12 = big_m12 = big_m21 = area = math.nan
    diagnostics = InverseDiagnostics(method="iterative")

    # lon12 in [-180, 180]; -180 only for west-going geodesics
    lon12, lon12s = ang_diff(lon1, lon2)
    lonsign = 1 if lon12 >= 0 else -1
    # close to the same half-meridian means on it
    lon12 = lonsign * ang_round(lon12)
    lon12s = ang_round((180 - lon12) - lonsign * lon12s)
    lam12 = math.radians(lon12)
    if lon12 > 90:
        slam12, clam12 = sincosd(lon12s)
        clam12 = -clam12
    else:
        slam12, clam12 = sincosd(lon12)

    # close to the equator means on it
    lat1 = ang_round(lat_fix(lat1))
    lat2 = ang_round(lat_fix(lat2))
    # point 1 gets the larger |latitude|; a NaN latitude becomes lat1
    swapp = -1 if abs(lat1) < abs(lat2) else 1
    if swapp < 0:
        lonsign *= -1
        lat2, lat1 = lat1, lat2
    # make lat1 <= 0
    latsign = 1 if lat1 < 0 else -1
    lat1 *= latsign
    lat2 *= latsign
    # Now 0 <= lon12 <= 180, -90 <= lat1 <= 0 and lat1 <= lat2 <= -lat1.

    sbet1, cbet1 = sincosd(lat1)
    sbet1 *= ellipsoid.f1
    sbet1, cbet1 = norm(sbet1, cbet1)
    cbet1 = max(TINY, cbet1)

    sbet2, cbet2 = sincosd(lat2)
    sbet2 *= ellipsoid.f1
    sbet2, cbet2 = norm(sbet2, cbet2)
    cbet2 = max(TINY, cbet2)

    # Force bet2 = +/-bet1 exactly when the sensitive measure of
    # |bet1| - |bet2| vanishes.
    if cbet1 < -sbet1:
        if cbet2 == cbet1:
            sbet2 = sbet1 if sbet2 < 0 else -sbet1
    elif abs(sbet2) == -sbet1:
        cbet2 = cbet1

    dn1 = math.sqrt(1 + ellipsoid.ep2 * sq(sbet1))
    dn2 = math.sqrt(1 + ellipsoid.ep2 * sq(sbet2))

    s12x = m12x = 0.0
    salp1 = calp1 = salp2 = calp2 = math.nan

    meridian = lat1 == -90 or slam12 == 0
    if meridian:
        # head to the target longitude, arrive heading north
        calp1, salp1 = clam12, slam12
        calp2, salp2 = 1.0, 0.0

        # tan(bet) = tan(sig) * cos(alp)
        ssig1, csig1 = sbet1, calp1 * cbet1
        ssig2, csig2 = sbet2, calp2 * cbet2

        sig12 = math.atan2(max(0.0, csig1 * ssig2 - ssig1 * csig2),
                           csig1 * csig2 + ssig1 * ssig2)
        lengths = _lengths(ellipsoid, ellipsoid.n, sig12,
                           ssig1, csig1, dn1, ssig2, csig2, dn2, cbet1, cbet2,
                           outmask | Capability.DISTANCE | Capability.REDUCED_LENGTH)
        s12x, m12x = lengths.s12b, lengths.m12b
        big_m12, big_m21 = lengths.M12, lengths.M21

        # m12 < 0 beyond sig12 = pi/2 means the meridian is not shortest
        if sig12 < 1 or m12x >= 0:
            if sig12 < 3 * TINY or (sig12 < TOL0 and (s12x < 0 or m12x < 0)):
                sig12 = m12x = s12x = 0.0
            m12x *= ellipsoid.b
            s12x *= ellipsoid.b
            a12 = math.degrees(sig12)
            diagnostics.method = "meridian"
        else:
            # prolate and too close to antipodal
            meridian = False

    # somg12 > 1 marks that omg12 still has to be evaluated
    somg12, comg12, omg12 = 2.0, 0.0, 0.0
    domg12 = 0.0
    if (not meridian and sbet1 == 0
            and (ellipsoid.f <= 0 or lon12s >= ellipsoid.f * 180)):
        # geodesic runs along the equator
        calp1 = calp2 = 0.0
        salp1 = salp2 = 1.0
        s12x = ellipsoid.a * lam12
        sig12 = omg12 = lam12 / ellipsoid.f1
        m12x = ellipsoid.b * math.sin(sig12)
        if Capability.GEODESIC_SCALE in outmask:
            big_m12 = big_m21 = math.cos(sig12)
        a12 = lon12 / ellipsoid.f1
        diagnostics.method = "equatorial"

    elif not meridian:
        sig12, salp1, calp1, salp2, calp2, dnm = _inverse_start(
            ellipsoid, sbet1, cbet1, dn1, sbet2, cbet2, dn2, lam12, slam12, clam12)

        if sig12 >= 0:
            # short line, solved by the starting guess
            s12x = sig12 * ellipsoid.b * dnm
            m12x = sq(dnm) * ellipsoid.b * math.sin(sig12 / dnm)
            if Capability.GEODESIC_SCALE in outmask:
                big_m12 = big_m21 = math.cos(sig12 / dnm)
            a12 = math.degrees(sig12)
            omg12 = lam12 / (ellipsoid.f1 * dnm)
            diagnostics.method = "short_line"
        else:
            lam, salp1, calp1 = _solve_azimuth(
                ellipsoid, sbet1, cbet1, dn1, sbet2, cbet2, dn2,
                salp1, calp1, slam12, clam12, settings, diagnostics,
            )
            salp2, calp2, sig12 = lam.salp2, lam.calp2, lam.sig12
            domg12 = lam.domg12

            lengthmask = outmask
            if outmask & DIFFERENTIALS:
                lengthmask |= Capability.DISTANCE
            lengths = _lengths(ellipsoid, lam.eps, sig12,
                               lam.ssig1, lam.csig1, dn1,
                               lam.ssig2, lam.csig2, dn2, cbet1, cbet2, lengthmask)
            s12x = lengths.s12b * ellipsoid.b
            m12x = lengths.m12b * ellipsoid.b
            big_m12, big_m21 = lengths.M12, lengths.M21
            a12 = math.degrees(sig12)
            if Capability.AREA in outmask:
                # omg12 = lam12 - domg12
                sdomg12, cdomg12 = math.sin(domg12), math.cos(domg12)
                somg12 = slam12 * cdomg12 - clam12 * sdomg12
                comg12 = clam12 * cdomg12 + slam12 * sdomg12

    if Capability.DISTANCE in outmask:
        s12 = 0.0 + s12x  # no negative zero

    if Capability.REDUCED_LENGTH in outmask:
        m12 = 0.0 + m12x

    if Capability.AREA in outmask:
        area = _area_under(ellipsoid, salp1, calp1, salp2, calp2,
                           sbet1, cbet1, sbet2, cbet2)
        if not meridian and somg12 > 1:
            somg12, comg12 = math.sin(omg12), math.cos(omg12)

        if not meridian and comg12 > -0.7071 and sbet2 - sbet1 < 1.75:
            # moderate longitude and latitude differences:
            # tan(Gamma/2) = tan(omg12/2) (tan(bet1/2) + tan(bet2/2))
            #                / (1 + tan(bet1/2) tan(bet2/2))
            domg = 1 + comg12
            dbet1 = 1 + cbet1
            dbet2 = 1 + cbet2
            alp12 = 2 * math.atan2(somg12 * (sbet1 * dbet2 + sbet2 * dbet1),
                                   domg * (sbet1 * sbet2 + dbet1 * dbet2))
        else:
            # alp12 = alp2 - alp1
            salp12 = salp2 * calp1 - calp2 * salp1
            calp12 = calp2 * calp1 + salp2 * salp1
            # alp1 = +/-180 and alp2 = 0 must give alp12 = -180
            if salp12 == 0 and calp12 < 0:
                salp12 = TINY * calp1
                calp12 = -1.0
            alp12 = math.atan2(salp12, calp12)
        area += ellipsoid.c2 * alp12
        area *= swapp * lonsign * latsign
        area += 0.0

    # undo the canonical transforms
    if swapp < 0:
        salp2, salp1 = salp1, salp2
        calp2, calp1 = calp1, calp2
        if Capability.GEODESIC_SCALE in outmask:
            big_m21, big_m12 = big_m12, big_m21

    salp1 *= swapp * lonsign
    calp1 *= swapp * latsign
    salp2 *= swapp * lonsign
    calp2 *= swapp * latsign

    return _InverseSolution(a12, s12, salp1, calp1, salp2, calp2,
                            m12, big_m12, big_m21, area, diagnostics)


def _solve_azimuth(
    ellipsoid: Ellipsoid,
    sbet1: float, cbet1: float, dn1: float,
    sbet2: float, cbet2: float, dn2: float,
    salp1: float, calp1: float,
    slam12: float, clam12: float,
    settings: SolverSettings,
    diagnostics: InverseDiagnostics,
) -> Tuple[_Lambda12, float, float]:
    """Find alp1 with zero longitude residual.

    Runs Newton's method inside a bracket [alp1a, alp1b] of the root,
    falling back to bisection of the bracket whenever a Newton step is
    unusable and for good once ``settings.max_newton_iterations`` is
    spent. The iteration count never exceeds ``settings.max_iterations``.

    Returns
    -------
    Tuple[_Lambda12, float, float]
        The residual evaluation at the solution and (salp1, calp1).
    """
    maxit1 = settings.max_newton_iterations
    maxit2 = settings.max_iterations
    phase = IterationPhase.NEWTON if maxit1 > 0 else IterationPhase.BISECTION
    numit = 0
    tripn = tripb = False
    # bracket of the root
    salp1a, calp1a = TINY, 1.0
    salp1b, calp1b = TINY, -1.0

    while True:
        lam = _lambda12(ellipsoid, sbet1, cbet1, dn1, sbet2, cbet2, dn2,
                        salp1, calp1, slam12, clam12, numit < maxit1)
        v, dv = lam.lam12, lam.dlam12
        # reversed test to allow escape with NaNs
        if tripb or not abs(v) >= (8 if tripn else 1) * TOL0:
            phase = IterationPhase.CONVERGED
            break
        if numit >= maxit2:
            phase = IterationPhase.EXHAUSTED
            break

        # shrink the bracket
        if v > 0 and (numit > maxit1 or calp1 / salp1 > calp1b / salp1b):
            salp1b, calp1b = salp1, calp1
        elif v < 0 and (numit > maxit1 or calp1 / salp1 < calp1a / salp1a):
            salp1a, calp1a = salp1, calp1

        if numit < maxit1 and dv > 0:
            dalp1 = -v / dv
            sdalp1, cdalp1 = math.sin(dalp1), math.cos(dalp1)
            nsalp1 = salp1 * cdalp1 + calp1 * sdalp1
            if nsalp1 > 0 and abs(dalp1) < math.pi:
                calp1 = calp1 * cdalp1 - salp1 * sdalp1
                salp1 = nsalp1
                salp1, calp1 = norm(salp1, calp1)
                diagnostics.newton_steps += 1
                phase = IterationPhase.NEWTON
                # slope can vanish, so converge on eps rather than sqrt(eps)
                tripn = abs(v) <= 16 * TOL0
                numit += 1
                continue

        if phase is IterationPhase.NEWTON:
            logger.debug(f"Inverse solver switching to bisection at iteration {numit}")
        phase = IterationPhase.BISECTION
        # midpoint of the bracket
        salp1 = (salp1a + salp1b) / 2
        calp1 = (calp1a + calp1b) / 2
        salp1, calp1 = norm(salp1, calp1)
        diagnostics.bisection_steps += 1
        tripn = False
        tripb = (abs(salp1a - salp1) + (calp1a - calp1) < TOLB
                 or abs(salp1 - salp1b) + (calp1 - calp1b) < TOLB)
        numit += 1

    diagnostics.iterations = numit
    diagnostics.final_phase = phase
    if phase is IterationPhase.EXHAUSTED:
        logger.warning(
            f"Inverse solver exhausted {maxit2} iterations; "
            f"residual {lam.lam12:.3e} rad"
        )
    return lam, salp1, calp1


def _area_under(ellipsoid, salp1, calp1, salp2, calp2, sbet1, cbet1, sbet2, cbet2):
    """Ellipsoidal correction to the area between the geodesic and the equator."""
    # sin(alp1) * cos(bet1) = sin(alp0)
    salp0 = salp1 * cbet1
    calp0 = math.hypot(calp1, salp1 * sbet1)
    if calp0 == 0 or salp0 == 0:
        # sig1 and sig2 are indeterminate on the equator
        return 0.0
    ssig1, csig1 = norm(sbet1, calp1 * cbet1)
    ssig2, csig2 = norm(sbet2, calp2 * cbet2)
    eps = series.eps_from_k2(sq(calp0) * ellipsoid.ep2)
    # a^2 e^2 cos(alp0) sin(alp0)
    a4 = sq(ellipsoid.a) * calp0 * salp0 * ellipsoid.e2
    c4a = series.eval_c4(ellipsoid, eps)
    b41 = series.sin_cos_series(False, ssig1, csig1, c4a)
    b42 = series.sin_cos_series(False, ssig2, csig2, c4a)
    return a4 * (b42 - b41)


# =============================================================================
# Public API
# =============================================================================

def general_inverse(
    ellipsoid: Ellipsoid,
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    caps: Capability = Capability.STANDARD,
    flags: Flags = Flags.NONE,
    settings: Optional[SolverSettings] = None,
) -> GeodesicResult:
    """Solve the inverse geodesic problem.

    Parameters
    ----------
    ellipsoid : Ellipsoid
        Ellipsoid to solve on.
    lat1, lon1 : float
        Point 1 in degrees.
    lat2, lon2 : float
        Point 2 in degrees.
    caps : Capability
        Quantities to compute. ``DISTANCE_IN`` is meaningless here and
        ignored beyond implying ``DISTANCE``.
    flags : Flags
        With ``Flags.LONG_UNROLL`` the returned ``lon2`` satisfies
        ``lon2 - lon1 = signed longitude difference`` and ``lon1`` is
        returned unchanged; otherwise both are reduced to (-180, 180].
    settings : SolverSettings, optional
        Iteration caps for the azimuth search.

    Returns
    -------
    GeodesicResult
        Requested quantities, ``a12`` and ``diagnostics``. Latitudes outside
        [-90, 90] give NaN results.

    Notes
    -----
    The shortest geodesic is not unique for some point pairs. The solver
    then returns a canonical choice:

    - coincident points: azi1 = azi2 following the meridian direction
      implied by the latitude signs (usually 0 or 180);
    - points on the equator separated by more than (1 - f) * 180 degrees
      on an oblate ellipsoid: the geodesic with azi1 in [0, 90];
    - antipodal points and points connected through a pole: azi1 = 0 or
      180 when a meridian is shortest; the alternatives are obtained by
      reflecting in the meridian (azi -> -azi) or the equator
      (azi -> 180 - azi).

    The azimuth search never raises; if its hard iteration cap is reached
    a warning is logged and the current estimate returned.

    Examples
    --------
    >>> r = general_inverse(WGS84, 40.64, -73.78, 1.36, 103.99)
    >>> round(r.s12, 3)
    15347512.941
    """
    caps = closure(caps)
    unroll = Flags.LONG_UNROLL in flags
    sol = _gen_inverse(ellipsoid, lat1, lon1, lat2, lon2, caps, settings)

    result = GeodesicResult(
        lat1=lat_fix(lat1),
        lat2=lat_fix(lat2),
        a12=sol.a12,
        diagnostics=sol.diagnostics,
    )
    if Capability.LONGITUDE in caps:
        if unroll:
            lon12, e = ang_diff(lon1, lon2)
            result.lon1 = lon1
            result.lon2 = (lon1 + lon12) + e
        else:
            result.lon1 = ang_normalize(lon1)
            result.lon2 = ang_normalize(lon2)
    if Capability.DISTANCE in caps:
        result.s12 = sol.s12
    if Capability.AZIMUTH in caps:
        result.azi1 = atan2d(sol.salp1, sol.calp1)
        result.azi2 = atan2d(sol.salp2, sol.calp2)
    if Capability.REDUCED_LENGTH in caps:
        result.m12 = sol.m12
    if Capability.GEODESIC_SCALE in caps:
        result.M12 = sol.M12
        result.M21 = sol.M21
    if Capability.AREA in caps:
        result.S12 = sol.S12
    return result


def inverse(
    ellipsoid: Ellipsoid,
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> GeodesicResult:
    """Shortest distance and azimuths between two points.

    Returns
    -------
    GeodesicResult
        With ``s12``, ``azi1``, ``azi2`` (and the normalised points) set.
    """
    return general_inverse(ellipsoid, lat1, lon1, lat2, lon2, Capability.STANDARD)
