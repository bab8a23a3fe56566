"""
Exact-Angle Arithmetic for Geodesic Computations.

Helpers that keep angles exact where IEEE arithmetic allows it. Sines and
cosines of multiples of 90 degrees are returned exactly, angle differences
are carried as an error-free (value, round-off) pair, and tiny angles are
rounded so that their sum with 90 degrees is exact. These guarantees are
what let the solvers handle meridians, the equator and the poles as exact
special cases rather than as near misses.

References
----------
- Knuth, D.E. (1997). The Art of Computer Programming, Vol. 2, 4.2.2 (TwoSum).
- Karney, C.F.F. (2013). Algorithms for geodesics. J. Geodesy, 87(1), 43-55.
"""

import math
from typing import Sequence, Tuple


def sq(x: float) -> float:
    """Square of x."""
    return x * x


def cbrt(x: float) -> float:
    """Real cube root of x."""
    y = math.pow(abs(x), 1 / 3.0)
    return y if x > 0 else (-y if x < 0 else x)


def norm(x: float, y: float) -> Tuple[float, float]:
    """Scale (x, y) to a unit vector."""
    r = math.hypot(x, y)
    return x / r, y / r


def error_free_sum(u: float, v: float) -> Tuple[float, float]:
    """Sum of two floats with its exact round-off error.

    Returns
    -------
    Tuple[float, float]
        (s, t) with s = fl(u + v) and s + t = u + v exactly.
    """
    s = u + v
    up = s - v
    vpp = s - up
    up -= u
    vpp -= v
    t = -(up + vpp)
    return s, t


def polyval(order: int, coeffs: Sequence[float], offset: int, x: float) -> float:
    """Evaluate a polynomial by Horner's rule.

    Parameters
    ----------
    order : int
        Polynomial degree; a negative order evaluates to 0.
    coeffs : sequence of float
        Coefficients, highest power first.
    offset : int
        Index of the leading coefficient within `coeffs`.
    x : float
        Evaluation point.
    """
    y = float(0 if order < 0 else coeffs[offset])
    while order > 0:
        order -= 1
        offset += 1
        y = y * x + coeffs[offset]
    return y


def ang_round(x: float) -> float:
    """Round tiny angles so that 90 - ang_round(x) is exact.

    Angles smaller than 1/16 degree are coarsened; this loses at most
    about 1e-19 degrees and prevents the solvers from seeing angles such
    as 1e-300 that behave as zero in some operations and not in others.
    """
    z = 1 / 16.0
    y = abs(x)
    # z - (z - y) must not be simplified to y
    if y < z:
        y = z - (z - y)
    return 0.0 if x == 0 else (-y if x < 0 else y)


def remainder(x: float, y: float) -> float:
    """Remainder of x/y in the range [-y/2, y/2)."""
    z = math.fmod(x, y) if math.isfinite(x) else math.nan
    # keep the sign of zero
    z = x if x == 0 else z
    return z + y if z < -y / 2 else (z if z < y / 2 else z - y)


def ang_normalize(x: float) -> float:
    """Reduce an angle to the range (-180, 180]."""
    y = remainder(x, 360)
    return 180.0 if y == -180 else y


def lat_fix(x: float) -> float:
    """Replace latitudes outside [-90, 90] by NaN."""
    return math.nan if abs(x) > 90 else x


def ang_diff(x: float, y: float) -> Tuple[float, float]:
    """Exact difference y - x of two angles, reduced to (-180, 180].

    Returns
    -------
    Tuple[float, float]
        (d, e) with d + e equal to the reduced difference exactly.
    """
    d, t = error_free_sum(ang_normalize(-x), ang_normalize(y))
    d = ang_normalize(d)
    return error_free_sum(-180.0 if d == 180 and t > 0 else d, t)


def sincosd(x: float) -> Tuple[float, float]:
    """Sine and cosine of an angle in degrees.

    Multiples of 90 degrees give exact results; the argument is reduced
    to the first octant before converting to radians.
    """
    r = math.fmod(x, 360) if math.isfinite(x) else math.nan
    q = 0 if math.isnan(r) else int(math.floor(r / 90 + 0.5))
    r -= 90 * q
    r = math.radians(r)
    s = math.sin(r)
    c = math.cos(r)
    q = q % 4
    if q == 1:
        s, c = c, -s
    elif q == 2:
        s, c = -s, -c
    elif q == 3:
        s, c = -c, s
    # drop the sign of -0.0 except for sin(-0.0)
    s, c = (x, c) if x == 0 else (0.0 + s, 0.0 + c)
    return s, c


def atan2d(y: float, x: float) -> float:
    """Two-argument arctangent in degrees, range (-180, 180]."""
    # Reduce to the first octant so that exact results are exact
    if abs(y) > abs(x):
        q = 2
        x, y = y, x
    else:
        q = 0
    if x < 0:
        q += 1
        x = -x
    ang = math.degrees(math.atan2(y, x))
    if q == 1:
        ang = (180 if y >= 0 else -180) - ang
    elif q == 2:
        ang = 90 - ang
    elif q == 3:
        ang = -90 + ang
    return ang
