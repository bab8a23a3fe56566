"""
Series Evaluators for the Geodesic Integrals.

The distance, longitude, reduced-length and area integrals along a geodesic
are expanded as trigonometric series in the arc length on the auxiliary
sphere, with coefficients that are polynomials in the small parameter
``eps`` (a function of the geodesic's equatorial azimuth) and in the third
flattening ``n`` of the ellipsoid.

Series families
---------------
A1, C1   distance integral I1 and its Fourier coefficients
C1'      reversion of C1 (arc length from distance)
A2, C2   reduced-length integral I2
A3, C3   longitude integral I3 (coefficients depend on n and eps)
C4       area integral I4 (coefficients depend on n and eps)

The coefficient tables below are the published order-6 expansions; each
block holds the numerators of a polynomial, highest power first, followed
by the common denominator. They are golden constants: a transcription error
degrades accuracy silently, which the round-off accuracy tests guard.

References
----------
- Karney, C.F.F. (2013). Algorithms for geodesics. J. Geodesy, 87(1),
  43-55, Eqs. (15)-(25) and the addenda.
"""

import math
from typing import List, Sequence, Tuple, TYPE_CHECKING

from geospatial.geomath import polyval, sq

if TYPE_CHECKING:
    from geospatial.ellipsoid import Ellipsoid


SERIES_ORDER = 6
N_A1 = SERIES_ORDER
N_C1 = SERIES_ORDER
N_C1P = SERIES_ORDER
N_A2 = SERIES_ORDER
N_C2 = SERIES_ORDER
N_A3 = SERIES_ORDER
N_C3 = SERIES_ORDER
N_C3X = (N_C3 * (N_C3 - 1)) // 2
N_C4 = SERIES_ORDER
N_C4X = (N_C4 * (N_C4 + 1)) // 2


_A1M1_COEFF = (1, 4, 64, 0, 256)

_C1_COEFF = (
    -1, 6, -16, 32,          # C1[1]
    -9, 64, -128, 2048,      # C1[2]
    9, -16, 768,             # C1[3]
    3, -5, 512,              # C1[4]
    -7, 1280,                # C1[5]
    -7, 2048,                # C1[6]
)

_C1P_COEFF = (
    205, -432, 768, 1536,        # C1p[1]
    4005, -4736, 3840, 12288,    # C1p[2]
    -225, 116, 384,              # C1p[3]
    -7173, 2695, 7680,           # C1p[4]
    3467, 7680,                  # C1p[5]
    38081, 61440,                # C1p[6]
)

_A2M1_COEFF = (-11, -28, -192, 0, 256)

_C2_COEFF = (
    1, 2, 16, 32,        # C2[1]
    35, 64, 384, 2048,   # C2[2]
    15, 80, 768,         # C2[3]
    7, 35, 512,          # C2[4]
    63, 1280,            # C2[5]
    77, 2048,            # C2[6]
)

_A3_COEFF = (
    -3, 128,             # A3, coeff of eps^5
    -2, -3, 64,          # A3, coeff of eps^4
    -1, -3, -1, 16,      # A3, coeff of eps^3
    3, -1, -2, 8,        # A3, coeff of eps^2
    1, -1, 2,            # A3, coeff of eps^1
    1, 1,                # A3, coeff of eps^0
)

_C3_COEFF = (
    3, 128,              # C3[1], coeff of eps^5
    2, 5, 128,           # C3[1], coeff of eps^4
    -1, 3, 3, 64,        # C3[1], coeff of eps^3
    -1, 0, 1, 8,         # C3[1], coeff of eps^2
    -1, 1, 4,            # C3[1], coeff of eps^1
    5, 256,              # C3[2], coeff of eps^5
    1, 3, 128,           # C3[2], coeff of eps^4
    -3, -2, 3, 64,       # C3[2], coeff of eps^3
    1, -3, 2, 32,        # C3[2], coeff of eps^2
    7, 512,              # C3[3], coeff of eps^5
    -10, 9, 384,         # C3[3], coeff of eps^4
    5, -9, 5, 192,       # C3[3], coeff of eps^3
    7, 512,              # C3[4], coeff of eps^5
    -14, 7, 512,         # C3[4], coeff of eps^4
    21, 2560,            # C3[5], coeff of eps^5
)

_C4_COEFF = (
    97, 15015,                                   # C4[0], coeff of eps^5
    1088, 156, 45045,                            # C4[0], coeff of eps^4
    -224, -4784, 1573, 45045,                    # C4[0], coeff of eps^3
    -10656, 14144, -4576, -858, 45045,           # C4[0], coeff of eps^2
    64, 624, -4576, 6864, -3003, 15015,          # C4[0], coeff of eps^1
    100, 208, 572, 3432, -12012, 30030, 45045,   # C4[0], coeff of eps^0
    1, 9009,                                     # C4[1], coeff of eps^5
    -2944, 468, 135135,                          # C4[1], coeff of eps^4
    5792, 1040, -1287, 135135,                   # C4[1], coeff of eps^3
    5952, -11648, 9152, -2574, 135135,           # C4[1], coeff of eps^2
    -64, -624, 4576, -6864, 3003, 135135,        # C4[1], coeff of eps^1
    8, 10725,                                    # C4[2], coeff of eps^5
    1856, -936, 225225,                          # C4[2], coeff of eps^4
    -8448, 4992, -1144, 225225,                  # C4[2], coeff of eps^3
    -1440, 4160, -4576, 1716, 225225,            # C4[2], coeff of eps^2
    -136, 63063,                                 # C4[3], coeff of eps^5
    1024, -208, 105105,                          # C4[3], coeff of eps^4
    3584, -3328, 1144, 315315,                   # C4[3], coeff of eps^3
    -128, 135135,                                # C4[4], coeff of eps^5
    -2560, 832, 405405,                          # C4[4], coeff of eps^4
    128, 99099,                                  # C4[5], coeff of eps^5
)


def eps_from_k2(k2: float) -> float:
    """Expansion parameter eps = k2 / (2(1 + sqrt(1 + k2)) + k2)."""
    return k2 / (2 * (1 + math.sqrt(1 + k2)) + k2)


def sin_cos_series(sinp: bool, sinx: float, cosx: float, c: Sequence[float]) -> float:
    """Evaluate a trigonometric series by Clenshaw summation.

    Parameters
    ----------
    sinp : bool
        If True evaluate sum(c[i] * sin(2*i*x), i = 1..n-1), otherwise
        sum(c[i] * cos((2*i+1)*x), i = 0..n-1).
    sinx, cosx : float
        Sine and cosine of the argument.
    c : sequence of float
        Coefficients; for the sine series c[0] is unused.

    Returns
    -------
    float
        Value of the series.
    """
    k = len(c)
    n = k - (1 if sinp else 0)
    ar = 2 * (cosx - sinx) * (cosx + sinx)  # 2 * cos(2 * x)
    y1 = 0.0
    if n & 1:
        k -= 1
        y0 = c[k]
    else:
        y0 = 0.0
    n = n // 2
    while n:
        n -= 1
        k -= 1
        y1 = ar * y0 - y1 + c[k]
        k -= 1
        y0 = ar * y1 - y0 + c[k]
    return (2 * sinx * cosx * y0 if sinp   # sin(2 * x) * y0
            else cosx * (y0 - y1))         # cos(x) * (y0 - y1)


def _even_series(coeff: Sequence[int], nmax: int, eps: float) -> List[float]:
    """Coefficients c[1..nmax] of the C1, C1' and C2 families."""
    c = [0.0] * (nmax + 1)
    eps2 = sq(eps)
    d = eps
    o = 0
    for l in range(1, nmax + 1):
        m = (nmax - l) // 2
        c[l] = d * polyval(m, coeff, o, eps2) / coeff[o + m + 1]
        o += m + 2
        d *= eps
    return c


def a1m1(eps: float) -> float:
    """Scale factor A1 - 1 of the distance integral."""
    m = N_A1 // 2
    t = polyval(m, _A1M1_COEFF, 0, sq(eps)) / _A1M1_COEFF[m + 1]
    return (t + eps) / (1 - eps)


def c1(eps: float) -> List[float]:
    """Coefficients C1[l], l = 1..6, of the distance integral."""
    return _even_series(_C1_COEFF, N_C1, eps)


def c1p(eps: float) -> List[float]:
    """Coefficients C1'[l], l = 1..6, of the reverted distance series."""
    return _even_series(_C1P_COEFF, N_C1P, eps)


def a2m1(eps: float) -> float:
    """Scale factor A2 - 1 of the reduced-length integral."""
    m = N_A2 // 2
    t = polyval(m, _A2M1_COEFF, 0, sq(eps)) / _A2M1_COEFF[m + 1]
    return (t - eps) / (1 + eps)


def c2(eps: float) -> List[float]:
    """Coefficients C2[l], l = 1..6, of the reduced-length integral."""
    return _even_series(_C2_COEFF, N_C2, eps)


def a3_coefficients(n: float) -> Tuple[float, ...]:
    """Polynomial coefficients in eps of A3 for third flattening n."""
    a3x = []
    o = 0
    for j in range(N_A3 - 1, -1, -1):
        m = min(N_A3 - j - 1, j)
        a3x.append(polyval(m, _A3_COEFF, o, n) / _A3_COEFF[o + m + 1])
        o += m + 2
    return tuple(a3x)


def c3_coefficients(n: float) -> Tuple[float, ...]:
    """Polynomial coefficients in eps of C3[1..5] for third flattening n."""
    c3x = []
    o = 0
    for l in range(1, N_C3):
        for j in range(N_C3 - 1, l - 1, -1):
            m = min(N_C3 - j - 1, j)
            c3x.append(polyval(m, _C3_COEFF, o, n) / _C3_COEFF[o + m + 1])
            o += m + 2
    return tuple(c3x)


def c4_coefficients(n: float) -> Tuple[float, ...]:
    """Polynomial coefficients in eps of C4[0..5] for third flattening n."""
    c4x = []
    o = 0
    for l in range(N_C4):
        for j in range(N_C4 - 1, l - 1, -1):
            m = N_C4 - j - 1
            c4x.append(polyval(m, _C4_COEFF, o, n) / _C4_COEFF[o + m + 1])
            o += m + 2
    return tuple(c4x)


def eval_a3(ellipsoid: 'Ellipsoid', eps: float) -> float:
    """Scale factor A3 of the longitude integral."""
    return polyval(N_A3 - 1, ellipsoid.a3x, 0, eps)


def eval_c3(ellipsoid: 'Ellipsoid', eps: float) -> List[float]:
    """Coefficients C3[l], l = 1..5, of the longitude integral (c[0] unused)."""
    c = [0.0] * N_C3
    mult = 1.0
    o = 0
    for l in range(1, N_C3):
        m = N_C3 - l - 1
        mult *= eps
        c[l] = mult * polyval(m, ellipsoid.c3x, o, eps)
        o += m + 1
    return c


def eval_c4(ellipsoid: 'Ellipsoid', eps: float) -> List[float]:
    """Coefficients C4[l], l = 0..5, of the area integral."""
    c = [0.0] * N_C4
    mult = 1.0
    o = 0
    for l in range(N_C4):
        m = N_C4 - l - 1
        c[l] = mult * polyval(m, ellipsoid.c4x, o, eps)
        o += m + 1
        mult *= eps
    return c
