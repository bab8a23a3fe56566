"""
Ellipsoid of Revolution for Geodesic Computations.

An ellipsoid is fully defined by its equatorial radius ``a`` and its
flattening ``f`` (positive for oblate, negative for prolate). Everything
the solvers need beyond that (eccentricities, the polar semi-axis, the
authalic constant used for areas, the convergence tolerance of the short
line test and the ``n``-dependent series tables) is derived exactly once
at construction and never changes afterwards, so an ``Ellipsoid`` can be
shared freely between threads.

Scientific Context
------------------
Domain: Geodesy, differential geometry of surfaces of revolution
Model: Oblate or prolate ellipsoid of revolution, |f| < 1/50 for
round-off accuracy (|f| < 1/5 gives reasonable accuracy)

References
----------
- NIMA TR8350.2: WGS84 parameters
- Karney, C.F.F. (2013). Algorithms for geodesics. J. Geodesy, 87(1), 43-55.
"""

import math
from dataclasses import dataclass, field
from typing import Tuple

from common.constants import GeodesyConstants, TOL2
from common.exceptions import InvalidEllipsoidError
from geospatial import series
from geospatial.geomath import sq


@dataclass(frozen=True)
class Ellipsoid:
    """Parameters defining a reference ellipsoid.

    Attributes
    ----------
    a : float
        Equatorial radius (semi-major axis for oblate ellipsoids). Its unit
        is the unit of every length the solvers return.
    f : float
        Flattening: f = (a - b) / a. Negative for a prolate ellipsoid.
    name : str
        Identifier for the ellipsoid.

    Derived Parameters
    ------------------
    f1 : float
        1 - f.
    e2 : float
        First eccentricity squared: e² = f(2 - f).
    ep2 : float
        Second eccentricity squared: e'² = e² / (1 - f)².
    n : float
        Third flattening: n = f / (2 - f).
    b : float
        Polar semi-axis: b = a(1 - f).
    c2 : float
        Authalic radius squared; 4πc² is the total surface area.
    etol2 : float
        Threshold on the auxiliary-sphere arc below which an inverse
        problem is solved in closed form.
    a3x, c3x, c4x : tuple of float
        Coefficients in eps of the A3, C3 and C4 series.

    Raises
    ------
    InvalidEllipsoidError
        If ``a`` is not finite and positive, or ``f >= 1``.

    Examples
    --------
    >>> wgs84 = Ellipsoid(6378137.0, 1 / 298.257223563, "WGS84")
    >>> round(wgs84.b, 6)
    6356752.314245
    """
    a: float
    f: float
    name: str = "custom"

    f1: float = field(init=False, repr=False)
    e2: float = field(init=False, repr=False)
    ep2: float = field(init=False, repr=False)
    n: float = field(init=False, repr=False)
    b: float = field(init=False, repr=False)
    c2: float = field(init=False, repr=False)
    etol2: float = field(init=False, repr=False)
    a3x: Tuple[float, ...] = field(init=False, repr=False, compare=False)
    c3x: Tuple[float, ...] = field(init=False, repr=False, compare=False)
    c4x: Tuple[float, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        a = float(self.a)
        f = float(self.f)
        if not (math.isfinite(a) and a > 0):
            raise InvalidEllipsoidError(
                f"Equatorial radius must be finite and positive, got {self.a}"
            )
        b = a * (1 - f)
        if not (math.isfinite(b) and b > 0):
            raise InvalidEllipsoidError(
                f"Flattening must be less than 1, got {self.f}"
            )

        f1 = 1 - f
        e2 = f * (2 - f)
        ep2 = e2 / sq(f1)
        n = f / (2 - f)
        if e2 == 0:
            c2_ratio = 1.0
        elif e2 > 0:
            c2_ratio = math.atanh(math.sqrt(e2)) / math.sqrt(e2)
        else:
            c2_ratio = math.atan(math.sqrt(-e2)) / math.sqrt(-e2)
        c2 = (sq(a) + sq(b) * c2_ratio) / 2
        # The sig12 threshold for "really short" inverse problems
        etol2 = 0.1 * TOL2 / math.sqrt(max(0.001, abs(f)) * min(1.0, 1 - f / 2) / 2)

        derived = {
            "a": a, "f": f, "f1": f1, "e2": e2, "ep2": ep2, "n": n, "b": b,
            "c2": c2, "etol2": etol2,
            "a3x": series.a3_coefficients(n),
            "c3x": series.c3_coefficients(n),
            "c4x": series.c4_coefficients(n),
        }
        for name, value in derived.items():
            object.__setattr__(self, name, value)

    @classmethod
    def from_axes(cls, a: float, b: float, name: str = "custom") -> 'Ellipsoid':
        """Create an ellipsoid from its equatorial radius and polar semi-axis.

        Parameters
        ----------
        a : float
            Equatorial radius.
        b : float
            Polar semi-axis (b > a gives a prolate ellipsoid).
        name : str
            Identifier for the ellipsoid.
        """
        if not (math.isfinite(a) and a > 0):
            raise InvalidEllipsoidError(
                f"Equatorial radius must be finite and positive, got {a}"
            )
        return cls(a=a, f=(a - b) / a, name=name)

    @property
    def area(self) -> float:
        """Total surface area of the ellipsoid."""
        return 4 * math.pi * self.c2

    @property
    def is_sphere(self) -> bool:
        """True for zero flattening."""
        return self.f == 0


# WGS84 ellipsoid - the standard reference for this library
WGS84 = Ellipsoid(
    a=GeodesyConstants.WGS84_SEMI_MAJOR_AXIS.value,
    f=GeodesyConstants.WGS84_FLATTENING.value,
    name="WGS84"
)

GRS80 = Ellipsoid(
    a=GeodesyConstants.GRS80_SEMI_MAJOR_AXIS.value,
    f=GeodesyConstants.GRS80_FLATTENING.value,
    name="GRS80"
)
