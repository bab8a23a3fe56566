"""
Geodetic Constants and Solver Configuration.

This module provides the reference-ellipsoid constants with their uncertainty
bounds and sources, together with the tuning parameters of the geodesic
solvers. All lengths are in meters.

References
----------
- WGS84 parameters: NIMA TR8350.2, Third Edition, 2000
- GRS80 parameters: Moritz, H. (2000). Geodetic Reference System 1980.
  Journal of Geodesy, 74(1), 128-133.
- Karney, C.F.F. (2013). Algorithms for geodesics. J. Geodesy, 87(1), 43-55.
"""

import math
import sys
from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class Constant:
    """A physical constant with uncertainty and provenance.

    Attributes
    ----------
    value : float
        The nominal value of the constant.
    uncertainty : float
        The standard uncertainty (1-sigma) of the constant.
    unit : str
        The SI unit of the constant.
    source : str
        Reference for the constant value.
    description : str
        Human-readable description of the constant.
    """
    value: float
    uncertainty: float
    unit: str
    source: str
    description: str


class GeodesyConstants:
    """Registry of reference-ellipsoid constants.

    All constants are class attributes with full metadata including
    uncertainty bounds and authoritative sources. The defining parameters
    of an ellipsoid are its semi-major axis and flattening; everything
    else is derived by :class:`geospatial.ellipsoid.Ellipsoid`.
    """

    # =========================================================================
    # WGS84 Ellipsoid Parameters
    # Reference: NIMA TR8350.2, Third Edition, 2000
    # =========================================================================

    WGS84_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,  # Defined exactly
        unit="m",
        source="WGS84, NIMA TR8350.2",
        description="Semi-major axis (equatorial radius) of WGS84 ellipsoid"
    )

    WGS84_FLATTENING: Final[Constant] = Constant(
        value=1.0 / 298.257223563,
        uncertainty=0.0,  # Defined exactly
        unit="dimensionless",
        source="WGS84, NIMA TR8350.2",
        description="Flattening of WGS84 ellipsoid: f = (a - b) / a"
    )

    # =========================================================================
    # GRS80 Ellipsoid Parameters
    # =========================================================================

    GRS80_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,
        unit="m",
        source="GRS80, Moritz (2000)",
        description="Semi-major axis (equatorial radius) of GRS80 ellipsoid"
    )

    GRS80_FLATTENING: Final[Constant] = Constant(
        value=1.0 / 298.257222100882711243,
        uncertainty=0.0,
        unit="dimensionless",
        source="GRS80, Moritz (2000) (derived from J2)",
        description="Flattening of GRS80 ellipsoid"
    )

    # =========================================================================
    # Spherical approximations
    # =========================================================================

    SPHERICAL_MEASURE_RADIUS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,
        unit="m",
        source="WGS84 equatorial radius",
        description="Radius used by the haversine and vincenty spherical measures"
    )


@dataclass(frozen=True)
class SolverSettings:
    """Tuning parameters of the inverse geodesic solver.

    Attributes
    ----------
    max_newton_iterations : int
        Number of iterations during which Newton's method is attempted
        before the solver commits to bisection.
    extra_bisection_iterations : int
        Additional iterations available to bisection once Newton's method
        is abandoned. The default (digits + 10) always suffices to
        collapse the azimuth bracket to machine precision.
    """
    max_newton_iterations: int = 20
    extra_bisection_iterations: int = sys.float_info.mant_dig + 10

    def __post_init__(self):
        if self.max_newton_iterations < 0 or self.extra_bisection_iterations < 1:
            raise ValueError(
                "Iteration caps must be non-negative with at least one "
                "bisection iteration"
            )

    @property
    def max_iterations(self) -> int:
        """Hard cap on the total number of solver iterations."""
        return self.max_newton_iterations + self.extra_bisection_iterations


DEFAULT_SOLVER_SETTINGS: Final[SolverSettings] = SolverSettings()


# =============================================================================
# Numerical tolerances (double precision)
# =============================================================================

TINY: Final[float] = math.sqrt(sys.float_info.min)
TOL0: Final[float] = sys.float_info.epsilon
# Nearly antipodal starting-guess threshold
TOL1: Final[float] = 200 * TOL0
TOL2: Final[float] = math.sqrt(TOL0)
TOLB: Final[float] = TOL0 * TOL2
XTHRESH: Final[float] = 1000 * TOL2
