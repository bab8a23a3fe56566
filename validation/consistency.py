"""
Consistency Tests for Geodesic Computations.

This module verifies that solver outputs obey identities every exact
solution satisfies, without needing reference data.

Test Categories
---------------
1. Round trip (the inverse of a direct solution recovers its distance
   and its starting azimuth)
2. Symmetry (swapping the end points reverses the azimuths and keeps the
   distance)
3. Additivity along a line (distance, area and reduced length compose)

Residuals are recorded through the :class:`AuditLogger` so that a run can
be summarised and exported.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from common.exceptions import ConsistencyError
from common.logging_config import AuditLogger, get_logger
from geospatial.capabilities import Capability
from geospatial.direct import general_direct
from geospatial.ellipsoid import Ellipsoid, WGS84
from geospatial.geodesic_line import GeodesicLine
from geospatial.geomath import ang_diff
from geospatial.inverse import general_inverse, inverse

logger = get_logger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation check.

    Attributes
    ----------
    test_name : str
        Name of the test.
    passed : bool
        Whether the test passed.
    message : str
        Description of result.
    details : dict
        Additional details.
    """
    test_name: str
    passed: bool
    message: str
    details: Dict[str, Any]


class GeodesicConsistencyChecker:
    """Checker for the internal consistency of geodesic solutions.

    Parameters
    ----------
    ellipsoid : Ellipsoid
        Ellipsoid the checks run on.
    distance_tolerance : float
        Acceptable length residual, in the ellipsoid's length unit.
    angle_tolerance : float
        Acceptable azimuth residual in degrees.
    strict_mode : bool
        If True, raise ConsistencyError on the first failed check.

    Examples
    --------
    >>> checker = GeodesicConsistencyChecker()
    >>> all(r.passed for r in checker.check_symmetry(10.0, 20.0, -30.0, 140.0))
    True
    """

    def __init__(
        self,
        ellipsoid: Ellipsoid = WGS84,
        distance_tolerance: float = 1e-6,
        angle_tolerance: float = 1e-9,
        strict_mode: bool = False,
    ):
        self.ellipsoid = ellipsoid
        self.distance_tolerance = distance_tolerance
        self.angle_tolerance = angle_tolerance
        self.strict_mode = strict_mode
        self._audit = AuditLogger()

    def _record(self, name: str, residual: float, tolerance: float,
                context: Dict[str, Any]) -> ValidationResult:
        record = self._audit.log_check_residual(name, residual, tolerance, context)
        result = ValidationResult(
            test_name=name,
            passed=record.passed,
            message=f"{name}: residual={residual:.3e} (tolerance={tolerance:.1e})",
            details={"residual": residual, "tolerance": tolerance, **context},
        )
        if self.strict_mode and not result.passed:
            raise ConsistencyError(result.message)
        return result

    def check_round_trip(
        self, lat1: float, lon1: float, azi1: float, s12: float
    ) -> List[ValidationResult]:
        """Solve a direct problem, then the inverse between its end points.

        The inverse must reproduce both s12 and azi1. Valid while the
        direct geodesic is the shortest one, i.e. for s12 well under half a
        meridian.
        """
        fwd = general_direct(self.ellipsoid, lat1, lon1, azi1, s12)
        back = inverse(self.ellipsoid, lat1, lon1, fwd.lat2, fwd.lon2)
        context = {"lat1": lat1, "lon1": lon1, "azi1": azi1, "s12": s12}
        return [
            self._record("round_trip", abs(back.s12 - s12),
                         self.distance_tolerance, context),
            self._record("round_trip_azimuth", abs(ang_diff(azi1, back.azi1)[0]),
                         self.angle_tolerance, context),
        ]

    def check_symmetry(
        self, lat1: float, lon1: float, lat2: float, lon2: float
    ) -> List[ValidationResult]:
        """Compare the inverse solutions from 1 to 2 and from 2 to 1.

        The distance must agree and the forward azimuth of the reverse
        geodesic must be the arrival azimuth at point 2 turned by 180
        degrees.
        """
        r12 = inverse(self.ellipsoid, lat1, lon1, lat2, lon2)
        r21 = inverse(self.ellipsoid, lat2, lon2, lat1, lon1)
        context = {"lat1": lat1, "lon1": lon1, "lat2": lat2, "lon2": lon2}
        return [
            self._record("symmetry", abs(r12.s12 - r21.s12),
                         self.distance_tolerance, context),
            self._record("symmetry_azimuth", abs(ang_diff(r12.azi2 + 180, r21.azi1)[0]),
                         self.angle_tolerance, context),
        ]

    def check_additivity(
        self, lat1: float, lon1: float, azi1: float, s12: float, s23: float
    ) -> List[ValidationResult]:
        """Check that line quantities compose from point 1 via 2 to 3.

        Point 3 reached directly along the line from 1 must match point 3
        reached from 2; the areas must add (S13 = S12 + S23) and the
        reduced lengths must satisfy m13 = m12 M23 + m23 M21.
        """
        line = GeodesicLine(self.ellipsoid, lat1, lon1, azi1, Capability.ALL)
        p2 = line.position(s12, Capability.ALL)
        p3 = line.position(s12 + s23, Capability.ALL)
        leg = general_direct(self.ellipsoid, p2.lat2, p2.lon2, p2.azi2, s23, Capability.ALL)

        gap = general_inverse(self.ellipsoid, p3.lat2, p3.lon2, leg.lat2, leg.lon2,
                              Capability.DISTANCE).s12
        area_residual = abs(p3.S12 - (p2.S12 + leg.S12))
        m_residual = abs(p3.m12 - (p2.m12 * leg.M12 + leg.m12 * p2.M21))
        context = {"lat1": lat1, "lon1": lon1, "azi1": azi1, "s12": s12, "s23": s23}
        # area sums grow like a^2, so the tolerance scales with a
        area_tolerance = self.distance_tolerance * self.ellipsoid.a
        return [
            self._record("additivity_position", gap, self.distance_tolerance, context),
            self._record("additivity_area", area_residual, area_tolerance, context),
            self._record("additivity_reduced_length", m_residual,
                         self.distance_tolerance, context),
        ]

    def check_all(
        self,
        points: NDArray[np.float64],
        segments: Sequence[Tuple[float, float]] = ((1e5, 2e5), (1e6, 3e6)),
    ) -> List[ValidationResult]:
        """Run every check over a set of sample points.

        Parameters
        ----------
        points : ndarray
            (n, 3) array of latitude, longitude, azimuth in degrees.
        segments : sequence of (float, float)
            Pairs of leg lengths (s12, s23) for the round-trip and
            additivity checks.

        Returns
        -------
        List[ValidationResult]
            Results of all checks.
        """
        points = np.asarray(points, dtype=np.float64)
        results: List[ValidationResult] = []
        for lat, lon, azi in points:
            for s12, s23 in segments:
                results.extend(self.check_round_trip(lat, lon, azi, s12))
                fwd = general_direct(self.ellipsoid, lat, lon, azi, s12 + s23)
                results.extend(self.check_symmetry(lat, lon, fwd.lat2, fwd.lon2))
                results.extend(self.check_additivity(lat, lon, azi, s12, s23))

        failed = sum(1 for r in results if not r.passed)
        if failed:
            logger.warning(f"{failed} of {len(results)} consistency checks failed")
        else:
            logger.info(f"All {len(results)} consistency checks passed")
        return results


def max_residual(results: Sequence[ValidationResult], test_name: str) -> float:
    """Largest residual recorded for one check name (NaN if none ran)."""
    values = [r.details["residual"] for r in results if r.test_name == test_name]
    return max(values) if values else math.nan
