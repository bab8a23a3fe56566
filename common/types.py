"""
Type Definitions for Geodesic Computations.

This module defines the records exchanged between the solvers and their
callers. Angles are in DEGREES and lengths in the unit of the ellipsoid's
equatorial radius (meters for the reference ellipsoids).

Design Rationale
----------------
The solvers compute only what the caller's capability set asks for. Rather
than returning positional tuples padded with NaN, results are dataclasses
whose unrequested fields are ``None``, so a missing quantity can never be
mistaken for a computed one.
"""

import enum
import math
from dataclasses import dataclass, field, fields
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class GeoCoordinate:
    """A geographic coordinate on the ellipsoid surface.

    Attributes
    ----------
    latitude : float
        Geodetic latitude in DEGREES. Range: [-90, 90].
    longitude : float
        Geodetic longitude in DEGREES. Any real value is accepted.

    Notes
    -----
    No range check is applied: an out-of-range latitude propagates as NaN
    through the solvers, matching the numerical convention of the library.

    Examples
    --------
    >>> jfk = GeoCoordinate(40.64, -73.78)
    >>> jfk.to_radians()
    (0.7093..., -1.2877...)
    """
    latitude: float
    longitude: float

    def to_radians(self) -> Tuple[float, float]:
        """Convert to radians.

        Returns
        -------
        Tuple[float, float]
            (latitude_radians, longitude_radians)
        """
        return math.radians(self.latitude), math.radians(self.longitude)

    @classmethod
    def from_radians(cls, lat_rad: float, lon_rad: float) -> 'GeoCoordinate':
        """Create coordinate from radians (convenience constructor)."""
        return cls(latitude=math.degrees(lat_rad), longitude=math.degrees(lon_rad))


class IterationPhase(enum.Enum):
    """States of the inverse solver's azimuth search."""
    NEWTON = "newton"
    BISECTION = "bisection"
    CONVERGED = "converged"
    EXHAUSTED = "exhausted"


@dataclass
class InverseDiagnostics:
    """How the inverse solver reached its answer.

    Attributes
    ----------
    method : str
        'meridian', 'equatorial', 'short_line' or 'iterative'.
    iterations : int
        Number of azimuth updates performed (0 for closed-form cases).
    newton_steps : int
        Updates taken by Newton's method.
    bisection_steps : int
        Updates taken by bisection.
    final_phase : IterationPhase
        CONVERGED unless the hard iteration cap was exhausted.
    """
    method: str
    iterations: int = 0
    newton_steps: int = 0
    bisection_steps: int = 0
    final_phase: IterationPhase = IterationPhase.CONVERGED


@dataclass
class GeodesicResult:
    """Result of a direct, inverse or line-position computation.

    Only the fields selected by the capability set are populated; the rest
    are ``None``. ``a12`` is always populated.

    Attributes
    ----------
    lat1, lon1, azi1 : float
        Point 1 and the forward azimuth there (degrees).
    lat2, lon2, azi2 : float
        Point 2 and the forward azimuth there (degrees).
    s12 : float
        Distance from point 1 to point 2.
    a12 : float
        Arc length on the auxiliary sphere (degrees).
    m12 : float
        Reduced length of the geodesic.
    M12, M21 : float
        Geodesic scales (dimensionless).
    S12 : float
        Area between the geodesic and the equator (length squared),
        counter-clockwise positive.
    diagnostics : InverseDiagnostics, optional
        Populated by the inverse solver.
    """
    lat1: Optional[float] = None
    lon1: Optional[float] = None
    azi1: Optional[float] = None
    lat2: Optional[float] = None
    lon2: Optional[float] = None
    azi2: Optional[float] = None
    s12: Optional[float] = None
    a12: Optional[float] = None
    m12: Optional[float] = None
    M12: Optional[float] = None
    M21: Optional[float] = None
    S12: Optional[float] = None
    diagnostics: Optional[InverseDiagnostics] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, float]:
        """Populated numeric fields as a dictionary."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "diagnostics" and getattr(self, f.name) is not None
        }


@dataclass(frozen=True)
class PolygonResult:
    """Result of closing a polygon or polyline.

    Attributes
    ----------
    num : int
        Number of vertices.
    perimeter : float
        Perimeter (or polyline length).
    area : float
        Signed area, counter-clockwise positive; NaN for polylines.
    crossings : int
        Number of times the edges cross the prime meridian (signed sum);
        odd values mean the polygon encircles a pole.
    """
    num: int
    perimeter: float
    area: float
    crossings: int = 0

    @property
    def encircles_pole(self) -> bool:
        """True when the closed polygon winds around a pole."""
        return bool(self.crossings & 1)

