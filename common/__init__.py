"""
Common utilities and infrastructure for the geodesy library.

This package provides foundational components used across all modules:
- Reference-ellipsoid constants and solver settings
- Unit registry and length/area conversion
- Result and coordinate types
- Exception hierarchy
- Logging and audit trail infrastructure
"""

from common.constants import GeodesyConstants, SolverSettings, DEFAULT_SOLVER_SETTINGS
from common.units import UnitRegistry, validate_units, convert_length, convert_area
from common.types import (
    GeoCoordinate,
    GeodesicResult,
    PolygonResult,
    InverseDiagnostics,
    IterationPhase,
)
from common.exceptions import (
    GeodesyError,
    InvalidEllipsoidError,
    OutOfRangeError,
    UnknownMeasureError,
    ConsistencyError,
)
from common.logging_config import get_logger, AuditLogger

__all__ = [
    "GeodesyConstants",
    "SolverSettings",
    "DEFAULT_SOLVER_SETTINGS",
    "UnitRegistry",
    "validate_units",
    "convert_length",
    "convert_area",
    "GeoCoordinate",
    "GeodesicResult",
    "PolygonResult",
    "InverseDiagnostics",
    "IterationPhase",
    "GeodesyError",
    "InvalidEllipsoidError",
    "OutOfRangeError",
    "UnknownMeasureError",
    "ConsistencyError",
    "get_logger",
    "AuditLogger",
]
