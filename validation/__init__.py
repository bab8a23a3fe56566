"""
Validation Framework for the Geodesy Library.

This module provides consistency checks of the geodesic solvers and the
accuracy benchmark of the approximate distance measures.
"""

from validation.consistency import (
    ValidationResult,
    GeodesicConsistencyChecker,
    max_residual,
)

from validation.benchmark import (
    box_size_for_distance,
    geodist_benchmark,
)

__all__ = [
    "ValidationResult",
    "GeodesicConsistencyChecker",
    "max_residual",
    "box_size_for_distance",
    "geodist_benchmark",
]
