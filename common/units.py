"""
Unit Registry and Dimensional Analysis for Geodesic Computations.

The solvers work in plain floats: angles in degrees and lengths in the unit
of the ellipsoid's equatorial radius (meters for the reference ellipsoids).
``pint`` is used only at the edges of the library, to accept quantities
from callers and to report distances and areas in the unit they ask for.

Example Usage
-------------
>>> from common.units import Q_, convert_length
>>> convert_length(15_347_512.0, 'km')
15347.512
>>> Q_(1, 'nautical_mile').to('m')
<Quantity(1852.0, 'meter')>
"""

import inspect
from functools import wraps
from typing import Any, Callable, Dict, Union

import numpy as np
import pint
from pint import UnitRegistry as PintUnitRegistry

ureg = PintUnitRegistry()
Q_ = ureg.Quantity

LengthLike = Union[float, np.ndarray, pint.Quantity]

# Units in which the solvers read and write each quantity
STANDARD_UNITS: Dict[str, str] = {
    "latitude": "degree",
    "longitude": "degree",
    "azimuth": "degree",
    "arc_length": "degree",
    "distance": "meter",
    "reduced_length": "meter",
    "geodesic_scale": "dimensionless",
    "area": "meter**2",
}


class UnitRegistry:
    """Geodesy-facing view of the shared pint registry.

    Examples
    --------
    >>> units = UnitRegistry()
    >>> units.quantity(90, 'degree').to('radian')
    <Quantity(1.57079633, 'radian')>
    >>> units.standard('distance')
    <Unit('meter')>
    """

    def __init__(self):
        self._registry = ureg

    @property
    def registry(self) -> PintUnitRegistry:
        return self._registry

    def quantity(self, value: Any, unit: str) -> pint.Quantity:
        """Attach `unit` to a number or array."""
        return self._registry.Quantity(value, unit)

    def standard(self, kind: str) -> pint.Unit:
        """The solver unit of a quantity kind listed in STANDARD_UNITS."""
        return self._registry.Unit(STANDARD_UNITS[kind])

    def validate_dimensionality(self, quantity: pint.Quantity, expected_dim: str) -> bool:
        """Require `quantity` to have dimensionality `expected_dim`.

        Parameters
        ----------
        quantity : pint.Quantity
            Quantity under test.
        expected_dim : str
            Dimensionality string such as ``'[length]'`` or ``'[length] ** 2'``.

        Returns
        -------
        bool
            Always True; a mismatch raises instead.

        Raises
        ------
        pint.DimensionalityError
            If the dimensionalities differ.
        """
        expected = self._registry.get_dimensionality(expected_dim)
        actual = quantity.dimensionality
        if actual != expected:
            raise pint.DimensionalityError(quantity.units, expected, actual, expected)
        return True


def _to_unit(value: LengthLike, to_unit: str, from_unit: str, kind: str) -> Any:
    quantity = value if isinstance(value, pint.Quantity) else Q_(value, from_unit)
    try:
        return quantity.to(to_unit).magnitude
    except pint.DimensionalityError as e:
        raise ValueError(f"'{to_unit}' is not a unit of {kind}") from e


def convert_length(
    value: LengthLike, to_unit: str, from_unit: str = STANDARD_UNITS["distance"]
) -> Any:
    """Convert a length (scalar or array) to another unit.

    Parameters
    ----------
    value : float, ndarray or pint.Quantity
        The length. Bare numbers are read in `from_unit`.
    to_unit : str
        Target unit (e.g., 'km', 'nautical_mile').
    from_unit : str
        Unit of bare numbers.

    Returns
    -------
    float or ndarray
        Magnitude in `to_unit`.

    Raises
    ------
    ValueError
        If `to_unit` is not a length unit.
    """
    return _to_unit(value, to_unit, from_unit, "length")


def convert_area(
    value: LengthLike, to_unit: str, from_unit: str = STANDARD_UNITS["area"]
) -> Any:
    """Convert an area (scalar or array) to another unit, e.g. 'hectare'."""
    return _to_unit(value, to_unit, from_unit, "area")


def _require_compatible(value: Any, unit: str, label: str) -> None:
    if not isinstance(value, pint.Quantity):
        return
    if not value.is_compatible_with(unit):
        raise ValueError(
            f"{label} has incompatible units. Expected {unit}, got {value.units}"
        )


def validate_units(expected_units: Dict[str, str]):
    """Decorator rejecting quantities whose units cannot convert as declared.

    Bare numbers pass through unchecked and are taken to be in the
    declared unit already.

    Parameters
    ----------
    expected_units : dict[str, str]
        Argument name to unit string. The key ``'return'`` checks the
        return value.

    Examples
    --------
    >>> @validate_units({'distance': 'm'})
    ... def half(distance):
    ...     return distance / 2
    """
    returns = expected_units.get('return')
    arguments = {k: v for k, v in expected_units.items() if k != 'return'}

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @wraps(func)
        def wrapper(*args, **kwargs):
            bound = signature.bind(*args, **kwargs)
            bound.apply_defaults()
            for name, unit in arguments.items():
                if name in bound.arguments:
                    _require_compatible(bound.arguments[name], unit, f"Parameter '{name}'")

            result = func(*args, **kwargs)
            if returns is not None:
                _require_compatible(result, returns, "Return value")
            return result
        return wrapper
    return decorator


def ensure_magnitude(value: Union[float, pint.Quantity], unit: str) -> float:
    """Magnitude of `value` in `unit`; bare numbers are returned unchanged."""
    if isinstance(value, pint.Quantity):
        return value.to(unit).magnitude
    return value
