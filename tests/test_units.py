"""
Tests for common.units and the shared record types.
"""

import dataclasses
import math

import numpy as np
import pint
import pytest

from common.constants import DEFAULT_SOLVER_SETTINGS, GeodesyConstants, SolverSettings
from common.types import GeoCoordinate, GeodesicResult, PolygonResult
from common.units import (
    Q_,
    UnitRegistry,
    convert_area,
    convert_length,
    ensure_magnitude,
    validate_units,
)


# ---------------------------------------------------------------------------
# Conversions
# ---------------------------------------------------------------------------

class TestConversions:

    def test_length(self):
        assert convert_length(1000.0, "km") == pytest.approx(1.0)
        assert convert_length(Q_(1, "nautical_mile"), "m") == pytest.approx(1852.0)
        assert convert_length(1.0, "m", from_unit="km") == pytest.approx(1000.0)

    def test_length_array(self):
        out = convert_length(np.array([1000.0, 2500.0]), "km")
        assert np.allclose(out, [1.0, 2.5])

    def test_area(self):
        assert convert_area(1e6, "km**2") == pytest.approx(1.0)
        assert convert_area(1e4, "hectare") == pytest.approx(1.0)

    def test_wrong_dimension(self):
        with pytest.raises(ValueError):
            convert_length(1.0, "second")
        with pytest.raises(ValueError):
            convert_area(1.0, "km")

    def test_ensure_magnitude(self):
        assert ensure_magnitude(Q_(2, "km"), "m") == pytest.approx(2000.0)
        assert ensure_magnitude(5.0, "m") == 5.0


class TestUnitRegistry:

    def test_quantity(self):
        angle = UnitRegistry().quantity(90, "degree").to("radian")
        assert angle.magnitude == pytest.approx(math.pi / 2)

    def test_validate_dimensionality(self):
        units = UnitRegistry()
        assert units.validate_dimensionality(Q_(3, "km"), "[length]")
        with pytest.raises(pint.DimensionalityError):
            units.validate_dimensionality(Q_(3, "s"), "[length]")

    def test_standard_units(self):
        units = UnitRegistry()
        assert units.standard("distance") == units.registry.Unit("meter")
        assert units.quantity(1, "km").to(units.standard("distance")).magnitude == 1000.0


class TestValidateUnits:

    def test_decorator(self):
        @validate_units({"distance": "m"})
        def half(distance):
            return ensure_magnitude(distance, "m") / 2

        assert half(Q_(1, "km")) == pytest.approx(500.0)
        assert half(10.0) == 5.0
        with pytest.raises(ValueError):
            half(Q_(1, "kg"))

    def test_return_value(self):
        @validate_units({"return": "m"})
        def wrong():
            return Q_(1, "s")

        with pytest.raises(ValueError):
            wrong()


# ---------------------------------------------------------------------------
# Records and settings
# ---------------------------------------------------------------------------

class TestRecords:

    def test_coordinate_radians(self):
        c = GeoCoordinate.from_radians(math.pi / 4, -math.pi / 2)
        assert c.latitude == pytest.approx(45.0)
        assert c.to_radians() == pytest.approx((math.pi / 4, -math.pi / 2))

    def test_result_to_dict(self):
        r = GeodesicResult(lat1=1.0, a12=2.0)
        assert r.to_dict() == {"lat1": 1.0, "a12": 2.0}

    def test_polygon_pole(self):
        assert PolygonResult(4, 1.0, 2.0, crossings=1).encircles_pole
        assert not PolygonResult(4, 1.0, 2.0, crossings=2).encircles_pole


class TestSettings:

    def test_default_iteration_cap(self):
        assert DEFAULT_SOLVER_SETTINGS.max_newton_iterations == 20
        assert DEFAULT_SOLVER_SETTINGS.max_iterations == 20 + 53 + 10

    def test_invalid(self):
        with pytest.raises(ValueError):
            SolverSettings(extra_bisection_iterations=0)

    def test_only_iteration_caps_are_tunable(self):
        names = {f.name for f in dataclasses.fields(SolverSettings)}
        assert names == {"max_newton_iterations", "extra_bisection_iterations"}

    def test_reference_constants(self):
        assert GeodesyConstants.WGS84_SEMI_MAJOR_AXIS.value == 6378137.0
        assert GeodesyConstants.WGS84_FLATTENING.value == pytest.approx(1 / 298.257223563)
