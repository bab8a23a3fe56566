"""
Tests for geospatial.geomath exact-angle helpers.
"""

import math

import pytest

from geospatial.geomath import (
    ang_diff,
    ang_normalize,
    ang_round,
    atan2d,
    cbrt,
    error_free_sum,
    lat_fix,
    polyval,
    sincosd,
)


# ---------------------------------------------------------------------------
# Trigonometry in degrees
# ---------------------------------------------------------------------------

class TestSincosd:

    def test_quadrants_are_exact(self):
        assert sincosd(0.0) == (0.0, 1.0)
        assert sincosd(90.0) == (1.0, 0.0)
        assert sincosd(180.0) == (0.0, -1.0)
        assert sincosd(270.0) == (-1.0, 0.0)
        assert sincosd(-90.0) == (-1.0, 0.0)

    def test_negative_zero_sine_is_kept(self):
        s, c = sincosd(-0.0)
        assert math.copysign(1.0, s) == -1.0
        assert c == 1.0

    def test_generic_angle(self):
        s, c = sincosd(30.0)
        assert s == pytest.approx(0.5, abs=1e-15)
        assert c == pytest.approx(math.sqrt(3) / 2, abs=1e-15)

    def test_large_argument_is_reduced(self):
        assert sincosd(720.0 + 90.0) == (1.0, 0.0)

    def test_non_finite(self):
        s, c = sincosd(math.inf)
        assert math.isnan(s) and math.isnan(c)


class TestAtan2d:

    def test_exact_directions(self):
        assert atan2d(1.0, 0.0) == 90.0
        assert atan2d(-1.0, 0.0) == -90.0
        assert atan2d(0.0, -1.0) == 180.0
        assert atan2d(0.0, 1.0) == 0.0

    def test_diagonal(self):
        assert atan2d(1.0, 1.0) == pytest.approx(45.0, abs=1e-14)
        assert atan2d(-1.0, -1.0) == pytest.approx(-135.0, abs=1e-14)


# ---------------------------------------------------------------------------
# Angle reduction
# ---------------------------------------------------------------------------

class TestAngNormalize:

    @pytest.mark.parametrize("x, expected", [
        (180.0, 180.0),
        (-180.0, 180.0),
        (540.0, 180.0),
        (-190.0, 170.0),
        (360.0, 0.0),
        (45.0, 45.0),
    ])
    def test_range(self, x, expected):
        assert ang_normalize(x) == expected


class TestAngDiff:

    def test_across_antimeridian(self):
        d, e = ang_diff(170.0, -170.0)
        assert d == 20.0
        assert e == 0.0

    def test_half_turn(self):
        assert ang_diff(0.0, 180.0)[0] == 180.0

    def test_error_term_is_exact(self):
        d, e = ang_diff(1e-20, 100.0)
        assert d == 100.0
        assert e == -1e-20


class TestAngRound:

    def test_tiny_angle_rounds_to_zero(self):
        assert ang_round(1e-30) == 0.0

    def test_ordinary_angles_untouched(self):
        assert ang_round(30.0) == 30.0
        assert ang_round(-0.5) == -0.5


class TestLatFix:

    def test_out_of_range_is_nan(self):
        assert math.isnan(lat_fix(91.0))
        assert math.isnan(lat_fix(-90.0001))

    def test_in_range_untouched(self):
        assert lat_fix(-90.0) == -90.0
        assert lat_fix(45.5) == 45.5


# ---------------------------------------------------------------------------
# Arithmetic helpers
# ---------------------------------------------------------------------------

class TestErrorFreeSum:

    def test_recovers_lost_bits(self):
        s, t = error_free_sum(1e16, 1.0)
        assert s == 1e16
        assert t == 1.0

    def test_exact_sum_has_no_error(self):
        assert error_free_sum(0.5, 0.25) == (0.75, 0.0)


class TestPolyval:

    def test_horner(self):
        assert polyval(2, [1, 2, 3], 0, 2.0) == 11.0

    def test_offset(self):
        assert polyval(1, [9, 9, 2, 5], 2, 3.0) == 11.0

    def test_negative_order(self):
        assert polyval(-1, [1, 2, 3], 0, 2.0) == 0.0


class TestCbrt:

    def test_sign(self):
        assert cbrt(27.0) == pytest.approx(3.0)
        assert cbrt(-8.0) == pytest.approx(-2.0)
        assert cbrt(0.0) == 0.0
