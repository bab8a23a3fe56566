"""
Tests for geospatial.series expansions and Clenshaw summation.
"""

import math

import pytest

from geospatial import series
from geospatial.ellipsoid import Ellipsoid, WGS84


# ---------------------------------------------------------------------------
# Clenshaw summation
# ---------------------------------------------------------------------------

class TestSinCosSeries:

    @pytest.mark.parametrize("x", [0.3, 1.2, -2.5])
    def test_sine_series(self, x):
        a, b = 0.7, -0.2
        value = series.sin_cos_series(True, math.sin(x), math.cos(x), [0.0, a, b])
        assert value == pytest.approx(a * math.sin(2 * x) + b * math.sin(4 * x), abs=1e-15)

    @pytest.mark.parametrize("x", [0.3, 1.2, -2.5])
    def test_cosine_series(self, x):
        a, b = 0.7, -0.2
        value = series.sin_cos_series(False, math.sin(x), math.cos(x), [a, b])
        assert value == pytest.approx(a * math.cos(x) + b * math.cos(3 * x), abs=1e-15)

    def test_single_term(self):
        x = 0.3
        value = series.sin_cos_series(True, math.sin(x), math.cos(x), [0.0, 1.0])
        assert value == pytest.approx(math.sin(2 * x), abs=1e-15)


# ---------------------------------------------------------------------------
# Distance and reduced-length series
# ---------------------------------------------------------------------------

class TestEvenSeries:

    def test_vanish_at_zero(self):
        assert series.a1m1(0.0) == 0.0
        assert series.a2m1(0.0) == 0.0
        assert series.c1(0.0) == [0.0] * 7
        assert series.c1p(0.0) == [0.0] * 7
        assert series.c2(0.0) == [0.0] * 7

    def test_leading_terms(self):
        eps = 1e-4
        assert series.c1(eps)[1] == pytest.approx(-eps / 2, rel=1e-3)
        assert series.c1p(eps)[1] == pytest.approx(eps / 2, rel=1e-3)
        assert series.c2(eps)[1] == pytest.approx(eps / 2, rel=1e-3)
        assert series.a1m1(eps) == pytest.approx(eps, rel=1e-3)
        assert series.a2m1(eps) == pytest.approx(-eps, rel=1e-3)

    def test_eps_from_k2(self):
        assert series.eps_from_k2(0.0) == 0.0
        k2 = WGS84.ep2
        eps = series.eps_from_k2(k2)
        assert eps == pytest.approx(k2 / (math.sqrt(1 + k2) + 1) ** 2)


# ---------------------------------------------------------------------------
# Ellipsoid-dependent series
# ---------------------------------------------------------------------------

class TestEllipsoidSeries:

    def test_a3_is_one_at_zero_eps(self):
        assert series.eval_a3(WGS84, 0.0) == 1.0

    def test_lengths(self):
        eps = 1e-3
        assert len(series.eval_c3(WGS84, eps)) == 6
        assert len(series.eval_c4(WGS84, eps)) == 6

    def test_c3_vanishes_at_zero_eps(self):
        assert series.eval_c3(WGS84, 0.0) == [0.0] * 6

    def test_sphere_c3_leading_term(self, sphere):
        eps = 1e-4
        assert series.eval_c3(sphere, eps)[1] == pytest.approx(eps / 4, rel=1e-3)

    @pytest.mark.parametrize("f", [1 / 298.257223563, 0.2, -0.2])
    def test_c3_closed_form(self, f):
        # Karney (2013), eq. (25), through eps^5
        ell = Ellipsoid(6.4e6, f)
        n, eps = ell.n, 0.05
        c1 = ((1 / 4 - n / 4) * eps + (1 / 8 - n**2 / 8) * eps**2
              + (3 / 64 + 3 * n / 64 - n**2 / 64) * eps**3
              + (5 / 128 + n / 64) * eps**4 + 3 / 128 * eps**5)
        c2 = ((1 / 16 - 3 * n / 32 + n**2 / 32) * eps**2
              + (3 / 64 - n / 32 - 3 * n**2 / 64) * eps**3
              + (3 / 128 + n / 128) * eps**4 + 5 / 256 * eps**5)
        c = series.eval_c3(ell, eps)
        assert c[1] == pytest.approx(c1, rel=1e-14)
        assert c[2] == pytest.approx(c2, rel=1e-14)
