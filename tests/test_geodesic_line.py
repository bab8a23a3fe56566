"""
Tests for geospatial.geodesic_line.
"""

import math

import numpy as np
import pytest

from geospatial.capabilities import Capability, Flags
from geospatial.direct import general_direct
from geospatial.ellipsoid import WGS84
from geospatial.geodesic_line import (
    GeodesicLine,
    arc_direct_line,
    direct_line,
    inverse_line,
    line_init,
)
from geospatial.inverse import general_inverse, inverse


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def jfk_line():
    return GeodesicLine(WGS84, 40.64, -73.78, 45.0)


@pytest.fixture
def jfk_changi():
    return inverse_line(WGS84, 40.64, -73.78, 1.36, 103.99)


# ---------------------------------------------------------------------------
# Positions
# ---------------------------------------------------------------------------

class TestPositions:

    def test_matches_direct(self, jfk_line):
        for s12 in (-3e6, 0.0, 1e5, 10e6, 25e6):
            p = jfk_line.position(s12, Capability.ALL)
            d = general_direct(WGS84, 40.64, -73.78, 45.0, s12, Capability.ALL)
            for name in ("lat2", "lon2", "azi2", "a12", "m12", "M12", "S12"):
                assert getattr(p, name) == pytest.approx(getattr(d, name), abs=1e-9)

    def test_known_point(self, jfk_line):
        p = jfk_line.position(10e6)
        assert p.lat2 == pytest.approx(32.6211004637, abs=1e-8)
        assert p.lon2 == pytest.approx(49.0524870930, abs=1e-8)

    def test_arc_and_distance_consistent(self, jfk_line):
        s = jfk_line.distance_at_arc(40.0)
        p = jfk_line.position(s)
        assert p.a12 == pytest.approx(40.0, abs=1e-12)
        q = jfk_line.arc_position(40.0)
        assert q.lat2 == pytest.approx(p.lat2, abs=1e-12)

    def test_general_position_modes(self, jfk_line):
        by_arc = jfk_line.general_position(Flags.ARC_MODE, 30.0)
        by_distance = jfk_line.general_position(Flags.NONE, by_arc.s12)
        assert by_distance.lon2 == pytest.approx(by_arc.lon2, abs=1e-11)

    def test_without_distance_in(self):
        line = GeodesicLine(WGS84, 10.0, 20.0, 30.0,
                            Capability.LATITUDE | Capability.LONGITUDE)
        p = line.position(1e6)
        assert math.isnan(p.lat2)
        assert math.isnan(p.lon2)
        assert math.isnan(p.a12)
        assert math.isnan(line.distance_at_arc(10.0))
        q = line.arc_position(10.0)
        assert math.isfinite(q.lat2) and math.isfinite(q.lon2)

    def test_unroll_accumulates_longitude(self):
        line = GeodesicLine(WGS84, 40, -75, -10)
        p = line.position(2e7, flags=Flags.LONG_UNROLL)
        assert p.lon2 == pytest.approx(-254, abs=1)

    def test_area_matches_inverse(self, jfk_changi):
        p = jfk_changi.position(jfk_changi.s13, Capability.AREA)
        r = general_inverse(WGS84, 40.64, -73.78, 1.36, 103.99, Capability.AREA)
        assert p.S12 == pytest.approx(r.S12, rel=1e-9)


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------

class TestConstructors:

    def test_inverse_line_reference_point(self, jfk_changi):
        r = inverse(WGS84, 40.64, -73.78, 1.36, 103.99)
        assert jfk_changi.s13 == pytest.approx(r.s12, abs=1e-6)
        assert jfk_changi.azi1 == pytest.approx(r.azi1, abs=1e-12)
        end = jfk_changi.position(jfk_changi.s13)
        assert end.lat2 == pytest.approx(1.36, abs=1e-9)
        assert end.lon2 == pytest.approx(103.99, abs=1e-9)

    def test_direct_line(self):
        line = direct_line(WGS84, 10.0, 20.0, 30.0, 5e6)
        d = general_direct(WGS84, 10.0, 20.0, 30.0, 5e6)
        assert line.s13 == 5e6
        assert line.a13 == pytest.approx(d.a12, abs=1e-12)
        assert Capability.DISTANCE_IN in line.caps

    def test_arc_direct_line(self):
        line = arc_direct_line(WGS84, 10.0, 20.0, 30.0, 45.0)
        assert line.a13 == 45.0
        assert line.s13 == pytest.approx(line.distance_at_arc(45.0))

    def test_line_init_has_no_reference(self):
        line = line_init(WGS84, 10.0, 20.0, 30.0)
        assert line.s13 is None and line.a13 is None
        with pytest.raises(ValueError):
            line.points(5)

    def test_caps_closure(self):
        line = GeodesicLine(WGS84, 0.0, 0.0, 45.0, Capability.DISTANCE_IN)
        assert Capability.LATITUDE in line.caps
        assert Capability.AZIMUTH in line.caps
        assert Capability.DISTANCE in line.caps

    def test_azimuth_normalised(self):
        line = GeodesicLine(WGS84, 0.0, 0.0, 540.0)
        assert line.azi1 == 180.0

    def test_invalid_latitude(self):
        line = GeodesicLine(WGS84, 95.0, 0.0, 0.0)
        assert math.isnan(line.lat1)
        assert math.isnan(line.position(1e3).lat2)


# ---------------------------------------------------------------------------
# Immutability
# ---------------------------------------------------------------------------

class TestImmutability:

    def test_setattr_raises(self, jfk_line):
        with pytest.raises(AttributeError):
            jfk_line.lat1 = 0.0

    def test_position_does_not_change_line(self, jfk_line):
        before = repr(jfk_line)
        jfk_line.position(1e6, Capability.ALL)
        assert repr(jfk_line) == before


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------

class TestSampling:

    def test_waypoints_shape_and_ends(self, jfk_changi):
        pts = jfk_changi.waypoints(11)
        assert pts.shape == (11, 2)
        assert pts[0] == pytest.approx(np.array([40.64, -73.78]), abs=1e-12)
        assert pts[-1] == pytest.approx(np.array([1.36, 103.99]), abs=1e-9)

    def test_equal_spacing(self, jfk_changi):
        pts = jfk_changi.waypoints(6)
        legs = [inverse(WGS84, *pts[i], *pts[i + 1]).s12 for i in range(5)]
        assert np.allclose(legs, jfk_changi.s13 / 5, atol=1e-6)

    def test_points_carry_requested_fields(self, jfk_changi):
        results = jfk_changi.points(3, Capability.STANDARD)
        assert len(results) == 3
        assert results[1].s12 == pytest.approx(jfk_changi.s13 / 2)

    def test_too_few_points(self, jfk_changi):
        with pytest.raises(ValueError):
            jfk_changi.points(1)

    def test_arc_sampling_without_distance(self):
        line = arc_direct_line(WGS84, 0.0, 0.0, 90.0, 90.0,
                               Capability.LATITUDE | Capability.LONGITUDE)
        pts = line.waypoints(3)
        # longitude advances by (1 - f) times the arc along the equator
        assert pts[1, 1] == pytest.approx(45.0 * (1 - WGS84.f), abs=1e-12)
