"""
Tests for geospatial.polygon (geodesic polygon area and perimeter).
"""

import math

import pytest

from geospatial.ellipsoid import WGS84
from geospatial.inverse import inverse
from geospatial.polygon import (
    Accumulator,
    PolygonArea,
    polygon_add,
    polygon_area_perimeter,
    polygon_compute,
)


def _polygon(points, polyline=False):
    poly = PolygonArea(WGS84, polyline)
    for lat, lon in points:
        poly.add_point(lat, lon)
    return poly


DIAMOND = [(0, -1), (-1, 0), (0, 1), (1, 0)]
NORTH_RING = [(89, 0), (89, 90), (89, 180), (89, 270)]
SOUTH_RING = [(-89, 0), (-89, 90), (-89, 180), (-89, 270)]
OCTANT = [(90, 0), (0, 0), (0, 90)]


# ---------------------------------------------------------------------------
# Accumulator
# ---------------------------------------------------------------------------

class TestAccumulator:

    def test_exact_cancellation(self):
        acc = Accumulator()
        for x in (1e20, 1.0, -1e20):
            acc.add(x)
        assert acc.sum() == 1.0

    def test_sum_with_extra_term_leaves_state(self):
        acc = Accumulator(2.0)
        assert acc.sum(3.0) == 5.0
        assert acc.sum() == 2.0

    def test_negate_and_copy(self):
        acc = Accumulator(1.5)
        copy = Accumulator(acc)
        acc.negate()
        assert acc.sum() == -1.5
        assert copy.sum() == 1.5


# ---------------------------------------------------------------------------
# Reference polygons
# ---------------------------------------------------------------------------

class TestKnownPolygons:

    def test_diamond(self):
        r = _polygon(DIAMOND).compute()
        assert r.perimeter == pytest.approx(627598.2731, abs=1e-4)
        assert r.area == pytest.approx(24619419146, abs=1)
        assert r.num == 4

    def test_north_pole_ring(self):
        r = _polygon(NORTH_RING).compute()
        assert r.perimeter == pytest.approx(631819.8745, abs=1e-4)
        assert r.area == pytest.approx(24952305678, abs=1)
        assert r.encircles_pole

    def test_south_pole_ring(self):
        r = _polygon(SOUTH_RING).compute()
        assert r.perimeter == pytest.approx(631819.8745, abs=1e-4)
        assert r.area == pytest.approx(-24952305678, abs=1)

    def test_octant(self):
        r = _polygon(OCTANT).compute()
        assert r.perimeter == pytest.approx(30022685, abs=1)
        assert r.area == pytest.approx(63758202715511, abs=1)
        assert r.area == pytest.approx(WGS84.area / 8, rel=1e-12)

    def test_octant_polyline(self):
        r = _polygon(OCTANT, polyline=True).compute()
        assert r.perimeter == pytest.approx(20020719, abs=1)
        assert math.isnan(r.area)

    def test_vertex_near_antimeridian(self):
        r = _polygon([(89, 0.1), (89, 90.1), (89, -179.9)]).compute()
        assert r.perimeter == pytest.approx(539297, abs=1)
        assert r.area == pytest.approx(12476152838.5, abs=1)

    def test_two_vertices_over_pole(self):
        r = _polygon([(66.562222222, 0), (66.562222222, 180)]).compute()
        assert r.perimeter == pytest.approx(10465729.17, abs=1)
        assert r.area == pytest.approx(0, abs=1)

    def test_ring_traversed_twice(self):
        points = [(89, -360), (89, -240), (89, -120), (89, 0), (89, 120), (89, 240)]
        r = _polygon(points).compute()
        assert r.perimeter == pytest.approx(1160741, abs=1)
        assert r.area == pytest.approx(32415230256.0, abs=1)

    def test_one_degree_cell(self):
        r = _polygon([(0, 0), (0, 1), (1, 1), (1, 0)]).compute()
        flat = WGS84.a ** 2 * math.radians(1) ** 2 * math.cos(math.radians(0.5))
        assert r.area > 0
        assert r.area == pytest.approx(flat, rel=0.02)


# ---------------------------------------------------------------------------
# Orientation and sign conventions
# ---------------------------------------------------------------------------

class TestOrientation:

    def test_clockwise_is_negative(self):
        r = _polygon(list(reversed(DIAMOND))).compute()
        assert r.area == pytest.approx(-24619419146, abs=1)

    def test_reverse_flag(self):
        poly = _polygon(DIAMOND)
        assert poly.compute(reverse=True).area == pytest.approx(-poly.compute().area)

    def test_unsigned_area_of_clockwise_polygon(self):
        poly = _polygon(list(reversed(DIAMOND)))
        r = poly.compute(sign=False)
        assert r.area == pytest.approx(WGS84.area - 24619419146, abs=2)

    def test_fewer_than_two_vertices(self):
        poly = _polygon([(10, 20)])
        r = poly.compute()
        assert r.area == 0.0 and r.perimeter == 0.0
        assert math.isnan(_polygon([(10, 20)], polyline=True).compute().area)


# ---------------------------------------------------------------------------
# Incremental interface
# ---------------------------------------------------------------------------

class TestIncremental:

    def test_edges_match_points(self):
        poly = PolygonArea(WGS84)
        poly.add_point(*DIAMOND[0])
        for (lat1, lon1), (lat2, lon2) in zip(DIAMOND, DIAMOND[1:]):
            r = inverse(WGS84, lat1, lon1, lat2, lon2)
            poly.add_edge(r.azi1, r.s12)
        result = poly.compute()
        assert result.area == pytest.approx(24619419146, abs=1)
        assert result.perimeter == pytest.approx(627598.2731, abs=1e-4)

    def test_edge_before_first_point_is_ignored(self):
        poly = PolygonArea(WGS84)
        poly.add_edge(90, 1000)
        assert poly.num == 0

    def test_test_point_does_not_modify(self):
        poly = _polygon(DIAMOND[:3])
        tentative = poly.test_point(*DIAMOND[3])
        assert poly.num == 3
        poly.add_point(*DIAMOND[3])
        final = poly.compute()
        assert tentative.num == final.num
        assert tentative.area == pytest.approx(final.area, abs=1e-3)
        assert tentative.perimeter == pytest.approx(final.perimeter, abs=1e-6)

    def test_test_edge_does_not_modify(self):
        poly = _polygon(DIAMOND[:3])
        r = inverse(WGS84, *DIAMOND[2], *DIAMOND[3])
        tentative = poly.test_edge(r.azi1, r.s12)
        assert poly.num == 3
        assert tentative.area == pytest.approx(24619419146, abs=1)

    def test_test_edge_without_vertices(self):
        r = PolygonArea(WGS84).test_edge(0, 1000)
        assert math.isnan(r.perimeter)

    def test_clear(self):
        poly = _polygon(DIAMOND)
        poly.clear()
        r = poly.compute()
        assert r.num == 0
        assert r.area == 0.0

    def test_functional_aliases(self):
        poly = PolygonArea(WGS84)
        for lat, lon in DIAMOND:
            poly = polygon_add(poly, lat, lon)
        assert polygon_compute(poly).area == pytest.approx(24619419146, abs=1)


# ---------------------------------------------------------------------------
# Array interface
# ---------------------------------------------------------------------------

class TestPolygonAreaPerimeter:

    def test_matches_accumulator(self):
        lats, lons = zip(*DIAMOND)
        area, perimeter = polygon_area_perimeter(WGS84, lats, lons)
        assert area == pytest.approx(24619419146, abs=1)
        assert perimeter == pytest.approx(627598.2731, abs=1e-4)

    def test_units(self):
        lats, lons = zip(*DIAMOND)
        area, perimeter = polygon_area_perimeter(WGS84, lats, lons, length_unit="km")
        assert area == pytest.approx(24619.419146, rel=1e-9)
        assert perimeter == pytest.approx(627.5982731, rel=1e-9)

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            polygon_area_perimeter(WGS84, [0, 1, 2], [0, 1])

    def test_against_pyproj(self, geod):
        lats = [40.0, 41.0, 45.0, 44.0, 42.0]
        lons = [-100.0, -95.0, -96.0, -101.0, -103.0]
        area, perimeter = polygon_area_perimeter(WGS84, lats, lons)
        ref_area, ref_perimeter = geod.polygon_area_perimeter(lons, lats)
        assert area == pytest.approx(ref_area, rel=1e-9)
        assert perimeter == pytest.approx(ref_perimeter, rel=1e-12)

    def test_eccentric_ellipsoids(self, eccentric, geod_for):
        geod = geod_for(eccentric)
        for lats, lons in [
            ([40.0, 41.0, 45.0, 44.0, 42.0], [-100.0, -95.0, -96.0, -101.0, -103.0]),
            ([-10.0, -20.0, 5.0, 30.0], [0.0, 60.0, 130.0, 40.0]),
            ([70.0, 70.0, 70.0, 70.0], [0.0, 90.0, 180.0, 270.0]),
        ]:
            area, perimeter = polygon_area_perimeter(eccentric, lats, lons)
            ref_area, ref_perimeter = geod.polygon_area_perimeter(lons, lats)
            assert area == pytest.approx(ref_area, rel=1e-9)
            assert perimeter == pytest.approx(ref_perimeter, rel=1e-12)
