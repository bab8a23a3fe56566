"""
Tests for geospatial.capabilities closure and series requirements.
"""

from geospatial.capabilities import (
    ALWAYS,
    Capability,
    SeriesFamily,
    closure,
    required_series,
)


# ---------------------------------------------------------------------------
# Closure
# ---------------------------------------------------------------------------

class TestClosure:

    def test_empty_request_gets_latitude_and_azimuth(self):
        assert closure(Capability.NONE) == ALWAYS
        assert ALWAYS == Capability.LATITUDE | Capability.AZIMUTH

    def test_distance_in_implies_distance(self):
        caps = closure(Capability.DISTANCE_IN)
        assert Capability.DISTANCE in caps
        assert Capability.LATITUDE in caps
        assert Capability.AZIMUTH in caps

    def test_idempotent(self):
        once = closure(Capability.DISTANCE_IN | Capability.AREA)
        assert closure(once) == once

    def test_standard_members(self):
        std = Capability.STANDARD
        for cap in (Capability.LATITUDE, Capability.LONGITUDE,
                    Capability.AZIMUTH, Capability.DISTANCE):
            assert cap in std
        assert Capability.AREA not in std


# ---------------------------------------------------------------------------
# Series requirements
# ---------------------------------------------------------------------------

class TestRequiredSeries:

    def test_latitude_needs_nothing(self):
        assert required_series(closure(Capability.NONE)) == SeriesFamily.NONE

    def test_longitude_needs_c3(self):
        assert required_series(closure(Capability.LONGITUDE)) == SeriesFamily.C3

    def test_reduced_length(self):
        assert required_series(Capability.REDUCED_LENGTH) == SeriesFamily.C1 | SeriesFamily.C2

    def test_distance_in(self):
        families = required_series(closure(Capability.DISTANCE_IN))
        assert families == SeriesFamily.C1 | SeriesFamily.C1P

    def test_area_needs_c4(self):
        assert required_series(Capability.AREA) == SeriesFamily.C4

    def test_all(self):
        expected = (SeriesFamily.C1 | SeriesFamily.C1P | SeriesFamily.C2
                    | SeriesFamily.C3 | SeriesFamily.C4)
        assert required_series(Capability.ALL) == expected
