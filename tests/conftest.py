"""
Shared fixtures for the geodesy test-suite.

pyproj wraps the C implementation of the same geodesic algorithms and
serves as an independent reference for the solvers.
"""

import numpy as np
import pytest

from geospatial.ellipsoid import Ellipsoid, WGS84


@pytest.fixture
def wgs84():
    return WGS84


@pytest.fixture
def sphere():
    """Sphere of radius 6400 km."""
    return Ellipsoid(6.4e6, 0.0, "sphere")


@pytest.fixture
def prolate():
    """Prolate ellipsoid with f = -1/150."""
    return Ellipsoid(6.4e6, -1 / 150.0, "prolate")


@pytest.fixture
def geod():
    """pyproj geodesic on WGS84."""
    pyproj = pytest.importorskip("pyproj")
    return pyproj.Geod(ellps="WGS84")


@pytest.fixture
def random_pairs():
    """Forty seeded random point pairs as (lat1, lon1, lat2, lon2) rows."""
    rng = np.random.default_rng(0)
    n = 40
    return np.column_stack([
        rng.uniform(-89.0, 89.0, n),
        rng.uniform(-180.0, 180.0, n),
        rng.uniform(-89.0, 89.0, n),
        rng.uniform(-180.0, 180.0, n),
    ])


@pytest.fixture
def geod_for():
    """Build the pyproj geodesic matching an Ellipsoid."""
    pyproj = pytest.importorskip("pyproj")

    def build(ellipsoid):
        return pyproj.Geod(a=ellipsoid.a, f=ellipsoid.f)
    return build


@pytest.fixture(params=[-0.2, -0.1, 0.1, 0.2], ids=lambda f: f"f={f}")
def eccentric(request):
    """Strongly oblate and prolate ellipsoids with a = 6400 km."""
    return Ellipsoid(6.4e6, request.param, f"f={request.param}")
