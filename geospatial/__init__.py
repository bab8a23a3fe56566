"""
Geospatial Module: Geodesics on an Ellipsoid of Revolution.

All Earth-surface calculations originate from this module. Angles are in
degrees and lengths in the unit of the ellipsoid's equatorial radius.

This module provides:
- Ellipsoid models (WGS84, GRS80, custom oblate or prolate)
- Direct and inverse geodesic solvers
- Geodesic lines with position sampling
- Polygon area and perimeter
- Distance matrices with geodesic and approximate measures
"""

from geospatial.ellipsoid import Ellipsoid, WGS84, GRS80

from geospatial.capabilities import Capability, Flags, closure, required_series

from geospatial.direct import direct, general_direct, arc_direct

from geospatial.inverse import inverse, general_inverse

from geospatial.geodesic_line import (
    GeodesicLine,
    line_init,
    direct_line,
    arc_direct_line,
    inverse_line,
)

from geospatial.polygon import (
    Accumulator,
    PolygonArea,
    polygon_add,
    polygon_compute,
    polygon_area_perimeter,
)

from geospatial.distance_calculations import (
    geodesic_inverse,
    geodesic_direct,
    compute_azimuth,
    geodesic_distance,
    geodesic_distance_batch,
    distance_between,
    interpolate_geodesic,
    compute_heading_change,
    haversine_distance,
    vincenty_distance,
    cheap_distance,
    geodist,
)

__all__ = [
    # Ellipsoids
    "Ellipsoid",
    "WGS84",
    "GRS80",
    # Capabilities
    "Capability",
    "Flags",
    "closure",
    "required_series",
    # Solvers
    "direct",
    "general_direct",
    "arc_direct",
    "inverse",
    "general_inverse",
    # Lines
    "GeodesicLine",
    "line_init",
    "direct_line",
    "arc_direct_line",
    "inverse_line",
    # Polygons
    "Accumulator",
    "PolygonArea",
    "polygon_add",
    "polygon_compute",
    "polygon_area_perimeter",
    # Distance calculations
    "geodesic_inverse",
    "geodesic_direct",
    "compute_azimuth",
    "geodesic_distance",
    "geodesic_distance_batch",
    "distance_between",
    "interpolate_geodesic",
    "compute_heading_change",
    "haversine_distance",
    "vincenty_distance",
    "cheap_distance",
    "geodist",
]
