"""
Accuracy Benchmark of the Approximate Distance Measures.

Random points are drawn in a small box around a central latitude and the
pairwise distances of every approximate measure are compared with the
geodesic distance, giving the mean absolute and mean relative error of
each measure at that latitude and scale.
"""

from typing import Dict, Optional, Union

import numpy as np

from common.exceptions import OutOfRangeError
from common.logging_config import get_logger
from geospatial.distance_calculations import MEASURES, geodist, haversine_distance

logger = get_logger(__name__)

APPROXIMATE_MEASURES = tuple(m for m in MEASURES if m != "geodesic")


def box_size_for_distance(lon: float, lat: float, d: float) -> float:
    """Side in degrees of a lon/lat box whose diagonal spans about d meters.

    The haversine length of the diagonal from (lon - delta/2, lat - delta/2)
    to (lon + delta/2, lat + delta/2) increases with delta; it is solved
    for d by bisection on [0, d / 1e5].
    """
    def diagonal(delta: float) -> float:
        return float(haversine_distance(lat - delta / 2, lon - delta / 2,
                                        lat + delta / 2, lon + delta / 2))

    lo, hi = 0.0, d / 1e5
    if diagonal(hi) <= d:
        return hi
    for _ in range(200):
        mid = (lo + hi) / 2
        if mid in (lo, hi):
            break
        if diagonal(mid) < d:
            lo = mid
        else:
            hi = mid
    return (lo + hi) / 2


def geodist_benchmark(
    lat: float = 0.0,
    d: float = 1.0,
    n: int = 100,
    rng: Optional[Union[int, np.random.Generator]] = None,
) -> Dict[str, Dict[str, float]]:
    """Mean errors of the approximate measures relative to the geodesic.

    Parameters
    ----------
    lat : float
        Central latitude in degrees.
    d : float
        Distance scale in meters over which errors are measured.
    n : int
        Number of random points (n >= 2).
    rng : int or numpy.random.Generator, optional
        Seed or generator for reproducible draws.

    Returns
    -------
    dict
        ``{"absolute": {measure: meters}, "relative": {measure: fraction}}``
        for the haversine, vincenty and cheap measures.

    Examples
    --------
    >>> errors = geodist_benchmark(lat=30, d=1000, rng=1)
    >>> sorted(errors["absolute"])
    ['cheap', 'haversine', 'vincenty']
    """
    if abs(lat) > 90:
        raise OutOfRangeError(f"Latitude must lie within [-90, 90], got {lat}")
    if n < 2:
        raise ValueError(f"Need at least 2 points, got {n}")
    if not d > 0:
        raise ValueError(f"Distance must be positive, got {d}")

    generator = np.random.default_rng(rng)
    lon = 0.0
    delta = box_size_for_distance(lon, lat, d)
    x = np.column_stack([
        (lon - delta / 2) + delta * generator.random(n),
        (lat - delta / 2) + delta * generator.random(n),
    ])
    # keep the box on the globe near the poles
    x[:, 1] = np.clip(x[:, 1], -90.0, 90.0)

    upper = np.triu_indices(n, k=1)
    reference = geodist(x, measure="geodesic")[upper]
    absolute: Dict[str, float] = {}
    relative: Dict[str, float] = {}
    for measure in APPROXIMATE_MEASURES:
        err = np.abs(geodist(x, measure=measure)[upper] - reference)
        absolute[measure] = float(np.mean(err))
        with np.errstate(divide="ignore", invalid="ignore"):
            relative[measure] = float(np.nanmean(err / reference))
    logger.debug(f"Benchmark at lat={lat}, d={d} m over {n} points: {absolute}")
    return {"absolute": absolute, "relative": relative}
