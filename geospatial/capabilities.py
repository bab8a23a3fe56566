"""
Capability Sets for Geodesic Computations.

A computation only produces the quantities the caller asks for, and each
quantity needs a subset of the per-line series. Both relations are kept
here as explicit tables: ``closure`` expands a request with its
prerequisites and ``required_series`` lists the coefficient vectors a
geodesic line must build to serve it.
"""

import enum
from typing import Dict


class Capability(enum.Flag):
    """Quantities a geodesic computation can produce."""
    NONE = 0
    LATITUDE = enum.auto()
    LONGITUDE = enum.auto()
    AZIMUTH = enum.auto()
    DISTANCE = enum.auto()
    DISTANCE_IN = enum.auto()
    REDUCED_LENGTH = enum.auto()
    GEODESIC_SCALE = enum.auto()
    AREA = enum.auto()

    STANDARD = LATITUDE | LONGITUDE | AZIMUTH | DISTANCE
    ALL = (LATITUDE | LONGITUDE | AZIMUTH | DISTANCE | DISTANCE_IN
           | REDUCED_LENGTH | GEODESIC_SCALE | AREA)


class Flags(enum.Flag):
    """Modifiers of a direct or position computation."""
    NONE = 0
    # s12_a12 is an arc length in degrees rather than a distance
    ARC_MODE = enum.auto()
    # longitude accumulates across the antimeridian
    LONG_UNROLL = enum.auto()


class SeriesFamily(enum.Flag):
    """Per-line coefficient vectors."""
    NONE = 0
    C1 = enum.auto()
    C1P = enum.auto()
    C2 = enum.auto()
    C3 = enum.auto()
    C4 = enum.auto()


PREREQUISITES: Dict[Capability, Capability] = {
    Capability.DISTANCE_IN: Capability.DISTANCE,
}

SERIES_REQUIREMENTS: Dict[Capability, SeriesFamily] = {
    Capability.LONGITUDE: SeriesFamily.C3,
    Capability.DISTANCE: SeriesFamily.C1,
    Capability.DISTANCE_IN: SeriesFamily.C1 | SeriesFamily.C1P,
    Capability.REDUCED_LENGTH: SeriesFamily.C1 | SeriesFamily.C2,
    Capability.GEODESIC_SCALE: SeriesFamily.C1 | SeriesFamily.C2,
    Capability.AREA: SeriesFamily.C4,
}

# Quantities every computation produces regardless of the request
ALWAYS = Capability.LATITUDE | Capability.AZIMUTH

LENGTHS = Capability.DISTANCE | Capability.REDUCED_LENGTH | Capability.GEODESIC_SCALE
DIFFERENTIALS = Capability.REDUCED_LENGTH | Capability.GEODESIC_SCALE


def closure(caps: Capability) -> Capability:
    """Expand a capability set with its prerequisites.

    Parameters
    ----------
    caps : Capability
        Requested quantities.

    Returns
    -------
    Capability
        The request plus everything it depends on, plus latitude and
        azimuth, which are always produced.

    Examples
    --------
    >>> closure(Capability.DISTANCE_IN) & Capability.DISTANCE
    <Capability.DISTANCE: 8>
    """
    expanded = caps | ALWAYS
    changed = True
    while changed:
        changed = False
        for cap, prerequisite in PREREQUISITES.items():
            if cap in expanded and prerequisite not in expanded:
                expanded |= prerequisite
                changed = True
    return expanded


def required_series(caps: Capability) -> SeriesFamily:
    """Series families needed to serve a capability set.

    Parameters
    ----------
    caps : Capability
        Requested quantities (expanded with ``closure`` first).

    Returns
    -------
    SeriesFamily
        Union of the families required by each requested quantity.
    """
    families = SeriesFamily.NONE
    for cap, needed in SERIES_REQUIREMENTS.items():
        if cap in caps:
            families |= needed
    return families
