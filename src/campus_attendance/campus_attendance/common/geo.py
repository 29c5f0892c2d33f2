"""Great-circle helpers used by geofencing.

Both functions work on a spherical Earth of radius ``EARTH_RADIUS_M``; at
classroom scale (5-100 m) the haversine form keeps sub-millimetre precision.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from ..core.constants import EARTH_RADIUS_M
from .validators import require_latitude, require_longitude


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

    @classmethod
    def parse(cls, latitude, longitude) -> "Coordinate":
        """Build a coordinate from untrusted input, range-checked."""
        return cls(latitude=require_latitude(latitude), longitude=require_longitude(longitude))


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    """Haversine distance between two coordinates in meters."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(b.longitude - a.longitude)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    # Rounding can push h marginally above 1 for antipodal points.
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(h))


def destination_point(origin: Coordinate, bearing_deg: float, distance_m: float) -> Coordinate:
    """Point reached from ``origin`` after ``distance_m`` along ``bearing_deg``."""
    angular = distance_m / EARTH_RADIUS_M
    bearing = math.radians(bearing_deg)
    lat1 = math.radians(origin.latitude)
    lon1 = math.radians(origin.longitude)

    lat2 = math.asin(
        math.sin(lat1) * math.cos(angular) + math.cos(lat1) * math.sin(angular) * math.cos(bearing)
    )
    lon2 = lon1 + math.atan2(
        math.sin(bearing) * math.sin(angular) * math.cos(lat1),
        math.cos(angular) - math.sin(lat1) * math.sin(lat2),
    )
    lon2_deg = (math.degrees(lon2) + 540.0) % 360.0 - 180.0
    return Coordinate(latitude=math.degrees(lat2), longitude=lon2_deg)
