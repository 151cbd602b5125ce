"""
Spherical geometry on raw coordinates.

Assumption
----------
The Earth is treated as a sphere of radius 6371 km.  Great-circle
(Haversine) distances are therefore accurate to ~0.5 %, which is well
inside the error of any GPS fix we ingest.  Road distances are the job of
a routing service, not of this module.

Complexity: O(1) per call, O(N) for ``find_nearest``.
"""

from __future__ import annotations

import math
from typing import Iterable

from .entities import BoundingBox, Point
from .enums import COMPASS, Direction

EARTH_RADIUS_KM = 6_371.0
EARTH_RADIUS_MILES = 3_958.8
METERS_PER_KM = 1_000.0
MILES_PER_KM = 0.621371
KM_PER_DEGREE = 111.0


def haversine_km(p1: Point, p2: Point) -> float:
    """Return the great-circle distance in **km** between two points."""
    lat1_r, lat2_r = math.radians(p1.lat), math.radians(p2.lat)
    dlat = math.radians(p2.lat - p1.lat)
    dlng = math.radians(p2.lng - p1.lng)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def haversine_m(p1: Point, p2: Point) -> float:
    return haversine_km(p1, p2) * METERS_PER_KM


def haversine_miles(p1: Point, p2: Point) -> float:
    return haversine_km(p1, p2) * MILES_PER_KM


def bearing(p1: Point, p2: Point) -> float:
    """Initial bearing from *p1* to *p2* in degrees, ``[0, 360)``, 0 = north."""
    lat1, lat2 = math.radians(p1.lat), math.radians(p2.lat)
    dlng = math.radians(p2.lng - p1.lng)

    x = math.sin(dlng) * math.cos(lat2)
    y = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlng)

    return (math.degrees(math.atan2(x, y)) + 360) % 360


def _fold_lng(lng_deg: float) -> float:
    """Fold a longitude into (-180, 180]."""
    lng_deg = (lng_deg + 180) % 360 - 180
    return 180.0 if lng_deg == -180 else lng_deg


def destination(start: Point, bearing_deg: float, distance_km: float) -> Point:
    """Project *distance_km* along *bearing_deg* from *start*."""
    lat1 = math.radians(start.lat)
    lng1 = math.radians(start.lng)
    brng = math.radians(bearing_deg)
    angular = distance_km / EARTH_RADIUS_KM

    lat2 = math.asin(
        math.sin(lat1) * math.cos(angular)
        + math.cos(lat1) * math.sin(angular) * math.cos(brng)
    )
    lng2 = lng1 + math.atan2(
        math.sin(brng) * math.sin(angular) * math.cos(lat1),
        math.cos(angular) - math.sin(lat1) * math.sin(lat2),
    )

    return Point(math.degrees(lat2), _fold_lng(math.degrees(lng2)))


def midpoint(p1: Point, p2: Point) -> Point:
    """Great-circle midpoint -- not the arithmetic mean of the coordinates."""
    lat1, lat2 = math.radians(p1.lat), math.radians(p2.lat)
    lng1 = math.radians(p1.lng)
    dlng = math.radians(p2.lng - p1.lng)

    bx = math.cos(lat2) * math.cos(dlng)
    by = math.cos(lat2) * math.sin(dlng)

    lat3 = math.atan2(
        math.sin(lat1) + math.sin(lat2),
        math.sqrt((math.cos(lat1) + bx) ** 2 + by**2),
    )
    lng3 = lng1 + math.atan2(by, math.cos(lat1) + bx)
    return Point(math.degrees(lat3), _fold_lng(math.degrees(lng3)))


def bounding_box(center: Point, radius_km: float) -> BoundingBox:
    """
    Planar box around *center*.

    Uses ~111 km per degree of latitude and shrinks the longitude span by
    ``cos(lat)``.  The approximation degrades towards the poles; callers
    needing exact membership must post-filter with ``haversine_km``.
    """
    lat_delta = radius_km / KM_PER_DEGREE
    lng_delta = radius_km / (KM_PER_DEGREE * math.cos(math.radians(center.lat)))
    return BoundingBox(
        min_lat=center.lat - lat_delta,
        max_lat=center.lat + lat_delta,
        min_lng=center.lng - lng_delta,
        max_lng=center.lng + lng_delta,
    )


def find_nearest(
    center: Point, points: Iterable[Point], radius_km: float
) -> list[Point]:
    """
    Return the points within *radius_km* of *center*, in input order.

    Two phases: a cheap bounding-box reject, then the exact Haversine
    check for the survivors only.
    """
    bbox = bounding_box(center, radius_km)
    return [
        p for p in points
        if bbox.contains(p) and haversine_km(center, p) <= radius_km
    ]


def direction_from_bearing(bearing_deg: float) -> Direction:
    """Map a bearing to one of the eight compass points."""
    return COMPASS[int((bearing_deg + 22.5) / 45.0) % 8]


def get_direction(origin: Point, target: Point) -> Direction:
    return direction_from_bearing(bearing(origin, target))
