"""
Polygons and geofences.

Containment uses the even-odd ray-casting rule over consecutive edges;
the ring is implicitly closed (the first vertex follows the last).
Points lying exactly on an edge may land on either side -- inclusion is
not defined for them.

Area is the Shoelace formula on radian coordinates scaled by R², which
treats the sphere as locally flat: fine for city-sized service areas,
increasingly wrong for continental ones.

Complexity: O(V) per polygon query, O(G x V) per collection query.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Optional

from pydantic import ValidationError

from geoindex.schemas import GeofenceSchema, GeoJSONPolygon, PointSchema, PolygonSchema
from .distance import EARTH_RADIUS_KM, haversine_km
from .entities import BoundingBox, InvalidFormat, InvalidGeoJSON, Point
from .enums import GeofenceType


@dataclass
class Polygon:
    points: list[Point] = field(default_factory=list)

    def contains(self, point: Point) -> bool:
        if len(self.points) < 3:
            return False

        inside = False
        j = len(self.points) - 1
        for i, pi in enumerate(self.points):
            pj = self.points[j]
            if (pi.lat > point.lat) != (pj.lat > point.lat) and point.lng < (
                (pj.lng - pi.lng) * (point.lat - pi.lat) / (pj.lat - pi.lat) + pi.lng
            ):
                inside = not inside
            j = i
        return inside

    def bounding_box(self) -> BoundingBox:
        if not self.points:
            return BoundingBox()
        lats = [p.lat for p in self.points]
        lngs = [p.lng for p in self.points]
        return BoundingBox(
            min_lat=min(lats), max_lat=max(lats), min_lng=min(lngs), max_lng=max(lngs)
        )

    def centroid(self) -> Point:
        """Vertex mean -- not the area centroid of an irregular polygon."""
        if not self.points:
            return Point(0.0, 0.0)
        n = len(self.points)
        return Point(
            sum(p.lat for p in self.points) / n,
            sum(p.lng for p in self.points) / n,
        )

    def area_km2(self) -> float:
        if len(self.points) < 3:
            return 0.0

        n = len(self.points)
        total = 0.0
        for i in range(n):
            a, b = self.points[i], self.points[(i + 1) % n]
            total += (
                math.radians(a.lng) * math.radians(b.lat)
                - math.radians(b.lng) * math.radians(a.lat)
            )
        return abs(total) / 2 * EARTH_RADIUS_KM * EARTH_RADIUS_KM

    def perimeter_km(self) -> float:
        if len(self.points) < 2:
            return 0.0
        n = len(self.points)
        return sum(haversine_km(self.points[i], self.points[(i + 1) % n]) for i in range(n))

    def is_valid(self) -> bool:
        return len(self.points) >= 3 and all(p.is_valid() for p in self.points)

    # ── Serialisation ─────────────────────────────────────────────

    def to_geojson(self) -> GeoJSONPolygon:
        ring = [[p.lng, p.lat] for p in self.points]
        if ring:
            ring.append(list(ring[0]))
        return GeoJSONPolygon(coordinates=[ring])

    @classmethod
    def from_geojson(cls, obj: GeoJSONPolygon | Mapping[str, Any] | str) -> Polygon:
        """
        Build a polygon from the outer ring of a GeoJSON ``Polygon``.

        The duplicated closing position is dropped so that a round trip
        keeps the vertex count and order.  Raises ``InvalidGeoJSON``.
        """
        try:
            if isinstance(obj, str):
                gj = GeoJSONPolygon.model_validate_json(obj)
            elif isinstance(obj, GeoJSONPolygon):
                gj = obj
            else:
                gj = GeoJSONPolygon.model_validate(obj)
        except ValidationError as exc:
            raise InvalidGeoJSON(f"Not a GeoJSON polygon: {exc}") from exc

        ring = gj.coordinates[0]
        if any(len(pos) < 2 for pos in ring):
            raise InvalidGeoJSON("GeoJSON position needs [lng, lat]")

        points = [Point(pos[1], pos[0]) for pos in ring]
        if len(points) > 1 and points[0] == points[-1]:
            points.pop()
        return cls(points)

    def to_schema(self) -> PolygonSchema:
        return PolygonSchema(points=[PointSchema(lat=p.lat, lng=p.lng) for p in self.points])

    def to_json(self) -> str:
        return self.to_schema().model_dump_json()

    @classmethod
    def from_schema(cls, schema: PolygonSchema) -> Polygon:
        return cls([Point(p.lat, p.lng) for p in schema.points])

    @classmethod
    def from_json(cls, data: str | bytes) -> Polygon:
        try:
            schema = PolygonSchema.model_validate_json(data)
        except ValidationError as exc:
            raise InvalidFormat(f"Invalid polygon JSON: {exc}") from exc
        return cls.from_schema(schema)


# ── Geofences ─────────────────────────────────────────────────────────


@dataclass
class Geofence:
    """A named boundary such as a service area, surge zone or no-pickup zone."""

    id: str
    name: str
    type: str
    polygon: Optional[Polygon] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def contains(self, point: Point) -> bool:
        if self.polygon is None:
            return False
        return self.polygon.contains(point)

    def to_dict(self) -> dict[str, Any]:
        return GeofenceSchema(
            id=self.id,
            name=self.name,
            type=_type_value(self.type),
            polygon=self.polygon.to_schema() if self.polygon is not None else None,
            metadata=self.metadata,
        ).model_dump()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Geofence:
        try:
            schema = GeofenceSchema.model_validate(data)
        except ValidationError as exc:
            raise InvalidFormat(f"Invalid geofence: {exc}") from exc
        return cls(
            id=schema.id,
            name=schema.name,
            type=schema.type,
            polygon=Polygon.from_schema(schema.polygon) if schema.polygon else None,
            metadata=dict(schema.metadata),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


class GeofenceCollection:
    """Ordered geofences with linear-scan spatial queries."""

    def __init__(self, geofences: list[Geofence] | None = None):
        self.geofences: list[Geofence] = list(geofences or [])

    def __len__(self) -> int:
        return len(self.geofences)

    def __iter__(self) -> Iterator[Geofence]:
        return iter(self.geofences)

    def add(self, geofence: Geofence) -> None:
        self.geofences.append(geofence)

    def find_containing(self, point: Point) -> list[Geofence]:
        return [gf for gf in self.geofences if gf.contains(point)]

    def find_by_type(self, point: Point, geofence_type: str) -> list[Geofence]:
        wanted = _type_value(geofence_type)
        return [
            gf for gf in self.geofences
            if _type_value(gf.type) == wanted and gf.contains(point)
        ]

    def is_in_service_area(self, point: Point) -> bool:
        return any(
            _type_value(gf.type) == GeofenceType.SERVICE_AREA.value and gf.contains(point)
            for gf in self.geofences
        )


def _type_value(t: str) -> str:
    return t.value if isinstance(t, GeofenceType) else t
