"""Pydantic wire schemas for shapes and heatmap cells."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

# A GeoJSON position: [lng, lat] (optional altitude ignored)
Position = list[float]


class PointSchema(BaseModel):
    lat: float
    lng: float


class GeoJSONPolygon(BaseModel):
    """Single outer ring, explicitly closed.  Holes are not supported."""

    type: Literal["Polygon"] = "Polygon"
    coordinates: list[list[Position]] = Field(..., min_length=1, max_length=1)


class PolygonSchema(BaseModel):
    points: list[PointSchema] = []


class GeofenceSchema(BaseModel):
    id: str
    name: str
    type: str
    polygon: Optional[PolygonSchema] = None
    metadata: dict[str, Any] = {}


class HeatmapCellSchema(BaseModel):
    index: str
    center: PointSchema
    driver_count: int
    request_count: int
    demand_score: float = Field(..., ge=0, le=1)
    supply_score: float = Field(..., ge=0, le=1)
    surge_level: float
    color: str
