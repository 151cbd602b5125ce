"""
Value objects and the error hierarchy shared by every component.

Points, bounding boxes and match candidates are plain value objects: they
are created by callers and passed into queries, and carry no lifecycle of
their own.  Validity of a ``Point`` is a query (``is_valid``), not a
constructor constraint, so out-of-range coordinates may exist transiently.
"""

from __future__ import annotations

from dataclasses import dataclass


# ── Errors ────────────────────────────────────────────────────────────


class GeoIndexError(Exception):
    """Base class for every error raised by this library."""


class InvalidFormat(GeoIndexError, ValueError):
    """Raised when a serialised address or shape cannot be parsed."""


class InvalidCellFormat(InvalidFormat):
    """Raised for a malformed hex cell string."""


class InvalidGeohash(InvalidFormat):
    """Raised for a geohash with no recognised base-32 symbols."""


class InvalidGeoJSON(InvalidFormat):
    """Raised for a GeoJSON document that is not a single-ring polygon."""


class GridError(GeoIndexError):
    """Raised when the hex grid cannot relate two cells."""


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Point:
    lat: float
    lng: float

    def is_valid(self) -> bool:
        return -90 <= self.lat <= 90 and -180 <= self.lng <= 180


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float = 0.0
    max_lat: float = 0.0
    min_lng: float = 0.0
    max_lng: float = 0.0

    def contains(self, p: Point) -> bool:
        """Inclusive on every edge."""
        return (
            self.min_lat <= p.lat <= self.max_lat
            and self.min_lng <= p.lng <= self.max_lng
        )

    def center(self) -> Point:
        return Point(
            (self.min_lat + self.max_lat) / 2,
            (self.min_lng + self.max_lng) / 2,
        )


@dataclass(frozen=True)
class MatchCandidate:
    """A scored driver/request pairing fed to the batch matcher."""

    driver_id: str
    request_id: str
    score: float
    grid_distance: int = 0
    eta_seconds: int = 0
