"""
Hexagonal grid index on top of Uber's H3.

Resolutions
-----------
* 7 -- city          (~1.22 km edge, ~5.16 km² area)
* 8 -- neighbourhood (~0.46 km edge, ~0.74 km² area)
* 9 -- block         (~0.17 km edge, ~0.11 km² area)

Cells are exposed as ``HexCell``, a thin wrapper around the 64-bit H3
index, so callers never depend on the H3 library's own representation.
``point -> cell`` is many-to-one and deterministic per resolution;
``cell -> point`` returns the cell centre, not the original point.

Complexity: O(1) per point conversion, O(k²) for disks and rings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import h3

from geoindex.config import settings
from .entities import GridError, InvalidCellFormat, Point

_HEX_RE = re.compile(r"^[0-9a-fA-F]{1,16}$")

# Approximate edge length (km) per resolution
EDGE_LENGTH_KM: dict[int, float] = {
    7: 1.22,
    8: 0.46,
    9: 0.17,
    10: 0.065,
}


@dataclass(frozen=True, order=True)
class HexCell:
    """64-bit H3 cell index."""

    value: int

    def __str__(self) -> str:
        return h3.int_to_str(self.value)

    @classmethod
    def from_string(cls, s: str) -> HexCell:
        """Parse the canonical hexadecimal form.  Raises ``InvalidCellFormat``."""
        if not isinstance(s, str) or not _HEX_RE.match(s):
            raise InvalidCellFormat(f"Invalid H3 cell string: {s!r}")
        value = int(s, 16)
        if not h3.is_valid_cell(h3.int_to_str(value)):
            raise InvalidCellFormat(f"Invalid H3 cell string: {s!r}")
        return cls(value)

    @property
    def resolution(self) -> int:
        return h3.get_resolution(str(self))


@dataclass(frozen=True)
class CellInfo:
    index: str
    center: Point
    resolution: int


def is_valid_cell_string(s: str) -> bool:
    try:
        HexCell.from_string(s)
    except InvalidCellFormat:
        return False
    return True


class HexGrid:
    """Point/cell conversions and grid navigation at one fixed resolution."""

    def __init__(self, resolution: int | None = None):
        self.resolution = settings.h3_resolution if resolution is None else int(resolution)

    @property
    def edge_length_km(self) -> float:
        if self.resolution in EDGE_LENGTH_KM:
            return EDGE_LENGTH_KM[self.resolution]
        return h3.average_hexagon_edge_length(self.resolution, unit="km")

    # ── Conversions ───────────────────────────────────────────────

    def point_to_cell(self, point: Point) -> HexCell:
        return HexCell(h3.str_to_int(self._cell(point)))

    def cell_to_point(self, cell: HexCell) -> Point:
        lat, lng = h3.cell_to_latlng(str(cell))
        return Point(lat, lng)

    @staticmethod
    def cell_to_string(cell: HexCell) -> str:
        return str(cell)

    @staticmethod
    def string_to_cell(s: str) -> HexCell:
        return HexCell.from_string(s)

    def cell_string(self, point: Point) -> str:
        """Shortcut for ``str(point_to_cell(point))``."""
        return self._cell(point)

    def cell_info(self, point: Point) -> CellInfo:
        cell = self.point_to_cell(point)
        return CellInfo(
            index=str(cell),
            center=self.cell_to_point(cell),
            resolution=self.resolution,
        )

    # ── Navigation ────────────────────────────────────────────────

    def k_ring(self, cell: HexCell, k: int) -> list[HexCell]:
        """
        All cells within *k* steps, centre included.

        Size is ``3k² + 3k + 1``: k=0 -> 1, k=1 -> 7, k=2 -> 19, k=3 -> 37
        (fewer only when the disk touches one of H3's twelve pentagons).
        A negative *k* is treated as 0.
        """
        return [HexCell(h3.str_to_int(c)) for c in h3.grid_disk(str(cell), max(0, k))]

    def ring(self, cell: HexCell, k: int) -> list[HexCell]:
        """Cells at exactly *k* steps: disk(k) minus disk(k-1)."""
        if k <= 0:
            return [cell]
        inner = set(h3.grid_disk(str(cell), k - 1))
        return [
            HexCell(h3.str_to_int(c))
            for c in h3.grid_disk(str(cell), k)
            if c not in inner
        ]

    def neighbor_strings(self, point: Point, k: int) -> list[str]:
        return list(h3.grid_disk(self._cell(point), max(0, k)))

    def grid_distance(self, a: HexCell, b: HexCell) -> int:
        try:
            return h3.grid_distance(str(a), str(b))
        except h3.H3BaseException as exc:
            raise GridError(f"No grid distance between {a} and {b}") from exc

    def grid_path(self, a: HexCell, b: HexCell) -> list[HexCell]:
        """Cells on a shortest path from *a* to *b*, both ends included."""
        try:
            path = h3.grid_path_cells(str(a), str(b))
        except h3.H3BaseException as exc:
            raise GridError(f"No grid path between {a} and {b}") from exc
        return [HexCell(h3.str_to_int(c)) for c in path]

    def rings_for_radius(self, radius_km: float) -> int:
        k = int(radius_km / self.edge_length_km) + 1
        return max(settings.cover_min_rings, min(settings.cover_max_rings, k))

    def cover_radius(self, center: Point, radius_km: float) -> list[HexCell]:
        """
        Approximate a circle with a k-ring around the centre cell.

        ``k`` is the first ring count whose span reaches *radius_km*, capped
        to ``[cover_min_rings, cover_max_rings]``.  Cells just outside the
        circle at the ring boundary are expected; this trades exactness for
        bounded cost.
        """
        return self.k_ring(self.point_to_cell(center), self.rings_for_radius(radius_km))

    # ── Internals ─────────────────────────────────────────────────

    def _cell(self, point: Point) -> str:
        return h3.latlng_to_cell(point.lat, point.lng, self.resolution)
