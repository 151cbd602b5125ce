"""
Demand/Supply Heatmap
=====================

Per-cell driver and request counters keyed by H3 cell string.  Scores,
surge level and color are recomputed from the two counters on every
update (see ``geoindex.domain.pricing``); they carry no state of their
own.

``cells_in_radius`` always returns one entry per covering cell: cells
with no recorded activity are synthesised as gray, zero-count,
surge-1.0 placeholders rather than left out.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Optional

from geoindex.domain.entities import InvalidCellFormat, Point
from geoindex.domain.enums import HeatColor
from geoindex.domain.hexgrid import HexCell, HexGrid
from geoindex.domain.pricing import SurgeEngine
from geoindex.schemas import HeatmapCellSchema, PointSchema
from .locks import ReadWriteLock

logger = logging.getLogger(__name__)


@dataclass
class HeatmapCell:
    cell_id: str
    center: Point
    driver_count: int = 0
    request_count: int = 0
    demand_score: float = 0.0
    supply_score: float = 0.0
    surge_level: float = 1.0
    color: HeatColor = field(default=HeatColor.GRAY)

    def recalculate(self, engine: SurgeEngine) -> None:
        scores = engine.score(self.driver_count, self.request_count)
        self.demand_score = scores.demand_score
        self.supply_score = scores.supply_score
        self.surge_level = scores.surge_level
        self.color = scores.color

    def to_schema(self) -> HeatmapCellSchema:
        return HeatmapCellSchema(
            index=self.cell_id,
            center=PointSchema(lat=self.center.lat, lng=self.center.lng),
            driver_count=self.driver_count,
            request_count=self.request_count,
            demand_score=self.demand_score,
            supply_score=self.supply_score,
            surge_level=self.surge_level,
            color=self.color.value,
        )


class Heatmap:
    def __init__(self, resolution: int | None = None, engine: SurgeEngine | None = None):
        self.grid = HexGrid(resolution)
        self.engine = engine or SurgeEngine()
        self._cells: dict[str, HeatmapCell] = {}
        self._lock = ReadWriteLock()

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._cells)

    def update_cell(self, cell_id: str, driver_count: int, request_count: int) -> None:
        """
        Create or overwrite the counters of *cell_id*.

        Malformed ids are ignored; negative counts are clamped to 0.
        """
        try:
            cell = HexCell.from_string(cell_id)
        except InvalidCellFormat:
            logger.debug("Ignoring heatmap update for invalid cell %r", cell_id)
            return

        index = str(cell)
        with self._lock.write_locked():
            hmc = self._cells.get(index)
            if hmc is None:
                hmc = HeatmapCell(cell_id=index, center=self.grid.cell_to_point(cell))
                self._cells[index] = hmc
            hmc.driver_count = max(0, driver_count)
            hmc.request_count = max(0, request_count)
            hmc.recalculate(self.engine)

    def get_cell(self, cell_id: str) -> Optional[HeatmapCell]:
        """A copy of the stored cell, or None."""
        with self._lock.read_locked():
            hmc = self._cells.get(cell_id.lower())
            return replace(hmc) if hmc is not None else None

    def cells_in_radius(self, center: Point, radius_km: float) -> list[HeatmapCell]:
        covering = self.grid.cover_radius(center, radius_km)

        with self._lock.read_locked():
            result: list[HeatmapCell] = []
            for cell in covering:
                index = str(cell)
                hmc = self._cells.get(index)
                if hmc is None:
                    hmc = HeatmapCell(cell_id=index, center=self.grid.cell_to_point(cell))
                else:
                    hmc = replace(hmc)
                result.append(hmc)
        return result
