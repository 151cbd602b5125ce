"""
Driver Spatial Index
====================

Live map of drivers to the hex cell they currently occupy.

* ``_drivers``: driver_id -> cell string
* ``_cells``:   cell string -> set of driver_ids

The two maps are kept mutually consistent: a driver appears in exactly
one cell set iff it has a reverse entry, and empty cell sets are
deleted.  Mutations take the write side of the lock, queries the read
side, so a query always sees the last completed update.

Absent drivers and empty cells are data, not errors: nothing here raises.

Complexity: O(1) per update/remove, O(k² + D) per ``nearby`` query for
D drivers found.
"""

from __future__ import annotations

import logging
from typing import Optional

from geoindex.domain.entities import Point
from geoindex.domain.hexgrid import HexGrid
from .locks import ReadWriteLock

logger = logging.getLogger(__name__)


class DriverSpatialIndex:
    def __init__(self, resolution: int | None = None):
        self.grid = HexGrid(resolution)
        self._cells: dict[str, set[str]] = {}
        self._drivers: dict[str, str] = {}
        self._lock = ReadWriteLock()

    @property
    def resolution(self) -> int:
        return self.grid.resolution

    def __contains__(self, driver_id: object) -> bool:
        with self._lock.read_locked():
            return driver_id in self._drivers

    # ── Mutations ─────────────────────────────────────────────────

    def update_driver(self, driver_id: str, location: Point) -> None:
        """
        Move *driver_id* to the cell containing *location*.  Idempotent.

        An out-of-range or non-finite location is ignored; the driver
        keeps its previous cell.
        """
        if not location.is_valid():
            logger.debug("Ignoring invalid location for driver %s: %r", driver_id, location)
            return
        new_cell = self.grid.cell_string(location)

        with self._lock.write_locked():
            old_cell = self._drivers.get(driver_id)
            if old_cell == new_cell:
                return
            if old_cell is not None:
                self._remove_from_cell(driver_id, old_cell)

            self._drivers[driver_id] = new_cell
            self._cells.setdefault(new_cell, set()).add(driver_id)

        logger.debug("Driver %s: %s -> %s", driver_id, old_cell, new_cell)

    def remove_driver(self, driver_id: str) -> None:
        with self._lock.write_locked():
            cell = self._drivers.pop(driver_id, None)
            if cell is None:
                return
            self._remove_from_cell(driver_id, cell)

        logger.debug("Driver %s removed from %s", driver_id, cell)

    def clear(self) -> None:
        with self._lock.write_locked():
            self._cells.clear()
            self._drivers.clear()

    # ── Queries ───────────────────────────────────────────────────

    def nearby(self, pickup: Point, k_rings: int = 1) -> list[str]:
        """Drivers in any cell within *k_rings* of the pickup cell, deduplicated."""
        if not pickup.is_valid():
            return []
        cells = self.grid.neighbor_strings(pickup, k_rings)

        with self._lock.read_locked():
            seen: dict[str, None] = {}
            for cell in cells:
                for driver_id in self._cells.get(cell, ()):
                    seen.setdefault(driver_id)
        return list(seen)

    def driver_count(self) -> int:
        with self._lock.read_locked():
            return len(self._drivers)

    def cell_of(self, driver_id: str) -> Optional[str]:
        with self._lock.read_locked():
            return self._drivers.get(driver_id)

    def cell_stats(self) -> dict[str, int]:
        with self._lock.read_locked():
            return {cell: len(ids) for cell, ids in self._cells.items()}

    def snapshot(self) -> tuple[dict[str, str], dict[str, set[str]]]:
        """Consistent copies of both maps (forward, reverse)."""
        with self._lock.read_locked():
            return (
                dict(self._drivers),
                {cell: set(ids) for cell, ids in self._cells.items()},
            )

    # ── Internals ─────────────────────────────────────────────────

    def _remove_from_cell(self, driver_id: str, cell: str) -> None:
        """Caller holds the write lock."""
        ids = self._cells.get(cell)
        if ids is None:
            return
        ids.discard(driver_id)
        if not ids:
            del self._cells[cell]
