"""
Greedy Batch Matching
=====================

1. **Candidates**   -- for each request, every driver indexed within
   ``k`` rings of the pickup cell becomes a ``MatchCandidate`` scored by
   grid proximity.
2. **Ordering**     -- candidates are sorted by score, highest first.
   The sort is stable, so equal scores keep their input order.
3. **Greedy claim** -- walking that order, the first candidate naming a
   driver claims it; later candidates naming the same driver are dropped.

**Note:** this is NOT an optimal assignment.  A min-cost bipartite
matching (Hungarian algorithm) could pair more requests, but downstream
callers rely on the exact tie-break above, so the greedy contract is
kept as-is.  Requests are not deduplicated: one request may appear in
several kept pairs if its candidates name different drivers.

Complexity
----------
* Ordering:     O(C log C) for C candidates
* Greedy claim: O(C)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Sequence

from geoindex.config import settings
from .distance import haversine_km
from .entities import GridError, MatchCandidate, Point
from .hexgrid import HexCell

if TYPE_CHECKING:
    from geoindex.infrastructure.driver_index import DriverSpatialIndex

logger = logging.getLogger(__name__)


class BatchMatcher:
    def __init__(self, avg_speed_kmh: float | None = None):
        self.avg_speed_kmh = (
            settings.matcher_avg_speed_kmh if avg_speed_kmh is None else avg_speed_kmh
        )

    def optimize_batch(
        self,
        requests: Sequence[MatchCandidate],
        drivers: Sequence[MatchCandidate] = (),
    ) -> list[MatchCandidate]:
        """
        Keep the highest-scoring candidate per driver, greedily.

        ``drivers`` is accepted for interface parity with callers that
        pass driver-side candidates; only ``requests`` is consulted.
        Neither input is mutated.
        """
        claimed: set[str] = set()
        result: list[MatchCandidate] = []

        for cand in sorted(requests, key=lambda c: c.score, reverse=True):
            if cand.driver_id in claimed:
                continue
            claimed.add(cand.driver_id)
            result.append(cand)

        logger.info("Batch optimisation: %d of %d candidates kept", len(result), len(requests))
        return result

    def candidates_for(
        self,
        request_id: str,
        pickup: Point,
        driver_index: DriverSpatialIndex,
        k_rings: int = 1,
    ) -> list[MatchCandidate]:
        """
        Score every driver within *k_rings* of *pickup*.

        ``score = 1 / (1 + grid_distance)``; the ETA is the cell-centre
        Haversine distance at the configured average speed.  Distances are
        measured on the index's own grid.
        """
        if not pickup.is_valid():
            return []
        grid = driver_index.grid
        pickup_cell = grid.point_to_cell(pickup)
        pickup_center = grid.cell_to_point(pickup_cell)

        out: list[MatchCandidate] = []
        for driver_id in driver_index.nearby(pickup, k_rings):
            cell_id = driver_index.cell_of(driver_id)
            if cell_id is None:  # removed since nearby() returned
                continue
            driver_cell = HexCell.from_string(cell_id)
            try:
                dist = grid.grid_distance(pickup_cell, driver_cell)
            except GridError:
                logger.debug("Skipping driver %s: no grid distance", driver_id)
                continue
            km = haversine_km(pickup_center, grid.cell_to_point(driver_cell))
            out.append(
                MatchCandidate(
                    driver_id=driver_id,
                    request_id=request_id,
                    score=1.0 / (1 + dist),
                    grid_distance=dist,
                    eta_seconds=int(round(km / self.avg_speed_kmh * 3600)),
                )
            )
        return out

    def match(
        self,
        pickups: Iterable[tuple[str, Point]],
        driver_index: DriverSpatialIndex,
        k_rings: int = 1,
    ) -> list[MatchCandidate]:
        """Build candidates for every ``(request_id, pickup)`` and optimise them."""
        candidates: list[MatchCandidate] = []
        for request_id, pickup in pickups:
            candidates.extend(self.candidates_for(request_id, pickup, driver_index, k_rings))
        return self.optimize_batch(candidates)
