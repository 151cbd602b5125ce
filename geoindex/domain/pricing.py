"""
Surge Engine  (Strategy Pattern)
================================

Derives the heatmap fields of a cell from its two counters.

* **Demand score** = min(requests / MAX_REQUESTS, 1.0)
* **Supply score** = min(drivers / MAX_DRIVERS, 1.0)
* **Surge level**  = tiered on requests / drivers:

      no drivers, some requests -> 2.0
      no drivers, no requests   -> 1.0
      ratio > 3                 -> 2.0
      ratio > 2                 -> 1.5
      ratio > 1.5               -> 1.25
      otherwise                 -> 1.0

* **Color** = tiered on surge level; a cell with no activity is gray.

MAX_REQUESTS (50) and MAX_DRIVERS (20) are tuning knobs, not semantics.

Complexity: O(1) per cell.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from geoindex.config import settings
from .enums import HeatColor


@dataclass(frozen=True)
class CellScores:
    demand_score: float
    supply_score: float
    surge_level: float
    color: HeatColor


# ── Strategy hierarchy ────────────────────────────────────────────────


class SurgeStrategy(ABC):
    @abstractmethod
    def surge_level(self, driver_count: int, request_count: int) -> float: ...


class TieredRatioSurge(SurgeStrategy):
    """Request/driver ratio bucketed into fixed multipliers."""

    TIERS = ((3.0, 2.0), (2.0, 1.5), (1.5, 1.25))

    def surge_level(self, driver_count: int, request_count: int) -> float:
        if driver_count == 0:
            return 2.0 if request_count > 0 else 1.0
        ratio = request_count / driver_count
        for threshold, level in self.TIERS:
            if ratio > threshold:
                return level
        return 1.0


def surge_color(surge_level: float, driver_count: int, request_count: int) -> HeatColor:
    if driver_count == 0 and request_count == 0:
        return HeatColor.GRAY
    if surge_level >= 2.0:
        return HeatColor.RED
    if surge_level >= 1.5:
        return HeatColor.ORANGE
    if surge_level >= 1.25:
        return HeatColor.YELLOW
    if surge_level >= 1.0:
        return HeatColor.GREEN
    return HeatColor.BLUE


# ── Engine facade ─────────────────────────────────────────────────────


class SurgeEngine:
    """High-level API used by the heatmap."""

    def __init__(
        self,
        max_requests: float | None = None,
        max_drivers: float | None = None,
        strategy: SurgeStrategy | None = None,
    ):
        self.max_requests = settings.heatmap_max_requests if max_requests is None else max_requests
        self.max_drivers = settings.heatmap_max_drivers if max_drivers is None else max_drivers
        self.strategy = strategy or TieredRatioSurge()

    def demand_score(self, request_count: int) -> float:
        return min(request_count / self.max_requests, 1.0)

    def supply_score(self, driver_count: int) -> float:
        return min(driver_count / self.max_drivers, 1.0)

    def score(self, driver_count: int, request_count: int) -> CellScores:
        surge = self.strategy.surge_level(driver_count, request_count)
        return CellScores(
            demand_score=self.demand_score(request_count),
            supply_score=self.supply_score(driver_count),
            surge_level=surge,
            color=surge_color(surge, driver_count, request_count),
        )
