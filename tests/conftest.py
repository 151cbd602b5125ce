"""
Shared test fixtures.

Everything here is in-memory: the hex grid is backed by the ``h3``
library and the indexes live in the test process, so no services are
needed.
"""

import pytest

from geoindex.domain.entities import Point
from geoindex.domain.enums import Resolution
from geoindex.domain.hexgrid import HexGrid
from geoindex.infrastructure.driver_index import DriverSpatialIndex
from geoindex.infrastructure.heatmap import Heatmap

# San Francisco downtown
SF = Point(37.7749, -122.4194)
# ~1.11 km due north of SF
SF_NORTH = Point(37.7849, -122.4194)


@pytest.fixture
def sf() -> Point:
    return SF


@pytest.fixture
def grid() -> HexGrid:
    return HexGrid(Resolution.NEIGHBORHOOD)


@pytest.fixture
def driver_index() -> DriverSpatialIndex:
    return DriverSpatialIndex(Resolution.NEIGHBORHOOD)


@pytest.fixture
def heatmap() -> Heatmap:
    return Heatmap(Resolution.NEIGHBORHOOD)
