"""Unit tests for the H3-backed hexagonal grid."""

import pytest

from geoindex.domain.distance import destination, haversine_km
from geoindex.domain.entities import InvalidCellFormat, InvalidFormat, Point
from geoindex.domain.enums import Resolution
from geoindex.domain.hexgrid import HexCell, HexGrid, is_valid_cell_string
from tests.conftest import SF


class TestPointToCell:
    def test_deterministic(self, grid):
        assert grid.point_to_cell(SF) == grid.point_to_cell(SF)

    def test_nearby_points_same_cell(self, grid):
        """Two points ~10 m apart share a res-8 cell."""
        c1 = grid.point_to_cell(Point(37.7749, -122.4194))
        c2 = grid.point_to_cell(Point(37.77495, -122.41945))
        assert c1 == c2

    def test_distant_points_different_cell(self, grid):
        assert grid.point_to_cell(SF) != grid.point_to_cell(Point(28.6139, 77.2090))

    @pytest.mark.parametrize("res", list(Resolution))
    def test_cell_carries_resolution(self, res):
        assert HexGrid(res).point_to_cell(SF).resolution == int(res)

    def test_default_resolution_from_settings(self):
        assert HexGrid().resolution == 8

    @pytest.mark.parametrize("res", list(Resolution))
    def test_center_within_one_cell_diameter(self, res):
        g = HexGrid(res)
        for p in (SF, Point(-33.8688, 151.2093), Point(0.0, 0.0), Point(64.1466, -21.9426)):
            center = g.cell_to_point(g.point_to_cell(p))
            assert haversine_km(p, center) <= 2 * g.edge_length_km


class TestCellStrings:
    def test_round_trip(self, grid):
        cell = grid.point_to_cell(SF)
        s = grid.cell_to_string(cell)
        assert grid.string_to_cell(s) == cell
        assert str(HexCell.from_string(s)) == s

    def test_canonical_form_is_lower_hex(self, grid):
        s = grid.cell_string(SF)
        assert s == s.lower()
        assert len(s) == 15
        int(s, 16)

    def test_upper_case_is_accepted(self, grid):
        s = grid.cell_string(SF)
        assert HexCell.from_string(s.upper()) == HexCell.from_string(s)

    @pytest.mark.parametrize(
        "bad",
        ["", "zzz", "not-a-cell", "0", "0x8828308281fffff", " 8828308281fffff",
         "ffffffffffffffff", "8828308281fffff0", "-1"],
    )
    def test_malformed_raises(self, bad):
        with pytest.raises(InvalidCellFormat):
            HexCell.from_string(bad)
        assert not is_valid_cell_string(bad)

    def test_non_string_raises(self):
        with pytest.raises(InvalidCellFormat):
            HexCell.from_string(None)

    def test_invalid_format_is_a_value_error(self):
        with pytest.raises(ValueError):
            HexGrid.string_to_cell("nope")
        assert issubclass(InvalidCellFormat, InvalidFormat)

    def test_cell_info(self, grid):
        info = grid.cell_info(SF)
        assert info.index == grid.cell_string(SF)
        assert info.resolution == 8
        assert info.center == grid.cell_to_point(grid.point_to_cell(SF))


class TestRings:
    @pytest.mark.parametrize("res", list(Resolution))
    @pytest.mark.parametrize("k", [0, 1, 2, 3])
    def test_k_ring_size(self, res, k):
        g = HexGrid(res)
        cells = g.k_ring(g.point_to_cell(SF), k)
        assert len(cells) == 3 * k * k + 3 * k + 1
        assert len(set(cells)) == len(cells)

    def test_k_ring_includes_center(self, grid):
        cell = grid.point_to_cell(SF)
        assert cell in grid.k_ring(cell, 2)
        assert grid.k_ring(cell, 0) == [cell]

    @pytest.mark.parametrize("k", [1, 2, 3])
    def test_ring_size(self, grid, k):
        cells = grid.ring(grid.point_to_cell(SF), k)
        assert len(cells) == 6 * k

    def test_ring_zero_is_center(self, grid):
        cell = grid.point_to_cell(SF)
        assert grid.ring(cell, 0) == [cell]

    def test_negative_k_is_center_only(self, grid):
        cell = grid.point_to_cell(SF)
        assert grid.k_ring(cell, -2) == [cell]
        assert grid.ring(cell, -1) == [cell]
        assert grid.neighbor_strings(SF, -1) == [grid.cell_string(SF)]

    def test_ring_is_disk_difference(self, grid):
        cell = grid.point_to_cell(SF)
        ring = set(grid.ring(cell, 2))
        assert ring == set(grid.k_ring(cell, 2)) - set(grid.k_ring(cell, 1))
        assert all(grid.grid_distance(cell, c) == 2 for c in ring)

    def test_neighbor_strings(self, grid):
        strings = grid.neighbor_strings(SF, 1)
        assert len(strings) == 7
        assert grid.cell_string(SF) in strings


class TestGridDistance:
    def test_same_cell_is_zero(self, grid):
        cell = grid.point_to_cell(SF)
        assert grid.grid_distance(cell, cell) == 0

    def test_neighbors_are_one_apart(self, grid):
        cell = grid.point_to_cell(SF)
        for n in grid.ring(cell, 1):
            assert grid.grid_distance(cell, n) == 1

    def test_path_endpoints_and_length(self, grid):
        a = grid.point_to_cell(SF)
        b = grid.point_to_cell(destination(SF, 60.0, 3.0))
        path = grid.grid_path(a, b)
        assert path[0] == a
        assert path[-1] == b
        assert len(path) == grid.grid_distance(a, b) + 1
        for prev, nxt in zip(path, path[1:]):
            assert grid.grid_distance(prev, nxt) == 1


class TestCoverRadius:
    def test_small_radius_clamps_to_one_ring(self, grid):
        assert len(grid.cover_radius(SF, 0.0)) == 7

    def test_ring_count_from_edge_length(self, grid):
        # int(2 / 0.46) + 1 = 5 rings
        assert grid.rings_for_radius(2.0) == 5
        assert len(grid.cover_radius(SF, 2.0)) == 3 * 25 + 3 * 5 + 1

    def test_large_radius_caps_at_ten_rings(self, grid):
        assert grid.rings_for_radius(100.0) == 10
        assert len(grid.cover_radius(SF, 100.0)) == 331

    def test_covers_the_circle_on_the_axes(self, grid):
        cells = set(grid.cover_radius(SF, 2.0))
        for brng in (0, 90, 180, 270):
            assert grid.point_to_cell(destination(SF, brng, 1.9)) in cells

    def test_edge_length_table(self):
        assert HexGrid(7).edge_length_km == 1.22
        assert HexGrid(9).edge_length_km == 0.17
        assert HexGrid(10).edge_length_km == 0.065
        assert HexGrid(5).edge_length_km > 1.22
