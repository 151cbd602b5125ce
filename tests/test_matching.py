"""Unit tests for the greedy batch matcher."""

import pytest

from geoindex.domain.distance import destination
from geoindex.domain.entities import MatchCandidate
from geoindex.domain.matching import BatchMatcher
from tests.conftest import SF


def cand(driver_id, request_id, score, grid_distance=0, eta_seconds=0):
    return MatchCandidate(driver_id, request_id, score, grid_distance, eta_seconds)


class TestOptimizeBatch:
    def setup_method(self):
        self.matcher = BatchMatcher()

    def test_highest_score_claims_driver(self):
        requests = [cand("d1", "r1", 0.4), cand("d1", "r2", 0.9), cand("d2", "r3", 0.5)]
        result = self.matcher.optimize_batch(requests, [])
        assert result == [cand("d1", "r2", 0.9), cand("d2", "r3", 0.5)]

    def test_ties_keep_input_order(self):
        requests = [cand("d1", "r1", 0.5), cand("d1", "r2", 0.5)]
        assert self.matcher.optimize_batch(requests) == [cand("d1", "r1", 0.5)]

    def test_greedy_not_optimal(self):
        """r1 takes d1 first even though that leaves r2 unmatched."""
        requests = [cand("d1", "r1", 0.9), cand("d1", "r2", 0.8), cand("d2", "r1", 0.7)]
        result = self.matcher.optimize_batch(requests)
        assert result == [cand("d1", "r1", 0.9), cand("d2", "r1", 0.7)]

    def test_input_is_not_mutated(self):
        requests = [cand("d1", "r1", 0.1), cand("d2", "r2", 0.9)]
        original = list(requests)
        self.matcher.optimize_batch(requests)
        assert requests == original

    def test_driver_side_list_is_not_consulted(self):
        requests = [cand("d1", "r1", 0.5)]
        assert self.matcher.optimize_batch(requests, [cand("d9", "r9", 1.0)]) == requests

    def test_empty(self):
        assert self.matcher.optimize_batch([], []) == []


class TestCandidates:
    def setup_method(self):
        self.matcher = BatchMatcher(avg_speed_kmh=30.0)

    def test_scores_by_grid_distance(self, driver_index):
        driver_index.update_driver("here", SF)
        driver_index.update_driver("next", destination(SF, 90.0, 0.8))

        candidates = {c.driver_id: c for c in self.matcher.candidates_for("r1", SF, driver_index, 2)}
        assert candidates["here"].grid_distance == 0
        assert candidates["here"].score == 1.0
        assert candidates["here"].eta_seconds == 0
        assert candidates["next"].grid_distance >= 1
        assert candidates["next"].score == pytest.approx(1 / (1 + candidates["next"].grid_distance))
        assert candidates["next"].eta_seconds > 0
        assert all(c.request_id == "r1" for c in candidates.values())

    def test_match_assigns_each_driver_once(self, driver_index):
        driver_index.update_driver("d1", SF)
        far = destination(SF, 180.0, 10.0)
        driver_index.update_driver("d2", far)

        result = self.matcher.match([("r1", SF), ("r2", destination(SF, 0, 0.05)), ("r3", far)],
                                    driver_index, k_rings=1)
        assert len({c.driver_id for c in result}) == len(result)
        assert {c.driver_id for c in result} == {"d1", "d2"}
        assert [c for c in result if c.driver_id == "d1"][0].request_id == "r1"
        assert [c for c in result if c.driver_id == "d2"][0].request_id == "r3"

    def test_no_drivers(self, driver_index):
        assert self.matcher.match([("r1", SF)], driver_index) == []
