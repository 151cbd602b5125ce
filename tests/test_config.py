"""Unit tests for settings loading."""

from geoindex.config import Settings
from geoindex.domain.pricing import SurgeEngine


class TestSettings:
    def test_defaults(self):
        s = Settings(_env_file=None)
        assert s.h3_resolution == 8
        assert (s.cover_min_rings, s.cover_max_rings) == (1, 10)
        assert s.heatmap_max_requests == 50.0
        assert s.heatmap_max_drivers == 20.0

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("GEOINDEX_H3_RESOLUTION", "9")
        monkeypatch.setenv("GEOINDEX_HEATMAP_MAX_DRIVERS", "40")
        s = Settings(_env_file=None)
        assert s.h3_resolution == 9
        assert s.heatmap_max_drivers == 40.0

    def test_engine_reads_module_settings(self, monkeypatch):
        from geoindex import config

        monkeypatch.setattr(config.settings, "heatmap_max_requests", 10.0)
        assert SurgeEngine().demand_score(5) == 0.5
