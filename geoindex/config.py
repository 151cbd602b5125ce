"""Centralised library settings loaded from environment / .env file."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Hex grid
    h3_resolution: int = 8  # ~0.46 km hexagon edge
    cover_min_rings: int = 1
    cover_max_rings: int = 10  # bounds the cost of radius coverage

    # Geohash
    geohash_precision: int = 9  # ~4.8 m x 4.8 m

    # Heatmap normalisation (tunable, not semantic)
    heatmap_max_requests: float = 50.0  # expected max requests per cell
    heatmap_max_drivers: float = 20.0  # expected max drivers per cell

    # Batch matcher
    matcher_avg_speed_kmh: float = 30.0

    model_config = {"env_file": ".env", "env_prefix": "GEOINDEX_", "extra": "ignore"}


settings = Settings()
