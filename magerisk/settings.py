"""Centralized settings for the risk engine.

Uses pydantic-settings to load from environment variables (prefixed
MAGERISK_) with defaults suitable for local analysis runs.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Risk engine settings loaded from environment variables."""

    # --- Persistence ---
    database_url: str = "sqlite+pysqlite:///:memory:"
    database_echo: bool = False

    # --- Simulation ---
    random_seed: Optional[int] = None  # None -> non-deterministic stream
    monte_carlo_iterations: int = 10_000
    var_simulations: int = 10_000
    default_confidence_level: float = 0.95
    default_time_horizon: int = 365
    slow_simulation_ms: float = 1000.0

    # --- Logging ---
    log_level: str = "INFO"
    log_format: str = "json"

    model_config = {
        "env_prefix": "MAGERISK_",
        "env_file": ".env",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
