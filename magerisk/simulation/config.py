"""Stochastic Simulation Configuration."""

from dataclasses import dataclass

from magerisk.matrix.config import LEVEL_VALUE_THRESHOLDS


@dataclass(frozen=True)
class SimulationConfig:
    """Single-risk Monte Carlo configuration.

    Variabilities are relative standard deviations of the normal
    perturbation applied to each calculation factor.
    """
    iterations: int = 10_000
    probability_variability: float = 0.20
    vulnerability_variability: float = 0.15
    impact_variability: float = 0.25
    temporal_variability: float = 0.10
    environmental_variability: float = 0.10
    histogram_bins: int = 20
    slow_threshold_ms: float = 1000.0


@dataclass(frozen=True)
class VaRConfig:
    """Organizational VaR configuration."""
    simulations: int = 10_000
    loss_variability: float = 0.20
    days_per_year: int = 365
    # Iterations simulated per vectorized batch (bounds memory on large portfolios)
    batch_size: int = 2_000
    slow_threshold_ms: float = 1000.0


@dataclass(frozen=True)
class ScenarioConfig:
    """Deterministic scenario analysis configuration."""
    # (lower bound, level) pairs used to reclassify scenario-adjusted risks
    level_thresholds: tuple = LEVEL_VALUE_THRESHOLDS


DEFAULT_SIMULATION_CONFIG = SimulationConfig()
DEFAULT_VAR_CONFIG = VaRConfig()
DEFAULT_SCENARIO_CONFIG = ScenarioConfig()
