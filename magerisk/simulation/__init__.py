"""Stochastic Simulation Engine.

Box-Muller variation sampling, single-risk Monte Carlo, organizational
Value at Risk and deterministic scenario analysis.
"""

from magerisk.simulation.config import (
    DEFAULT_SCENARIO_CONFIG,
    DEFAULT_SIMULATION_CONFIG,
    DEFAULT_VAR_CONFIG,
    ScenarioConfig,
    SimulationConfig,
    VaRConfig,
)
from magerisk.simulation.models import (
    ConfidenceInterval,
    DistributionBin,
    LossExposure,
    MonteCarloResult,
    Scenario,
    ScenarioResult,
    SimulationStatistics,
    VaRResult,
)
from magerisk.simulation.monte_carlo import MonteCarloSimulator, distribution_bins, order_statistic
from magerisk.simulation.sampling import NormalVariationSampler, make_rng
from magerisk.simulation.scenarios import BASELINE, ScenarioAnalyzer
from magerisk.simulation.var import VaRSimulator

__all__ = [
    # Config
    "DEFAULT_SCENARIO_CONFIG",
    "DEFAULT_SIMULATION_CONFIG",
    "DEFAULT_VAR_CONFIG",
    "ScenarioConfig",
    "SimulationConfig",
    "VaRConfig",
    # Models
    "ConfidenceInterval",
    "DistributionBin",
    "LossExposure",
    "MonteCarloResult",
    "Scenario",
    "ScenarioResult",
    "SimulationStatistics",
    "VaRResult",
    # Components
    "BASELINE",
    "MonteCarloSimulator",
    "NormalVariationSampler",
    "ScenarioAnalyzer",
    "VaRSimulator",
    "distribution_bins",
    "make_rng",
    "order_statistic",
]
