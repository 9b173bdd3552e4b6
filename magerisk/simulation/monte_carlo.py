"""Single-Risk Monte Carlo Simulation.

Perturbs every factor of a risk calculation independently and
summarizes the distribution of their product.
"""

import logging
import math
from typing import Optional

import numpy as np

from magerisk.errors.validators import validate_iterations
from magerisk.logging_config.performance import log_performance
from magerisk.simulation.config import DEFAULT_SIMULATION_CONFIG, SimulationConfig
from magerisk.simulation.models import (
    ConfidenceInterval,
    DistributionBin,
    MonteCarloResult,
    SimulationStatistics,
)
from magerisk.simulation.sampling import NormalVariationSampler, make_rng
from magerisk.triad.models import RiskCalculation

logger = logging.getLogger(__name__)


def order_statistic(sorted_values: np.ndarray, quantile: float) -> float:
    """Value at index floor(n x quantile) of an ascending array."""
    return float(sorted_values[math.floor(len(sorted_values) * quantile)])


def distribution_bins(values: np.ndarray, bin_count: int) -> list[DistributionBin]:
    """Equal-width histogram over [min, max].

    A zero-width range puts every value in the first bin.
    """
    n = len(values)
    low, high = float(values.min()), float(values.max())
    width = (high - low) / bin_count

    if width == 0:
        counts = np.zeros(bin_count, dtype=int)
        counts[0] = n
    else:
        indices = np.minimum(((values - low) / width).astype(int), bin_count - 1)
        counts = np.bincount(indices, minlength=bin_count)

    return [
        DistributionBin(
            min=low + i * width,
            max=low + (i + 1) * width,
            count=int(counts[i]),
            frequency=float(counts[i]) / n,
        )
        for i in range(bin_count)
    ]


class MonteCarloSimulator:
    """Monte Carlo simulation of one risk's adjusted value.

    Example:
        simulator = MonteCarloSimulator(rng=make_rng(7))
        result = simulator.run(risk.calculation, iterations=10_000)
        print(result.confidence_interval.p95)
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.config = config or DEFAULT_SIMULATION_CONFIG
        self.sampler = NormalVariationSampler(rng if rng is not None else make_rng())

    @property
    def slow_threshold_ms(self) -> float:
        return self.config.slow_threshold_ms

    def simulate(self, calculation: RiskCalculation, iterations: int) -> np.ndarray:
        """Raw samples: product of five perturbed factors, clamped to [0, 1]."""
        cfg = self.config
        perturb = self.sampler.perturb
        samples = (
            perturb(calculation.threat_probability, cfg.probability_variability, iterations)
            * perturb(calculation.vulnerability_level, cfg.vulnerability_variability, iterations)
            * perturb(calculation.aggregated_impact, cfg.impact_variability, iterations)
            * perturb(calculation.temporal_factor, cfg.temporal_variability, iterations)
            * perturb(calculation.environmental_factor, cfg.environmental_variability, iterations)
        )
        return np.clip(samples, 0.0, 1.0)

    @log_performance()
    def run(
        self,
        calculation: RiskCalculation,
        iterations: Optional[int] = None,
        risk_id: Optional[str] = None,
    ) -> MonteCarloResult:
        """Simulate and summarize.

        Raises:
            ValidationError: iterations outside [1,000, 100,000].
        """
        iterations = validate_iterations(self.config.iterations if iterations is None else iterations)
        samples = np.sort(self.simulate(calculation, iterations))

        statistics = SimulationStatistics(
            mean=float(samples.mean()),
            median=order_statistic(samples, 0.5),
            p5=order_statistic(samples, 0.05),
            p95=order_statistic(samples, 0.95),
            min=float(samples[0]),
            max=float(samples[-1]),
            std_dev=float(samples.std()),
        )
        logger.debug(
            "Monte Carlo %s: %d iterations, p5=%.4f p50=%.4f p95=%.4f",
            risk_id or "-", iterations, statistics.p5, statistics.median, statistics.p95,
        )
        return MonteCarloResult(
            risk_id=risk_id,
            iterations=iterations,
            statistics=statistics,
            confidence_interval=ConfidenceInterval(
                p5=statistics.p5, p50=statistics.median, p95=statistics.p95,
            ),
            distribution_bins=distribution_bins(samples, self.config.histogram_bins),
        )
