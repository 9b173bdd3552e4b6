"""Organizational Value at Risk.

Monte Carlo over a portfolio of loss exposures: each risk materializes
with probability equal to its adjusted risk and, when it does, loses a
uniform amount within +/- the loss variability of its expected loss.
"""

import logging
import math
from typing import Optional, Protocol, Sequence

import numpy as np

from magerisk.errors.validators import validate_confidence_level, validate_time_horizon
from magerisk.logging_config.performance import log_performance
from magerisk.simulation.config import DEFAULT_VAR_CONFIG, VaRConfig
from magerisk.simulation.models import VaRResult
from magerisk.simulation.sampling import make_rng

logger = logging.getLogger(__name__)


class Exposure(Protocol):
    adjusted_risk: float
    expected_loss: float


class VaRSimulator:
    """Portfolio VaR and Expected Shortfall.

    Example:
        simulator = VaRSimulator(rng=make_rng(11))
        result = simulator.run(risks, confidence_level=0.99, time_horizon=30)
        print(f"VaR: {result.var:,.0f}  ES: {result.expected_shortfall:,.0f}")
    """

    def __init__(
        self,
        config: Optional[VaRConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.config = config or DEFAULT_VAR_CONFIG
        self.rng = rng if rng is not None else make_rng()

    @property
    def slow_threshold_ms(self) -> float:
        return self.config.slow_threshold_ms

    def simulate_losses(self, exposures: Sequence[Exposure]) -> np.ndarray:
        """Total portfolio loss per iteration (unsorted)."""
        probabilities = np.array([e.adjusted_risk for e in exposures], dtype=float)
        expected = np.array([e.expected_loss or 0.0 for e in exposures], dtype=float)
        low = expected * (1.0 - self.config.loss_variability)
        span = expected * 2.0 * self.config.loss_variability

        totals = np.empty(self.config.simulations)
        for start in range(0, self.config.simulations, self.config.batch_size):
            stop = min(start + self.config.batch_size, self.config.simulations)
            shape = (stop - start, len(exposures))
            occurred = self.rng.random(shape) < probabilities
            losses = low + self.rng.random(shape) * span
            totals[start:stop] = np.where(occurred, losses, 0.0).sum(axis=1)
        return totals

    @log_performance()
    def run(
        self,
        exposures: Sequence[Exposure],
        confidence_level: float = 0.95,
        time_horizon: float = 365,
    ) -> VaRResult:
        """Simulate the portfolio and read VaR off the descending losses.

        Raises:
            ValidationError: confidence outside [0.5, 0.99] or horizon
                outside [1, 365] days.
        """
        confidence_level = validate_confidence_level(confidence_level)
        time_horizon = validate_time_horizon(time_horizon)

        if not exposures:
            return VaRResult(confidence_level=confidence_level, time_horizon=time_horizon)

        losses = np.sort(self.simulate_losses(exposures))[::-1]
        n = len(losses)
        index = math.floor(n * (1.0 - confidence_level))
        raw_var = float(losses[index])
        tail = losses[:index]

        result = VaRResult(
            var=raw_var * math.sqrt(time_horizon / self.config.days_per_year),
            expected_shortfall=float(tail.mean()) if len(tail) else raw_var,
            total_expected_loss=float(sum(e.expected_loss or 0.0 for e in exposures)),
            confidence_level=confidence_level,
            time_horizon=time_horizon,
            var_95=float(losses[math.floor(n * 0.05)]),
            var_99=float(losses[math.floor(n * 0.01)]),
            simulation_count=n,
            risk_count=len(exposures),
        )
        logger.debug(
            "VaR over %d risks at %.2f/%gd: %.2f (ES %.2f)",
            result.risk_count, confidence_level, time_horizon, result.var, result.expected_shortfall,
        )
        return result
