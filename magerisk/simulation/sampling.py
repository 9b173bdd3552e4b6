"""Normal Variation Sampling.

Box-Muller sampler over an injected ``numpy.random.Generator`` so every
simulation can be replayed from a seed.
"""

from typing import Optional

import numpy as np


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """New generator; ``None`` draws fresh OS entropy."""
    return np.random.default_rng(seed)


class NormalVariationSampler:
    """Perturbs a base value by a relative normal variation.

    Example:
        sampler = NormalVariationSampler(make_rng(42))
        samples = sampler.perturb(0.6, 0.20, size=10_000)
    """

    def __init__(self, rng: np.random.Generator):
        self.rng = rng

    def standard_normal(self, size: int) -> np.ndarray:
        """Standard normal draws via the Box-Muller transform."""
        u1 = 1.0 - self.rng.random(size)  # (0, 1], keeps log finite
        u2 = self.rng.random(size)
        return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)

    def perturb(self, base: float, variability: float, size: int) -> np.ndarray:
        """``base x (1 + variability x z)`` clamped to [0, 1]."""
        z = self.standard_normal(size)
        return np.clip(base + base * variability * z, 0.0, 1.0)
