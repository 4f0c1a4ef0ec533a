"""
Primitive distributions for trajinfer models.

Each distribution pairs a sampler (drawing from a numpy Generator) with a
log-density evaluated by scipy.stats. Values outside the support have
log-density -inf rather than raising, so constrained executions with
impossible values still produce a (zero-weight) trace.
"""

from dataclasses import dataclass

import numpy as np
from scipy import stats


@dataclass(frozen=True)
class Uniform:
    """Continuous uniform distribution on [low, high]."""

    low: float = 0.0
    high: float = 1.0

    def __post_init__(self) -> None:
        if not self.low < self.high:
            raise ValueError(f"Uniform needs low < high, got [{self.low}, {self.high}]")

    def sample(self, rng: np.random.Generator) -> float:
        return float(rng.uniform(self.low, self.high))

    def logpdf(self, value: float) -> float:
        return float(stats.uniform.logpdf(value, loc=self.low, scale=self.high - self.low))


@dataclass(frozen=True)
class Normal:
    """Gaussian distribution with mean `mu` and standard deviation `sigma`."""

    mu: float
    sigma: float

    def __post_init__(self) -> None:
        if not self.sigma > 0:
            raise ValueError(f"Normal needs sigma > 0, got {self.sigma}")

    def sample(self, rng: np.random.Generator) -> float:
        return float(rng.normal(self.mu, self.sigma))

    def logpdf(self, value: float) -> float:
        return float(stats.norm.logpdf(value, loc=self.mu, scale=self.sigma))
