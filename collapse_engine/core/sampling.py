"""
Random sampling for the collapse simulator.

Every stochastic draw (earthquake category, Gaussian damage magnitudes, wall
extent factors) goes through a small sampler object holding its own numpy
Generator.  All generators are spawned from one ``RandomSource`` so a run is
reproducible from a single seed, while each sampler still has an independent
stream.

Tests replace samplers with anything exposing ``next_value()`` (and the
uniform damage draw with anything exposing ``random()``).
"""

from __future__ import annotations

from typing import Optional, Protocol

import numpy as np


class Sampler(Protocol):
    def next_value(self) -> float:
        ...


class RandomSource:
    """Process-wide seed root.  ``spawn()`` hands out independent generators."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        self._seq = np.random.SeedSequence(seed)

    def spawn(self) -> np.random.Generator:
        child = self._seq.spawn(1)[0]
        return np.random.default_rng(child)


class GaussianSampler:
    """Normal(mean, sd) sampler.  sd == 0 always yields the mean."""

    def __init__(self, mean: float, sd: float, rng: np.random.Generator) -> None:
        self.mean = float(mean)
        self.sd = float(sd)
        self._rng = rng

    def next_value(self) -> float:
        return float(self._rng.normal(self.mean, self.sd))

    def __repr__(self) -> str:
        return f"GaussianSampler(mean={self.mean}, sd={self.sd})"


class UniformSampler:
    """Continuous uniform sampler over [low, high]."""

    def __init__(self, low: float, high: float, rng: np.random.Generator) -> None:
        self.low = float(low)
        self.high = float(high)
        self._rng = rng

    def next_value(self) -> float:
        if self.low == self.high:
            return self.low
        return float(self._rng.uniform(self.low, self.high))

    def __repr__(self) -> str:
        return f"UniformSampler(low={self.low}, high={self.high})"
