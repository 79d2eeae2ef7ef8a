"""
Damage model.

Maps a building's construction code to a random earthquake damage value and
a fire state to a minimum damage value.  Both are expressed as brokenness in
[0, 100].

Earthquake damage for one building:

    u ~ U[0, 1)
    u <  p_destroyed          -> destroyed magnitude
    u <  p_severe             -> severe magnitude
    u <  p_moderate           -> moderate magnitude
    u <  p_slight             -> slight magnitude
    otherwise                 -> 0

where the thresholds are running sums of the configured per-category
probabilities.  A draw equal to a threshold falls into the next category.
Magnitudes are Gaussian, truncated towards zero and clamped to [0, 100].

Fire damage:

    HEATING -> slight, BURNING -> moderate, INFERNO -> severe,
    BURNT_OUT -> destroyed, anything else -> 0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum, unique
from typing import TYPE_CHECKING, Dict, Mapping, Optional, Protocol

import numpy as np

from .sampling import GaussianSampler, RandomSource, Sampler

if TYPE_CHECKING:
    from .params import CodeProbabilities, CollapseParams

logger = logging.getLogger("collapse_engine.core.damage")

MAX_COLLAPSE = 100


# ─────────────────────────────────────────────────────────────────────────── #
# Enumerations                                                                 #
# ─────────────────────────────────────────────────────────────────────────── #

@unique
class BuildingCode(IntEnum):
    """Construction type of a building."""

    WOOD = 0
    STEEL = 1
    CONCRETE = 2

    @property
    def config_name(self) -> str:
        return self.name.lower()


@unique
class FireState(IntEnum):
    """Fieryness ladder of the host fire simulation."""

    UNBURNT = 0
    HEATING = 1
    BURNING = 2
    INFERNO = 3
    WATER_DAMAGE = 4
    MINOR_DAMAGE = 5
    MODERATE_DAMAGE = 6
    SEVERE_DAMAGE = 7
    BURNT_OUT = 8


@unique
class CollapseDegree(IntEnum):
    """Coarse damage bucket; the value is the bucket's inclusive upper bound."""

    NONE = 0
    SLIGHT = 25
    MODERATE = 50
    SEVERE = 75
    DESTROYED = 100

    @classmethod
    def get(cls, damage: int) -> "CollapseDegree":
        for degree in cls:
            if damage <= degree.value:
                return degree
        raise ValueError(f"Don't know what to do with a damage value of {damage}")


def clamp_damage(value: float) -> int:
    """Truncate a sampled magnitude to int and restrict it to [0, 100]."""
    return int(np.clip(int(value), 0, MAX_COLLAPSE))


# ─────────────────────────────────────────────────────────────────────────── #
# Per-code thresholds                                                          #
# ─────────────────────────────────────────────────────────────────────────── #

@dataclass(frozen=True)
class CollapseStats:
    """Cumulative collapse thresholds for one building code."""

    code: BuildingCode
    p_destroyed: float
    p_severe: float
    p_moderate: float
    p_slight: float

    @classmethod
    def from_probabilities(cls, code: BuildingCode, probs: "CodeProbabilities") -> "CollapseStats":
        p_destroyed = probs.p_destroyed
        p_severe = p_destroyed + probs.p_severe
        p_moderate = p_severe + probs.p_moderate
        p_slight = p_moderate + probs.p_slight
        return cls(code, p_destroyed, p_severe, p_moderate, p_slight)

    def category(self, draw: float) -> CollapseDegree:
        """Severity category selected by a uniform draw (NONE past the last threshold)."""
        if draw < self.p_destroyed:
            return CollapseDegree.DESTROYED
        if draw < self.p_severe:
            return CollapseDegree.SEVERE
        if draw < self.p_moderate:
            return CollapseDegree.MODERATE
        if draw < self.p_slight:
            return CollapseDegree.SLIGHT
        return CollapseDegree.NONE


class UniformDraw(Protocol):
    def random(self) -> float:
        ...


# ─────────────────────────────────────────────────────────────────────────── #
# Damage model                                                                 #
# ─────────────────────────────────────────────────────────────────────────── #

class DamageModel:
    """Earthquake and fire damage draws.

    Attributes:
        stats: CollapseStats for every BuildingCode.
        samplers: One magnitude sampler per non-NONE CollapseDegree.
    """

    def __init__(
        self,
        stats: Mapping[BuildingCode, CollapseStats],
        samplers: Mapping[CollapseDegree, Sampler],
        uniform: UniformDraw,
    ) -> None:
        missing = [code.name for code in BuildingCode if code not in stats]
        if missing:
            from .params import ConfigError
            raise ConfigError(f"No collapse stats for building codes: {missing}")
        self.stats: Dict[BuildingCode, CollapseStats] = dict(stats)
        self.samplers: Dict[CollapseDegree, Sampler] = dict(samplers)
        self._uniform = uniform
        self._fire_samplers: Dict[FireState, Sampler] = {
            FireState.HEATING: self.samplers[CollapseDegree.SLIGHT],
            FireState.BURNING: self.samplers[CollapseDegree.MODERATE],
            FireState.INFERNO: self.samplers[CollapseDegree.SEVERE],
            FireState.BURNT_OUT: self.samplers[CollapseDegree.DESTROYED],
        }

    @classmethod
    def from_params(cls, params: "CollapseParams", source: RandomSource) -> "DamageModel":
        """Build the model, spawning one generator per sampler from ``source``."""
        stats = {
            code: CollapseStats.from_probabilities(code, params.probabilities[code])
            for code in BuildingCode
        }
        samplers = {
            CollapseDegree.SLIGHT: GaussianSampler(params.slight.mean, params.slight.sd, source.spawn()),
            CollapseDegree.MODERATE: GaussianSampler(params.moderate.mean, params.moderate.sd, source.spawn()),
            CollapseDegree.SEVERE: GaussianSampler(params.severe.mean, params.severe.sd, source.spawn()),
            CollapseDegree.DESTROYED: GaussianSampler(params.destroyed.mean, params.destroyed.sd, source.spawn()),
        }
        return cls(stats, samplers, source.spawn())

    def draw_earthquake_damage(self, code: Optional[int]) -> int:
        """Random earthquake brokenness for a building of the given code."""
        building_code = as_building_code(code)
        if building_code is None:
            logger.debug(f"Unknown building code {code!r}; no earthquake damage")
            return 0
        category = self.stats[building_code].category(self._uniform.random())
        if category == CollapseDegree.NONE:
            return 0
        return clamp_damage(self.samplers[category].next_value())

    def fire_minimum_damage(self, fire_state: Optional[int]) -> int:
        """Minimum brokenness implied by the given fire state."""
        try:
            state = FireState(fire_state) if fire_state is not None else None
        except ValueError:
            state = None
        sampler = self._fire_samplers.get(state)
        if sampler is None:
            return 0
        return clamp_damage(sampler.next_value())


def as_building_code(code: Optional[int]) -> Optional[BuildingCode]:
    if code is None:
        return None
    try:
        return BuildingCode(code)
    except ValueError:
        return None
