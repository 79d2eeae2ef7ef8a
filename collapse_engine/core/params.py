"""
CollapseParams — Immutable parameter pack for the collapse simulator.

All damage distributions, per-building-code collapse probabilities and
wall-projection constants live here.  Instances are built once at startup
(usually by ``config_loader.build_collapse_params``) and never change while
a simulation runs.

Config key space (prefix ``collapse.``):

    <code>.p-destroyed / .p-severe / .p-moderate / .p-slight
    {slight,moderate,severe,destroyed}.mean / .sd
    create-road-blockages, floor-height, wall-extent.min, wall-extent.max
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from .damage import BuildingCode


class ConfigError(ValueError):
    """Raised when the collapse configuration is missing or inconsistent."""


@dataclass(frozen=True)
class GaussianParams:
    """Mean / standard deviation of one damage-magnitude distribution."""

    mean: float
    sd: float

    def __post_init__(self) -> None:
        if self.sd < 0.0:
            raise ConfigError(f"Gaussian sd must be >= 0, got {self.sd}")


@dataclass(frozen=True)
class CodeProbabilities:
    """Independent per-category collapse probabilities for one building code.

    The four values are summed cumulatively by ``CollapseStats``; they do not
    have to add up to 1.0.  Whatever remains is the implicit "no damage" share.
    """

    p_destroyed: float
    p_severe: float
    p_moderate: float
    p_slight: float
    p_none: Optional[float] = None
    """Informational only; never used when drawing damage."""

    def __post_init__(self) -> None:
        for name in ("p_destroyed", "p_severe", "p_moderate", "p_slight"):
            value = getattr(self, name)
            if value < 0.0:
                raise ConfigError(f"CodeProbabilities.{name} must be >= 0, got {value}")


@dataclass(frozen=True)
class CollapseParams:
    """
    Complete parameter specification for the collapse simulator.

    Every field except ``seed`` is required; there are no built-in damage
    or blockade constants.

    Organized by subsystem:
      - Earthquake damage (per-code probabilities)
      - Damage magnitude distributions
      - Blockade generation
      - Reproducibility
    """

    # ── Earthquake damage ───────────────────────────────────────────────── #
    probabilities: Dict[BuildingCode, CodeProbabilities]
    """Collapse probabilities for every BuildingCode."""

    # ── Damage magnitudes (shared across building codes) ────────────────── #
    slight: GaussianParams
    moderate: GaussianParams
    severe: GaussianParams
    destroyed: GaussianParams

    # ── Blockades ───────────────────────────────────────────────────────── #
    create_road_blockages: bool
    """If False, damage is still applied but no blockades are generated."""
    floor_height_m: float
    """Height of one floor in metres."""
    wall_extent_min: float
    wall_extent_max: float
    """Bounds of the per-building uniform extent factor."""

    # ── Reproducibility ─────────────────────────────────────────────────── #
    seed: Optional[int] = None
    """Seed for the shared random source (None = fresh OS entropy)."""

    def __post_init__(self) -> None:
        missing = [code.name for code in BuildingCode if code not in self.probabilities]
        if missing:
            raise ConfigError(f"No collapse probabilities configured for building codes: {missing}")
        if self.floor_height_m <= 0.0:
            raise ConfigError(f"floor-height must be > 0, got {self.floor_height_m}")
        if self.wall_extent_min < 0.0:
            raise ConfigError(f"wall-extent.min must be >= 0, got {self.wall_extent_min}")
        if self.wall_extent_min > self.wall_extent_max:
            raise ConfigError(
                f"wall-extent.min ({self.wall_extent_min}) exceeds "
                f"wall-extent.max ({self.wall_extent_max})"
            )

    @property
    def floor_height_mm(self) -> float:
        """Floor height in the world's length unit (millimetres)."""
        return self.floor_height_m * 1000.0
