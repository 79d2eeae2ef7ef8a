"""Geometry, damage model, parameters and world model."""
from .damage import BuildingCode, CollapseDegree, CollapseStats, DamageModel, FireState
from .params import CodeProbabilities, CollapseParams, ConfigError, GaussianParams
from .sampling import GaussianSampler, RandomSource, UniformSampler
from .tracking import BuildingTracker
from .world import (
    Blockade,
    Building,
    ChangeSet,
    Edge,
    IdAllocationError,
    IdAllocator,
    Road,
    SequentialIdAllocator,
    WorldModel,
    WorldModelListener,
)

__all__ = [
    "BuildingCode",
    "CollapseDegree",
    "CollapseStats",
    "DamageModel",
    "FireState",
    "CodeProbabilities",
    "CollapseParams",
    "ConfigError",
    "GaussianParams",
    "GaussianSampler",
    "RandomSource",
    "UniformSampler",
    "BuildingTracker",
    "Blockade",
    "Building",
    "ChangeSet",
    "Edge",
    "IdAllocationError",
    "IdAllocator",
    "Road",
    "SequentialIdAllocator",
    "WorldModel",
    "WorldModelListener",
]
