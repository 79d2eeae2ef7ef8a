"""
collapse_engine — building collapse and road blockade simulation.

Applies an earthquake damage model to every building at step 1, escalates
damage of burning buildings every step, and projects the walls of damaged
buildings onto the road network to create blockades.

Quick start
-----------
    from collapse_engine import CollapseSimulator
    from collapse_engine.config_loader import load_collapse_params, load_world

    params = load_collapse_params("configs/collapse.yaml")
    world = load_world("configs/sample_world.yaml")
    sim = CollapseSimulator(world, params)

    report = sim.process_step(1)
    report.changes.to_dict()

Primary API
-----------
    CollapseSimulator   — per-step orchestrator
    CollapseParams      — immutable parameter pack
    DamageModel         — earthquake / fire damage draws
    BlockadeGenerator   — wall projection onto roads
    WorldModel          — entity store with add/remove listeners
    SimulationRunner    — multi-step runner
"""

from __future__ import annotations

from .core.damage import BuildingCode, CollapseDegree, DamageModel, FireState
from .core.params import CollapseParams, ConfigError
from .core.sampling import RandomSource
from .core.tracking import BuildingTracker
from .core.world import (
    Blockade,
    Building,
    ChangeSet,
    Edge,
    IdAllocationError,
    Road,
    SequentialIdAllocator,
    WorldModel,
)
from .systems.blockades import BlockadeGenerator
from .systems.collapse import CollapseEngine
from .simulation.simulator import CollapseSimulator, StepReport
from .simulation.runner import SimulationRunner
from .analysis.metrics import summary_statistics

__version__ = "1.0.0"

__all__ = [
    "BuildingCode",
    "CollapseDegree",
    "DamageModel",
    "FireState",
    "CollapseParams",
    "ConfigError",
    "RandomSource",
    "BuildingTracker",
    "Blockade",
    "Building",
    "ChangeSet",
    "Edge",
    "IdAllocationError",
    "Road",
    "SequentialIdAllocator",
    "WorldModel",
    "BlockadeGenerator",
    "CollapseEngine",
    "CollapseSimulator",
    "StepReport",
    "SimulationRunner",
    "summary_statistics",
    "__version__",
]
