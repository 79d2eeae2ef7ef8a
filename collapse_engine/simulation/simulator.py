"""
Collapse simulator — per-step orchestration.

The simulator wires the damage model, building tracker, collapse engine and
blockade generator together and exposes one entry point:

    changes = simulator.process_step(time).changes

Each call:
  1. Runs the damage phases (earthquake at step 1, fire every step).
  2. Generates blockade shapes for buildings whose brokenness rose, unless
     ``create_road_blockages`` is off.
  3. Allocates ids for all shapes in one request and builds Blockade entities.
     An IdAllocationError is logged and skips blockade creation for the step;
     damage already applied stays.
  4. Appends new ids to each road's blockade list, adds the blockades to the
     world and records everything in the step's ChangeSet.
  5. Fires post-step hooks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..core.damage import DamageModel
from ..core.params import CollapseParams
from ..core.sampling import RandomSource, Sampler, UniformSampler
from ..core.tracking import BuildingTracker
from ..core.world import (
    Blockade,
    ChangeSet,
    IdAllocationError,
    IdAllocator,
    Road,
    SequentialIdAllocator,
    WorldModel,
)
from ..systems.blockades import BlockadeGenerator
from ..systems.collapse import CollapseEngine, CollapseReport

logger = logging.getLogger("collapse_engine.simulation.simulator")


@dataclass
class StepReport:
    """Everything one step produced."""

    time: int
    changes: ChangeSet
    collapse: CollapseReport
    blockades: List[Blockade] = field(default_factory=list)
    blockade_error: Optional[str] = None

    @property
    def total_repair_cost(self) -> int:
        return sum(b.repair_cost for b in self.blockades)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.time,
            "earthquake": self.collapse.earthquake_applied,
            "changed_buildings": [b.id for b in self.collapse.changed],
            "fire_damaged": list(self.collapse.fire_damaged),
            "degree_counts": {
                code.name.lower(): {d.name.lower(): n for d, n in counts.items()}
                for code, counts in self.collapse.degree_counts.items()
            },
            "blockades": [b.to_dict() for b in self.blockades],
            "blockade_error": self.blockade_error,
            "changes": self.changes.to_dict()["changes"],
        }


# Type alias for post-step hooks:  hook(report) -> None
StepHook = Callable[[StepReport], None]


class CollapseSimulator:
    """Building collapse and road blockade simulator.

    Attributes:
        world: The world model being simulated.
        params: Immutable simulator parameters.
        tracker: Live set of buildings.
        engine: Damage phases.
        generator: Blockade generation.
    """

    def __init__(
        self,
        world: WorldModel,
        params: CollapseParams,
        allocator: Optional[IdAllocator] = None,
        source: Optional[RandomSource] = None,
        damage_model: Optional[DamageModel] = None,
        extent: Optional[Sampler] = None,
        post_step_hooks: Optional[List[StepHook]] = None,
    ) -> None:
        self.world = world
        self.params = params
        self.source = source if source is not None else RandomSource(params.seed)
        self.damage_model = (
            damage_model if damage_model is not None
            else DamageModel.from_params(params, self.source)
        )
        if extent is None:
            extent = UniformSampler(params.wall_extent_min, params.wall_extent_max, self.source.spawn())
        self.allocator = (
            allocator if allocator is not None
            else SequentialIdAllocator(world.max_id() + 1)
        )
        self.tracker = BuildingTracker().attach(world)
        self.engine = CollapseEngine(self.damage_model, self.tracker)
        self.generator = BlockadeGenerator(world, params.floor_height_mm, extent)
        self._post_hooks: List[StepHook] = list(post_step_hooks or [])

    def register_post_hook(self, hook: StepHook) -> None:
        """Add a callback invoked with each StepReport."""
        self._post_hooks.append(hook)

    def process_step(self, time: int) -> StepReport:
        """Apply damage and generate blockades for one simulation step."""
        changes = ChangeSet()
        collapse = self.engine.do_collapse(changes, time)
        report = StepReport(time=time, changes=changes, collapse=collapse)

        if self.params.create_road_blockages and collapse.changed:
            shapes = self.generator.generate(collapse.changed)
            try:
                new_blockades = self.generator.create_blockades(shapes, self.allocator)
            except IdAllocationError as exc:
                logger.error(f"Interrupted while requesting IDs: {exc}")
                report.blockade_error = str(exc)
                new_blockades = {}
            self._attach_blockades(new_blockades, changes)
            for road_blockades in new_blockades.values():
                report.blockades.extend(road_blockades)

        logger.info(
            f"Step {time}: {len(collapse.changed)} buildings damaged, "
            f"{len(report.blockades)} blockades created"
        )
        for hook in self._post_hooks:
            hook(report)
        return report

    def _attach_blockades(self, blockades: Dict[int, List[Blockade]], changes: ChangeSet) -> None:
        for road_id, new in blockades.items():
            road = self.world.get_entity(road_id)
            if not isinstance(road, Road):
                raise KeyError(f"Blockades generated for unknown road {road_id}")
            ids = list(road.blockades or [])
            ids.extend(b.id for b in new)
            road.blockades = ids
            self.world.add_entities(new)
            changes.add_all(new)
            changes.add_change(road, "blockades")
