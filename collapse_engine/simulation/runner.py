"""
Simulation runner.

Provides SimulationRunner, which drives a CollapseSimulator for N steps and
collects the per-step reports.

Usage:
    from collapse_engine.config_loader import load_collapse_params, load_world
    from collapse_engine.simulation.runner import SimulationRunner

    params = load_collapse_params("configs/collapse.yaml")
    world = load_world("configs/sample_world.yaml")
    reports = SimulationRunner(world, params).run(n_steps=5)
"""

from __future__ import annotations

from typing import List, Optional

from ..core.params import CollapseParams
from ..core.world import IdAllocator, WorldModel
from ..analysis.recorder import StepRecorder
from .simulator import CollapseSimulator, StepReport


class SimulationRunner:
    """Runs the collapse simulator from step 1 for a fixed number of steps.

    Attributes:
        simulator: The wrapped CollapseSimulator.
        recorder:  StepRecorder fed by a post-step hook.
    """

    def __init__(
        self,
        world: WorldModel,
        params: CollapseParams,
        allocator: Optional[IdAllocator] = None,
        recorder: Optional[StepRecorder] = None,
    ) -> None:
        self.simulator = CollapseSimulator(world, params, allocator=allocator)
        self.recorder = recorder if recorder is not None else StepRecorder()
        self.simulator.register_post_hook(self.recorder.record)

    def run(self, n_steps: int, start: int = 1) -> List[StepReport]:
        """Process steps ``start`` .. ``start + n_steps - 1``.

        Returns:
            Reports for the steps run by this call, in order.
        """
        if n_steps < 0:
            raise ValueError(f"n_steps must be >= 0, got {n_steps}")
        return [self.simulator.process_step(t) for t in range(start, start + n_steps)]
