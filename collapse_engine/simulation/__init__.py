"""Per-step simulator and multi-step runner."""
from .simulator import CollapseSimulator, StepReport
from .runner import SimulationRunner

__all__ = ["CollapseSimulator", "StepReport", "SimulationRunner"]
