"""
Summary statistics over recorded simulation steps.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List

import numpy as np

from ..core.damage import CollapseDegree
from ..core.world import Building, WorldModel

if TYPE_CHECKING:
    from ..simulation.simulator import StepReport


def degree_histogram(world: WorldModel) -> Dict[str, int]:
    """Number of buildings per collapse degree (undefined brokenness counts as none)."""
    hist = {degree.name.lower(): 0 for degree in CollapseDegree}
    for building in world.entities_of_type(Building):
        damage = building.brokenness if building.is_brokenness_defined else 0
        hist[CollapseDegree.get(damage).name.lower()] += 1
    return hist


def summary_statistics(reports: List["StepReport"]) -> Dict[str, float]:
    """Aggregate counts and repair costs over a run.

    Args:
        reports: StepReports in step order.

    Returns:
        Dictionary with step count, damaged building totals and blockade
        count / repair cost statistics.
    """
    costs = np.array(
        [b.repair_cost for r in reports for b in r.blockades], dtype=np.float64
    )
    damaged = {b.id for r in reports for b in r.collapse.changed}
    roads = {b.position for r in reports for b in r.blockades}
    return {
        "steps": float(len(reports)),
        "damaged_buildings": float(len(damaged)),
        "fire_damage_events": float(sum(len(r.collapse.fire_damaged) for r in reports)),
        "blockades": float(costs.size),
        "blocked_roads": float(len(roads)),
        "total_repair_cost": float(costs.sum()) if costs.size else 0.0,
        "mean_repair_cost": float(costs.mean()) if costs.size else 0.0,
        "max_repair_cost": float(costs.max()) if costs.size else 0.0,
        "failed_allocations": float(sum(1 for r in reports if r.blockade_error)),
    }
