"""
Collapse engine: applies earthquake and fire damage to tracked buildings.

Per step ``t``:
  1. Earthquake phase, ``t == 1`` only.  Every building's brokenness is
     overwritten with a fresh damage draw.  Buildings with damage > 0 are
     reported as changed.  Runs at most once per engine lifetime.
  2. Fire phase, every step.  Buildings with a defined fire state have their
     brokenness raised to the fire minimum when it is currently lower.

Every brokenness write is recorded in the caller's ChangeSet.  Brokenness is
never lowered by the fire phase.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from ..core.damage import (
    MAX_COLLAPSE,
    BuildingCode,
    CollapseDegree,
    DamageModel,
    as_building_code,
)
from ..core.tracking import BuildingTracker
from ..core.world import Building, ChangeSet

logger = logging.getLogger("collapse_engine.systems.collapse")

EARTHQUAKE_STEP = 1


@dataclass
class CollapseReport:
    """Outcome of one step's damage phases."""

    time: int
    changed: List[Building] = field(default_factory=list)
    """Buildings whose brokenness was raised this step, ascending id."""
    earthquake_applied: bool = False
    degree_counts: Dict[BuildingCode, Dict[CollapseDegree, int]] = field(default_factory=dict)
    """Earthquake outcome per building code and collapse degree (empty without an earthquake)."""
    fire_damaged: List[int] = field(default_factory=list)


def empty_degree_counts() -> Dict[BuildingCode, Dict[CollapseDegree, int]]:
    return {code: {degree: 0 for degree in CollapseDegree} for code in BuildingCode}


class CollapseEngine:
    """Runs the damage phases over the buildings known to a tracker."""

    def __init__(self, damage_model: DamageModel, tracker: BuildingTracker) -> None:
        self.damage_model = damage_model
        self.tracker = tracker
        self._earthquake_done = False
        self._fire_time: Optional[int] = None
        self._fire_minimums: Dict[Tuple[int, int], int] = {}

    @property
    def earthquake_done(self) -> bool:
        return self._earthquake_done

    def do_collapse(self, changes: ChangeSet, time: int) -> CollapseReport:
        report = CollapseReport(time=time)
        changed: Set[Building] = set()
        if time == EARTHQUAKE_STEP and not self._earthquake_done:
            quake_changed, counts = self.do_earthquake_collapse(changes)
            changed |= quake_changed
            report.earthquake_applied = True
            report.degree_counts = counts
        fire_changed = self.do_fire_collapse(changes, time)
        changed |= fire_changed
        report.fire_damaged = sorted(b.id for b in fire_changed)
        report.changed = sorted(changed, key=lambda b: b.id)
        return report

    def do_earthquake_collapse(self, changes: ChangeSet):
        """Overwrite every tracked building's brokenness with an earthquake draw.

        Returns:
            (changed buildings, counts per building code and collapse degree)
        """
        counts = empty_degree_counts()
        totals = {code: 0 for code in BuildingCode}
        result: Set[Building] = set()
        logger.debug("Collapsing buildings")
        for building in self.tracker:
            damage = self.damage_model.draw_earthquake_damage(building.building_code)
            damage = max(0, min(MAX_COLLAPSE, damage))
            building.brokenness = damage
            changes.add_change(building, "brokenness")

            code = as_building_code(building.building_code)
            if code is not None:
                counts[code][CollapseDegree.get(damage)] += 1
                totals[code] += 1
            if damage > 0:
                result.add(building)
        self._earthquake_done = True

        logger.info("Finished collapsing buildings: ")
        for code in BuildingCode:
            logger.info(f"Building code {code.name}: {totals[code]} buildings")
            for degree, n in counts[code].items():
                logger.info(f"  {n} {degree.name.lower()}")
        return result, counts

    def do_fire_collapse(self, changes: ChangeSet, time: int) -> Set[Building]:
        """Raise brokenness of burning buildings to their fire minimum.

        The minimum drawn for a building and fire state is reused for the
        rest of the step, so a repeated pass in the same step changes nothing.
        """
        if time != self._fire_time:
            self._fire_time = time
            self._fire_minimums = {}
        logger.debug("Checking fire damage")
        result: Set[Building] = set()
        for building in self.tracker:
            if not building.is_fieryness_defined:
                continue
            key = (building.id, building.fieryness)
            if key not in self._fire_minimums:
                min_damage = self.damage_model.fire_minimum_damage(building.fieryness)
                self._fire_minimums[key] = max(0, min(MAX_COLLAPSE, min_damage))
            min_damage = self._fire_minimums[key]
            damage = building.brokenness if building.is_brokenness_defined else 0
            if damage < min_damage:
                logger.info(f"Building {building.id} damaged by fire. New brokenness: {min_damage}")
                building.brokenness = min_damage
                changes.add_change(building, "brokenness")
                result.add(building)
        logger.debug("Finished checking fire damage")
        return result
