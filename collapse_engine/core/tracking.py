"""Live set of buildings, kept in sync with a WorldModel through its listener hooks."""

from __future__ import annotations

from typing import Dict, Iterator, List

from .world import Building, Entity, WorldModel, WorldModelListener


class BuildingTracker(WorldModelListener):
    """Tracks every Building in a world without rescanning it each step.

    ``attach()`` seeds the set from the current world contents and registers
    for add/remove notifications.  Iteration is in ascending id order.
    """

    def __init__(self) -> None:
        self._buildings: Dict[int, Building] = {}

    def attach(self, world: WorldModel) -> "BuildingTracker":
        for building in world.entities_of_type(Building):
            self._buildings[building.id] = building
        world.add_listener(self)
        return self

    def on_entity_added(self, world: WorldModel, entity: Entity) -> None:
        if isinstance(entity, Building):
            self._buildings[entity.id] = entity

    def on_entity_removed(self, world: WorldModel, entity: Entity) -> None:
        if isinstance(entity, Building):
            self._buildings.pop(entity.id, None)

    @property
    def buildings(self) -> List[Building]:
        return [self._buildings[k] for k in sorted(self._buildings)]

    def __iter__(self) -> Iterator[Building]:
        return iter(self.buildings)

    def __len__(self) -> int:
        return len(self._buildings)

    def __contains__(self, building: object) -> bool:
        return isinstance(building, Building) and building.id in self._buildings
