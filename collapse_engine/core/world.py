"""
In-memory world model consumed by the collapse simulator.

The host simulation owns buildings, roads and blockades.  This module gives
them a minimal Python shape:

    Edge      — directed boundary segment (mm)
    Building  — footprint edges, floors, building code, brokenness, fieryness
    Road      — surface edges and an append-only list of blockade ids
    Blockade  — immutable obstruction polygon with repair cost and centroid

plus the collaborators the simulator talks to:

    WorldModel          — entity store with add/remove listeners
    WorldModelListener  — on_entity_added / on_entity_removed callbacks
    ChangeSet           — change-tracking sink flushed by the caller
    IdAllocator         — batch identity allocation
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, Type, TypeVar

logger = logging.getLogger("collapse_engine.core.world")

Coord = Tuple[int, int]


# ─────────────────────────────────────────────────────────────────────────── #
# Entities                                                                     #
# ─────────────────────────────────────────────────────────────────────────── #

@dataclass(frozen=True)
class Edge:
    start: Coord
    end: Coord


def edges_from_points(points: List[Coord]) -> List[Edge]:
    """Closed edge loop through the given vertices."""
    n = len(points)
    return [Edge(tuple(points[i]), tuple(points[(i + 1) % n])) for i in range(n)]


@dataclass(eq=False)
class Entity:
    id: int

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.id))

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and other.id == self.id


@dataclass(eq=False)
class Building(Entity):
    edges: List[Edge] = field(default_factory=list)
    floors: int = 1
    building_code: Optional[int] = None
    brokenness: Optional[int] = None
    fieryness: Optional[int] = None

    @property
    def is_brokenness_defined(self) -> bool:
        return self.brokenness is not None

    @property
    def is_fieryness_defined(self) -> bool:
        return self.fieryness is not None


@dataclass(eq=False)
class Road(Entity):
    edges: List[Edge] = field(default_factory=list)
    blockades: Optional[List[int]] = None


@dataclass(eq=False)
class Blockade(Entity):
    position: int = -1
    apexes: Tuple[int, ...] = ()
    repair_cost: int = 0
    x: int = 0
    y: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "position": self.position,
            "apexes": list(self.apexes),
            "repair_cost": self.repair_cost,
            "x": self.x,
            "y": self.y,
        }


E = TypeVar("E", bound=Entity)


# ─────────────────────────────────────────────────────────────────────────── #
# Change tracking                                                              #
# ─────────────────────────────────────────────────────────────────────────── #

class ChangeSet:
    """Records property writes and new entities for the caller to publish.

    Property changes are keyed by (entity id, property name); a later write to
    the same property replaces the earlier value.
    """

    def __init__(self) -> None:
        self._changes: Dict[Tuple[int, str], Any] = {}
        self._added: Dict[int, Entity] = {}

    def add_change(self, entity: Entity, prop: str) -> None:
        value = getattr(entity, prop)
        if isinstance(value, list):
            value = list(value)
        self._changes[(entity.id, prop)] = value

    def add_entity(self, entity: Entity) -> None:
        self._added[entity.id] = entity

    def add_all(self, entities: List[Entity]) -> None:
        for entity in entities:
            self.add_entity(entity)

    def changed_value(self, entity_id: int, prop: str) -> Any:
        return self._changes[(entity_id, prop)]

    def has_change(self, entity_id: int, prop: str) -> bool:
        return (entity_id, prop) in self._changes

    def changed_entity_ids(self) -> List[int]:
        return sorted({eid for eid, _ in self._changes})

    @property
    def added_entities(self) -> List[Entity]:
        return list(self._added.values())

    def __len__(self) -> int:
        return len(self._changes) + len(self._added)

    def to_dict(self) -> Dict[str, Any]:
        changes: Dict[str, Dict[str, Any]] = {}
        for (eid, prop), value in sorted(self._changes.items()):
            changes.setdefault(str(eid), {})[prop] = value
        return {
            "changes": changes,
            "added": [e.to_dict() for e in self._added.values() if isinstance(e, Blockade)],
        }


# ─────────────────────────────────────────────────────────────────────────── #
# Identity allocation                                                          #
# ─────────────────────────────────────────────────────────────────────────── #

class IdAllocationError(RuntimeError):
    """Raised when fresh entity ids cannot be obtained."""


class IdAllocator(ABC):
    """Hands out fresh entity ids in batches."""

    @abstractmethod
    def request_new_ids(self, count: int) -> List[int]:
        """Return ``count`` fresh ids or raise IdAllocationError."""


class SequentialIdAllocator(IdAllocator):
    """Monotonic ids starting at ``next_id``; optionally capped at ``limit``."""

    def __init__(self, next_id: int, limit: Optional[int] = None) -> None:
        self._next = int(next_id)
        self._limit = limit

    def request_new_ids(self, count: int) -> List[int]:
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        if self._limit is not None and self._next + count - 1 > self._limit:
            raise IdAllocationError(
                f"Cannot allocate {count} ids: only {self._limit - self._next + 1} left"
            )
        ids = list(range(self._next, self._next + count))
        self._next += count
        return ids


# ─────────────────────────────────────────────────────────────────────────── #
# World model                                                                  #
# ─────────────────────────────────────────────────────────────────────────── #

class WorldModelListener:
    """Receives entity add/remove notifications from a WorldModel."""

    def on_entity_added(self, world: "WorldModel", entity: Entity) -> None:
        pass

    def on_entity_removed(self, world: "WorldModel", entity: Entity) -> None:
        pass


class WorldModel:
    """Entity store keyed by id, notifying listeners on add/remove."""

    def __init__(self, entities: Optional[List[Entity]] = None) -> None:
        self._entities: Dict[int, Entity] = {}
        self._listeners: List[WorldModelListener] = []
        for entity in entities or []:
            self.add_entity(entity)

    def add_listener(self, listener: WorldModelListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: WorldModelListener) -> None:
        self._listeners.remove(listener)

    def add_entity(self, entity: Entity) -> None:
        if entity.id in self._entities:
            raise ValueError(f"Duplicate entity id {entity.id}")
        self._entities[entity.id] = entity
        for listener in list(self._listeners):
            listener.on_entity_added(self, entity)

    def add_entities(self, entities: List[Entity]) -> None:
        for entity in entities:
            self.add_entity(entity)

    def remove_entity(self, entity_id: int) -> Entity:
        entity = self._entities.pop(entity_id)
        for listener in list(self._listeners):
            listener.on_entity_removed(self, entity)
        return entity

    def get_entity(self, entity_id: int) -> Optional[Entity]:
        return self._entities.get(entity_id)

    def entities_of_type(self, kind: Type[E]) -> List[E]:
        """Entities of one type in ascending id order."""
        return sorted(
            (e for e in self._entities.values() if isinstance(e, kind)),
            key=lambda e: e.id,
        )

    def max_id(self) -> int:
        return max(self._entities, default=0)

    def __iter__(self) -> Iterator[Entity]:
        return iter(list(self._entities.values()))

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities
