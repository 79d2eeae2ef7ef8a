"""Stubs and builders shared by the collapse simulator tests."""

from typing import Dict, Iterable, List, Optional

from collapse_engine.core.world import Building, IdAllocationError, IdAllocator, Road, edges_from_points


class ConstantSampler:
    """Sampler that always returns the same value."""

    def __init__(self, value: float) -> None:
        self.value = value
        self.calls = 0

    def next_value(self) -> float:
        self.calls += 1
        return self.value


class FixedDraws:
    """Uniform source replaying a fixed list of draws."""

    def __init__(self, values: Iterable[float]) -> None:
        self._values = list(values)

    def random(self) -> float:
        return self._values.pop(0)


class FakeDamageModel:
    """Damage model with scripted earthquake damage per code and fire minimum per state."""

    def __init__(self, quake: Optional[Dict[int, int]] = None, fire: Optional[Dict[int, int]] = None) -> None:
        self.quake = quake or {}
        self.fire = fire or {}
        self.quake_calls = 0

    def draw_earthquake_damage(self, code) -> int:
        self.quake_calls += 1
        return self.quake.get(code, 0)

    def fire_minimum_damage(self, state) -> int:
        return self.fire.get(state, 0)


class FailingAllocator(IdAllocator):
    def __init__(self) -> None:
        self.requests: List[int] = []

    def request_new_ids(self, count: int) -> List[int]:
        self.requests.append(count)
        raise IdAllocationError("interrupted")


def rect(x0, y0, x1, y1):
    return [(x0, y0), (x1, y0), (x1, y1), (x0, y1)]


def make_building(bid, points, floors=2, code=0, brokenness=None, fieryness=None):
    return Building(
        id=bid,
        edges=edges_from_points(points),
        floors=floors,
        building_code=code,
        brokenness=brokenness,
        fieryness=fieryness,
    )


def make_road(rid, points, blockades=None):
    return Road(id=rid, edges=edges_from_points(points), blockades=blockades)


BASE_CONFIG = {
    "collapse.seed": 7,
    "collapse.create-road-blockages": True,
    "collapse.floor-height": 3.0,
    "collapse.wall-extent.min": 1.0,
    "collapse.wall-extent.max": 1.0,
    "collapse.slight.mean": 10.0,
    "collapse.slight.sd": 5.0,
    "collapse.moderate.mean": 35.0,
    "collapse.moderate.sd": 7.5,
    "collapse.severe.mean": 60.0,
    "collapse.severe.sd": 7.5,
    "collapse.destroyed.mean": 90.0,
    "collapse.destroyed.sd": 5.0,
    "collapse.wood.p-destroyed": 0.05,
    "collapse.wood.p-severe": 0.10,
    "collapse.wood.p-moderate": 0.20,
    "collapse.wood.p-slight": 0.25,
    "collapse.steel.p-destroyed": 0.02,
    "collapse.steel.p-severe": 0.05,
    "collapse.steel.p-moderate": 0.15,
    "collapse.steel.p-slight": 0.25,
    "collapse.concrete.p-destroyed": 0.01,
    "collapse.concrete.p-severe": 0.04,
    "collapse.concrete.p-moderate": 0.10,
    "collapse.concrete.p-slight": 0.20,
}


