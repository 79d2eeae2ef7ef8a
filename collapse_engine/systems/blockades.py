"""
Blockade generator: turns collapsed buildings into road obstructions.

For every building whose brokenness rose this step (ascending id):

  1. d = floor_height_mm × floors × brokenness/100 × extent,
     extent ~ U[wall_extent_min, wall_extent_max], drawn once per building.
  2. Each wall is projected outward by d (quadrilateral + circular end caps);
     the union of all projections is the building's wall area.
  3. existing = every blockade already in the world ∪ everything claimed
     earlier in this step.
  4. For each road (ascending id):
         piece = (road ∩ wall_area) − existing
     non-empty pieces are claimed (added to existing) and decomposed into
     hole-free single-contour polygons.
  5. Each polygon becomes a BlockadeShape: integer apexes, repair cost
     area × 1e-6 rounded half up, and centroid.  Zero-cost shapes are dropped.

Shapes are converted into Blockade entities in one batch by
``create_blockades`` so that a single id request covers the whole step.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry

from ..core import geometry
from ..core.damage import MAX_COLLAPSE
from ..core.sampling import Sampler
from ..core.world import Blockade, Building, IdAllocationError, IdAllocator, Road, WorldModel

logger = logging.getLogger("collapse_engine.systems.blockades")

REPAIR_COST_FACTOR = 0.000001
"""Converts square millimetres to the square-metre repair cost unit."""


@dataclass(frozen=True)
class BlockadeShape:
    """Geometry and cost of a blockade that has not been given an id yet."""

    road_id: int
    apexes: Tuple[int, ...]
    repair_cost: int
    x: int
    y: int


def repair_cost(points: List[geometry.Point2D]) -> int:
    return int(math.floor(geometry.signed_area(points) * REPAIR_COST_FACTOR + 0.5))


def shape_from_polygon(poly: Polygon, road_id: int) -> Optional[BlockadeShape]:
    """Blockade shape for one simple polygon, or None if it is degenerate or free to clear."""
    apexes = geometry.polygon_apexes(poly)
    points = geometry.vertex_array_to_points(apexes)
    if len(points) < 3:
        return None
    if geometry.signed_area(points) <= 0.0:
        return None
    cost = repair_cost(points)
    if cost == 0:
        return None
    cx, cy = geometry.compute_centroid(points)
    return BlockadeShape(road_id=road_id, apexes=apexes, repair_cost=cost, x=int(cx), y=int(cy))


class BlockadeGenerator:
    """Projects collapsed walls onto roads.

    Attributes:
        world: World model providing roads and existing blockades.
        floor_height_mm: Height of one floor in millimetres.
        extent: Sampler for the per-building extent factor.
        flatness: Maximum deviation when flattening circular caps.
    """

    def __init__(
        self,
        world: WorldModel,
        floor_height_mm: float,
        extent: Sampler,
        flatness: float = geometry.FLATNESS,
    ) -> None:
        self.world = world
        self.floor_height_mm = float(floor_height_mm)
        self.extent = extent
        self.flatness = float(flatness)

    # ------------------------------------------------------------------ #
    # Per-building geometry                                                #
    # ------------------------------------------------------------------ #

    def projection_distance(self, building: Building) -> float:
        """How far the building's walls fall; consumes one extent draw."""
        extent = self.extent.next_value()
        brokenness = building.brokenness if building.is_brokenness_defined else 0
        return self.floor_height_mm * building.floors * (brokenness / MAX_COLLAPSE) * extent

    def wall_area(self, building: Building, distance: float) -> BaseGeometry:
        """Union of every projected wall of the building."""
        if distance <= 0.0:
            return geometry.union([])
        footprint = geometry.ring_points(building.edges)
        outward = 1.0 if geometry.signed_area(footprint) >= 0.0 else -1.0
        shapes: List[BaseGeometry] = []
        for edge in building.edges:
            shapes.extend(
                geometry.project_wall(edge.start, edge.end, distance, outward, self.flatness)
            )
        return geometry.union(shapes)

    def existing_area(self, claimed: Iterable[BaseGeometry] = ()) -> BaseGeometry:
        """Coverage of all world blockades plus areas claimed earlier this step."""
        regions = [
            geometry.polygon_from_apexes(b.apexes)
            for b in self.world.entities_of_type(Blockade)
            if len(b.apexes) >= 6
        ]
        regions.extend(claimed)
        return geometry.union(regions)

    def road_blockades(
        self,
        wall_area: BaseGeometry,
        existing: BaseGeometry,
    ) -> Tuple[Dict[int, List[Polygon]], List[BaseGeometry]]:
        """Intersect a wall area with every road, excluding existing coverage.

        Returns:
            (simple polygons per road id, regions claimed by this call)
        """
        result: Dict[int, List[Polygon]] = {}
        claimed: List[BaseGeometry] = []
        for road in self.world.entities_of_type(Road):
            road_area = geometry.polygon_from_edges(road.edges)
            piece = geometry.subtract(geometry.intersect(road_area, wall_area), existing)
            if geometry.is_empty(piece):
                continue
            existing = geometry.union([existing, piece])
            claimed.append(piece)
            result[road.id] = geometry.decompose(piece)
        return result, claimed

    # ------------------------------------------------------------------ #
    # Step-level entry points                                              #
    # ------------------------------------------------------------------ #

    def generate(self, buildings: Iterable[Building]) -> Dict[int, List[BlockadeShape]]:
        """Blockade shapes for every changed building, grouped by road id."""
        shapes: Dict[int, List[BlockadeShape]] = {}
        claimed: List[BaseGeometry] = []
        for building in sorted(buildings, key=lambda b: b.id):
            logger.debug(f"Creating blockages for building {building.id}")
            distance = self.projection_distance(building)
            wall_area = self.wall_area(building, distance)
            if geometry.is_empty(wall_area):
                continue
            existing = self.existing_area(claimed)
            per_road, new_claims = self.road_blockades(wall_area, existing)
            claimed.extend(new_claims)
            for road_id, polygons in per_road.items():
                for poly in polygons:
                    shape = shape_from_polygon(poly, road_id)
                    if shape is not None:
                        shapes.setdefault(road_id, []).append(shape)
        return {road_id: shapes[road_id] for road_id in sorted(shapes)}

    def create_blockades(
        self,
        shapes: Dict[int, List[BlockadeShape]],
        allocator: IdAllocator,
    ) -> Dict[int, List[Blockade]]:
        """Give every shape a fresh id with a single allocation request.

        Raises:
            IdAllocationError: If the allocator cannot supply the ids.
        """
        count = sum(len(v) for v in shapes.values())
        if count == 0:
            return {}
        allocated = list(allocator.request_new_ids(count))
        if len(allocated) != count:
            raise IdAllocationError(f"Requested {count} ids, got {len(allocated)}")
        ids = iter(allocated)
        logger.debug("Creating new blockade objects")
        result: Dict[int, List[Blockade]] = {}
        for road_id, road_shapes in shapes.items():
            for shape in road_shapes:
                blockade = Blockade(
                    id=next(ids),
                    position=road_id,
                    apexes=shape.apexes,
                    repair_cost=shape.repair_cost,
                    x=shape.x,
                    y=shape.y,
                )
                logger.debug(f"Created new blockade: {blockade}")
                result.setdefault(road_id, []).append(blockade)
        return result
