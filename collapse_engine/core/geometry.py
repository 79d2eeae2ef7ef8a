"""
2D geometry primitives for blockade generation.

Points are (x, y) tuples in millimetres.  Regions are shapely geometries
(Polygon, MultiPolygon or an empty GeometryCollection); boolean combination
is delegated to shapely and everything the blockade pipeline needs on top of
it lives here:

    project_wall      edge -> quadrilateral + two flattened end caps
    union / intersect / subtract / is_singular / decompose
    flatten_circle    circle -> polygon with bounded deviation
    polygon_apexes    simple polygon -> flat integer apex tuple
    signed_area / compute_centroid on vertex lists
"""

from __future__ import annotations

import math
from typing import Iterable, List, Sequence, Tuple

from shapely.geometry import GeometryCollection, LineString, MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.geometry.polygon import orient
from shapely.ops import split, unary_union

Point2D = Tuple[float, float]

FLATNESS = 100.0
"""Maximum distance between a flattened curve and the true curve (mm)."""

_MIN_CIRCLE_SEGMENTS = 8


# ─────────────────────────────────────────────────────────────────────────── #
# Vertex-list measures                                                         #
# ─────────────────────────────────────────────────────────────────────────── #

def vertex_array_to_points(apexes: Sequence[int]) -> List[Point2D]:
    """Turn a flat [x0, y0, x1, y1, ...] sequence into a list of points."""
    if len(apexes) % 2:
        raise ValueError(f"Apex array must have even length, got {len(apexes)}")
    return [(float(apexes[i]), float(apexes[i + 1])) for i in range(0, len(apexes), 2)]


def signed_area(points: Sequence[Point2D]) -> float:
    """Shoelace area; positive for counter-clockwise vertex order."""
    n = len(points)
    if n < 3:
        return 0.0
    total = 0.0
    for i in range(n):
        x0, y0 = points[i]
        x1, y1 = points[(i + 1) % n]
        total += x0 * y1 - x1 * y0
    return total / 2.0


def compute_centroid(points: Sequence[Point2D]) -> Point2D:
    """Area centroid of a simple polygon given by its vertices.

    Degenerate (zero-area) vertex lists fall back to the vertex mean.
    """
    a = signed_area(points)
    n = len(points)
    if n == 0:
        raise ValueError("Cannot compute the centroid of an empty vertex list")
    if a == 0.0:
        return (
            sum(p[0] for p in points) / n,
            sum(p[1] for p in points) / n,
        )
    cx = 0.0
    cy = 0.0
    for i in range(n):
        x0, y0 = points[i]
        x1, y1 = points[(i + 1) % n]
        cross = x0 * y1 - x1 * y0
        cx += (x0 + x1) * cross
        cy += (y0 + y1) * cross
    return cx / (6.0 * a), cy / (6.0 * a)


# ─────────────────────────────────────────────────────────────────────────── #
# Curves                                                                       #
# ─────────────────────────────────────────────────────────────────────────── #

def circle_segments(radius: float, flatness: float = FLATNESS) -> int:
    """Number of chords needed so no chord strays more than ``flatness`` from the arc.

    Always a multiple of four so the axis-aligned extremes are exact vertices.
    """
    if radius <= flatness:
        return _MIN_CIRCLE_SEGMENTS
    half_angle = math.acos(1.0 - flatness / radius)
    n = math.ceil(math.pi / half_angle)
    n = max(_MIN_CIRCLE_SEGMENTS, n)
    return int(math.ceil(n / 4.0) * 4)


def flatten_circle(center: Point2D, radius: float, flatness: float = FLATNESS) -> List[Point2D]:
    """Polygonal approximation of a circle, counter-clockwise from angle 0."""
    cx, cy = center
    n = circle_segments(radius, flatness)
    points = []
    for k in range(n):
        theta = 2.0 * math.pi * k / n
        points.append((cx + radius * math.cos(theta), cy + radius * math.sin(theta)))
    return points


# ─────────────────────────────────────────────────────────────────────────── #
# Region construction                                                          #
# ─────────────────────────────────────────────────────────────────────────── #

def ring_points(edges: Iterable) -> List[Point2D]:
    """Vertex list of a boundary given as consecutive directed edges.

    Follows the edge chain: the first edge's start, then every edge's end.
    The closing vertex (equal to the first) is dropped.
    """
    points: List[Point2D] = []
    for edge in edges:
        if not points:
            points.append((float(edge.start[0]), float(edge.start[1])))
        points.append((float(edge.end[0]), float(edge.end[1])))
    if len(points) > 1 and points[0] == points[-1]:
        points.pop()
    return points


def polygon_from_points(points: Sequence[Point2D]) -> BaseGeometry:
    """Closed polygon region; invalid rings are repaired with buffer(0)."""
    if len(points) < 3:
        return GeometryCollection()
    poly = Polygon(points)
    if not poly.is_valid:
        poly = poly.buffer(0)
    return poly


def polygon_from_edges(edges: Iterable) -> BaseGeometry:
    return polygon_from_points(ring_points(edges))


def polygon_from_apexes(apexes: Sequence[int]) -> BaseGeometry:
    return polygon_from_points(vertex_array_to_points(apexes))


def project_wall(
    start: Point2D,
    end: Point2D,
    distance: float,
    outward: float = 1.0,
    flatness: float = FLATNESS,
) -> List[BaseGeometry]:
    """Shapes covered by a wall falling ``distance`` away from its footprint.

    Returns the quadrilateral between the wall and its offset copy plus a
    circle of radius ``distance`` around each endpoint, filling the corner
    gaps between neighbouring walls.

    ``outward`` is +1 when the footprint is counter-clockwise and -1 when it
    is clockwise; the offset is taken along the right-hand normal times that
    sign, which points away from the footprint interior.
    """
    if distance <= 0.0:
        return []
    shapes: List[BaseGeometry] = []
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    length = math.hypot(dx, dy)
    if length > 0.0:
        ox = dy / length * distance * outward
        oy = -dx / length * distance * outward
        quad = Polygon([
            start,
            end,
            (end[0] + ox, end[1] + oy),
            (start[0] + ox, start[1] + oy),
        ])
        shapes.append(quad)
    shapes.append(Polygon(flatten_circle(start, distance, flatness)))
    shapes.append(Polygon(flatten_circle(end, distance, flatness)))
    return shapes


# ─────────────────────────────────────────────────────────────────────────── #
# Region operations                                                            #
# ─────────────────────────────────────────────────────────────────────────── #

def iter_polygons(geometry: BaseGeometry) -> List[Polygon]:
    """Non-empty polygonal parts of any shapely geometry; lines and points are dropped."""
    if geometry is None or geometry.is_empty:
        return []
    if isinstance(geometry, Polygon):
        return [geometry] if geometry.area > 0.0 else []
    if isinstance(geometry, (MultiPolygon, GeometryCollection)):
        result: List[Polygon] = []
        for part in geometry.geoms:
            result.extend(iter_polygons(part))
        return result
    return []


def union(regions: Iterable[BaseGeometry]) -> BaseGeometry:
    parts = [r for r in regions if r is not None and not r.is_empty]
    if not parts:
        return GeometryCollection()
    return unary_union(parts)


def intersect(a: BaseGeometry, b: BaseGeometry) -> BaseGeometry:
    if a.is_empty or b.is_empty:
        return GeometryCollection()
    return a.intersection(b)


def subtract(a: BaseGeometry, b: BaseGeometry) -> BaseGeometry:
    if a.is_empty or b.is_empty:
        return a
    return a.difference(b)


def is_empty(region: BaseGeometry) -> bool:
    return not iter_polygons(region)


def is_singular(region: BaseGeometry) -> bool:
    """True if the region is a single contour with no holes."""
    polys = iter_polygons(region)
    return len(polys) == 1 and not polys[0].interiors


def decompose(region: BaseGeometry) -> List[Polygon]:
    """Split a region into hole-free single-contour polygons.

    Separate parts are returned as they are; a polygon with holes is cut by a
    vertical line through each hole until no piece has a hole left.
    """
    if is_singular(region):
        return [orient(iter_polygons(region)[0], sign=1.0)]
    result: List[Polygon] = []
    for poly in iter_polygons(region):
        result.extend(_split_holes(poly))
    return result


def _split_holes(poly: Polygon) -> List[Polygon]:
    if not poly.interiors:
        return [orient(poly, sign=1.0)]
    hole = Polygon(poly.interiors[0])
    x = hole.representative_point().x
    _, miny, _, maxy = poly.bounds
    cutter = LineString([(x, miny - 1.0), (x, maxy + 1.0)])
    pieces = iter_polygons(split(poly, cutter))
    if len(pieces) < 2:
        return [orient(poly, sign=1.0)]
    result: List[Polygon] = []
    for piece in pieces:
        result.extend(_split_holes(piece))
    return result


def polygon_apexes(poly: Polygon) -> Tuple[int, ...]:
    """Integer apex list of a simple polygon's exterior.

    Coordinates are truncated to int; consecutive coincident vertices and the
    closing vertex are removed.
    """
    apexes: List[int] = []
    last = None
    for x, y in poly.exterior.coords:
        point = (int(x), int(y))
        if point != last:
            apexes.extend(point)
        last = point
    if len(apexes) >= 4 and apexes[0] == apexes[-2] and apexes[1] == apexes[-1]:
        del apexes[-2:]
    return tuple(apexes)
