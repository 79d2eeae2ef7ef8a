import math

import pytest
from shapely.geometry import MultiPolygon, Polygon, box

from collapse_engine.core import geometry
from collapse_engine.core.world import edges_from_points


def test_signed_area_orientation():
    ccw = [(0, 0), (10, 0), (10, 5), (0, 5)]
    assert geometry.signed_area(ccw) == 50.0
    assert geometry.signed_area(list(reversed(ccw))) == -50.0
    assert geometry.signed_area([(0, 0), (1, 1)]) == 0.0


def test_centroid_of_rectangle():
    cx, cy = geometry.compute_centroid([(0, 0), (4000, 0), (4000, 2000), (0, 2000)])
    assert cx == pytest.approx(2000.0)
    assert cy == pytest.approx(1000.0)


def test_centroid_of_degenerate_polygon_falls_back_to_vertex_mean():
    assert geometry.compute_centroid([(0, 0), (2, 0), (4, 0)]) == (2.0, 0.0)


def test_vertex_array_to_points_rejects_odd_length():
    assert geometry.vertex_array_to_points([1, 2, 3, 4]) == [(1.0, 2.0), (3.0, 4.0)]
    with pytest.raises(ValueError):
        geometry.vertex_array_to_points([1, 2, 3])


@pytest.mark.parametrize("radius", [50.0, 500.0, 3000.0, 250000.0])
def test_flattened_circle_stays_within_flatness(radius):
    n = geometry.circle_segments(radius)
    assert n % 4 == 0
    # Sagitta of one chord is the largest distance between chord and arc.
    sagitta = radius * (1.0 - math.cos(math.pi / n))
    assert sagitta <= geometry.FLATNESS + 1e-9


def test_flattened_circle_hits_axis_extremes():
    pts = geometry.flatten_circle((100.0, 200.0), 3000.0)
    xs = [p[0] for p in pts]
    ys = [p[1] for p in pts]
    assert min(xs) == pytest.approx(-2900.0)
    assert max(xs) == pytest.approx(3100.0)
    assert min(ys) == pytest.approx(-2800.0)
    assert max(ys) == pytest.approx(3200.0)


def test_project_wall_goes_outward_for_both_orientations():
    # Bottom wall of a counter-clockwise footprint projects to negative y.
    shapes = geometry.project_wall((0, 0), (1000, 0), 200.0, outward=1.0)
    quad = shapes[0]
    assert quad.bounds == pytest.approx((0.0, -200.0, 1000.0, 0.0))
    # The same wall walked clockwise (right to left) still falls downward.
    shapes = geometry.project_wall((1000, 0), (0, 0), 200.0, outward=-1.0)
    assert shapes[0].bounds == pytest.approx((0.0, -200.0, 1000.0, 0.0))
    assert len(shapes) == 3, "Expected one quadrilateral and two end caps"


def test_project_wall_with_zero_distance_is_empty():
    assert geometry.project_wall((0, 0), (1000, 0), 0.0) == []


def test_region_operations():
    a = box(0, 0, 10, 10)
    b = box(5, 0, 15, 10)
    assert geometry.union([a, b]).area == pytest.approx(150.0)
    assert geometry.intersect(a, b).area == pytest.approx(50.0)
    assert geometry.subtract(a, b).area == pytest.approx(50.0)
    assert geometry.is_empty(geometry.intersect(a, box(20, 20, 30, 30)))
    assert geometry.is_empty(geometry.union([]))


def test_is_singular():
    assert geometry.is_singular(box(0, 0, 10, 10))
    assert not geometry.is_singular(MultiPolygon([box(0, 0, 1, 1), box(2, 2, 3, 3)]))
    holed = Polygon(
        [(0, 0), (10, 0), (10, 10), (0, 10)],
        [[(4, 4), (6, 4), (6, 6), (4, 6)]],
    )
    assert not geometry.is_singular(holed)


def test_decompose_separates_parts():
    parts = geometry.decompose(MultiPolygon([box(0, 0, 1, 1), box(2, 2, 3, 3)]))
    assert len(parts) == 2
    assert all(not p.interiors for p in parts)


def test_decompose_cuts_holes_open():
    holed = Polygon(
        [(0, 0), (10000, 0), (10000, 10000), (0, 10000)],
        [[(4000, 4000), (6000, 4000), (6000, 6000), (4000, 6000)]],
    )
    parts = geometry.decompose(holed)
    assert len(parts) >= 2
    assert all(not p.interiors for p in parts), "Every part must be a single contour"
    assert sum(p.area for p in parts) == pytest.approx(96_000_000.0)
    for p in parts:
        assert geometry.signed_area(list(p.exterior.coords)[:-1]) > 0


def test_polygon_apexes_truncate_and_deduplicate():
    poly = Polygon([(0.2, 0.7), (10.9, 0.1), (10.95, 0.3), (10.5, 5.5), (0.1, 5.9)])
    apexes = geometry.polygon_apexes(poly)
    # (10.9, 0.1) and (10.95, 0.3) collapse onto the same integer point.
    assert apexes == (0, 0, 10, 0, 10, 5, 0, 5)


def test_polygon_from_edges_follows_edge_chain():
    poly = geometry.polygon_from_edges(edges_from_points([(0, 0), (10, 0), (10, 10), (0, 10)]))
    assert poly.area == pytest.approx(100.0)
    assert geometry.ring_points(edges_from_points([(0, 0), (10, 0), (10, 10)])) == [
        (0.0, 0.0), (10.0, 0.0), (10.0, 10.0)
    ]


def test_decompose_returns_single_contour_counter_clockwise():
    clockwise = Polygon([(0, 0), (0, 10), (10, 10), (10, 0)])
    (part,) = geometry.decompose(clockwise)
    assert part.equals(clockwise)
    assert geometry.signed_area(list(part.exterior.coords)[:-1]) > 0
