import pytest

from floorkernel.core.errors import DegenerateEdge
from floorkernel.core.model import Point, Transform
from floorkernel.geom.polygon import (
    bounding_box,
    closest_edge_index,
    ensure_ccw,
    is_ccw,
    line_intersection,
    outward_normal,
    points_equal,
    signed_area,
)

from conftest import SQUARE, assert_points, pts


def test_signed_area_and_winding():
    square = pts(*SQUARE)
    assert signed_area(square) == 10000
    assert is_ccw(square)
    assert signed_area(square[::-1]) == -10000
    assert ensure_ccw(square[::-1]) == square


def test_outward_normal_points_out_of_ccw_polygon():
    assert outward_normal(Point(0, 0), Point(100, 0)) == (0, -1)
    assert outward_normal(Point(100, 0), Point(100, 100)) == (1, 0)


def test_outward_normal_rejects_short_edges():
    with pytest.raises(DegenerateEdge) as info:
        outward_normal(Point(0, 0), Point(0.005, 0), edge_index=3)
    assert info.value.edge_index == 3


def test_line_intersection():
    hit = line_intersection(tuple(pts((0, -10), (100, -10))), tuple(pts((110, 0), (110, 100))))
    assert_points([hit], [(110, -10)])
    assert line_intersection(tuple(pts((0, 0), (1, 0))), tuple(pts((0, 1), (1, 1)))) is None


def test_bounding_box_and_closest_edge():
    assert bounding_box(pts((1, 5), (-2, 3), (4, -1))) == (-2, -1, 4, 5)
    with pytest.raises(ValueError):
        bounding_box([])
    assert closest_edge_index(pts(*SQUARE), Point(95, 50)) == 1


def test_points_equal_is_per_axis():
    assert points_equal(Point(0, 0), Point(1e-12, -1e-12))
    assert not points_equal(Point(0, 0), Point(0, 1e-6))


def test_transform_round_trip():
    transform = Transform(position=Point(10, 20), rotation=0.5, scale=2.0)
    local = pts((0, 0), (3, 4))
    assert_points(transform.to_local(transform.to_world(local)), [(0, 0), (3, 4)])
    assert_points(transform.to_world([Point(0, 0)]), [(10, 20)])
