import pytest

from floorkernel.core.errors import DegenerateEdge, IndexOutOfRange
from floorkernel.core.model import Anchor, Aperture, ApertureKind, Point, Wall, WallType
from floorkernel.engine import walls as wall_ops

from conftest import SQUARE, assert_points, pts

SQUARE_PTS = pts(*SQUARE)


def test_mitered_wall_on_uniform_square():
    polygon = wall_ops.wall_polygon(SQUARE_PTS, 0, [10.0] * 4)
    assert_points(polygon, [(0, 0), (100, 0), (110, -10), (-10, -10)])


def test_unmitered_wall_is_plain_offset():
    polygon = wall_ops.wall_polygon(SQUARE_PTS, 0, [10.0] * 4, miter=False)
    assert_points(polygon, [(0, 0), (100, 0), (100, -10), (0, -10)])


def test_every_wall_is_offset_outward():
    for i in range(4):
        inner_start, inner_end, outer_end, outer_start = wall_ops.wall_polygon(SQUARE_PTS, i, [10.0] * 4)
        assert (inner_start, inner_end) == (SQUARE_PTS[i], SQUARE_PTS[(i + 1) % 4])
        for outer in (outer_end, outer_start):
            assert not (0 < outer.x < 100 and 0 < outer.y < 100)


def test_corner_follows_neighbour_thickness():
    polygon = wall_ops.wall_polygon(SQUARE_PTS, 0, [10.0, 20.0, 10.0, 10.0])
    assert_points(polygon, [(0, 0), (100, 0), (120, -10), (-10, -10)])


def test_degenerate_edge_is_not_offset():
    vertices = pts((0, 0), (100, 0), (100, 0.005), (100, 100), (0, 100))
    polygon = wall_ops.wall_polygon(vertices, 1, [10.0] * 5)
    assert polygon == (vertices[1], vertices[2], vertices[2], vertices[1])

    # The wall before it cannot miter against it and keeps the plain offset end.
    before = wall_ops.wall_polygon(vertices, 0, [10.0] * 5)
    assert_points([before[2]], [(100, -10)])


def test_collinear_neighbours_fall_back_to_offset_endpoint():
    vertices = pts((0, 0), (50, 0), (100, 0), (100, 100), (0, 100))
    polygon = wall_ops.wall_polygon(vertices, 0, [10.0] * 5)
    assert_points(polygon, [(0, 0), (50, 0), (50, -10), (-10, -10)])


def test_isolated_room_walls_are_exterior(make_room):
    room = make_room("a")
    walls = wall_ops.regenerate(room)

    assert [w.id for w in walls] == ["wall_a_e0_s0", "wall_a_e1_s0", "wall_a_e2_s0", "wall_a_e3_s0"]
    assert all(w.wall_type is WallType.EXTERIOR for w in walls)
    assert all(w.thickness == 20.0 for w in walls)
    assert_points(walls[0].polygon, [(0, 0), (100, 0), (120, -20), (-20, -20)])


def test_shared_edge_is_interior_in_world_space(make_room):
    a = make_room("a")
    b = make_room("b", position=(100, 0))

    walls = wall_ops.regenerate(a, [b])

    assert [w.wall_type for w in walls] == [
        WallType.EXTERIOR,
        WallType.INTERIOR,
        WallType.EXTERIOR,
        WallType.EXTERIOR,
    ]
    assert walls[1].thickness == 10.0
    assert wall_ops.regenerate(b, [a])[3].wall_type is WallType.INTERIOR
    # Neighbours are only read.
    assert b.walls[3].wall_type is WallType.INTERIOR and len(a.walls) == 4


@pytest.mark.parametrize("tolerance, expected", [(1.5, WallType.EXTERIOR), (2.0, WallType.EXTERIOR), (3.0, WallType.INTERIOR)])
def test_classification_tolerance(make_room, tolerance, expected):
    a = make_room("a")
    b = make_room("b", position=(102.5, 0))
    assert wall_ops.classify_edges(a, [b], tolerance)[1] is expected


def test_small_gap_within_tolerance_is_interior(make_room):
    a = make_room("a")
    b = make_room("b", position=(101, 0))
    assert wall_ops.classify_edges(a, [b])[1] is WallType.INTERIOR


def test_regeneration_keeps_wall_objects_and_attachments(make_room):
    room = make_room("a")
    first = wall_ops.regenerate(room)
    door = Aperture("d1", ApertureKind.DOOR, Anchor.START, 10.0, 30.0)
    wall_ops.add_aperture(first[0], door)
    first[0].color = "#FF0000"

    room.model.set_vertex(1, (120, 0))
    second = wall_ops.regenerate(room)

    assert second[0] is first[0]
    assert second[0].id == "wall_a_e0_s0"
    assert second[0].apertures == [door]
    assert second[0].color == "#FF0000"
    assert second[0].display_color == "#FF0000"
    assert second[1].display_color == "#374151"
    assert second[0].inner_end == Point(120, 0)


def test_regeneration_follows_vertex_count(make_room):
    room = make_room("a")
    wall_ops.regenerate(room)

    room.model.insert_vertex(2, (110, 50))
    assert len(wall_ops.regenerate(room)) == 5
    assert room.walls[4].id == "wall_a_e4_s0"

    room.model.delete_vertex(2)
    room.model.delete_vertex(3)
    walls = wall_ops.regenerate(room)
    assert [w.edge_index for w in walls] == [0, 1, 2]
    assert set(room.walls) == {0, 1, 2}


def test_thickness_precedence(make_room):
    room = make_room("a")
    wall_ops.regenerate(room, overrides={0: 35})
    assert room.walls[0].thickness == 35.0
    assert room.walls[0].thickness_locked
    assert room.walls[1].thickness == 20.0

    wall_ops.regenerate(room)
    assert room.walls[0].thickness == 35.0

    wall_ops.regenerate(room, overrides={0: 5})
    assert room.walls[0].thickness == 5.0


def test_explicit_wall_type_survives_regeneration(make_room):
    room = make_room("a")
    wall_ops.regenerate(room)

    wall_ops.set_wall_type(room, 2, WallType.ADIABATIC)
    assert room.walls[2].thickness == 15.0
    assert not room.walls[2].thickness_locked

    wall_ops.regenerate(room)
    assert room.walls[2].wall_type is WallType.ADIABATIC
    assert room.walls[2].thickness == 15.0


def test_incremental_thickness_update_touches_three_walls(make_room):
    room = make_room("a")
    wall_ops.regenerate(room)
    untouched = room.walls[2].polygon

    updated = wall_ops.update_wall_thickness(room, 0, 40)

    assert [w.edge_index for w in updated] == [0, 3, 1]
    assert_points(room.walls[0].polygon, [(0, 0), (100, 0), (120, -40), (-20, -40)])
    assert_points([room.walls[1].outer_start], [(120, -40)])
    assert_points([room.walls[3].outer_end], [(-20, -40)])
    assert room.walls[2].polygon == untouched
    assert room.walls[0].thickness_locked


def test_incremental_update_matches_full_regeneration(make_room):
    room = make_room("a")
    wall_ops.regenerate(room)
    wall_ops.update_wall_thickness(room, 1, 33)
    incremental = [w.polygon for w in room.wall_list()]

    wall_ops.regenerate(room)

    for got, want in zip([w.polygon for w in room.wall_list()], incremental):
        assert_points(got, [p.as_tuple() for p in want])


def test_incremental_update_validates_input(make_room):
    room = make_room("a")
    assert wall_ops.update_wall_thickness(room, 0, 30) == []

    wall_ops.regenerate(room)
    with pytest.raises(IndexOutOfRange):
        wall_ops.update_wall_thickness(room, 4, 30)
    with pytest.raises(ValueError):
        wall_ops.update_wall_thickness(room, 0, -1)


def test_remove_room_walls(make_room):
    room = make_room("a")
    wall_ops.regenerate(room)
    removed = wall_ops.remove_room_walls(room)
    assert len(removed) == 4
    assert room.walls == {}


def test_aperture_span_from_start_anchor(make_room):
    room = make_room("a")
    wall = wall_ops.regenerate(room)[0]
    window = Aperture("w1", ApertureKind.WINDOW, Anchor.START, 10.0, 30.0, sill_height=0.9)

    assert_points(wall_ops.aperture_span(wall, window), [(10, 0), (40, 0), (40, -20), (10, -20)])


def test_aperture_span_from_end_anchor(make_room):
    room = make_room("a")
    wall = wall_ops.regenerate(room)[0]
    door = Aperture("d1", ApertureKind.DOOR, Anchor.END, 10.0, 30.0)

    assert_points(wall_ops.aperture_span(wall, door), [(90, 0), (60, 0), (60, -20), (90, -20)])


def test_add_aperture_rejects_duplicates_and_overflow(make_room):
    room = make_room("a")
    wall = wall_ops.regenerate(room)[0]
    wall_ops.add_aperture(wall, Aperture("d1", ApertureKind.DOOR, Anchor.START, 0.0, 90.0))

    with pytest.raises(ValueError):
        wall_ops.add_aperture(wall, Aperture("d1", ApertureKind.DOOR, Anchor.START, 0.0, 10.0))
    with pytest.raises(ValueError):
        wall_ops.add_aperture(wall, Aperture("d2", ApertureKind.DOOR, Anchor.START, 80.0, 30.0))
    assert [a.id for a in wall.apertures] == ["d1"]


def test_aperture_on_degenerate_wall_raises():
    vertices = pts((0, 0), (100, 0), (100, 0.005), (100, 100), (0, 100))
    polygon = wall_ops.wall_polygon(vertices, 1, [10.0] * 5)

    wall = Wall("w", "r", 1, polygon, WallType.EXTERIOR, 10.0)
    with pytest.raises(DegenerateEdge):
        wall_ops.aperture_span(wall, Aperture("a", ApertureKind.WINDOW, Anchor.START, 0.0, 0.001))
