from floorkernel.core.primitives import (
    Angle,
    Coincident,
    Distance,
    Fixed,
    Handle,
    Horizontal,
    IndexRemap,
    LinePrimitive,
    Parallel,
    Perpendicular,
    PointPrimitive,
    Role,
    build_polygon_primitives,
    primitive_from_dict,
)

from conftest import pts


def test_handle_wire_tokens():
    assert str(Handle.point(3)) == "p3"
    assert str(Handle.line(0)) == "l0"
    assert Handle.parse("p12") == Handle(Role.POINT, 12)
    assert Handle.parse(" l4 ") == Handle.line(4)


def test_handle_parse_rejects_tokens_without_index():
    assert Handle.parse("p") is None
    assert Handle.parse("c_1") is None
    assert Handle.parse("point7") is None


def test_insert_remap_shifts_indices_at_and_after_position():
    remap = IndexRemap.insert(2, 4)
    assert [remap.point(i) for i in range(4)] == [0, 1, 3, 4]
    assert [remap.line(i) for i in range(4)] == [0, 1, 3, 4]


def test_delete_remap_drops_removed_index():
    remap = IndexRemap.delete(1, 5)
    assert [remap.point(i) for i in range(5)] == [0, None, 1, 2, 3]
    assert remap.line(1) is None
    assert remap.handle(Handle.line(4)) == Handle.line(3)


def test_reverse_remap_keeps_vertex_zero():
    remap = IndexRemap.reverse(4)
    assert [remap.point(i) for i in range(4)] == [0, 3, 2, 1]
    assert [remap.line(i) for i in range(4)] == [3, 2, 1, 0]


def test_constraint_remapped_through_insert_and_delete():
    constraint = Distance(Handle.point(2), Handle.point(3), 250.0, id="c_0")

    moved = constraint.remapped(IndexRemap.insert(0, 4))
    assert moved == Distance(Handle.point(3), Handle.point(4), 250.0, id="c_0")

    assert constraint.remapped(IndexRemap.delete(3, 5)) is None
    assert constraint.remapped(IndexRemap.delete(0, 5)).refs() == (Handle.point(1), Handle.point(2))


def test_constraint_wire_form():
    constraint = Distance(Handle.point(0), Handle.point(1), 250.0, id="c_0")
    assert constraint.to_dict() == {
        "id": "c_0",
        "type": "p2p_distance",
        "p1_id": "p0",
        "p2_id": "p1",
        "distance": 250.0,
    }
    assert Horizontal(Handle.line(2), id="c_3").to_dict() == {"id": "c_3", "type": "horizontal", "line_id": "l2"}


def test_primitive_from_dict_restores_every_kind():
    samples = [
        PointPrimitive(Handle.point(2), 1.5, -3.0, fixed=True),
        LinePrimitive(Handle.line(1), Handle.point(1), Handle.point(2)),
        Angle(Handle.line(0), Handle.line(1), 90.0, id="c_1"),
        Parallel(Handle.line(0), Handle.line(2), id="c_2"),
        Fixed(Handle.point(0), id="c_4"),
        Coincident(Handle.point(1), Handle.point(3), id="c_5"),
        Perpendicular(Handle.line(1), Handle.line(2), id="c_6"),
    ]
    for primitive in samples:
        assert primitive_from_dict(primitive.to_dict()) == primitive


def test_primitive_from_dict_ignores_unknown_records():
    assert primitive_from_dict({"id": "x1", "type": "circle"}) is None
    assert primitive_from_dict({"id": "pA", "type": "point", "x": 0, "y": 0}) is None
    assert primitive_from_dict({"id": "c_0", "type": "horizontal", "line_id": "edge"}) is None
    assert primitive_from_dict({"id": "c_0", "type": "horizontal", "line_id": "p2"}) is None
    assert primitive_from_dict({"id": "c_1", "type": "p2p_distance", "p1_id": "l0", "p2_id": "p1", "distance": 5}) is None


def test_build_polygon_primitives_closes_the_ring():
    points, lines = build_polygon_primitives(pts((0, 0), (10, 0), (0, 10)))
    assert [p.id for p in points] == ["p0", "p1", "p2"]
    assert lines[2].to_dict() == {"id": "l2", "type": "line", "p1_id": "p2", "p2_id": "p0"}
