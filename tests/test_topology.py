import math

from floorkernel.core.model import Point, Transform
from floorkernel.core.topology import Adjacency, build_room_graph, edges_match, find_adjacencies

from conftest import pts


def test_edges_match_directions():
    a = tuple(pts((0, 0), (10, 0)))
    assert edges_match(a, tuple(pts((0, 0), (10, 0)))) is False
    assert edges_match(a, tuple(pts((10, 0), (0, 0)))) is True
    assert edges_match(a, tuple(pts((10, 0), (20, 0)))) is None


def test_edges_match_uses_per_axis_tolerance():
    a = tuple(pts((0, 0), (10, 0)))
    # Each axis off by 1.9, further than 2 in euclidean distance.
    assert edges_match(a, tuple(pts((11.9, 1.9), (1.9, 1.9)))) is True
    assert edges_match(a, tuple(pts((12, 0), (0, 0)))) is None


def test_find_adjacencies_in_world_space(make_room):
    a = make_room("a")
    b = make_room("b", position=(100, 0))
    c = make_room("c", position=(0, 100))

    found = find_adjacencies(a, [a, b, c])

    assert found == [Adjacency("a", 1, "b", 3, True), Adjacency("a", 2, "c", 0, True)]


def test_rotated_room_is_matched_after_transform(make_room):
    a = make_room("a")
    b = make_room("b")
    # Half a turn then a shift up lays b to the left of a, its edge 3 on a's edge 3.
    b.transform = Transform(position=Point(0, 100), rotation=math.pi)

    found = find_adjacencies(a, [b])
    assert [(f.edge_a, f.edge_b, f.reversed) for f in found] == [(3, 3, True)]


def test_room_graph(make_room):
    rooms = [
        make_room("a"),
        make_room("b", position=(100, 0)),
        make_room("far", position=(1000, 1000)),
    ]

    G = build_room_graph(rooms)

    assert set(G.nodes()) == {"a", "b", "far"}
    assert list(G.edges(data="edges")) == [("a", "b", [(1, 3)])]
    assert G.degree("far") == 0
