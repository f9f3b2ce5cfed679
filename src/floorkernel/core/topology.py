"""Topology analysis between rooms of a floor plan.

This module finds shared boundaries between rooms by matching edge endpoints
in world space and builds a NetworkX graph of which rooms touch which.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import networkx as nx

from .. import config
from .model import Point, Room


@dataclass(frozen=True)
class Adjacency:
    """A shared boundary between an edge of one room and an edge of another.

    Attributes:
        room_a: ID of the first room.
        edge_a: Edge index in the first room.
        room_b: ID of the second room.
        edge_b: Edge index in the second room.
        reversed: True when the edges run in opposite directions, the usual
            case for two CCW rooms sharing a wall.
    """

    room_a: str
    edge_a: int
    room_b: str
    edge_b: int
    reversed: bool


def _near(p1: Point, p2: Point, tolerance: float) -> bool:
    return abs(p1.x - p2.x) < tolerance and abs(p1.y - p2.y) < tolerance


def edges_match(
    edge1: Tuple[Point, Point],
    edge2: Tuple[Point, Point],
    tolerance: float = config.ADJACENCY_TOLERANCE,
) -> Optional[bool]:
    """Compare two edges by their endpoints.

    Returns:
        False when the edges match in the same direction, True when they match
        reversed, None when they do not match.
    """
    a1, a2 = edge1
    b1, b2 = edge2
    if _near(a1, b1, tolerance) and _near(a2, b2, tolerance):
        return False
    if _near(a1, b2, tolerance) and _near(a2, b1, tolerance):
        return True
    return None


def _world_edges(room: Room) -> List[Tuple[Point, Point]]:
    world = room.world_vertices()
    n = len(world)
    return [(world[i], world[(i + 1) % n]) for i in range(n)]


def find_adjacencies(
    room: Room,
    others: Iterable[Room],
    tolerance: float = config.ADJACENCY_TOLERANCE,
) -> List[Adjacency]:
    """Find every edge of ``room`` that coincides with an edge of another room.

    Neighbours are only read, never modified.

    Args:
        room: The room whose edges are tested.
        others: Candidate neighbours; ``room`` itself is skipped if present.
        tolerance: Per-axis endpoint tolerance in world units.

    Returns:
        One Adjacency per matching edge pair, ``room`` always on side A.
    """
    edges = _world_edges(room)
    found = []
    for other in others:
        if other.id == room.id:
            continue
        other_edges = _world_edges(other)
        for i, edge in enumerate(edges):
            for j, other_edge in enumerate(other_edges):
                direction = edges_match(edge, other_edge, tolerance)
                if direction is not None:
                    found.append(Adjacency(room.id, i, other.id, j, direction))
    return found


def shared_edge_indices(
    room: Room, others: Iterable[Room], tolerance: float = config.ADJACENCY_TOLERANCE
) -> Dict[int, List[Adjacency]]:
    """Adjacencies of ``room`` grouped by its own edge index."""
    grouped: Dict[int, List[Adjacency]] = {}
    for adjacency in find_adjacencies(room, others, tolerance):
        grouped.setdefault(adjacency.edge_a, []).append(adjacency)
    return grouped


def build_room_graph(rooms: Iterable[Room], tolerance: float = config.ADJACENCY_TOLERANCE) -> nx.Graph:
    """Build a graph representing room adjacency.

    Creates a NetworkX graph where nodes are rooms and an edge joins two rooms
    that share at least one boundary edge. Edge data lists the shared edge
    index pairs under ``edges``.

    Args:
        rooms: Rooms of one floor plan.
        tolerance: Per-axis endpoint tolerance in world units.

    Returns:
        NetworkX Graph with room adjacency.
    """
    rooms = list(rooms)
    G = nx.Graph()

    for room in rooms:
        G.add_node(room.id, name=room.name)

    for i, room in enumerate(rooms):
        for adjacency in find_adjacencies(room, rooms[i + 1 :], tolerance):
            if G.has_edge(adjacency.room_a, adjacency.room_b):
                G[adjacency.room_a][adjacency.room_b]["edges"].append((adjacency.edge_a, adjacency.edge_b))
            else:
                G.add_edge(adjacency.room_a, adjacency.room_b, edges=[(adjacency.edge_a, adjacency.edge_b)])

    return G
