"""Wall boundary synthesis for room polygons.

Each edge of a CCW room polygon gets a 4-vertex wall polygon
``[innerStart, innerEnd, outerEnd, outerStart]``. The inner side is the room
edge itself; the outer side is the edge offset along its outward normal by the
wall thickness, with corners mitered against the neighbouring walls' outer
lines.

Two update paths are provided:

- :func:`regenerate` rebuilds every wall of a room after its shape changed
  and reconciles the result with the existing walls by edge index, so wall
  ids, apertures and colors survive reshaping.
- :func:`update_wall_thickness` changes one wall and recomputes only the
  corners that depend on it.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .. import config
from ..core.errors import DegenerateEdge, IndexOutOfRange
from ..core.model import Anchor, Aperture, Point, Room, Wall, WallType, wall_id_for
from ..core.topology import shared_edge_indices
from ..geom.polygon import Line, line_intersection, offset_edge, outward_normal

LOGGER = logging.getLogger(__name__)

WallPolygon = Tuple[Point, Point, Point, Point]


def _outer_line(vertices: Sequence[Point], index: int, thickness: float) -> Optional[Line]:
    n = len(vertices)
    try:
        return offset_edge(vertices[index], vertices[(index + 1) % n], thickness, index)
    except DegenerateEdge:
        return None


def wall_polygon(
    vertices: Sequence[Point],
    edge_index: int,
    thicknesses: Sequence[float],
    miter: bool = True,
) -> WallPolygon:
    """Compute the wall polygon of one edge.

    Args:
        vertices: CCW room vertices, in room-local coordinates.
        edge_index: Edge the wall is built on.
        thicknesses: Thickness per edge index; the neighbours' values are used
            for the mitered corners.
        miter: When False the outer corners are the plain offset endpoints.

    Returns:
        ``(innerStart, innerEnd, outerEnd, outerStart)``. For an edge shorter
        than ``MIN_EDGE_LENGTH`` the outer corners are the inner endpoints.
    """
    n = len(vertices)
    prev_index = (edge_index - 1) % n
    next_index = (edge_index + 1) % n
    inner_start = vertices[edge_index]
    inner_end = vertices[next_index]

    outer = _outer_line(vertices, edge_index, thicknesses[edge_index])
    if outer is None:
        LOGGER.debug("Edge %d is degenerate, wall left unoffset", edge_index)
        return (inner_start, inner_end, inner_end, inner_start)
    if not miter:
        return (inner_start, inner_end, outer[1], outer[0])

    start_corner = outer[0]
    prev_outer = _outer_line(vertices, prev_index, thicknesses[prev_index])
    if prev_outer is not None:
        start_corner = line_intersection(prev_outer, outer) or outer[0]

    end_corner = outer[1]
    next_outer = _outer_line(vertices, next_index, thicknesses[next_index])
    if next_outer is not None:
        end_corner = line_intersection(outer, next_outer) or outer[1]

    return (inner_start, inner_end, end_corner, start_corner)


def classify_edges(
    room: Room, neighbours: Iterable[Room], tolerance: float = config.ADJACENCY_TOLERANCE
) -> List[WallType]:
    """Classify every edge of a room as interior or exterior.

    An edge is interior when it coincides with an edge of any neighbouring
    room, in either direction, after both are placed in world space.
    """
    shared = shared_edge_indices(room, neighbours, tolerance)
    return [WallType.INTERIOR if i in shared else WallType.EXTERIOR for i in range(room.model.vertex_count)]


def _resolve_edges(
    room: Room,
    neighbours: Iterable[Room],
    overrides: Mapping[int, float],
    tolerance: float,
) -> Tuple[List[WallType], List[float]]:
    types = []
    thicknesses = []
    for i, computed in enumerate(classify_edges(room, neighbours, tolerance)):
        existing = room.walls.get(i)
        wall_type = computed
        # Explicitly chosen kinds are never produced by classification
        if existing is not None and existing.wall_type not in (WallType.INTERIOR, WallType.EXTERIOR):
            wall_type = existing.wall_type

        if i in overrides:
            thickness = float(overrides[i])
        elif existing is not None and existing.thickness_locked:
            thickness = existing.thickness
        else:
            thickness = wall_type.default_thickness

        types.append(wall_type)
        thicknesses.append(thickness)
    return types, thicknesses


def regenerate(
    room: Room,
    neighbours: Iterable[Room] = (),
    overrides: Optional[Mapping[int, float]] = None,
    tolerance: float = config.ADJACENCY_TOLERANCE,
) -> List[Wall]:
    """Rebuild all walls of a room and reconcile them by edge index.

    Wall types and thicknesses are resolved for every edge first, then the
    polygons. An existing wall for edge *k* is updated in place, keeping its
    id, apertures and color. Walls whose edge no longer exists are removed,
    and new edges get new walls.

    Args:
        room: The room to rebuild; its ``walls`` are replaced.
        neighbours: Rooms to test for shared edges. Only read.
        overrides: Thickness per edge index. Takes precedence over a locked
            existing thickness, which takes precedence over the wall type table.
        tolerance: Endpoint tolerance for adjacency in world units.

    Returns:
        The room's walls ordered by edge index.
    """
    overrides = dict(overrides or {})
    vertices = room.model.vertices
    types, thicknesses = _resolve_edges(room, neighbours, overrides, tolerance)

    previous = room.walls
    walls: Dict[int, Wall] = {}
    created = 0
    for i in range(len(vertices)):
        polygon = wall_polygon(vertices, i, thicknesses)
        wall = previous.get(i)
        if wall is None:
            wall = Wall(
                id=wall_id_for(room.id, i),
                room_id=room.id,
                edge_index=i,
                polygon=polygon,
                wall_type=types[i],
                thickness=thicknesses[i],
            )
            created += 1
        else:
            wall.polygon = polygon
            wall.wall_type = types[i]
            wall.thickness = thicknesses[i]
        if i in overrides:
            wall.thickness_locked = True
        walls[i] = wall

    removed = [previous[k].id for k in sorted(previous) if k not in walls]
    room.walls = walls
    LOGGER.debug(
        "Regenerated %d walls for room %s (%d new, %d removed)", len(walls), room.id, created, len(removed)
    )
    return room.wall_list()


def _current_thicknesses(room: Room, default: float) -> List[float]:
    return [room.walls[i].thickness if i in room.walls else default for i in range(room.model.vertex_count)]


def update_wall_thickness(room: Room, edge_index: int, thickness: float) -> List[Wall]:
    """Change one wall's thickness without regenerating the room.

    Recomputes the wall itself and the outer corners of the two neighbouring
    walls that are mitered against it. Every other wall is left untouched.
    The new thickness is locked so later regenerations keep it.

    Returns:
        The updated walls: the edited wall first, then its neighbours. Empty
        when the room has no wall on that edge yet.

    Raises:
        IndexOutOfRange: If ``edge_index`` is not an edge of the room.
        ValueError: If ``thickness`` is negative.
    """
    n = room.model.vertex_count
    if not 0 <= edge_index < n:
        raise IndexOutOfRange(edge_index, n)
    if thickness < 0:
        raise ValueError(f"Wall thickness must be non-negative, got {thickness}")

    wall = room.walls.get(edge_index)
    if wall is None:
        LOGGER.debug("Room %s has no wall on edge %d", room.id, edge_index)
        return []

    wall.thickness = float(thickness)
    wall.thickness_locked = True

    vertices = room.model.vertices
    thicknesses = _current_thicknesses(room, wall.thickness)
    wall.polygon = wall_polygon(vertices, edge_index, thicknesses)

    updated = [wall]
    for neighbour_index in ((edge_index - 1) % n, (edge_index + 1) % n):
        neighbour = room.walls.get(neighbour_index)
        if neighbour is None:
            continue
        neighbour.polygon = wall_polygon(vertices, neighbour_index, thicknesses)
        updated.append(neighbour)

    LOGGER.debug("Set thickness of wall %s to %.2f", wall.id, wall.thickness)
    return updated


def set_wall_type(room: Room, edge_index: int, wall_type: WallType) -> List[Wall]:
    """Assign a wall type explicitly.

    Unless the wall's thickness is locked it follows the new type's default,
    through the incremental path.
    """
    wall = room.walls.get(edge_index)
    if wall is None:
        raise IndexOutOfRange(edge_index, room.model.vertex_count)
    wall.wall_type = WallType(wall_type)
    if wall.thickness_locked:
        return [wall]

    updated = update_wall_thickness(room, edge_index, wall.wall_type.default_thickness)
    wall.thickness_locked = False
    return updated


def remove_room_walls(room: Room) -> List[Wall]:
    """Destroy the derived walls of a room and return them."""
    removed = room.wall_list()
    room.walls = {}
    return removed


def aperture_fits(wall: Wall, aperture: Aperture) -> bool:
    """Check that an aperture lies entirely on the wall's inner edge."""
    return aperture.width > 0 and aperture.distance >= 0 and aperture.distance + aperture.width <= wall.length


def aperture_span(wall: Wall, aperture: Aperture) -> WallPolygon:
    """Cut-out polygon of a door or window through the wall thickness.

    The aperture runs along the inner edge from its anchor endpoint, starting
    ``distance`` away and extending ``width`` further, and through the wall
    along the outward normal.

    Returns:
        ``(innerA, innerB, outerB, outerA)`` with A nearer the anchor.

    Raises:
        DegenerateEdge: If the wall's inner edge is degenerate.
    """
    start, end = wall.inner_start, wall.inner_end
    nx, ny = outward_normal(start, end, wall.edge_index)
    if aperture.anchor is Anchor.END:
        start, end = end, start

    length = wall.length
    ux = (end.x - start.x) / length
    uy = (end.y - start.y) / length

    a = Point(start.x + ux * aperture.distance, start.y + uy * aperture.distance)
    far = aperture.distance + aperture.width
    b = Point(start.x + ux * far, start.y + uy * far)
    t = wall.thickness
    return (a, b, Point(b.x + nx * t, b.y + ny * t), Point(a.x + nx * t, a.y + ny * t))


def add_aperture(wall: Wall, aperture: Aperture) -> None:
    """Attach a door or window to a wall.

    Raises:
        ValueError: If the aperture id is taken or it does not fit on the wall.
    """
    if any(a.id == aperture.id for a in wall.apertures):
        raise ValueError(f"Aperture '{aperture.id}' already exists on wall {wall.id}")
    if not aperture_fits(wall, aperture):
        raise ValueError(f"Aperture '{aperture.id}' does not fit on wall {wall.id} (length {wall.length:.2f})")
    wall.apertures.append(aperture)
