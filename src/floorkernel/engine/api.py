"""Document-level API for floor-plan editing.

:class:`FloorPlan` is the explicit per-document context. It owns the rooms,
forwards vertex and constraint edits to each room's polygon model, drives
the solver through :class:`~floorkernel.engine.sync.ConstraintSync`, and
keeps derived walls up to date for the edited room and its neighbours.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Set, TypeVar

import networkx as nx

from .. import config
from ..core.errors import UnknownRoom
from ..core.model import Point, Room, Transform, Wall, as_point
from ..core.polygon_model import PolygonModel
from ..core.primitives import Constraint
from ..core.topology import build_room_graph, find_adjacencies
from ..geom.polygon import Bounds, closest_edge_index
from ..geom.spatial import SpatialIndex, bounds_union, entity_bounds
from . import walls as wall_ops
from .merge import merge_polygons
from .solver import SolverFactory
from .sync import ConstraintSync, SolveResult

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class FloorPlan:
    """Rooms of one document with their derived walls.

    Args:
        solver_factory: Builds a fresh constraint solver per solve. Without
            one, solving raises ``RuntimeError``.
        tolerance: Endpoint tolerance used for room adjacency.
    """

    def __init__(
        self,
        solver_factory: Optional[SolverFactory] = None,
        tolerance: float = config.ADJACENCY_TOLERANCE,
    ):
        self._rooms: Dict[str, Room] = {}
        self.tolerance = tolerance
        self.sync = ConstraintSync(solver_factory) if solver_factory is not None else None

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._rooms

    # ------------------------------------------------------------------ #
    # Rooms
    # ------------------------------------------------------------------ #
    @property
    def rooms(self) -> List[Room]:
        return list(self._rooms.values())

    def room(self, room_id: str) -> Room:
        """Look up a room.

        Raises:
            UnknownRoom: If no room has that id.
        """
        try:
            return self._rooms[room_id]
        except KeyError:
            raise UnknownRoom(room_id) from None

    def add_room(
        self,
        room_id: str,
        vertices: Iterable,
        name: str = "",
        transform: Optional[Transform] = None,
    ) -> Room:
        """Create a room and generate its walls.

        Raises:
            ValueError: If the id is already used.
            MinimumVertexCount: If fewer than 3 vertices are given.
        """
        if room_id in self._rooms:
            raise ValueError(f"Room '{room_id}' already exists")

        room = Room(
            id=room_id,
            model=PolygonModel(vertices, room_id=room_id),
            name=name or room_id,
            transform=transform or Transform(),
        )
        self._rooms[room_id] = room
        LOGGER.debug("Added room %s with %d vertices", room_id, room.model.vertex_count)
        self._refresh(room, set())
        return room

    def remove_room(self, room_id: str) -> Room:
        """Remove a room and destroy its walls; neighbours are reclassified."""
        room = self.room(room_id)
        neighbours = [r.id for r in self.neighbours_of(room_id)]
        del self._rooms[room_id]
        wall_ops.remove_room_walls(room)
        for neighbour_id in neighbours:
            self._regenerate(self._rooms[neighbour_id])
        LOGGER.debug("Removed room %s", room_id)
        return room

    def set_transform(self, room_id: str, transform: Transform) -> None:
        """Place a room elsewhere in world space."""
        room = self.room(room_id)
        before = {r.id for r in self.neighbours_of(room_id)}
        room.transform = transform
        self._refresh(room, before)

    def neighbours_of(self, room_id: str) -> List[Room]:
        """Rooms sharing at least one edge with the given room."""
        room = self.room(room_id)
        ids = {a.room_b for a in find_adjacencies(room, self._others(room_id), self.tolerance)}
        return [r for r in self._rooms.values() if r.id in ids]

    def room_graph(self) -> nx.Graph:
        return build_room_graph(self._rooms.values(), self.tolerance)

    def _others(self, room_id: str) -> List[Room]:
        return [r for r in self._rooms.values() if r.id != room_id]

    # ------------------------------------------------------------------ #
    # Vertex and constraint edits
    # ------------------------------------------------------------------ #
    def _edit(self, room_id: str, edit: Callable[[PolygonModel], T]) -> T:
        room = self.room(room_id)
        before = {r.id for r in self.neighbours_of(room_id)}
        result = edit(room.model)
        self._refresh(room, before)
        return result

    def insert_vertex(self, room_id: str, index: int, point) -> None:
        self._edit(room_id, lambda model: model.insert_vertex(index, point))

    def add_vertex_at(self, room_id: str, point) -> int:
        """Insert a world-space point into the room edge nearest to it.

        The point is converted into the room's local space and placed right
        after the start vertex of the closest edge.

        Returns:
            Index of the new vertex.
        """
        room = self.room(room_id)
        local = room.transform.to_local([as_point(point)])[0]
        index = closest_edge_index(room.model.vertices, local) + 1
        self._edit(room_id, lambda model: model.insert_vertex(index, local))
        return index

    def delete_vertex(self, room_id: str, index: int) -> Point:
        return self._edit(room_id, lambda model: model.delete_vertex(index))

    def set_vertex(self, room_id: str, index: int, point) -> Point:
        return self._edit(room_id, lambda model: model.set_vertex(index, point))

    def add_constraint(self, room_id: str, constraint: Constraint, constraint_id: Optional[str] = None) -> str:
        return self.room(room_id).model.add_constraint(constraint, constraint_id)

    def remove_constraint(self, room_id: str, constraint_id: str) -> Constraint:
        return self.room(room_id).model.remove_constraint(constraint_id)

    # ------------------------------------------------------------------ #
    # Solving
    # ------------------------------------------------------------------ #
    def _require_sync(self) -> ConstraintSync:
        if self.sync is None:
            raise RuntimeError("FloorPlan was created without a solver factory")
        return self.sync

    def solve(self, room_id: str) -> SolveResult:
        """Solve one room and refresh walls if its geometry moved."""
        sync = self._require_sync()
        room = self.room(room_id)
        before = {r.id for r in self.neighbours_of(room_id)}
        result = sync.solve(room.model)
        if result.ok and result.runs:
            self._refresh(room, before)
        return result

    def solve_dirty(self) -> Dict[str, SolveResult]:
        """Solve every dirty room once."""
        sync = self._require_sync()
        before: Dict[str, Set[str]] = {}
        for room in self._rooms.values():
            if room.model.dirty:
                before[room.id] = {r.id for r in self.neighbours_of(room.id)}
                sync.request_solve(room.model)

        results = sync.solve_pending()
        for room_id, result in results.items():
            if result.ok and result.runs:
                self._refresh(self._rooms[room_id], before[room_id])
            elif not result.ok:
                LOGGER.warning("Room %s kept its last geometry: %s", room_id, result.failure)
        return results

    # ------------------------------------------------------------------ #
    # Walls
    # ------------------------------------------------------------------ #
    def _regenerate(self, room: Room, overrides: Optional[Mapping[int, float]] = None) -> List[Wall]:
        return wall_ops.regenerate(room, self._others(room.id), overrides, self.tolerance)

    def _refresh(self, room: Room, before: Set[str]) -> None:
        self._regenerate(room)
        after = {r.id for r in self.neighbours_of(room.id)}
        for neighbour_id in sorted(before | after):
            if neighbour_id in self._rooms:
                self._regenerate(self._rooms[neighbour_id])

    def walls(self, room_id: str) -> List[Wall]:
        return self.room(room_id).wall_list()

    def regenerate_walls(self, room_id: str, overrides: Optional[Mapping[int, float]] = None) -> List[Wall]:
        """Full wall rebuild for one room, with optional thickness overrides."""
        return self._regenerate(self.room(room_id), overrides)

    def set_wall_thickness(self, room_id: str, edge_index: int, thickness: float) -> List[Wall]:
        return wall_ops.update_wall_thickness(self.room(room_id), edge_index, thickness)

    def all_walls(self) -> List[Wall]:
        return [wall for room in self._rooms.values() for wall in room.wall_list()]

    # ------------------------------------------------------------------ #
    # Derived views
    # ------------------------------------------------------------------ #
    def spatial_index(self, include_walls: bool = True) -> SpatialIndex:
        """Snapshot index of room and wall bounding boxes in world space."""
        entries = []
        for room in self._rooms.values():
            entries.append((room, entity_bounds(room)))
            if include_walls:
                entries.extend((wall, entity_bounds(wall, room.transform)) for wall in room.wall_list())
        return SpatialIndex(entries)

    def bounds(self) -> Bounds:
        """World-space box enclosing every room.

        Raises:
            ValueError: If the plan has no rooms.
        """
        return bounds_union(entity_bounds(room) for room in self._rooms.values())

    def merged_outlines(self) -> List[List[Point]]:
        """World-space outlines with rooms sharing full edges merged."""
        return merge_polygons(room.world_vertices() for room in self._rooms.values())
