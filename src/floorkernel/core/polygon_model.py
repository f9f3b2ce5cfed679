"""Room polygon with solver primitives kept in lockstep.

:class:`PolygonModel` owns a room's ordered vertex list and the flat list of
primitives mirroring it for the constraint solver. Every mutation validates
its arguments first, computes the new vertex and primitive lists, and only
then swaps them in, so a failed edit leaves the model untouched.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Tuple

from .. import config
from ..geom import polygon as geom
from .errors import IndexOutOfRange, MinimumVertexCount
from .model import Point, SolverStatus, as_point
from .primitives import (
    Constraint,
    Handle,
    IndexRemap,
    LinePrimitive,
    PointPrimitive,
    Primitive,
    Role,
    build_polygon_primitives,
)

LOGGER = logging.getLogger(__name__)


class PolygonModel:
    """Ordered CCW vertex list plus its mirrored solver primitives.

    Point and line primitives are built lazily, on the first constraint add or
    the first solve. Until then only the vertex list is maintained.

    Attributes:
        dirty: True when the geometry changed since the last solve.
        status: Lifecycle of the last solve.
        last_solve_time: Wall-clock seconds spent in the last solve, if any.
    """

    def __init__(self, vertices: Iterable, room_id: str = ""):
        points = [as_point(v) for v in vertices]
        if len(points) < config.MIN_VERTEX_COUNT:
            raise MinimumVertexCount(len(points), config.MIN_VERTEX_COUNT)

        self.room_id = room_id
        self._vertices: List[Point] = points
        self._points: List[PointPrimitive] = []
        self._lines: List[LinePrimitive] = []
        self._constraints: List[Constraint] = []
        self._initialized = False
        self._next_constraint_id = 0

        self.dirty = False
        self.status = SolverStatus.IDLE
        self.last_solve_time: Optional[float] = None

        if not geom.is_ccw(self._vertices):
            self.normalize_winding()
            self.dirty = False

    def __repr__(self) -> str:
        return f"PolygonModel(room_id={self.room_id!r}, vertices={len(self._vertices)}, constraints={len(self._constraints)})"

    # ------------------------------------------------------------------ #
    # Read access
    # ------------------------------------------------------------------ #
    @property
    def vertices(self) -> List[Point]:
        return list(self._vertices)

    @property
    def vertex_count(self) -> int:
        return len(self._vertices)

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def constraints(self) -> List[Constraint]:
        return list(self._constraints)

    @property
    def point_primitives(self) -> List[PointPrimitive]:
        return list(self._points)

    @property
    def line_primitives(self) -> List[LinePrimitive]:
        return list(self._lines)

    @property
    def primitives(self) -> List[Primitive]:
        """Points, then lines, then constraints."""
        return [*self._points, *self._lines, *self._constraints]

    @property
    def signed_area(self) -> float:
        return geom.signed_area(self._vertices)

    @property
    def is_ccw(self) -> bool:
        return geom.is_ccw(self._vertices)

    def has_constraints(self) -> bool:
        return bool(self._constraints)

    def vertex(self, index: int) -> Point:
        self._check_index(index)
        return self._vertices[index]

    def edge(self, index: int) -> Tuple[Point, Point]:
        """Endpoints of edge *index*, from vertex *index* to the next one."""
        self._check_index(index)
        n = len(self._vertices)
        return self._vertices[index], self._vertices[(index + 1) % n]

    def edges(self) -> List[Tuple[Point, Point]]:
        n = len(self._vertices)
        return [(self._vertices[i], self._vertices[(i + 1) % n]) for i in range(n)]

    def bounding_box(self) -> geom.Bounds:
        return geom.bounding_box(self._vertices)

    # ------------------------------------------------------------------ #
    # Primitives
    # ------------------------------------------------------------------ #
    def ensure_primitives(self) -> None:
        """Build point and line primitives from the vertices if not done yet."""
        if self._initialized:
            return
        self._points, self._lines = build_polygon_primitives(self._vertices)
        self._initialized = True
        LOGGER.debug("Initialized %d point and %d line primitives for room %s", len(self._points), len(self._lines), self.room_id)

    def set_fixed(self, index: int, fixed: bool = True) -> None:
        """Pin or release the point primitive of a vertex."""
        self._check_index(index)
        self.ensure_primitives()
        points = list(self._points)
        old = points[index]
        points[index] = PointPrimitive(old.handle, old.x, old.y, fixed)
        self._points = points
        self.dirty = True

    def replace_vertices(self, vertices: List[Point]) -> None:
        """Overwrite vertex coordinates in place, keeping the vertex count.

        Used to write a solution back. Point primitive coordinates follow.
        """
        if len(vertices) != len(self._vertices):
            raise ValueError(f"Expected {len(self._vertices)} vertices, got {len(vertices)}")
        self._vertices = list(vertices)
        if self._initialized:
            self._points = [PointPrimitive(p.handle, v.x, v.y, p.fixed) for p, v in zip(self._points, self._vertices)]

    def _lines_for(self, count: int) -> List[LinePrimitive]:
        return [LinePrimitive(Handle.line(i), Handle.point(i), Handle.point((i + 1) % count)) for i in range(count)]

    def _remap_constraints(self, remap: IndexRemap) -> Tuple[List[Constraint], List[Constraint]]:
        kept: List[Constraint] = []
        dropped: List[Constraint] = []
        for constraint in self._constraints:
            moved = constraint.remapped(remap)
            if moved is None:
                dropped.append(constraint)
            else:
                kept.append(moved)
        return kept, dropped

    # ------------------------------------------------------------------ #
    # Vertex edits
    # ------------------------------------------------------------------ #
    def insert_vertex(self, index: int, point) -> None:
        """Insert a vertex at *index*, shifting later vertices up by one.

        Args:
            index: Position in ``[0, n]``; ``n`` appends after the last vertex.
            point: The new vertex.

        Raises:
            IndexOutOfRange: If ``index`` is outside ``[0, n]``.
        """
        n = len(self._vertices)
        if not 0 <= index <= n:
            raise IndexOutOfRange(index, n, inclusive=True)
        point = as_point(point)

        vertices = self._vertices[:index] + [point] + self._vertices[index:]

        if self._initialized:
            remap = IndexRemap.insert(index, n)
            points = [
                PointPrimitive(Handle.point(remap.point(p.handle.index)), p.x, p.y, p.fixed)
                for p in self._points
            ]
            points.insert(index, PointPrimitive(Handle.point(index), point.x, point.y))
            constraints, _ = self._remap_constraints(remap)
            self._vertices, self._points, self._lines, self._constraints = (
                vertices,
                points,
                self._lines_for(n + 1),
                constraints,
            )
        else:
            self._vertices = vertices

        self.dirty = True
        LOGGER.debug("Inserted vertex %d at (%.3f, %.3f) in room %s", index, point.x, point.y, self.room_id)

        if not geom.is_ccw(self._vertices):
            self.normalize_winding()

    def delete_vertex(self, index: int) -> Point:
        """Remove the vertex at *index*.

        Constraints referencing the removed point or the edge starting at it
        are dropped and not restored. Callers that need to undo the deletion
        should snapshot them with :meth:`constraints_referencing` first.

        Returns:
            The removed vertex.

        Raises:
            MinimumVertexCount: If the polygon has 3 vertices or fewer.
            IndexOutOfRange: If ``index`` is outside ``[0, n)``.
        """
        n = len(self._vertices)
        if n <= config.MIN_VERTEX_COUNT:
            raise MinimumVertexCount(n - 1, config.MIN_VERTEX_COUNT)
        self._check_index(index)

        removed = self._vertices[index]
        vertices = self._vertices[:index] + self._vertices[index + 1 :]

        if self._initialized:
            remap = IndexRemap.delete(index, n)
            points = [
                PointPrimitive(Handle.point(remap.point(p.handle.index)), p.x, p.y, p.fixed)
                for p in self._points
                if p.handle.index != index
            ]
            constraints, dropped = self._remap_constraints(remap)
            self._vertices, self._points, self._lines, self._constraints = (
                vertices,
                points,
                self._lines_for(n - 1),
                constraints,
            )
            if dropped:
                LOGGER.debug("Dropped constraints %s with vertex %d of room %s", [c.id for c in dropped], index, self.room_id)
        else:
            self._vertices = vertices

        self.dirty = True

        if not geom.is_ccw(self._vertices):
            self.normalize_winding()
        return removed

    def set_vertex(self, index: int, point) -> Point:
        """Move a vertex; ids and winding are left alone.

        Returns:
            The previous position of the vertex.

        Raises:
            IndexOutOfRange: If ``index`` is outside ``[0, n)``.
        """
        self._check_index(index)
        point = as_point(point)
        previous = self._vertices[index]

        vertices = list(self._vertices)
        vertices[index] = point
        if self._initialized:
            points = list(self._points)
            old = points[index]
            points[index] = PointPrimitive(old.handle, point.x, point.y, old.fixed)
            self._vertices, self._points = vertices, points
        else:
            self._vertices = vertices

        self.dirty = True
        return previous

    def normalize_winding(self) -> bool:
        """Reverse the vertex order to CCW if needed, keeping vertex 0 first.

        Returns:
            True if the vertices were reversed.
        """
        if geom.signed_area(self._vertices) >= 0:
            return False

        n = len(self._vertices)
        remap = IndexRemap.reverse(n)
        vertices = [self._vertices[(n - k) % n] for k in range(n)]

        if self._initialized:
            points = sorted(
                (PointPrimitive(Handle.point(remap.point(p.handle.index)), p.x, p.y, p.fixed) for p in self._points),
                key=lambda p: p.handle.index,
            )
            constraints, _ = self._remap_constraints(remap)
            self._vertices, self._points, self._constraints = vertices, points, constraints
        else:
            self._vertices = vertices

        self.dirty = True
        LOGGER.debug("Reversed winding of room %s to counter-clockwise", self.room_id)
        return True

    # ------------------------------------------------------------------ #
    # Constraints
    # ------------------------------------------------------------------ #
    def add_constraint(self, constraint: Constraint, constraint_id: Optional[str] = None) -> str:
        """Attach a constraint and return its id.

        Args:
            constraint: The constraint to add; its own ``id`` is replaced.
            constraint_id: Explicit id, used when re-adding a snapshotted
                constraint on undo. Generated as ``c_{n}`` when omitted.

        Raises:
            IndexOutOfRange: If the constraint references a missing point or line.
            ValueError: If a reference names the wrong kind of primitive for the
                constraint type, or the id is already taken.
        """
        n = len(self._vertices)
        for handle in constraint.refs():
            if handle.role not in (Role.POINT, Role.LINE) or handle.index is None:
                raise ValueError(f"Constraint reference {handle} is not a point or line")
            if not 0 <= handle.index < n:
                raise IndexOutOfRange(handle.index, n)
        if not constraint.has_valid_roles():
            raise ValueError(
                f"{type(constraint).__name__} constraint expects {constraint.ref_role.value} references, "
                f"got {', '.join(str(h) for h in constraint.refs())}"
            )

        taken = {c.id for c in self._constraints}
        if constraint_id is None:
            constraint_id = f"c_{self._next_constraint_id}"
            while constraint_id in taken:
                self._next_constraint_id += 1
                constraint_id = f"c_{self._next_constraint_id}"
            self._next_constraint_id += 1
        elif constraint_id in taken:
            raise ValueError(f"Constraint id '{constraint_id}' already exists")

        self.ensure_primitives()
        self._constraints = [*self._constraints, replace(constraint, id=constraint_id)]
        self.dirty = True

        self._check_constraint_health()
        return constraint_id

    def get_constraint(self, constraint_id: str) -> Optional[Constraint]:
        for constraint in self._constraints:
            if constraint.id == constraint_id:
                return constraint
        return None

    def remove_constraint(self, constraint_id: str) -> Constraint:
        """Detach a constraint.

        Raises:
            KeyError: If no constraint has that id.
        """
        constraint = self.get_constraint(constraint_id)
        if constraint is None:
            raise KeyError(constraint_id)
        self._constraints = [c for c in self._constraints if c.id != constraint_id]
        self.dirty = True
        return constraint

    def clear_constraints(self) -> List[Constraint]:
        removed = self._constraints
        self._constraints = []
        if removed:
            self.dirty = True
        return removed

    def constraints_referencing(self, index: int) -> List[Constraint]:
        """Constraints that deleting vertex *index* would drop."""
        point = Handle.point(index)
        line = Handle.line(index)
        return [c for c in self._constraints if c.references(point) or c.references(line)]

    def degrees_of_freedom(self) -> Dict[str, int]:
        """Free-point DOF budget against the current constraint count."""
        fixed = sum(1 for p in self._points if p.fixed)
        free = len(self._vertices) - fixed
        raw = free * 2
        return {
            "free_points": free,
            "fixed_points": fixed,
            "raw": raw,
            "usable": max(0, raw - config.ANCHOR_DOF),
            "constraints": len(self._constraints),
        }

    def _check_constraint_health(self) -> None:
        if not self._constraints:
            return
        dof = self.degrees_of_freedom()
        usable = dof["usable"]
        count = dof["constraints"]

        if count > usable:
            by_type: Dict[str, int] = {}
            for constraint in self._constraints:
                by_type[constraint.wire_type] = by_type.get(constraint.wire_type, 0) + 1
            LOGGER.warning(
                "Room %s is over-constrained: %d constraints exceed %d usable DOF (%s)",
                self.room_id,
                count,
                usable,
                ", ".join(f"{k}={v}" for k, v in sorted(by_type.items())),
            )
        elif count >= usable * config.DOF_WARNING_RATIO:
            LOGGER.warning(
                "Room %s is approaching its constraint limit: %d constraints for %d usable DOF",
                self.room_id,
                count,
                usable,
            )

    def _check_index(self, index: int) -> None:
        n = len(self._vertices)
        if not 0 <= index < n:
            raise IndexOutOfRange(index, n)
