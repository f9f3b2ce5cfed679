"""Synchronization between room polygons and the constraint solver.

:class:`ConstraintSync` pushes a :class:`~floorkernel.core.polygon_model.PolygonModel`
to a freshly built solver, reads the solved points back into the vertex list
and owns the dirty/status lifecycle. Solver failures are reported in the
returned :class:`SolveResult`, never raised.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from ..core.errors import SolveFailure
from ..core.model import Point, SolverStatus
from ..core.polygon_model import PolygonModel
from ..core.primitives import PointPrimitive, Primitive, primitive_from_dict
from .solver import SolverFactory

LOGGER = logging.getLogger(__name__)


@dataclass
class SolveResult:
    """Outcome of a solve request.

    Attributes:
        room_id: Room the request was for.
        ok: False only when the solver failed; the vertices are then unchanged.
        skipped: True when the room had no constraints and the solver was not run.
        coalesced: True when the request arrived while a solve of the same
            room was in flight and was folded into its follow-up solve.
        failure: The failure, when ``ok`` is False.
        elapsed: Seconds spent in the last solver run.
        runs: Number of solver runs performed for this request.
    """

    room_id: str
    ok: bool
    skipped: bool = False
    coalesced: bool = False
    failure: Optional[SolveFailure] = None
    elapsed: float = 0.0
    runs: int = 0

    def __bool__(self) -> bool:
        return self.ok


class ConstraintSync:
    """Drives the external solver for room polygons.

    Args:
        solver_factory: Callable returning a new solver. Called once per
            solver run so no state is carried between runs.
    """

    def __init__(self, solver_factory: SolverFactory):
        self._solver_factory = solver_factory
        self._in_flight: Set[int] = set()
        self._follow_up: Dict[int, PolygonModel] = {}
        self._requests: Dict[str, PolygonModel] = {}

    @staticmethod
    def sync_to_solver(model: PolygonModel) -> List[Primitive]:
        """Copy vertex coordinates into the point primitives.

        Primitives are built first if needed. Lines and constraints are left
        as they are.

        Returns:
            The full primitive set: points, lines, constraints.
        """
        model.ensure_primitives()
        model.replace_vertices(model.vertices)
        return model.primitives

    def solve(self, model: PolygonModel) -> SolveResult:
        """Solve a room's constraints and write the result back.

        A request for a room whose solve is already in flight is not queued:
        it replaces any earlier pending request and a single follow-up solve
        runs once the in-flight one returns.
        """
        key = id(model)
        if key in self._in_flight:
            self._follow_up[key] = model
            LOGGER.debug("Coalesced solve request for room %s", model.room_id)
            return SolveResult(model.room_id, ok=True, coalesced=True)

        self._in_flight.add(key)
        try:
            result = self._run(model)
            runs = result.runs
            while key in self._follow_up:
                model = self._follow_up.pop(key)
                result = self._run(model)
                runs += result.runs
            result.runs = runs
        finally:
            self._in_flight.discard(key)
            self._follow_up.pop(key, None)
        return result

    def is_solving(self, model: PolygonModel) -> bool:
        return id(model) in self._in_flight

    def request_solve(self, model: PolygonModel) -> None:
        """Queue a room for :meth:`solve_pending`; a later request for the same room wins."""
        self._requests[model.room_id] = model

    def pending_rooms(self) -> List[str]:
        return list(self._requests)

    def solve_pending(self) -> Dict[str, SolveResult]:
        """Solve every requested room once, in request order."""
        requests, self._requests = self._requests, {}
        return {room_id: self.solve(model) for room_id, model in requests.items()}

    def _run(self, model: PolygonModel) -> SolveResult:
        if not model.has_constraints():
            model.dirty = False
            model.status = SolverStatus.SOLVED
            return SolveResult(model.room_id, ok=True, skipped=True)

        model.status = SolverStatus.SOLVING
        primitives = self.sync_to_solver(model)
        start = time.perf_counter()
        failure = None
        solved_points: List[PointPrimitive] = []

        try:
            solver = self._solver_factory()
            solver.push_primitives_and_params([p.to_dict() for p in primitives])
            if solver.solve():
                solver.apply_solution()
                solved_points = [p for p in map(primitive_from_dict, solver.get_primitives()) if isinstance(p, PointPrimitive)]
            else:
                failure = SolveFailure(f"Solver could not satisfy the constraints of room {model.room_id}")
        except Exception as exc:
            LOGGER.exception("Solver raised while solving room %s", model.room_id)
            failure = SolveFailure(f"Solver error for room {model.room_id}: {exc}")

        elapsed = time.perf_counter() - start
        model.last_solve_time = elapsed
        model.dirty = False

        if failure is not None:
            model.status = SolverStatus.FAILED
            LOGGER.warning("Failed to solve constraints of room %s", model.room_id)
            return SolveResult(model.room_id, ok=False, failure=failure, elapsed=elapsed, runs=1)

        self._apply_points(model, solved_points)
        model.status = SolverStatus.SOLVED
        LOGGER.debug("Solved room %s in %.2f ms", model.room_id, elapsed * 1000)
        return SolveResult(model.room_id, ok=True, elapsed=elapsed, runs=1)

    @staticmethod
    def _apply_points(model: PolygonModel, points: List[PointPrimitive]) -> None:
        vertices = model.vertices
        n = len(vertices)
        for point in points:
            index = point.handle.index
            if index is None or not 0 <= index < n:
                continue
            vertices[index] = Point(point.x, point.y)
        model.replace_vertices(vertices)
