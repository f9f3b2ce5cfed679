"""Shared fixtures: sample polygons and a scriptable fake solver."""

import pytest

from floorkernel.core.model import Point, Room, Transform
from floorkernel.core.polygon_model import PolygonModel

SQUARE = [(0, 0), (100, 0), (100, 100), (0, 100)]


class FakeSolver:
    """In-memory stand-in for the external constraint solver.

    Args:
        succeed: Value returned by ``solve()``.
        move: Vertex index to ``(x, y)`` applied to point primitives on success.
        extra: Additional wire records returned by ``get_primitives()``.
        error: Exception raised by ``solve()``.
        on_solve: Hook called at the start of ``solve()``.
    """

    def __init__(self, succeed=True, move=None, extra=None, error=None, on_solve=None):
        self.succeed = succeed
        self.move = move or {}
        self.extra = extra or []
        self.error = error
        self.on_solve = on_solve
        self.pushed = None
        self.applied = False

    def push_primitives_and_params(self, primitives):
        self.pushed = [dict(p) for p in primitives]

    def solve(self):
        if self.on_solve is not None:
            self.on_solve()
        if self.error is not None:
            raise self.error
        return self.succeed

    def apply_solution(self):
        self.applied = True

    def get_primitives(self):
        result = []
        for record in self.pushed:
            record = dict(record)
            if record["type"] == "point" and self.applied:
                index = int(record["id"][1:])
                if index in self.move:
                    record["x"], record["y"] = self.move[index]
            result.append(record)
        return result + [dict(r) for r in self.extra]


class SolverRecorder:
    """Solver factory that keeps every solver it builds."""

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.solvers = []

    def __call__(self):
        solver = FakeSolver(**self.kwargs)
        self.solvers.append(solver)
        return solver


def pts(*coords):
    return [Point(float(x), float(y)) for x, y in coords]


def assert_points(actual, expected, abs_tol=1e-9):
    assert len(actual) == len(expected)
    for got, want in zip(actual, expected):
        assert got.x == pytest.approx(want[0], abs=abs_tol)
        assert got.y == pytest.approx(want[1], abs=abs_tol)


@pytest.fixture
def square_model():
    return PolygonModel(SQUARE, room_id="square")


@pytest.fixture
def pentagon_model():
    return PolygonModel([(0, 0), (100, 0), (150, 50), (100, 100), (0, 100)], room_id="pentagon")


@pytest.fixture
def recorder():
    return SolverRecorder()


@pytest.fixture
def make_room():
    def _make(room_id, vertices=SQUARE, position=(0, 0)):
        return Room(
            id=room_id,
            model=PolygonModel(vertices, room_id=room_id),
            transform=Transform(position=Point(*map(float, position))),
        )

    return _make
