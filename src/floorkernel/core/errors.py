"""Error taxonomy for geometry kernel operations.

Every error is raised by the operation that detects it, before any state is
changed. Solver and merge failures are additionally reported as values by
ConstraintSync and the polygon merger.
"""

from __future__ import annotations


class GeometryError(Exception):
    """Base class for all kernel errors."""

    pass


class IndexOutOfRange(GeometryError, IndexError):
    """Raised when a vertex or edge index is outside the valid range."""

    def __init__(self, index: int, upper: int, inclusive: bool = False):
        self.index = index
        self.upper = upper
        bracket = "]" if inclusive else ")"
        super().__init__(f"Index {index} outside [0, {upper}{bracket}")


class MinimumVertexCount(GeometryError):
    """Raised when an edit would leave a polygon with fewer than 3 vertices."""

    def __init__(self, count: int, minimum: int = 3):
        self.count = count
        self.minimum = minimum
        super().__init__(f"Polygon needs at least {minimum} vertices, edit would leave {count}")


class DegenerateEdge(GeometryError):
    """A zero or near-zero length edge where a direction is needed."""

    def __init__(self, edge_index: int, length: float):
        self.edge_index = edge_index
        self.length = length
        super().__init__(f"Edge {edge_index} is degenerate (length {length:.6g})")


class SolveFailure(GeometryError):
    """The external solver could not satisfy the constraint set."""

    pass


class NoSharedEdge(GeometryError):
    """Two polygons expected to merge share no full edge."""

    pass


class UnknownRoom(GeometryError, KeyError):
    """Raised when a room id is not registered in a floor plan."""

    def __init__(self, room_id: str):
        self.room_id = room_id
        super().__init__(f"Room '{room_id}' does not exist")

    def __str__(self) -> str:
        return self.args[0]
