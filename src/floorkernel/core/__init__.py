"""Core data models for room polygons, primitives and topology."""

from .errors import (
    DegenerateEdge,
    GeometryError,
    IndexOutOfRange,
    MinimumVertexCount,
    NoSharedEdge,
    SolveFailure,
    UnknownRoom,
)
from .model import Aperture, Point, Room, SolverStatus, Transform, Wall, WallType
from .topology import Adjacency, build_room_graph, find_adjacencies

__all__ = [
    "Adjacency",
    "Aperture",
    "DegenerateEdge",
    "GeometryError",
    "IndexOutOfRange",
    "MinimumVertexCount",
    "NoSharedEdge",
    "Point",
    "Room",
    "SolveFailure",
    "SolverStatus",
    "Transform",
    "UnknownRoom",
    "Wall",
    "WallType",
    "build_room_graph",
    "find_adjacencies",
]
