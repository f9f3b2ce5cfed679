"""Core data models for the floor-plan geometry kernel.

This module defines the value types (points, transforms, apertures) and the
mutable records owned by a room: its wall set and solver status. The polygon
itself lives in :mod:`floorkernel.core.polygon_model`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

from .. import config

if TYPE_CHECKING:
    from .polygon_model import PolygonModel


@dataclass(frozen=True)
class Point:
    """Represents a 2D point in space.

    Attributes:
        x: The x-coordinate of the point.
        y: The y-coordinate of the point.
    """

    x: float
    y: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


def as_point(value) -> Point:
    """Coerce a Point or an ``(x, y)`` pair into a Point."""
    if isinstance(value, Point):
        return value
    x, y = value
    return Point(float(x), float(y))


class SolverStatus(str, Enum):
    """Lifecycle of a room's constraint solve."""

    IDLE = "idle"
    SOLVING = "solving"
    SOLVED = "solved"
    FAILED = "failed"


class WallType(str, Enum):
    """Wall classification.

    Classification only ever yields INTERIOR or EXTERIOR; the remaining kinds
    are set explicitly by the caller.
    """

    EXTERIOR = "exterior"
    INTERIOR = "interior"
    INTERIOR_STRUCTURAL = "interior_structural"
    INTERIOR_PARTITION = "interior_partition"
    TERRAIN_CONTACT = "terrain_contact"
    ADIABATIC = "adiabatic"

    @property
    def is_interior(self) -> bool:
        return self.value.startswith("interior")

    @property
    def default_thickness(self) -> float:
        return config.WALL_THICKNESS.get(self.value, config.INTERIOR_WALL_THICKNESS)

    @property
    def default_color(self) -> str:
        return config.WALL_COLORS.get(self.value, config.WALL_COLORS["interior"])


@dataclass(frozen=True)
class Transform:
    """Placement of a room's local coordinates in world space.

    Attributes:
        position: Translation applied last.
        rotation: Rotation in radians, counter-clockwise.
        scale: Uniform scale applied first.
    """

    position: Point = Point(0.0, 0.0)
    rotation: float = 0.0
    scale: float = 1.0

    def to_world(self, points: Sequence[Point]) -> List[Point]:
        cos_r = math.cos(self.rotation)
        sin_r = math.sin(self.rotation)
        world = []
        for p in points:
            sx = p.x * self.scale
            sy = p.y * self.scale
            world.append(
                Point(
                    sx * cos_r - sy * sin_r + self.position.x,
                    sx * sin_r + sy * cos_r + self.position.y,
                )
            )
        return world

    def to_local(self, points: Sequence[Point]) -> List[Point]:
        cos_r = math.cos(-self.rotation)
        sin_r = math.sin(-self.rotation)
        inv = 1.0 / self.scale
        local = []
        for p in points:
            tx = p.x - self.position.x
            ty = p.y - self.position.y
            local.append(
                Point(
                    (tx * cos_r - ty * sin_r) * inv,
                    (tx * sin_r + ty * cos_r) * inv,
                )
            )
        return local


class ApertureKind(str, Enum):
    DOOR = "door"
    WINDOW = "window"


class Anchor(str, Enum):
    START = "start"
    END = "end"


@dataclass
class Aperture:
    """A door or window cut-out on a wall.

    Attributes:
        id: Unique identifier for the aperture.
        kind: Door or window.
        anchor: Which inner endpoint of the wall the distance is measured from.
        distance: Signed distance from the anchor to the aperture start,
            measured along the wall towards the other endpoint.
        width: Width of the opening.
        height: Height of the opening.
        sill_height: Height of the sill, windows only.
    """

    id: str
    kind: ApertureKind
    anchor: Anchor
    distance: float
    width: float
    height: float = 2.1
    sill_height: Optional[float] = None


@dataclass
class Wall:
    """A wall derived from one edge of a room polygon.

    The polygon slots are fixed: ``[innerStart, innerEnd, outerEnd, outerStart]``.
    Inner vertices equal the room vertices of the edge; outer vertices are the
    mitered corners.

    Attributes:
        id: Stable identifier, preserved across regenerations of the same edge.
        room_id: ID of the owning room.
        edge_index: Index of the room edge this wall is built on.
        polygon: The 4 wall vertices.
        wall_type: Classification of the wall.
        thickness: Offset distance of the outer side.
        height: Wall height in meters.
        apertures: Doors and windows cut into this wall.
        color: Display color, None means the wall type default.
        thickness_locked: True when the thickness was set explicitly and must
            survive a full regeneration.
    """

    id: str
    room_id: str
    edge_index: int
    polygon: Tuple[Point, Point, Point, Point]
    wall_type: WallType
    thickness: float
    height: float = config.DEFAULT_WALL_HEIGHT
    apertures: List[Aperture] = field(default_factory=list)
    color: Optional[str] = None
    thickness_locked: bool = False

    @property
    def inner_start(self) -> Point:
        return self.polygon[0]

    @property
    def inner_end(self) -> Point:
        return self.polygon[1]

    @property
    def outer_end(self) -> Point:
        return self.polygon[2]

    @property
    def outer_start(self) -> Point:
        return self.polygon[3]

    @property
    def display_color(self) -> str:
        return self.color or self.wall_type.default_color

    @property
    def length(self) -> float:
        return math.hypot(self.inner_end.x - self.inner_start.x, self.inner_end.y - self.inner_start.y)


def wall_id_for(room_id: str, edge_index: int) -> str:
    return f"wall_{room_id}_e{edge_index}_s0"


@dataclass
class Room:
    """A room: one polygon model, its placement and its derived walls.

    Attributes:
        id: Unique identifier for the room.
        model: The room polygon with its solver primitives.
        name: Human-readable name of the room.
        transform: Local-to-world placement.
        walls: Derived walls keyed by edge index.
    """

    id: str
    model: "PolygonModel"
    name: str = ""
    transform: Transform = field(default_factory=Transform)
    walls: Dict[int, Wall] = field(default_factory=dict)

    @property
    def vertices(self) -> List[Point]:
        return self.model.vertices

    def world_vertices(self) -> List[Point]:
        return self.transform.to_world(self.model.vertices)

    def wall_list(self) -> List[Wall]:
        return [self.walls[k] for k in sorted(self.walls)]
