"""Solver-facing primitives mirroring a room polygon.

A room polygon is mirrored as one point primitive per vertex, one line
primitive per edge and any number of constraints. Point and line handles are
positional: ``p{i}`` is vertex *i*, ``l{i}`` is the edge starting at vertex *i*.
They are renumbered through :class:`IndexRemap` whenever the vertex list is
resized. Constraint ids (``c_{n}``) are stable across edits.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, List, Optional, Tuple, Union


class Role(str, Enum):
    POINT = "point"
    LINE = "line"
    CONSTRAINT = "constraint"


_PREFIX = {Role.POINT: "p", Role.LINE: "l"}
_HANDLE_RE = re.compile(r"^([pl])(\d+)$")


@dataclass(frozen=True)
class Handle:
    """Structured reference to a point or line primitive.

    Attributes:
        role: What kind of primitive is referenced.
        index: Positional index of the vertex or edge, None when the handle
            carries no position.
    """

    role: Role
    index: Optional[int]

    def __str__(self) -> str:
        prefix = _PREFIX.get(self.role, "c")
        return f"{prefix}{'' if self.index is None else self.index}"

    @classmethod
    def point(cls, index: int) -> "Handle":
        return cls(Role.POINT, index)

    @classmethod
    def line(cls, index: int) -> "Handle":
        return cls(Role.LINE, index)

    @classmethod
    def parse(cls, token: str) -> Optional["Handle"]:
        """Parse a solver wire token such as ``p3`` or ``l0``.

        Returns None when the token has no positional suffix.
        """
        match = _HANDLE_RE.match(str(token).strip())
        if not match:
            return None
        role = Role.POINT if match.group(1) == "p" else Role.LINE
        return cls(role, int(match.group(2)))


class RemapKind(str, Enum):
    INSERT = "insert"
    DELETE = "delete"
    REVERSE = "reverse"


@dataclass(frozen=True)
class IndexRemap:
    """Maps positional indices from before an edit to after it.

    Attributes:
        kind: The edit that resized or reordered the vertex list.
        index: Vertex index the edit happened at (unused for REVERSE).
        count: Vertex count before the edit.

    Rules, for both point and line indices (line *k* starts at vertex *k*):

    - INSERT at *i*: indices ``>= i`` move up by one.
    - DELETE at *i*: index *i* disappears (None), indices ``> i`` move down.
    - REVERSE keeping vertex 0: point *k* goes to ``(n - k) % n``, line *k*
      goes to ``n - 1 - k``.
    """

    kind: RemapKind
    index: int
    count: int

    @classmethod
    def insert(cls, index: int, count: int) -> "IndexRemap":
        return cls(RemapKind.INSERT, index, count)

    @classmethod
    def delete(cls, index: int, count: int) -> "IndexRemap":
        return cls(RemapKind.DELETE, index, count)

    @classmethod
    def reverse(cls, count: int) -> "IndexRemap":
        return cls(RemapKind.REVERSE, 0, count)

    def point(self, old: int) -> Optional[int]:
        if self.kind is RemapKind.INSERT:
            return old + 1 if old >= self.index else old
        if self.kind is RemapKind.DELETE:
            if old == self.index:
                return None
            return old - 1 if old > self.index else old
        return (self.count - old) % self.count

    def line(self, old: int) -> Optional[int]:
        if self.kind is RemapKind.REVERSE:
            return self.count - 1 - old
        return self.point(old)

    def handle(self, handle: Handle) -> Optional[Handle]:
        if handle.index is None:
            return handle
        mapped = self.point(handle.index) if handle.role is Role.POINT else self.line(handle.index)
        if mapped is None:
            return None
        return Handle(handle.role, mapped)


@dataclass
class PointPrimitive:
    handle: Handle
    x: float
    y: float
    fixed: bool = False

    @property
    def id(self) -> str:
        return str(self.handle)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "type": "point", "x": self.x, "y": self.y, "fixed": self.fixed}


@dataclass
class LinePrimitive:
    handle: Handle
    p1: Handle
    p2: Handle

    @property
    def id(self) -> str:
        return str(self.handle)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "type": "line", "p1_id": str(self.p1), "p2_id": str(self.p2)}


# --------------------------------------------------------------------------- #
# Constraints
# --------------------------------------------------------------------------- #
@dataclass(frozen=True)
class Constraint:
    """Base class for constraint variants.

    Subclasses declare their handle fields in ``_refs`` and the kind of
    primitive those handles must name in ``ref_role``; ``id`` is assigned by
    the owning model.
    """

    id: str = field(default="", kw_only=True)

    _refs: ClassVar[Tuple[str, ...]] = ()
    wire_type: ClassVar[str] = "constraint"
    ref_role: ClassVar[Role] = Role.POINT

    def refs(self) -> Tuple[Handle, ...]:
        return tuple(getattr(self, name) for name in self._refs)

    def has_valid_roles(self) -> bool:
        return all(handle.role is self.ref_role for handle in self.refs())

    def references(self, handle: Handle) -> bool:
        return handle in self.refs()

    def remapped(self, remap: IndexRemap) -> Optional["Constraint"]:
        """Return a copy with handles remapped, None if a reference vanished."""
        changes = {}
        for name in self._refs:
            new = remap.handle(getattr(self, name))
            if new is None:
                return None
            changes[name] = new
        return replace(self, **changes)

    def params(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "type": self.wire_type}
        for name in self._refs:
            data[f"{name}_id"] = str(getattr(self, name))
        data.update(self.params())
        return data


@dataclass(frozen=True)
class Horizontal(Constraint):
    line: Handle
    _refs = ("line",)
    ref_role = Role.LINE
    wire_type = "horizontal"


@dataclass(frozen=True)
class Vertical(Constraint):
    line: Handle
    _refs = ("line",)
    ref_role = Role.LINE
    wire_type = "vertical"


@dataclass(frozen=True)
class Parallel(Constraint):
    l1: Handle
    l2: Handle
    _refs = ("l1", "l2")
    ref_role = Role.LINE
    wire_type = "parallel"


@dataclass(frozen=True)
class Perpendicular(Constraint):
    l1: Handle
    l2: Handle
    _refs = ("l1", "l2")
    ref_role = Role.LINE
    wire_type = "perpendicular"


@dataclass(frozen=True)
class Distance(Constraint):
    p1: Handle
    p2: Handle
    value: float = 0.0
    _refs = ("p1", "p2")
    ref_role = Role.POINT
    wire_type = "p2p_distance"

    def params(self) -> Dict[str, Any]:
        return {"distance": self.value}


@dataclass(frozen=True)
class Angle(Constraint):
    l1: Handle
    l2: Handle
    value: float = 0.0
    _refs = ("l1", "l2")
    ref_role = Role.LINE
    wire_type = "angle"

    def params(self) -> Dict[str, Any]:
        return {"angle": self.value}


@dataclass(frozen=True)
class Coincident(Constraint):
    p1: Handle
    p2: Handle
    _refs = ("p1", "p2")
    ref_role = Role.POINT
    wire_type = "coincident"


@dataclass(frozen=True)
class Fixed(Constraint):
    point: Handle
    _refs = ("point",)
    ref_role = Role.POINT
    wire_type = "fixed"


CONSTRAINT_TYPES: Dict[str, type] = {
    cls.wire_type: cls
    for cls in (Horizontal, Vertical, Parallel, Perpendicular, Distance, Angle, Coincident, Fixed)
}

_PARAM_FIELDS = {"p2p_distance": ("distance", "value"), "angle": ("angle", "value")}

Primitive = Union[PointPrimitive, LinePrimitive, Constraint]


def primitive_from_dict(data: Dict[str, Any]) -> Optional[Primitive]:
    """Build a primitive from its solver wire form.

    Point and line ids are parsed for their positional suffix; records with an
    unknown type or an unparseable id return None.
    """
    kind = data.get("type")
    if kind == "point":
        handle = Handle.parse(data.get("id", ""))
        if handle is None or handle.role is not Role.POINT:
            return None
        return PointPrimitive(handle, float(data["x"]), float(data["y"]), bool(data.get("fixed", False)))
    if kind == "line":
        handle = Handle.parse(data.get("id", ""))
        p1 = Handle.parse(data.get("p1_id", ""))
        p2 = Handle.parse(data.get("p2_id", ""))
        if handle is None or p1 is None or p2 is None:
            return None
        return LinePrimitive(handle, p1, p2)

    cls = CONSTRAINT_TYPES.get(kind)
    if cls is None:
        return None
    kwargs: Dict[str, Any] = {"id": data.get("id", "")}
    for name in cls._refs:
        handle = Handle.parse(data.get(f"{name}_id", ""))
        if handle is None:
            return None
        kwargs[name] = handle
    if kind in _PARAM_FIELDS:
        wire_name, attr = _PARAM_FIELDS[kind]
        kwargs[attr] = float(data[wire_name])
    constraint = cls(**kwargs)
    return constraint if constraint.has_valid_roles() else None


def build_polygon_primitives(
    vertices, fixed: Optional[Callable[[int], bool]] = None
) -> Tuple[List[PointPrimitive], List[LinePrimitive]]:
    """Point and line primitives for a closed polygon."""
    n = len(vertices)
    points = [
        PointPrimitive(Handle.point(i), v.x, v.y, bool(fixed(i)) if fixed else False)
        for i, v in enumerate(vertices)
    ]
    lines = [LinePrimitive(Handle.line(i), Handle.point(i), Handle.point((i + 1) % n)) for i in range(n)]
    return points, lines
