"""Bounding boxes and hit-testing for rooms and walls.

The editor's spatial index only needs an axis-aligned bounding box per
entity. :class:`SpatialIndex` packs those boxes into a Shapely STRtree for
rectangle queries.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple, Union

from shapely.geometry import Point as ShapelyPoint, box
from shapely.strtree import STRtree

from ..core.model import Room, Transform, Wall
from .polygon import Bounds, bounding_box

LOGGER = logging.getLogger(__name__)

Entity = Union[Room, Wall]


def entity_bounds(entity: Entity, transform: Optional[Transform] = None) -> Bounds:
    """Bounding box ``(min_x, min_y, max_x, max_y)`` of a room or wall.

    Rooms are measured in world space. Wall polygons live in the owning room's
    local space; pass that room's transform to get world bounds.
    """
    if isinstance(entity, Room):
        return bounding_box(entity.world_vertices())
    if isinstance(entity, Wall):
        points = list(entity.polygon)
        if transform is not None:
            points = transform.to_world(points)
        return bounding_box(points)
    raise TypeError(f"Cannot compute bounds of {type(entity).__name__}")


class SpatialIndex:
    """Static STRtree over entity bounding boxes.

    Built from ``(entity, bounds)`` pairs, see :func:`entity_bounds`. The
    index is a snapshot: rebuild it after geometry changes.
    """

    def __init__(self, entries: Iterable[Tuple[Entity, Bounds]]):
        entries = list(entries)
        self._entities: List[Entity] = [entity for entity, _ in entries]
        self._boxes = [box(*bounds) for _, bounds in entries]
        self._tree = STRtree(self._boxes) if self._boxes else None
        LOGGER.debug("Built spatial index over %d entities", len(self._entities))

    def __len__(self) -> int:
        return len(self._entities)

    def query(self, bounds: Bounds) -> List[Entity]:
        """Entities whose bounding box intersects ``bounds``."""
        return self._query(box(*bounds))

    def query_point(self, x: float, y: float, tolerance: float = 0.0) -> List[Entity]:
        """Entities whose bounding box contains a point, grown by ``tolerance``."""
        point = ShapelyPoint(x, y)
        return self._query(point.buffer(tolerance) if tolerance > 0 else point)

    def _query(self, window) -> List[Entity]:
        if self._tree is None:
            return []
        # query() returns indices of candidates whose envelopes intersect
        indices = self._tree.query(window)
        hits = [i for i in sorted(int(i) for i in indices) if self._boxes[i].intersects(window)]
        return [self._entities[i] for i in hits]


def bounds_union(bounds: Iterable[Bounds]) -> Tuple[float, float, float, float]:
    """Smallest box enclosing every box in ``bounds``."""
    bounds = list(bounds)
    if not bounds:
        raise ValueError("Cannot combine an empty set of bounds")
    return (
        min(b[0] for b in bounds),
        min(b[1] for b in bounds),
        max(b[2] for b in bounds),
        max(b[3] for b in bounds),
    )
