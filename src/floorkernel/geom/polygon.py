"""Polygon geometry utilities for room and wall calculations.

This module provides the numerically delicate primitives the kernel is built
on: signed area and winding, edge normals, offset lines, line-line
intersection and bounding boxes.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

from shapely.geometry import MultiPoint

from .. import config
from ..core.errors import DegenerateEdge
from ..core.model import Point

Line = Tuple[Point, Point]
Bounds = Tuple[float, float, float, float]


def point_distance(p1: Point, p2: Point) -> float:
    """Calculate Euclidean distance between two points."""
    return math.hypot(p1.x - p2.x, p1.y - p2.y)


def points_equal(p1: Point, p2: Point, epsilon: float = config.EPSILON) -> bool:
    """Check if two points are equal within tolerance on both axes."""
    return abs(p1.x - p2.x) < epsilon and abs(p1.y - p2.y) < epsilon


def signed_area(vertices: Sequence[Point]) -> float:
    """Shoelace area, positive for counter-clockwise winding."""
    n = len(vertices)
    area = 0.0
    for i in range(n):
        a = vertices[i]
        b = vertices[(i + 1) % n]
        area += a.x * b.y - b.x * a.y
    return area / 2.0


def is_ccw(vertices: Sequence[Point]) -> bool:
    return signed_area(vertices) > 0


def ensure_ccw(vertices: Sequence[Point]) -> List[Point]:
    """Return the vertices in counter-clockwise order, reversing if needed."""
    if signed_area(vertices) < 0:
        return list(reversed(vertices))
    return list(vertices)


def outward_normal(start: Point, end: Point, edge_index: int = -1) -> Tuple[float, float]:
    """Unit normal ``(dy, -dx) / len`` of an edge.

    For a counter-clockwise polygon this points out of the room.

    Raises:
        DegenerateEdge: If the edge is shorter than ``MIN_EDGE_LENGTH``.
    """
    dx = end.x - start.x
    dy = end.y - start.y
    length = math.hypot(dx, dy)
    if length < config.MIN_EDGE_LENGTH:
        raise DegenerateEdge(edge_index, length)
    return dy / length, -dx / length


def offset_edge(start: Point, end: Point, distance: float, edge_index: int = -1) -> Line:
    """Offset an edge along its outward normal.

    Raises:
        DegenerateEdge: If the edge has no usable normal.
    """
    nx, ny = outward_normal(start, end, edge_index)
    return (
        Point(start.x + nx * distance, start.y + ny * distance),
        Point(end.x + nx * distance, end.y + ny * distance),
    )


def line_intersection(
    line1: Line, line2: Line, epsilon: float = config.INTERSECTION_EPSILON
) -> Optional[Point]:
    """Intersection of two infinite lines, each given by two points.

    Returns None when the 2x2 determinant is below ``epsilon`` (parallel or
    nearly parallel lines).
    """
    (p1, p2), (p3, p4) = line1, line2
    x1, y1, x2, y2 = p1.x, p1.y, p2.x, p2.y
    x3, y3, x4, y4 = p3.x, p3.y, p4.x, p4.y

    denom = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)
    if abs(denom) < epsilon:
        return None

    t = ((x1 - x3) * (y3 - y4) - (y1 - y3) * (x3 - x4)) / denom
    return Point(x1 + t * (x2 - x1), y1 + t * (y2 - y1))


def bounding_box(points: Sequence[Point]) -> Bounds:
    """Axis aligned bounds ``(min_x, min_y, max_x, max_y)``."""
    if not points:
        raise ValueError("Cannot compute bounds of an empty point set")
    return tuple(MultiPoint([p.as_tuple() for p in points]).bounds)


def closest_edge_index(vertices: Sequence[Point], point: Point) -> int:
    """Index of the polygon edge nearest to a point."""
    best_index = 0
    best_distance = math.inf
    n = len(vertices)
    for i in range(n):
        a = vertices[i]
        b = vertices[(i + 1) % n]
        ex, ey = b.x - a.x, b.y - a.y
        length_sq = ex * ex + ey * ey
        if length_sq == 0:
            dist = point_distance(point, a)
        else:
            t = max(0.0, min(1.0, ((point.x - a.x) * ex + (point.y - a.y) * ey) / length_sq))
            dist = point_distance(point, Point(a.x + t * ex, a.y + t * ey))
        if dist < best_distance:
            best_distance = dist
            best_index = i
    return best_index
