"""Merging of room polygons that share boundary edges.

Polygons are grouped with a NetworkX graph whose edges join polygons with
collinear, overlapping edges. Each connected group is then traced into one
outline. The trace only removes edges that are exact opposite-direction
duplicates; partially overlapping edges are detected, reported by
:func:`find_shared_edges`, but left in the outline.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import networkx as nx

from .. import config
from ..core.errors import NoSharedEdge
from ..core.model import Point, as_point
from ..geom.polygon import ensure_ccw, points_equal, signed_area

LOGGER = logging.getLogger(__name__)

EPSILON = config.EPSILON


@dataclass(frozen=True)
class SharedEdge:
    """An edge of polygon A lying on an edge of polygon B.

    Attributes:
        index_a: Edge index in polygon A.
        index_b: Edge index in polygon B.
        exact: True when the edges are the same segment traversed in
            opposite directions. Only exact edges are removed when merging.
        overlap: The common segment, for partial overlaps.
    """

    index_a: int
    index_b: int
    exact: bool
    overlap: Optional[Tuple[Point, Point]] = None


def _collinear(p1: Point, p2: Point, p3: Point) -> bool:
    cross = (p2.x - p1.x) * (p3.y - p1.y) - (p2.y - p1.y) * (p3.x - p1.x)
    return abs(cross) < EPSILON


def _parameter(p1: Point, p2: Point, p: Point) -> float:
    """Position of ``p`` along ``p1 -> p2``, 0 at p1 and 1 at p2."""
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    if abs(dx) > abs(dy):
        return (p.x - p1.x) / dx
    if abs(dy) > EPSILON:
        return (p.y - p1.y) / dy
    return 0.0


def edges_overlap(p1: Point, p2: Point, p3: Point, p4: Point) -> bool:
    """Check whether segment ``p1p2`` and segment ``p3p4`` overlap.

    Both endpoints of the second segment must be collinear with the first,
    and each segment must have an endpoint within the other's span.
    """
    if not _collinear(p1, p2, p3) or not _collinear(p1, p2, p4):
        return False

    t1 = _parameter(p1, p2, p3)
    t2 = _parameter(p1, p2, p4)
    t3 = _parameter(p3, p4, p1)
    t4 = _parameter(p3, p4, p2)

    def within(t: float) -> bool:
        return -EPSILON <= t <= 1 + EPSILON

    return (within(t1) or within(t2)) and (within(t3) or within(t4))


def edge_overlap(p1: Point, p2: Point, p3: Point, p4: Point) -> Optional[Tuple[Point, Point]]:
    """Common segment of two collinear edges, measured along ``p1p2``.

    Edges that only touch at an endpoint have no common segment.
    """
    if not _collinear(p1, p2, p3) or not _collinear(p1, p2, p4):
        return None

    t3 = _parameter(p1, p2, p3)
    t4 = _parameter(p1, p2, p4)
    lo = max(0.0, min(t3, t4))
    hi = min(1.0, max(t3, t4))
    if hi - lo <= EPSILON:
        return None

    dx = p2.x - p1.x
    dy = p2.y - p1.y
    return Point(p1.x + lo * dx, p1.y + lo * dy), Point(p1.x + hi * dx, p1.y + hi * dy)


def _edges(polygon: Sequence[Point]) -> Iterable[Tuple[int, Point, Point]]:
    n = len(polygon)
    for i in range(n):
        yield i, polygon[i], polygon[(i + 1) % n]


def polygons_share_edge(a: Sequence[Point], b: Sequence[Point]) -> bool:
    for _, a1, a2 in _edges(a):
        for _, b1, b2 in _edges(b):
            if edges_overlap(a1, a2, b1, b2):
                return True
    return False


def find_shared_edges(a: Sequence, b: Sequence) -> List[SharedEdge]:
    """Every edge pair of two polygons that coincides or overlaps."""
    a = [as_point(p) for p in a]
    b = [as_point(p) for p in b]
    shared = []
    for i, a1, a2 in _edges(a):
        for j, b1, b2 in _edges(b):
            if points_equal(a1, b2) and points_equal(a2, b1):
                shared.append(SharedEdge(i, j, exact=True))
            elif edges_overlap(a1, a2, b1, b2):
                overlap = edge_overlap(a1, a2, b1, b2)
                if overlap is not None:
                    shared.append(SharedEdge(i, j, exact=False, overlap=overlap))
    return shared


def simplify(points: Sequence[Point]) -> List[Point]:
    """Drop repeated points, a closing duplicate and straight-through vertices."""
    result: List[Point] = []
    for p in points:
        if not result or not points_equal(p, result[-1]):
            result.append(p)
    if len(result) > 1 and points_equal(result[0], result[-1]):
        result.pop()

    changed = True
    while changed and len(result) > 3:
        changed = False
        n = len(result)
        for i in range(n):
            prev, cur, nxt = result[i - 1], result[i], result[(i + 1) % n]
            forward = (cur.x - prev.x) * (nxt.x - cur.x) + (cur.y - prev.y) * (nxt.y - cur.y)
            if _collinear(prev, cur, nxt) and forward > 0:
                del result[i]
                changed = True
                break
    return result


def _walk(
    polygons: Tuple[List[Point], List[Point]],
    across: Dict[Tuple[int, int], Tuple[int, int]],
    start: Tuple[int, int],
    visited: set,
) -> List[Point]:
    """Follow one closed loop from ``start``, switching over shared edges."""
    loop: List[Point] = []
    current, index = start
    for _ in range(len(polygons[0]) + len(polygons[1])):
        key = (current, index)
        if key in across:
            current, far = across[key]
            index = (far + 1) % len(polygons[current])
        else:
            if key in visited:
                break
            visited.add(key)
            loop.append(polygons[current][index])
            index = (index + 1) % len(polygons[current])

        if (current, index) == start:
            return loop

    raise NoSharedEdge("Boundary trace did not return to its starting edge")


def _trace(a: List[Point], b: List[Point], shared: List[SharedEdge]) -> List[Point]:
    """Walk the outline of two polygons, switching over exact shared edges.

    Every loop formed by the non-shared edges is traced. When the polygons
    enclose a hole between them the hole is its own loop, and only the loop
    with the largest area is kept as the outline.

    Raises:
        NoSharedEdge: If a walk cannot close into a loop.
    """
    across: Dict[Tuple[int, int], Tuple[int, int]] = {}
    for edge in shared:
        across[(0, edge.index_a)] = (1, edge.index_b)
        across[(1, edge.index_b)] = (0, edge.index_a)

    polygons = (a, b)
    loops: List[List[Point]] = []
    visited: set = set()
    for current, polygon in enumerate(polygons):
        for index in range(len(polygon)):
            key = (current, index)
            if key in across or key in visited:
                continue
            loops.append(_walk(polygons, across, key, visited))

    if not loops:
        raise NoSharedEdge("Every edge of both polygons is shared")
    if len(loops) > 1:
        LOGGER.debug("Dropped %d enclosed loop(s) from merged outline", len(loops) - 1)
    return max(loops, key=lambda loop: abs(signed_area(loop)))


def merge_pair(a: Sequence, b: Sequence, strict: bool = False) -> Optional[List[Point]]:
    """Merge two polygons across their exact shared edges.

    Args:
        a: First polygon, CCW.
        b: Second polygon, CCW.
        strict: Raise instead of returning None.

    Returns:
        The merged CCW outline, or None when the polygons share no full edge
        or the trace fails.

    Raises:
        NoSharedEdge: Only when ``strict`` is True.
    """
    a = [as_point(p) for p in a]
    b = [as_point(p) for p in b]
    exact = [edge for edge in find_shared_edges(a, b) if edge.exact]

    try:
        if not exact:
            raise NoSharedEdge("Polygons share no full edge")
        outline = simplify(_trace(a, b, exact))
        if len(outline) < config.MIN_VERTEX_COUNT:
            raise NoSharedEdge(f"Merged outline collapsed to {len(outline)} points")
    except NoSharedEdge as exc:
        if strict:
            raise
        LOGGER.debug("Polygons not merged: %s", exc)
        return None

    return ensure_ccw(outline)


def build_adjacency_graph(polygons: Sequence[Sequence[Point]]) -> nx.Graph:
    """Graph over polygon indices, joined when they have overlapping edges."""
    G = nx.Graph()
    G.add_nodes_from(range(len(polygons)))
    for i in range(len(polygons)):
        for j in range(i + 1, len(polygons)):
            if polygons_share_edge(polygons[i], polygons[j]):
                G.add_edge(i, j)
    return G


def _merge_component(polygons: List[List[Point]]) -> List[List[Point]]:
    merged = polygons[0]
    remaining = polygons[1:]
    while remaining:
        for k, candidate in enumerate(remaining):
            result = merge_pair(merged, candidate)
            if result is not None:
                merged = result
                del remaining[k]
                break
        else:
            LOGGER.warning("%d polygon(s) overlap the group but share no full edge, kept unmerged", len(remaining))
            return [merged, *remaining]
    return [merged]


def merge_polygons(polygons: Iterable[Sequence]) -> List[List[Point]]:
    """Union every group of polygons connected through shared edges.

    Polygons with no neighbour pass through unchanged. Within a group,
    polygons are merged one at a time into the growing outline; any that
    cannot be traced in are returned unchanged alongside it.

    Args:
        polygons: CCW polygons as point sequences.

    Returns:
        The merged polygons, ordered by the first input of each group.
    """
    polygons = [[as_point(p) for p in polygon] for polygon in polygons]
    if len(polygons) <= 1:
        return polygons

    G = build_adjacency_graph(polygons)
    components = sorted((sorted(c) for c in nx.connected_components(G)), key=lambda c: c[0])

    result: List[List[Point]] = []
    for component in components:
        if len(component) == 1:
            result.append(polygons[component[0]])
            continue
        result.extend(_merge_component([polygons[i] for i in component]))

    LOGGER.debug("Merged %d polygons into %d", len(polygons), len(result))
    return result
