"""Geometry utilities for room polygons.

This module provides the low-level computations the kernel relies on:
winding and area, edge normals and offsets, line intersection, and
bounding boxes for hit-testing.
"""

from .polygon import ensure_ccw, line_intersection, outward_normal, signed_area
from .spatial import SpatialIndex, entity_bounds

__all__ = ["SpatialIndex", "ensure_ccw", "entity_bounds", "line_intersection", "outward_normal", "signed_area"]
