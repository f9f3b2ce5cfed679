"""Engine module for floor-plan geometry.

This module provides constraint solving through an external solver, wall
synthesis, polygon merging and the document-level FloorPlan API.
"""

from .api import FloorPlan
from .merge import merge_pair, merge_polygons
from .sync import ConstraintSync, SolveResult
from .walls import regenerate, update_wall_thickness, wall_polygon

__all__ = [
    "ConstraintSync",
    "FloorPlan",
    "SolveResult",
    "merge_pair",
    "merge_polygons",
    "regenerate",
    "update_wall_thickness",
    "wall_polygon",
]
