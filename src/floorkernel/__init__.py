"""Floorkernel - Geometry kernel for an interactive 2D floor-plan editor."""

__version__ = "0.1.0"

from .core.model import Point, Room, Transform, Wall, WallType
from .core.polygon_model import PolygonModel
from .engine.api import FloorPlan

__all__ = ["FloorPlan", "Point", "PolygonModel", "Room", "Transform", "Wall", "WallType"]
