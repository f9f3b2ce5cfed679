"""
Configuration for the floor-plan geometry kernel.

Tolerances and defaults are plain module constants; callers that need other
values pass them explicitly to the functions that use them.
"""

import logging

# Geometry tolerances
EPSILON = 1e-10  # Exact point / collinearity comparisons (polygon merging)
MIN_EDGE_LENGTH = 0.01  # Edges shorter than this have no usable normal
INTERSECTION_EPSILON = 1e-4  # Determinant below this means parallel offset lines
ADJACENCY_TOLERANCE = 2.0  # Endpoint matching between rooms, in world units
MIN_VERTEX_COUNT = 3

# Walls (1 unit = 1 cm)
INTERIOR_WALL_THICKNESS = 10.0
EXTERIOR_WALL_THICKNESS = 20.0
DEFAULT_WALL_HEIGHT = 3.0  # meters

WALL_THICKNESS = {
    "exterior": EXTERIOR_WALL_THICKNESS,
    "interior": INTERIOR_WALL_THICKNESS,
    "interior_structural": 20.0,
    "interior_partition": 7.0,
    "terrain_contact": 30.0,
    "adiabatic": 15.0,
}

WALL_COLORS = {
    "exterior": "#374151",
    "interior": "#9CA3AF",
    "interior_structural": "#6B7280",
    "interior_partition": "#D1D5DB",
    "terrain_contact": "#92400E",
    "adiabatic": "#1E40AF",
}

# Solver
DOF_WARNING_RATIO = 0.8  # Warn when constraints reach this share of usable DOF
ANCHOR_DOF = 2  # Degrees of freedom reserved for the anchor point

LOG_FORMAT = "%(message)s"


def configure_logging(verbose: bool = False) -> None:
    """Route kernel logging through Rich for command line use."""
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
