"""Command Line Interface for the floor-plan geometry kernel.

This module provides a small CLI to merge polygon sets and inspect the
walls generated for a set of rooms. Input files are JSON, either a list of
polygons or an object mapping room ids to polygons, each polygon being a
list of ``[x, y]`` pairs.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import configure_logging
from .core.errors import GeometryError
from .core.model import Point, as_point
from .engine.api import FloorPlan
from .engine.merge import merge_polygons
from .geom.polygon import signed_area

app = typer.Typer(
    name="floorkernel",
    help="Geometry tools for floor-plan room polygons",
    no_args_is_help=True,
)
console = Console()


def load_polygons(path: Path) -> Dict[str, List[Point]]:
    """Read polygons from a JSON file, keyed by room id.

    A plain list is keyed ``room_0``, ``room_1``, ... in file order.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        items = data.items()
    elif isinstance(data, list):
        items = ((f"room_{i}", polygon) for i, polygon in enumerate(data))
    else:
        raise ValueError("Expected a list of polygons or an object of room polygons")

    return {str(room_id): [as_point(p) for p in polygon] for room_id, polygon in items}


def _fmt(point: Point) -> str:
    return f"({point.x:g}, {point.y:g})"


@app.command()
def merge(
    input: Path = typer.Option(..., "--input", "-i", help="Path to polygons JSON file"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write merged polygons as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
):
    """Merge polygons that share full edges."""
    configure_logging(verbose)
    try:
        polygons = load_polygons(input)
        console.print(f"[green]✓[/green] Loaded {len(polygons)} polygons from {input}")
        merged = merge_polygons(polygons.values())
    except FileNotFoundError as e:
        console.print(f"[red]Error: File not found - {escape(str(e))}[/red]")
        raise typer.Exit(1)
    except json.JSONDecodeError as e:
        console.print(f"[red]Error: Invalid JSON - {escape(str(e))}[/red]")
        raise typer.Exit(1)
    except (GeometryError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    table = Table(title="Merged polygons")
    table.add_column("#", justify="right")
    table.add_column("Vertices", justify="right")
    table.add_column("Area", justify="right")
    table.add_column("Outline", style="cyan")
    for i, polygon in enumerate(merged):
        table.add_row(str(i), str(len(polygon)), f"{signed_area(polygon):.2f}", " ".join(_fmt(p) for p in polygon))
    console.print(table)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", encoding="utf-8") as f:
            json.dump([[list(p.as_tuple()) for p in polygon] for polygon in merged], f, indent=2)
        console.print(f"[green]✓[/green] Merged polygons saved to {output}")


@app.command()
def walls(
    input: Path = typer.Option(..., "--input", "-i", help="Path to rooms JSON file"),
    thickness: Optional[float] = typer.Option(None, "--thickness", "-t", help="Uniform wall thickness override"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
):
    """Generate and list the walls of every room."""
    configure_logging(verbose)
    try:
        rooms = load_polygons(input)
        plan = FloorPlan()
        for room_id, vertices in rooms.items():
            plan.add_room(room_id, vertices)
        if thickness is not None:
            for room in plan.rooms:
                plan.regenerate_walls(room.id, {i: thickness for i in range(room.model.vertex_count)})
    except FileNotFoundError as e:
        console.print(f"[red]Error: File not found - {escape(str(e))}[/red]")
        raise typer.Exit(1)
    except json.JSONDecodeError as e:
        console.print(f"[red]Error: Invalid JSON - {escape(str(e))}[/red]")
        raise typer.Exit(1)
    except (GeometryError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    table = Table(title="Walls")
    table.add_column("Wall", style="cyan")
    table.add_column("Type")
    table.add_column("Thickness", justify="right")
    table.add_column("Polygon")
    for wall in plan.all_walls():
        table.add_row(wall.id, wall.wall_type.value, f"{wall.thickness:g}", " ".join(_fmt(p) for p in wall.polygon))
    console.print(table)

    if verbose:
        graph = plan.room_graph()
        for a, b, data in graph.edges(data=True):
            console.print(f"  {a} ↔ {b}: shared edges {data['edges']}")


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
