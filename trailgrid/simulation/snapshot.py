"""Snapshot — a consistent, read-only view of the model for renderers.

Captured under the grid lock so a frame never mixes two grid layouts.
Colour inputs are plain data; turning them into pixels is the
renderer's business.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from trailgrid.colony.ant import Facing
    from trailgrid.colony.model import ColonyModel
    from trailgrid.pathfinding.astar import AStarPathfinder
    from trailgrid.world.node import NodeKind


@dataclass(frozen=True)
class NodeView:
    """Render inputs for one cell.

    Attributes:
        x: Column.
        y: Row.
        kind: Tile, Nest or FoodSource.
        blocking: Whether the cell is a wall.
        dominant_channel: Strongest pheromone channel.
        saturation: Strength of that channel relative to the maximum.
    """

    x: int
    y: int
    kind: NodeKind
    blocking: bool
    dominant_channel: int
    saturation: float


@dataclass(frozen=True)
class AntView:
    """Render inputs for one ant."""

    x: int
    y: int
    facing: Facing
    carrying_food: bool


@dataclass(frozen=True)
class Snapshot:
    """Everything a frame needs.

    Attributes:
        cell_count: Rows and columns of the grid.
        model_ticks: Ticks since the last reset.
        food_gathered: Food delivered since the last reset.
        nodes: One view per cell, row-major.
        ants: One view per ant, oldest first.
        paths: Remembered shortest paths as coordinate lists.
    """

    cell_count: int
    model_ticks: int
    food_gathered: int
    nodes: tuple[NodeView, ...]
    ants: tuple[AntView, ...]
    paths: tuple[tuple[tuple[int, int], ...], ...]

    def node(self, x: int, y: int) -> NodeView:
        """Return the view of cell ``(x, y)``."""
        return self.nodes[y * self.cell_count + x]


def take_snapshot(model: ColonyModel, pathfinder: AStarPathfinder) -> Snapshot:
    """Capture the current grid, ants and paths.

    Args:
        model: The colony model (and through it, the grid).
        pathfinder: Source of remembered paths.
    """
    grid = model.grid
    with grid.lock:
        dominant = grid.pheromones.dominant_channels()
        saturation = grid.pheromones.saturations()
        nodes = tuple(
            NodeView(
                x=node.x,
                y=node.y,
                kind=node.kind,
                blocking=node.blocking,
                dominant_channel=int(dominant[node.y, node.x]),
                saturation=float(saturation[node.y, node.x]),
            )
            for node in grid.iter_nodes()
        )
        ants = tuple(
            AntView(
                x=ant.x,
                y=ant.y,
                facing=ant.facing,
                carrying_food=ant.carrying_food,
            )
            for ant in model.ants
        )
        paths = tuple(
            tuple(node.position for node in path) for path in pathfinder.paths
        )
        return Snapshot(
            cell_count=grid.cell_count,
            model_ticks=model.model_ticks,
            food_gathered=model.food_gathered,
            nodes=nodes,
            ants=ants,
            paths=paths,
        )
