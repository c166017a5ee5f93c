"""GridNode — a single cell of the grid.

A node is a Tile, a Nest or a FoodSource.  Every kind carries its own
pheromone channels; only Tiles can be blocking.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from trailgrid.pheromones.fields import PheromoneField


class NodeKind(Enum):
    """What occupies a grid cell."""

    TILE = auto()
    NEST = auto()
    FOOD_SOURCE = auto()


@dataclass(eq=False)
class GridNode:
    """A single cell in the grid.

    Attributes:
        x: Column position.
        y: Row position.
        kind: Tile, Nest or FoodSource.
        pheromones: Handle onto this cell's pheromone channels.
        blocking: Whether ants and paths may not enter (Tiles only).
        neighbours: Cached in-bounds king-move neighbours, refreshed by
            ``Grid.rebuild_neighbours``.
    """

    x: int
    y: int
    kind: NodeKind
    pheromones: PheromoneField = field(repr=False)
    blocking: bool = False
    neighbours: list[GridNode] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        if self.kind is not NodeKind.TILE:
            self.blocking = False

    @property
    def position(self) -> tuple[int, int]:
        """Grid coordinate as ``(x, y)``."""
        return (self.x, self.y)

    @property
    def is_goal(self) -> bool:
        """Return True for Nests and FoodSources."""
        return self.kind is not NodeKind.TILE
