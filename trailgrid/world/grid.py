"""Grid — the spatial container for the simulation.

The Grid owns the square array of nodes, the pheromone store behind
them and the Nest/FoodSource bookkeeping.  It is the single source of
truth for adjacency: neighbour lists are derived from its bounds and are
rebuilt whenever the node array changes.

Structural mutations (``resize``, ``replace_node``) and the model tick
all hold ``lock`` so readers never see a half-built grid.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

from trailgrid.pheromones.fields import DEFAULT_MAX_PHEROMONE, PheromoneLayers
from trailgrid.world.node import GridNode, NodeKind

log = logging.getLogger(__name__)

MIN_CELL_COUNT = 2

# Neighbour discovery order (dx, dy)
_NEIGHBOUR_OFFSETS = (
    (-1, 0),
    (-1, 1),
    (-1, -1),
    (1, 0),
    (1, 1),
    (1, -1),
    (0, 1),
    (0, -1),
)


@dataclass
class Grid:
    """A square 2D grid of nodes.

    Attributes:
        cell_count: Number of rows and columns.
        size: Logical width in pixels, used to derive ``cell_size``.
        max_pheromone: Upper bound for every pheromone channel.
        pheromones: Grid-wide pheromone store.
        nodes: 2D list of nodes indexed as ``nodes[y][x]``.
        nest_positions: Coordinates of every Nest, oldest first.
        food_positions: Coordinates of every FoodSource, oldest first.
        lock: Coarse lock guarding the node array and the ants.
        topology_listeners: Callables run after the node array changed.
    """

    cell_count: int
    size: int = 900
    max_pheromone: float = DEFAULT_MAX_PHEROMONE
    pheromones: PheromoneLayers = field(init=False, repr=False)
    nodes: list[list[GridNode]] = field(init=False, repr=False)
    nest_positions: list[tuple[int, int]] = field(init=False, default_factory=list)
    food_positions: list[tuple[int, int]] = field(init=False, default_factory=list)
    lock: threading.RLock = field(
        init=False,
        repr=False,
        default_factory=threading.RLock,
    )
    topology_listeners: list[Callable[[], None]] = field(
        init=False,
        repr=False,
        default_factory=list,
    )

    def __post_init__(self) -> None:
        """Seed the grid with Tiles and a single Nest at (0, 0)."""
        _check_cell_count(self.cell_count)
        self.pheromones = PheromoneLayers(
            cell_count=self.cell_count,
            max_pheromone=self.max_pheromone,
        )
        self._seed()

    @property
    def cell_size(self) -> int:
        """Pixel size of one cell."""
        return self.size // self.cell_count

    def _seed(self) -> None:
        self.pheromones.reshape(self.cell_count)
        self.nodes = [
            [self._make_node(x, y, NodeKind.TILE) for x in range(self.cell_count)]
            for y in range(self.cell_count)
        ]
        self.nodes[0][0] = self._make_node(0, 0, NodeKind.NEST)
        self.nest_positions = [(0, 0)]
        self.food_positions = []
        self.rebuild_neighbours()

    def _make_node(self, x: int, y: int, kind: NodeKind) -> GridNode:
        return GridNode(x=x, y=y, kind=kind, pheromones=self.pheromones.cell(x, y))

    def _notify(self) -> None:
        for listener in self.topology_listeners:
            listener()

    def in_bounds(self, x: int, y: int) -> bool:
        """Return True if ``(x, y)`` lies inside the grid."""
        return 0 <= x < self.cell_count and 0 <= y < self.cell_count

    def node_at(self, x: int, y: int) -> GridNode | None:
        """Return the node at ``(x, y)``, or None when off the grid.

        Args:
            x: Column index.
            y: Row index.
        """
        if not self.in_bounds(x, y):
            return None
        return self.nodes[y][x]

    def iter_nodes(self) -> Iterator[GridNode]:
        """Yield every node in row-major order."""
        for row in self.nodes:
            yield from row

    def resize(self, cell_count: int) -> None:
        """Rebuild the grid with a new cell count.

        Every cell becomes an empty Tile except a Nest at (0, 0); walls,
        food and pheromones are discarded.  Ants left outside the new
        bounds are pruned by the model on its next tick.

        Args:
            cell_count: New number of rows and columns (at least 2).

        Raises:
            ValueError: If ``cell_count`` is below the minimum.
        """
        _check_cell_count(cell_count)
        with self.lock:
            self.cell_count = cell_count
            self._seed()
            self._notify()
        log.info("Grid resized to %dx%d", cell_count, cell_count)

    def replace_node(self, x: int, y: int, kind: NodeKind) -> bool:
        """Swap the node at ``(x, y)`` for a fresh node of ``kind``.

        The new node starts unblocked and without pheromone.  Replacing
        the last remaining Nest is rejected.

        Args:
            x: Column index.
            y: Row index.
            kind: Kind of the replacement node.

        Returns:
            True if the node was replaced, False if the call was rejected.
        """
        with self.lock:
            old = self.node_at(x, y)
            if old is None:
                return False
            if (
                old.kind is NodeKind.NEST
                and kind is not NodeKind.NEST
                and len(self.nest_positions) <= 1
            ):
                log.debug("Refusing to remove the last nest at (%d, %d)", x, y)
                return False

            self._forget(old)
            self.pheromones.cell(x, y).clear()
            self.nodes[y][x] = self._make_node(x, y, kind)
            match kind:
                case NodeKind.NEST:
                    self.nest_positions.append((x, y))
                case NodeKind.FOOD_SOURCE:
                    self.food_positions.append((x, y))
                case NodeKind.TILE:
                    pass

            self.rebuild_neighbours()
            self._notify()
        return True

    def _forget(self, node: GridNode) -> None:
        match node.kind:
            case NodeKind.NEST:
                self.nest_positions.remove(node.position)
            case NodeKind.FOOD_SOURCE:
                self.food_positions.remove(node.position)
            case NodeKind.TILE:
                pass

    def toggle_blocking(self, x: int, y: int) -> bool:
        """Flip the blocking flag of the Tile at ``(x, y)``.

        Returns:
            True if a Tile was toggled, False otherwise.
        """
        node = self.node_at(x, y)
        if node is None or node.kind is not NodeKind.TILE:
            return False
        node.blocking = not node.blocking
        return True

    def set_max_pheromone(self, value: float) -> None:
        """Change the pheromone upper bound for every cell."""
        with self.lock:
            self.pheromones.set_max_pheromone(value)
            self.max_pheromone = self.pheromones.max_pheromone

    def rebuild_neighbours(self) -> None:
        """Recompute the cached neighbour list of every node.

        Neighbours depend on the grid bounds only; blocking is checked
        by callers when they traverse.
        """
        with self.lock:
            for node in self.iter_nodes():
                node.neighbours = self._find_neighbours(node)

    def _find_neighbours(self, node: GridNode) -> list[GridNode]:
        result: list[GridNode] = []
        for dx, dy in _NEIGHBOUR_OFFSETS:
            neighbour = self.node_at(node.x + dx, node.y + dy)
            if neighbour is not None:
                result.append(neighbour)
        return result


def _check_cell_count(cell_count: int) -> None:
    if cell_count < MIN_CELL_COUNT:
        msg = f"cell_count must be >= {MIN_CELL_COUNT}, got {cell_count}"
        raise ValueError(msg)
