"""A* shortest paths over the grid's cached adjacency.

Costs use the octile metric: a straight step costs 10, a diagonal step
14.  Per-search scratch state (g/h/f costs and predecessors) is kept in a
``PathScratch`` buffer owned by the pathfinder instead of on the nodes.

Every ``find_path`` call resets the scratch buffer for the entire grid,
so a single search is O(cell_count²) even for short paths.  Batch calls
such as ``find_all_paths`` multiply that by the number of pairs.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from trailgrid.world.grid import Grid
from trailgrid.world.node import GridNode

log = logging.getLogger(__name__)

MOVE_STRAIGHT_COST = 10
MOVE_DIAGONAL_COST = 14


def distance_cost(a: GridNode, b: GridNode) -> int:
    """Octile cost of travelling between two nodes on an open grid."""
    dx = abs(a.x - b.x)
    dy = abs(a.y - b.y)
    return MOVE_DIAGONAL_COST * min(dx, dy) + MOVE_STRAIGHT_COST * abs(dx - dy)


def path_cost(path: list[GridNode]) -> int:
    """Sum of step costs along ``path``."""
    return sum(distance_cost(a, b) for a, b in itertools.pairwise(path))


@dataclass
class PathScratch:
    """Transient A* bookkeeping, indexed as ``[y, x]``.

    Only meaningful during and right after the most recent search.
    """

    cell_count: int
    g_cost: NDArray[np.float64] = field(init=False, repr=False)
    h_cost: NDArray[np.float64] = field(init=False, repr=False)
    f_cost: NDArray[np.float64] = field(init=False, repr=False)
    previous: dict[tuple[int, int], tuple[int, int]] = field(
        init=False,
        repr=False,
        default_factory=dict,
    )

    def __post_init__(self) -> None:
        shape = (self.cell_count, self.cell_count)
        self.g_cost = np.full(shape, np.inf)
        self.h_cost = np.zeros(shape)
        self.f_cost = np.full(shape, np.inf)


class AStarPathfinder:
    """Shortest-path search and neighbour-cache upkeep for a Grid.

    Attributes:
        grid: The grid to search.
        paths: Paths found since the last reset, for overlay rendering.
        scratch: Bookkeeping of the most recent search.
    """

    def __init__(self, grid: Grid) -> None:
        """Attach to ``grid`` and cache all neighbour lists once.

        Args:
            grid: The grid whose topology this pathfinder follows.
        """
        self.grid = grid
        self.paths: list[list[GridNode]] = []
        self.scratch = PathScratch(cell_count=grid.cell_count)
        grid.topology_listeners.append(self.clear_paths)
        self.rebuild_neighbours()

    def rebuild_neighbours(self) -> None:
        """Recompute every node's neighbours and drop remembered paths."""
        self.grid.rebuild_neighbours()
        self.clear_paths()

    def clear_paths(self) -> None:
        """Forget all remembered paths."""
        self.paths = []

    def find_path(
        self,
        start_x: int,
        start_y: int,
        end_x: int,
        end_y: int,
    ) -> list[GridNode]:
        """Find the cheapest path between two cells.

        Args:
            start_x: Column of the start cell.
            start_y: Row of the start cell.
            end_x: Column of the destination cell.
            end_y: Row of the destination cell.

        Returns:
            Nodes from start to end inclusive, or an empty list when the
            cells coincide, lie off the grid, or are not connected.
        """
        with self.grid.lock:
            start = self.grid.node_at(start_x, start_y)
            end = self.grid.node_at(end_x, end_y)
            if start is None or end is None or start is end:
                return []

            scratch = PathScratch(cell_count=self.grid.cell_count)
            self.scratch = scratch

            counter = itertools.count()
            h = distance_cost(start, end)
            scratch.g_cost[start.y, start.x] = 0
            scratch.h_cost[start.y, start.x] = h
            scratch.f_cost[start.y, start.x] = h
            open_heap: list[tuple[float, int, GridNode]] = [(h, next(counter), start)]
            closed: set[tuple[int, int]] = set()

            while open_heap:
                f, _, current = heapq.heappop(open_heap)
                if current.position in closed:
                    continue
                if f > scratch.f_cost[current.y, current.x]:
                    continue  # stale entry

                if current is end:
                    path = self._trace(end)
                    self.paths.append(path)
                    return path

                closed.add(current.position)

                for neighbour in current.neighbours:
                    if neighbour.position in closed:
                        continue
                    if neighbour.blocking:
                        closed.add(neighbour.position)
                        continue

                    g = scratch.g_cost[current.y, current.x] + distance_cost(
                        current,
                        neighbour,
                    )
                    if g < scratch.g_cost[neighbour.y, neighbour.x]:
                        h = distance_cost(neighbour, end)
                        scratch.previous[neighbour.position] = current.position
                        scratch.g_cost[neighbour.y, neighbour.x] = g
                        scratch.h_cost[neighbour.y, neighbour.x] = h
                        scratch.f_cost[neighbour.y, neighbour.x] = g + h
                        heapq.heappush(open_heap, (g + h, next(counter), neighbour))

        log.debug(
            "No path from (%d, %d) to (%d, %d)",
            start_x,
            start_y,
            end_x,
            end_y,
        )
        return []

    def _trace(self, end: GridNode) -> list[GridNode]:
        """Walk predecessors back from ``end`` and return the path in order."""
        path = [end]
        position = end.position
        while position in self.scratch.previous:
            position = self.scratch.previous[position]
            node = self.grid.node_at(*position)
            if node is None:
                break
            path.append(node)
        path.reverse()
        return path

    def find_all_paths(self) -> list[list[GridNode]]:
        """Find a path from every FoodSource to every Nest.

        Previously remembered paths are discarded first.

        Returns:
            The non-empty paths found, also kept in ``paths``.
        """
        with self.grid.lock:
            self.clear_paths()
            for food_x, food_y in list(self.grid.food_positions):
                for nest_x, nest_y in list(self.grid.nest_positions):
                    self.find_path(food_x, food_y, nest_x, nest_y)
            return list(self.paths)
