"""SimulationEngine — wires grid, pathfinder, model and runner together.

The engine is the surface a front-end talks to:

- configuration setters, validated before they reach the model
- interaction intents (walls, nests, food, resets)
- a render snapshot and change-event subscription
- start/stop of the background model thread

It never deals with raw input events or pixels.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np
from numpy.random import Generator

from trailgrid.colony.model import ColonyModel
from trailgrid.colony.strategies import make_strategy
from trailgrid.pathfinding.astar import AStarPathfinder
from trailgrid.simulation.config import SimulationConfig
from trailgrid.simulation.events import Listener
from trailgrid.simulation.runner import ModelRunner
from trailgrid.simulation.snapshot import Snapshot, take_snapshot
from trailgrid.world.grid import Grid
from trailgrid.world.node import NodeKind

log = logging.getLogger(__name__)


@dataclass
class SimulationEngine:
    """Owns all top-level simulation state.

    Attributes:
        config: Loaded simulation configuration.
        grid: The square cell grid.
        pathfinder: A* search and neighbour-cache upkeep.
        model: The ant colony and its ACO parameters.
        runner: Background thread issuing model ticks.
        rng: Master seeded random generator.
    """

    config: SimulationConfig
    grid: Grid = field(init=False)
    pathfinder: AStarPathfinder = field(init=False)
    model: ColonyModel = field(init=False)
    runner: ModelRunner = field(init=False)
    rng: Generator = field(init=False)

    def __post_init__(self) -> None:
        """Build grid, pathfinder, model and runner from config."""
        self.config.validate()
        self.rng = np.random.default_rng(self.config.seed)
        self.grid = Grid(
            cell_count=self.config.cell_count,
            size=self.config.grid_size,
            max_pheromone=self.config.max_pheromone,
        )
        self.pathfinder = AStarPathfinder(self.grid)
        self.model = ColonyModel(
            self.grid,
            self.rng,
            make_strategy(self.config.strategy),
            pheromone_strength=self.config.pheromone_strength,
            evaporation_speed=self.config.evaporation_speed,
            pheromone_fall_off=self.config.pheromone_fall_off,
            random_move_chance=self.config.random_move_chance,
            using_dissipation=self.config.using_dissipation,
            dissipation_rate=self.config.dissipation_rate,
            aggressive_bias=self.config.aggressive_bias,
            bias_factor=self.config.bias_factor,
            memory_capacity=self.config.memory_capacity,
        )
        self.model.set_ant_count(self.config.ant_count)
        self.runner = ModelRunner(self.model.tick, self.config.model_tick_rate)
        log.info(
            "Engine built: %dx%d grid, %d ants, strategy=%s",
            self.grid.cell_count,
            self.grid.cell_count,
            self.model.ant_count,
            self.model.strategy.name,
        )

    # -- Driving the model --

    def step(self) -> None:
        """Advance the model by one tick on the calling thread."""
        self.model.tick()

    def run(self, ticks: int) -> None:
        """Run the model for a fixed number of ticks on the calling thread.

        Args:
            ticks: Number of ticks to advance.
        """
        self.model.run(ticks)

    def start(self) -> None:
        """Start the background model thread (paused)."""
        self.runner.start()

    def stop(self) -> None:
        """Stop the background model thread."""
        self.runner.stop()

    def set_model_running(self, running: bool) -> None:
        """Resume or pause background ticking."""
        self.runner.set_model_running(running)

    # -- Configuration surface --

    def set_cell_count(self, cell_count: int) -> None:
        """Rebuild the grid at a new size; ants off the grid are pruned."""
        self.grid.resize(cell_count)

    def set_pheromone_strength(self, value: float) -> None:
        self.model.pheromone_strength = value

    def set_evaporation_speed(self, value: float) -> None:
        self.model.evaporation_speed = value

    def set_pheromone_fall_off(self, value: float) -> None:
        self.model.pheromone_fall_off = value

    def set_random_move_chance(self, value: float) -> None:
        self.model.random_move_chance = value

    def set_max_pheromone(self, value: float) -> None:
        self.grid.set_max_pheromone(value)

    def set_ant_count(self, count: int) -> None:
        self.model.set_ant_count(count)

    def set_using_dissipation(self, using: bool) -> None:
        self.model.using_dissipation = using

    def set_dissipation_rate(self, value: float) -> None:
        self.model.dissipation_rate = value

    def set_aggressive_bias(self, enabled: bool, factor: float | None = None) -> None:
        """Toggle exploitation bias, optionally changing its factor."""
        if factor is not None:
            self.model.bias_factor = factor
        self.model.aggressive_bias = enabled

    def set_model_tick_rate(self, ticks_per_second: int) -> None:
        self.runner.tick_rate = ticks_per_second

    def subscribe(self, listener: Listener) -> None:
        """Receive tick, food and ant-count change events."""
        self.model.events.subscribe(listener)

    # -- Interaction intents --

    def toggle_blocking(self, x: int, y: int) -> bool:
        """Turn a Tile into a wall or back."""
        return self.grid.toggle_blocking(x, y)

    def place_food_source(self, x: int, y: int) -> bool:
        """Put a FoodSource on the Tile at ``(x, y)``."""
        return self._swap(x, y, NodeKind.TILE, NodeKind.FOOD_SOURCE)

    def remove_food_source(self, x: int, y: int) -> bool:
        """Turn the FoodSource at ``(x, y)`` back into a Tile."""
        return self._swap(x, y, NodeKind.FOOD_SOURCE, NodeKind.TILE)

    def place_nest(self, x: int, y: int) -> bool:
        """Put a Nest on the Tile at ``(x, y)``."""
        return self._swap(x, y, NodeKind.TILE, NodeKind.NEST)

    def remove_nest(self, x: int, y: int) -> bool:
        """Turn the Nest at ``(x, y)`` back into a Tile, unless it is the last."""
        return self._swap(x, y, NodeKind.NEST, NodeKind.TILE)

    def _swap(self, x: int, y: int, expected: NodeKind, kind: NodeKind) -> bool:
        with self.grid.lock:
            node = self.grid.node_at(x, y)
            if node is None or node.kind is not expected:
                log.debug(
                    "Ignoring %s -> %s at (%d, %d)",
                    expected.name,
                    kind.name,
                    x,
                    y,
                )
                return False
            return self.grid.replace_node(x, y, kind)

    def reset_model(self) -> None:
        """Pause, then clear ants, counters, pheromones and paths."""
        self.runner.set_model_running(False)
        with self.grid.lock:
            self.pathfinder.rebuild_neighbours()
            self.model.reset()

    def clear_grid(self) -> None:
        """Rebuild the grid at its current size with only the default Nest."""
        self.grid.resize(self.grid.cell_count)

    def show_shortest_paths(self, show: bool) -> list[list[tuple[int, int]]]:
        """Compute (or hide) shortest paths from every FoodSource to every Nest.

        Returns:
            The visible paths as coordinate lists.
        """
        if not show:
            self.pathfinder.clear_paths()
            return []
        paths = self.pathfinder.find_all_paths()
        return [[node.position for node in path] for path in paths]

    # -- Query surface --

    def snapshot(self) -> Snapshot:
        """Capture a consistent view of the grid, ants and paths."""
        return take_snapshot(self.model, self.pathfinder)
