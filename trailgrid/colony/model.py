"""ColonyModel — ant population, ACO parameters and the tick pipeline.

The model owns every Ant (oldest first) and the global ACO parameters.
``tick`` runs the fixed pipeline shared by all ACO variants:

1. Prune ants whose position fell off the grid (after a resize)
2. Generate solutions (perceive, decide, move)
3. Daemon actions (deposit pheromone, pick up / drop food)
4. Global pheromone update (evaporation, optional dissipation)
5. Count the tick and notify listeners

Steps 2-4 are delegated to a ``ColonyStrategy``.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

from trailgrid.colony.ant import DEFAULT_BIAS_FACTOR, DEFAULT_MEMORY_CAPACITY, Ant
from trailgrid.colony.strategies import ColonyStrategy, TwoPheromoneStrategy
from trailgrid.simulation.events import EventSink, ModelEvent

if TYPE_CHECKING:
    from numpy.random import Generator

    from trailgrid.world.grid import Grid

log = logging.getLogger(__name__)

MAX_FALL_OFF = 100.0
MIN_ACTIVE_FALL_OFF = 1.0


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise ValueError(message)


class ColonyModel:
    """A colony of ants running one ACO variant on a Grid.

    Attributes:
        grid: The grid the ants walk on.
        rng: Seeded random generator shared by every decision.
        strategy: The ACO variant supplying the tick phases.
        events: Sink for tick, food and ant-count change notifications.
        memory_capacity: Short-term memory size given to new ants.
        food_gathered: Food delivered to a Nest since the last reset.
        model_ticks: Ticks run since the last reset.
    """

    def __init__(
        self,
        grid: Grid,
        rng: Generator,
        strategy: ColonyStrategy | None = None,
        *,
        pheromone_strength: float = 8.0,
        evaporation_speed: float = 0.95,
        pheromone_fall_off: float = 65.0,
        random_move_chance: float = 0.01,
        using_dissipation: bool = False,
        dissipation_rate: float = 1.0,
        aggressive_bias: bool = False,
        bias_factor: float = DEFAULT_BIAS_FACTOR,
        memory_capacity: int = DEFAULT_MEMORY_CAPACITY,
        events: EventSink | None = None,
    ) -> None:
        """Create an empty colony on ``grid``.

        Raises:
            ValueError: If any parameter is outside its valid range.
        """
        self.grid = grid
        self.rng = rng
        self.strategy: ColonyStrategy = strategy or TwoPheromoneStrategy()
        self.events = events or EventSink()
        _require(memory_capacity >= 1, "memory_capacity must be >= 1")
        self.memory_capacity = memory_capacity
        self.food_gathered = 0
        self.model_ticks = 0
        self._ants: deque[Ant] = deque()

        self.pheromone_strength = pheromone_strength
        self.evaporation_speed = evaporation_speed
        self.pheromone_fall_off = pheromone_fall_off
        self.random_move_chance = random_move_chance
        self.using_dissipation = using_dissipation
        self.dissipation_rate = dissipation_rate
        self.aggressive_bias = aggressive_bias
        self.bias_factor = bias_factor

    # -- Parameters --

    @property
    def pheromone_strength(self) -> float:
        """Base amount of pheromone an ant deposits per tick."""
        return self._pheromone_strength

    @pheromone_strength.setter
    def pheromone_strength(self, value: float) -> None:
        _require(value >= 0, f"pheromone_strength must be >= 0, got {value}")
        self._pheromone_strength = float(value)

    @property
    def evaporation_speed(self) -> float:
        """Amount every channel loses per tick."""
        return self._evaporation_speed

    @evaporation_speed.setter
    def evaporation_speed(self, value: float) -> None:
        _require(value >= 0, f"evaporation_speed must be >= 0, got {value}")
        self._evaporation_speed = float(value)

    @property
    def pheromone_fall_off(self) -> float:
        """Fall-off ratio in percent; anything below 1 disables the mechanic."""
        return self._pheromone_fall_off

    @pheromone_fall_off.setter
    def pheromone_fall_off(self, value: float) -> None:
        _require(
            0 <= value <= MAX_FALL_OFF,
            f"pheromone_fall_off must be in [0, 100], got {value}",
        )
        self._pheromone_fall_off = float(value)

    @property
    def using_fall_off(self) -> bool:
        """Whether deposits weaken with the distance walked."""
        return self._pheromone_fall_off >= MIN_ACTIVE_FALL_OFF

    @property
    def fall_off_distance(self) -> float:
        """Steps after which a deposit drops to the base strength."""
        return MAX_FALL_OFF - self._pheromone_fall_off

    @property
    def random_move_chance(self) -> float:
        """Probability (0..1) that an ant ignores pheromone for a tick."""
        return self._random_move_chance

    @random_move_chance.setter
    def random_move_chance(self, value: float) -> None:
        _require(
            0 <= value <= 1,
            f"random_move_chance must be in [0, 1], got {value}",
        )
        self._random_move_chance = float(value)

    @property
    def dissipation_rate(self) -> float:
        """Tunable constant for pheromone diffusion to neighbours."""
        return self._dissipation_rate

    @dissipation_rate.setter
    def dissipation_rate(self, value: float) -> None:
        _require(value >= 0, f"dissipation_rate must be >= 0, got {value}")
        self._dissipation_rate = float(value)

    @property
    def bias_factor(self) -> float:
        """Weight multiplier for the strongest candidate under bias."""
        return self._bias_factor

    @bias_factor.setter
    def bias_factor(self, value: float) -> None:
        _require(value >= 1, f"bias_factor must be >= 1, got {value}")
        self._bias_factor = float(value)

    def deposit_amount(self, ant: Ant) -> float:
        """Pheromone an ant lays on its current cell this tick.

        With fall-off enabled the amount is divided by how many
        ``fall_off_distance`` lengths the ant has walked since its last
        goal, so trails weaken the farther they lead.
        """
        if not self.using_fall_off:
            return self._pheromone_strength
        distance = self.fall_off_distance
        if distance <= 0:
            return 0.0
        return self._pheromone_strength / (max(ant.steps_walked, 1) / distance)

    # -- Ants --

    @property
    def ants(self) -> list[Ant]:
        """A copy of the ant population, oldest first."""
        return list(self._ants)

    @property
    def ant_count(self) -> int:
        """Number of ants currently in the colony."""
        return len(self._ants)

    def set_ant_count(self, count: int) -> None:
        """Grow or shrink the population to ``count`` ants.

        New ants spawn at the first Nest.  When shrinking, the oldest
        ants are removed first.

        Raises:
            ValueError: If ``count`` is negative.
        """
        _require(count >= 0, f"ant count must be >= 0, got {count}")
        with self.grid.lock:
            nest_x, nest_y = self.grid.nest_positions[0]
            while len(self._ants) < count:
                self._ants.append(
                    Ant.spawn(
                        nest_x,
                        nest_y,
                        self.rng,
                        memory_capacity=self.memory_capacity,
                    ),
                )
            while len(self._ants) > count:
                self._ants.popleft()

    # -- Counters --

    def increase_food_gathered(self) -> None:
        """Count one food delivery."""
        self.set_food_gathered(self.food_gathered + 1)

    def set_food_gathered(self, value: int) -> None:
        """Overwrite the food counter and notify listeners."""
        old = self.food_gathered
        self.food_gathered = value
        self.events.emit(ModelEvent.FOOD_GATHERED_CHANGED, old, value)

    def set_model_ticks(self, value: int) -> None:
        """Overwrite the tick counter and notify listeners."""
        old = self.model_ticks
        self.model_ticks = value
        self.events.emit(ModelEvent.TICK_COUNT_CHANGED, old, value)

    # -- Tick pipeline --

    def tick(self) -> None:
        """Advance the colony by one generation."""
        with self.grid.lock:
            self._prune()
            self.strategy.generate_solutions(self)
            self.strategy.daemon_actions(self)
            self.strategy.pheromone_update(self)
            self.set_model_ticks(self.model_ticks + 1)

    def run(self, ticks: int) -> None:
        """Run a fixed number of ticks.

        Args:
            ticks: Number of ticks to advance.
        """
        for _ in range(ticks):
            self.tick()

    def _prune(self) -> None:
        """Drop ants standing outside the grid."""
        before = len(self._ants)
        self._ants = deque(
            ant for ant in self._ants if self.grid.node_at(ant.x, ant.y) is not None
        )
        after = len(self._ants)
        if after != before:
            log.debug("Pruned %d ants outside the grid", before - after)
            self.events.emit(ModelEvent.ANT_COUNT_CHANGED, before, after)

    def reset(self) -> None:
        """Remove all ants, zero the counters and wipe every pheromone.

        The grid layout (walls, nests, food) is left untouched.
        """
        with self.grid.lock:
            self.set_ant_count(0)
            self.set_food_gathered(0)
            self.set_model_ticks(0)
            self.grid.pheromones.clear()
        log.info("Model reset")
