"""Ant -- individual agent with local perception and decisions.

An ant only ever knows its own coordinate, facing and a short memory of
recently visited cells.  It resolves everything else through the Grid
passed into each call, so ants never hold on to node objects that a
grid edit could invalidate.

Key movement model:

- **Forward cone**: an ant looks at the 3 (or 5) cells in front of it,
  relative to its facing.  Cells it has just visited are ignored so it
  does not pace back and forth.
- **Roulette-wheel choice**: the next cell is drawn with probability
  proportional to the saturation of one pheromone channel.  A Nest or
  FoodSource in view can short-circuit the draw.
- **Octant facing**: every step turns the ant to face the direction it
  just moved in.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from numpy.random import Generator

    from trailgrid.world.grid import Grid
    from trailgrid.world.node import GridNode

DEFAULT_MEMORY_CAPACITY = 12
DEFAULT_BIAS_FACTOR = 2.0


class Facing(Enum):
    """Compass octant an ant faces; the value is its unit step ``(dx, dy)``.

    Rows grow downward, so UP is ``(0, -1)``.
    """

    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)
    UP_LEFT = (-1, -1)
    UP_RIGHT = (1, -1)
    DOWN_LEFT = (-1, 1)
    DOWN_RIGHT = (1, 1)


# (left, left-front, front, right-front, right) offsets per facing
_FORWARD_CONE: dict[Facing, tuple[tuple[int, int], ...]] = {
    Facing.UP: ((-1, 0), (-1, -1), (0, -1), (1, -1), (1, 0)),
    Facing.UP_RIGHT: ((-1, -1), (0, -1), (1, -1), (1, 0), (1, 1)),
    Facing.RIGHT: ((0, -1), (1, -1), (1, 0), (1, 1), (0, 1)),
    Facing.DOWN_RIGHT: ((1, -1), (1, 0), (1, 1), (0, 1), (-1, 1)),
    Facing.DOWN: ((1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0)),
    Facing.DOWN_LEFT: ((1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1)),
    Facing.LEFT: ((0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1)),
    Facing.UP_LEFT: ((-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1)),
}

_OPPOSITE: dict[Facing, Facing] = {
    Facing.UP: Facing.DOWN,
    Facing.DOWN: Facing.UP,
    Facing.LEFT: Facing.RIGHT,
    Facing.RIGHT: Facing.LEFT,
    Facing.UP_LEFT: Facing.DOWN_RIGHT,
    Facing.UP_RIGHT: Facing.DOWN_LEFT,
    Facing.DOWN_LEFT: Facing.UP_RIGHT,
    Facing.DOWN_RIGHT: Facing.UP_LEFT,
}

_FACING_BY_STEP: dict[tuple[int, int], Facing] = {f.value: f for f in Facing}


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


@dataclass(eq=False)
class Ant:
    """A single ant agent.

    Attributes:
        x: Current column in the grid.
        y: Current row in the grid.
        facing: Octant the ant currently faces.
        carrying_food: Whether the ant is on its way back to a Nest.
        steps_walked: Steps since the last goal; only counts up while
            pheromone fall-off is enabled.
        memory_capacity: How many recently visited cells are remembered.
        memory: Recently visited coordinates, oldest first.
    """

    x: int
    y: int
    facing: Facing = Facing.UP
    carrying_food: bool = False
    steps_walked: int = 0
    memory_capacity: int = DEFAULT_MEMORY_CAPACITY
    memory: deque[tuple[int, int]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.memory = deque(maxlen=self.memory_capacity)

    @classmethod
    def spawn(
        cls,
        x: int,
        y: int,
        rng: Generator,
        memory_capacity: int = DEFAULT_MEMORY_CAPACITY,
    ) -> Ant:
        """Create an ant at ``(x, y)`` facing a random direction.

        Args:
            x: Spawn column.
            y: Spawn row.
            rng: Seeded random generator.
            memory_capacity: Size of the short-term memory.

        Returns:
            A new Ant instance.
        """
        facings = list(Facing)
        return cls(
            x=x,
            y=y,
            facing=facings[int(rng.integers(len(facings)))],
            memory_capacity=memory_capacity,
        )

    @property
    def position(self) -> tuple[int, int]:
        """Grid coordinate as ``(x, y)``."""
        return (self.x, self.y)

    # -- Perception --

    def perceive_forward(self, grid: Grid, depth: int = 3) -> list[GridNode]:
        """Return the walkable, unremembered cells in front of the ant.

        Args:
            grid: The grid to look into.
            depth: 3 for left/front/right, 5 to also include the cells
                directly to the ant's sides.

        Raises:
            ValueError: If ``depth`` is not 3 or 5.
        """
        cone = _FORWARD_CONE[self.facing]
        if depth == 3:
            offsets = cone[1:4]
        elif depth == 5:
            offsets = cone
        else:
            msg = f"depth must be 3 or 5, got {depth}"
            raise ValueError(msg)

        result: list[GridNode] = []
        for dx, dy in offsets:
            node = grid.node_at(self.x + dx, self.y + dy)
            if node is None or node.blocking or node.position in self.memory:
                continue
            result.append(node)
        return result

    def perceive_surrounding(self, grid: Grid) -> list[GridNode]:
        """Return the walkable neighbours of the ant's cell.

        Remembered cells are skipped; if that leaves nothing, memory is
        cleared and the neighbours are returned without that filter.
        """
        node = grid.node_at(self.x, self.y)
        if node is None:
            return []
        walkable = [n for n in node.neighbours if not n.blocking]
        result = [n for n in walkable if n.position not in self.memory]
        if not result:
            self.memory.clear()
            result = walkable
        return result

    # -- Decisions --

    def choose_by_probability(
        self,
        channel: int,
        candidates: Sequence[GridNode],
        prefer_goal: bool,
        rng: Generator,
        *,
        aggressive_bias: bool = False,
        bias_factor: float = DEFAULT_BIAS_FACTOR,
    ) -> GridNode | None:
        """Pick a candidate with probability proportional to its pheromone.

        Args:
            channel: Pheromone channel used as the weight.
            candidates: Cells to choose from.
            prefer_goal: Return a Nest or FoodSource immediately if one
                is among the candidates.
            rng: Seeded random generator.
            aggressive_bias: Multiply the strongest candidate's weight
                by ``bias_factor``.
            bias_factor: Exploitation multiplier used with the bias.

        Returns:
            The chosen node, or None if ``candidates`` is empty.
        """
        if not candidates:
            return None
        if prefer_goal:
            for node in candidates:
                if node.is_goal:
                    return node

        order = rng.permutation(len(candidates))
        shuffled = [candidates[int(i)] for i in order]
        weights = [node.pheromones.saturation(channel) for node in shuffled]
        if aggressive_bias:
            strongest = max(range(len(weights)), key=weights.__getitem__)
            weights[strongest] *= bias_factor

        roll = sum(weights) * float(rng.random())
        running = 0.0
        for node, weight in zip(shuffled, weights, strict=True):
            running += weight
            if running >= roll:
                return node
        return shuffled[-1]

    def choose_strongest(
        self,
        channel: int,
        candidates: Sequence[GridNode],
        prefer_goal: bool,
        rng: Generator,
    ) -> GridNode | None:
        """Pick the candidate with the most pheromone on ``channel``.

        Starts from a random candidate so equal concentrations do not
        always favour the same direction.
        """
        return self._choose_extreme(channel, candidates, prefer_goal, rng, 1.0)

    def choose_weakest(
        self,
        channel: int,
        candidates: Sequence[GridNode],
        prefer_goal: bool,
        rng: Generator,
    ) -> GridNode | None:
        """Pick the candidate with the least pheromone on ``channel``."""
        return self._choose_extreme(channel, candidates, prefer_goal, rng, -1.0)

    @staticmethod
    def _choose_extreme(
        channel: int,
        candidates: Sequence[GridNode],
        prefer_goal: bool,
        rng: Generator,
        sign: float,
    ) -> GridNode | None:
        if not candidates:
            return None
        target = candidates[int(rng.integers(len(candidates)))]
        for node in candidates:
            if prefer_goal and node.is_goal:
                return node
            if sign * node.pheromones.amount(channel) > sign * target.pheromones.amount(
                channel,
            ):
                target = node
        return target

    # -- Movement --

    def move(self, node: GridNode | None) -> None:
        """Step onto ``node`` and face the direction of travel.

        Does nothing if ``node`` is None or is the ant's own cell.
        """
        if node is None:
            return
        step = (_sign(node.x - self.x), _sign(node.y - self.y))
        if step == (0, 0):
            return
        self.facing = _FACING_BY_STEP[step]
        self.x, self.y = node.x, node.y
        self.memory.append(node.position)

    def turn_around(self) -> None:
        """Face the opposite direction."""
        self.facing = _OPPOSITE[self.facing]

    def turn_towards(self, index: int) -> None:
        """Face the direction at ``index`` in ``Facing`` order.

        Indices outside ``0..7`` are ignored.
        """
        facings = list(Facing)
        if 0 <= index < len(facings):
            self.facing = facings[index]

    def set_carrying_food(self, carrying: bool) -> None:
        """Change the carrying state; a change wipes short-term memory."""
        if carrying != self.carrying_food:
            self.memory.clear()
        self.carrying_food = carrying

    def increase_steps_walked(self, using_fall_off: bool) -> None:
        """Count a step while fall-off is on; otherwise pin the counter to 1."""
        if using_fall_off:
            self.steps_walked += 1
        else:
            self.steps_walked = 1

    def reset_steps_walked(self) -> None:
        """Start counting steps from the current goal."""
        self.steps_walked = 0
