"""Strategies — the ACO variants a ColonyModel can run.

A strategy supplies the three colony phases of a tick; the model keeps
the shared orchestration (pruning, counting, notification).  Both
variants here share the deposit and global-update rules and differ in
how many pheromone channels they use and how ants escape dead ends.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from trailgrid.pheromones.diffusion import update_layers
from trailgrid.world.node import NodeKind

if TYPE_CHECKING:
    from trailgrid.colony.ant import Ant
    from trailgrid.colony.model import ColonyModel
    from trailgrid.world.node import GridNode

SHARED_CHANNEL = 0
NEST_CHANNEL = 0  # laid by foraging ants, followed home by carriers
FOOD_CHANNEL = 1  # laid by carrying ants, followed out by foragers


class ColonyStrategy(Protocol):
    """The per-tick phases of an ACO variant."""

    name: str

    def generate_solutions(self, model: ColonyModel) -> None:
        """Let every ant perceive, decide and move."""
        ...

    def daemon_actions(self, model: ColonyModel) -> None:
        """Let every ant deposit pheromone and react to goals."""
        ...

    def pheromone_update(self, model: ColonyModel) -> None:
        """Apply global pheromone decay."""
        ...


def _global_update(model: ColonyModel) -> None:
    update_layers(
        model.grid.pheromones,
        model.evaporation_speed,
        using_dissipation=model.using_dissipation,
        dissipation_rate=model.dissipation_rate,
    )


def _reach_goal(
    model: ColonyModel,
    ant: Ant,
    node: GridNode,
    *,
    turn_on_revisit: bool,
) -> None:
    """Pick up or drop food on a goal cell; restart the step count there."""
    match node.kind:
        case NodeKind.FOOD_SOURCE if not ant.carrying_food:
            ant.set_carrying_food(True)
            ant.reset_steps_walked()
            ant.turn_around()
        case NodeKind.NEST if ant.carrying_food:
            ant.set_carrying_food(False)
            ant.reset_steps_walked()
            model.increase_food_gathered()
            ant.turn_around()
        case NodeKind.NEST | NodeKind.FOOD_SOURCE:
            ant.reset_steps_walked()
            if turn_on_revisit:
                ant.turn_around()
        case NodeKind.TILE:
            pass


class OnePheromoneStrategy:
    """All ants lay and follow a single shared channel.

    Random moves are random turns; a blocked ant first widens its view
    and then turns around.
    """

    name = "one_pheromone"

    def generate_solutions(self, model: ColonyModel) -> None:
        grid = model.grid
        rng = model.rng
        for ant in model.ants:
            candidates = ant.perceive_forward(grid, 3)

            if rng.random() < model.random_move_chance:
                ant.turn_towards(int(rng.integers(8)))
                candidates = ant.perceive_forward(grid, 3)

            if not candidates:
                candidates = ant.perceive_forward(grid, 5)
                if not candidates:
                    ant.turn_around()
                    continue

            choice = ant.choose_by_probability(
                SHARED_CHANNEL,
                candidates,
                True,
                rng,
                aggressive_bias=model.aggressive_bias,
                bias_factor=model.bias_factor,
            )
            ant.move(choice)
            ant.increase_steps_walked(model.using_fall_off)

    def daemon_actions(self, model: ColonyModel) -> None:
        for ant in model.ants:
            node = model.grid.node_at(ant.x, ant.y)
            if node is None:
                continue
            node.pheromones.increase(SHARED_CHANNEL, model.deposit_amount(ant))
            _reach_goal(model, ant, node, turn_on_revisit=False)

    def pheromone_update(self, model: ColonyModel) -> None:
        _global_update(model)


class TwoPheromoneStrategy:
    """Foragers and carriers lay separate channels and follow each other's.

    A foraging ant lays ``NEST_CHANNEL`` and follows ``FOOD_CHANNEL``;
    a carrying ant does the opposite.  A blocked ant widens its view to
    five cells, then to all neighbours, before turning around.
    """

    name = "two_pheromone"

    def generate_solutions(self, model: ColonyModel) -> None:
        grid = model.grid
        rng = model.rng
        for ant in model.ants:
            candidates = (
                ant.perceive_forward(grid, 3)
                or ant.perceive_forward(grid, 5)
                or ant.perceive_surrounding(grid)
            )
            if not candidates:
                ant.turn_around()
                continue

            if rng.random() < model.random_move_chance:
                ant.move(candidates[int(rng.integers(len(candidates)))])
                continue

            channel = NEST_CHANNEL if ant.carrying_food else FOOD_CHANNEL
            choice = ant.choose_by_probability(
                channel,
                candidates,
                True,
                rng,
                aggressive_bias=model.aggressive_bias,
                bias_factor=model.bias_factor,
            )
            ant.move(choice)
            ant.increase_steps_walked(model.using_fall_off)

    def daemon_actions(self, model: ColonyModel) -> None:
        for ant in model.ants:
            node = model.grid.node_at(ant.x, ant.y)
            if node is None:
                continue
            channel = FOOD_CHANNEL if ant.carrying_food else NEST_CHANNEL
            node.pheromones.increase(channel, model.deposit_amount(ant))
            _reach_goal(model, ant, node, turn_on_revisit=True)

    def pheromone_update(self, model: ColonyModel) -> None:
        _global_update(model)


STRATEGIES: dict[str, type[OnePheromoneStrategy] | type[TwoPheromoneStrategy]] = {
    OnePheromoneStrategy.name: OnePheromoneStrategy,
    TwoPheromoneStrategy.name: TwoPheromoneStrategy,
}


def make_strategy(name: str) -> ColonyStrategy:
    """Instantiate a strategy by its registered name.

    Raises:
        ValueError: If ``name`` is not a known strategy.
    """
    try:
        return STRATEGIES[name]()
    except KeyError:
        msg = f"unknown strategy {name!r}, expected one of {sorted(STRATEGIES)}"
        raise ValueError(msg) from None
