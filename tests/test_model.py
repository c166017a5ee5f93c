"""Tests for trailgrid.colony — the colony model and its ACO strategies."""

import numpy as np
import pytest
from numpy.random import Generator

from trailgrid.colony.ant import Ant, Facing
from trailgrid.colony.model import ColonyModel
from trailgrid.colony.strategies import (
    FOOD_CHANNEL,
    NEST_CHANNEL,
    SHARED_CHANNEL,
    OnePheromoneStrategy,
    TwoPheromoneStrategy,
    make_strategy,
)
from trailgrid.simulation.events import ChangeEvent, ModelEvent
from trailgrid.world.grid import Grid
from trailgrid.world.node import NodeKind


def _place_ant(
    model: ColonyModel,
    x: int,
    y: int,
    facing: Facing,
    carrying_food: bool = False,
) -> Ant:
    """Spawn one ant and move it to a known state."""
    model.set_ant_count(model.ant_count + 1)
    ant = model.ants[-1]
    ant.x, ant.y = x, y
    ant.facing = facing
    ant.carrying_food = carrying_food
    return ant


class TestPopulation:
    """Tests for growing and shrinking the colony."""

    def test_spawn_at_nest(self, model: ColonyModel) -> None:
        model.set_ant_count(5)
        assert model.ant_count == 5
        assert all(ant.position == (0, 0) for ant in model.ants)

    def test_spawn_at_first_nest(self, small_grid: Grid, rng: Generator) -> None:
        small_grid.replace_node(7, 7, NodeKind.NEST)
        model = ColonyModel(small_grid, rng)
        model.set_ant_count(2)
        assert all(ant.position == (0, 0) for ant in model.ants)

    def test_shrink_evicts_oldest(self, model: ColonyModel) -> None:
        model.set_ant_count(5)
        before = model.ants
        model.set_ant_count(2)
        after = model.ants
        assert len(after) == 2
        assert after[0] is before[3]
        assert after[1] is before[4]

    def test_grow_then_shrink_back(self, model: ColonyModel) -> None:
        model.set_ant_count(5)
        before = model.ants
        model.set_ant_count(8)
        grown = model.ants
        assert grown[:5] == before
        model.set_ant_count(5)
        survivors = model.ants
        expected = before[3:] + grown[5:8]
        assert len(survivors) == len(expected)
        assert all(a is b for a, b in zip(survivors, expected))

    def test_zero_ants(self, model: ColonyModel) -> None:
        model.set_ant_count(3)
        model.set_ant_count(0)
        assert model.ants == []

    def test_negative_count(self, model: ColonyModel) -> None:
        with pytest.raises(ValueError):
            model.set_ant_count(-1)

    def test_ants_returns_copy(self, model: ColonyModel) -> None:
        model.set_ant_count(2)
        model.ants.clear()
        assert model.ant_count == 2

    def test_new_ants_get_memory_capacity(
        self,
        small_grid: Grid,
        rng: Generator,
    ) -> None:
        model = ColonyModel(small_grid, rng, memory_capacity=3)
        model.set_ant_count(1)
        assert model.ants[0].memory.maxlen == 3


class TestParameters:
    """Tests for validated ACO parameters and the deposit rule."""

    @pytest.mark.parametrize(
        "name, value",
        [
            ("pheromone_strength", -1.0),
            ("evaporation_speed", -0.1),
            ("pheromone_fall_off", 101.0),
            ("pheromone_fall_off", -1.0),
            ("random_move_chance", 1.5),
            ("dissipation_rate", -1.0),
            ("bias_factor", 0.5),
        ],
    )
    def test_out_of_range_rejected(
        self,
        model: ColonyModel,
        name: str,
        value: float,
    ) -> None:
        before = getattr(model, name)
        with pytest.raises(ValueError):
            setattr(model, name, value)
        assert getattr(model, name) == before

    def test_constructor_validates(self, small_grid: Grid, rng: Generator) -> None:
        with pytest.raises(ValueError):
            ColonyModel(small_grid, rng, random_move_chance=2.0)
        with pytest.raises(ValueError):
            ColonyModel(small_grid, rng, memory_capacity=0)

    def test_deposit_without_fall_off(self, model: ColonyModel) -> None:
        model.pheromone_fall_off = 0.0
        ant = Ant(x=0, y=0, steps_walked=40)
        assert not model.using_fall_off
        assert model.deposit_amount(ant) == 8.0

    @pytest.mark.parametrize("fall_off", [0.0, 0.5, 0.99])
    def test_fall_off_below_one_is_disabled(
        self,
        model: ColonyModel,
        fall_off: float,
    ) -> None:
        model.pheromone_fall_off = fall_off
        assert not model.using_fall_off
        assert model.deposit_amount(Ant(x=0, y=0, steps_walked=50)) == 8.0

    def test_fall_off_of_one_is_enabled(self, model: ColonyModel) -> None:
        model.pheromone_fall_off = 1.0
        assert model.using_fall_off
        walked = Ant(x=0, y=0, steps_walked=99)
        assert model.deposit_amount(walked) == pytest.approx(8.0)

    def test_deposit_with_fall_off(self, model: ColonyModel) -> None:
        model.pheromone_fall_off = 65.0
        assert model.fall_off_distance == 35.0
        walked_seven = Ant(x=0, y=0, steps_walked=7)
        walked_seventy = Ant(x=0, y=0, steps_walked=70)
        assert model.deposit_amount(walked_seven) == pytest.approx(40.0)
        assert model.deposit_amount(walked_seventy) == pytest.approx(4.0)

    def test_deposit_at_goal_uses_one_step(self, model: ColonyModel) -> None:
        model.pheromone_fall_off = 65.0
        fresh = Ant(x=0, y=0, steps_walked=0)
        one = Ant(x=0, y=0, steps_walked=1)
        assert model.deposit_amount(fresh) == model.deposit_amount(one)

    def test_full_fall_off_deposits_nothing(self, model: ColonyModel) -> None:
        model.pheromone_fall_off = 100.0
        assert model.deposit_amount(Ant(x=0, y=0, steps_walked=5)) == 0.0


class TestTick:
    """Tests for the shared tick pipeline."""

    def test_tick_counts_and_notifies(self, model: ColonyModel) -> None:
        events: list[ChangeEvent] = []
        model.events.subscribe(events.append)
        model.tick()
        model.tick()
        assert model.model_ticks == 2
        assert events[-1] == ChangeEvent(ModelEvent.TICK_COUNT_CHANGED, 1, 2)

    def test_evaporation_applied(self, model: ColonyModel) -> None:
        model.evaporation_speed = 10.0
        model.grid.node_at(4, 4).pheromones.increase(3, 50.0)
        model.tick()
        assert model.grid.node_at(4, 4).pheromones.amount(3) == 40.0

    def test_dissipation_applied(self, model: ColonyModel) -> None:
        model.evaporation_speed = 0.0
        model.using_dissipation = True
        model.grid.node_at(4, 4).pheromones.increase(0, 80.0)
        model.tick()
        assert model.grid.node_at(5, 5).pheromones.amount(0) == pytest.approx(0.1)

    def test_ants_stay_on_walkable_cells(self, model: ColonyModel) -> None:
        for y in range(2, 8):
            model.grid.toggle_blocking(5, y)
        model.grid.replace_node(8, 8, NodeKind.FOOD_SOURCE)
        model.set_ant_count(30)
        model.random_move_chance = 0.2
        for _ in range(60):
            model.tick()
            for ant in model.ants:
                node = model.grid.node_at(ant.x, ant.y)
                assert node is not None
                assert not node.blocking
        assert model.grid.pheromones.levels.max() <= model.grid.max_pheromone

    def test_prune_after_resize(self, model: ColonyModel) -> None:
        events: list[ChangeEvent] = []
        model.events.subscribe(events.append)
        inside = _place_ant(model, 2, 2, Facing.UP)
        _place_ant(model, 8, 8, Facing.UP)
        model.grid.resize(5)
        model.tick()
        assert model.ants == [inside]
        assert ChangeEvent(ModelEvent.ANT_COUNT_CHANGED, 2, 1) in events

    def test_reset(self, model: ColonyModel) -> None:
        model.grid.replace_node(5, 5, NodeKind.FOOD_SOURCE)
        model.grid.toggle_blocking(3, 3)
        model.set_ant_count(10)
        model.run(5)
        model.set_food_gathered(4)
        model.reset()
        assert model.ant_count == 0
        assert model.model_ticks == 0
        assert model.food_gathered == 0
        assert model.grid.pheromones.levels.sum() == 0.0
        assert model.grid.node_at(5, 5).kind is NodeKind.FOOD_SOURCE
        assert model.grid.node_at(3, 3).blocking

    def test_same_seed_same_run(self) -> None:
        """Two colonies seeded alike walk identical paths."""

        def run(seed: int) -> list[tuple[int, int]]:
            grid = Grid(cell_count=12)
            grid.replace_node(9, 9, NodeKind.FOOD_SOURCE)
            model = ColonyModel(grid, np.random.default_rng(seed))
            model.set_ant_count(15)
            model.run(40)
            return [ant.position for ant in model.ants]

        assert run(5) == run(5)


class TestTwoPheromoneStrategy:
    """Tests for the forager/carrier variant."""

    def test_forager_lays_nest_channel(self, model: ColonyModel) -> None:
        model.random_move_chance = 0.0
        model.pheromone_fall_off = 0.0
        ant = _place_ant(model, 5, 5, Facing.UP)
        model.tick()
        assert ant.y == 4
        node = model.grid.node_at(ant.x, ant.y)
        assert node.pheromones.amount(NEST_CHANNEL) == pytest.approx(8.0 - 0.95)
        assert node.pheromones.amount(FOOD_CHANNEL) == 0.0

    def test_carrier_lays_food_channel(self, model: ColonyModel) -> None:
        model.random_move_chance = 0.0
        model.pheromone_fall_off = 0.0
        ant = _place_ant(model, 5, 5, Facing.DOWN, carrying_food=True)
        model.tick()
        node = model.grid.node_at(ant.x, ant.y)
        assert node.pheromones.amount(FOOD_CHANNEL) == pytest.approx(8.0 - 0.95)
        assert node.pheromones.amount(NEST_CHANNEL) == 0.0

    def test_pick_up_food(self, model: ColonyModel) -> None:
        model.random_move_chance = 0.0
        model.grid.replace_node(5, 4, NodeKind.FOOD_SOURCE)
        ant = _place_ant(model, 5, 5, Facing.UP)
        ant.steps_walked = 9
        model.tick()
        assert ant.position == (5, 4)
        assert ant.carrying_food
        assert ant.steps_walked == 0
        assert ant.facing is Facing.DOWN

    def test_deliver_food(self, model: ColonyModel) -> None:
        events: list[ChangeEvent] = []
        model.events.subscribe(events.append)
        model.random_move_chance = 0.0
        ant = _place_ant(model, 1, 1, Facing.UP_LEFT, carrying_food=True)
        model.tick()
        assert ant.position == (0, 0)
        assert not ant.carrying_food
        assert model.food_gathered == 1
        assert ant.facing is Facing.DOWN_RIGHT
        kinds = [event.kind for event in events]
        assert kinds.index(ModelEvent.FOOD_GATHERED_CHANGED) < kinds.index(
            ModelEvent.TICK_COUNT_CHANGED,
        )

    def test_forager_turns_at_nest(self, model: ColonyModel) -> None:
        model.random_move_chance = 0.0
        ant = _place_ant(model, 1, 1, Facing.UP_LEFT)
        model.tick()
        assert ant.position == (0, 0)
        assert ant.facing is Facing.DOWN_RIGHT
        assert model.food_gathered == 0

    def test_walled_in_ant_turns_around(self, model: ColonyModel) -> None:
        for node in model.grid.node_at(5, 5).neighbours:
            model.grid.toggle_blocking(node.x, node.y)
        ant = _place_ant(model, 5, 5, Facing.UP)
        model.tick()
        assert ant.position == (5, 5)
        assert ant.facing is Facing.DOWN

    def test_random_move_does_not_count_step(self, model: ColonyModel) -> None:
        model.random_move_chance = 1.0
        ant = _place_ant(model, 5, 5, Facing.UP)
        model.tick()
        assert ant.position != (5, 5)
        assert ant.steps_walked == 0

    def test_steps_counted_with_fall_off(self, model: ColonyModel) -> None:
        model.random_move_chance = 0.0
        ant = _place_ant(model, 5, 5, Facing.DOWN)
        model.run(2)
        assert ant.steps_walked == 2

    def test_colony_gathers_food(self, small_grid: Grid) -> None:
        small_grid.replace_node(4, 4, NodeKind.FOOD_SOURCE)
        model = ColonyModel(small_grid, np.random.default_rng(2024))
        model.set_ant_count(40)
        model.run(400)
        assert model.food_gathered > 0


class TestOnePheromoneStrategy:
    """Tests for the single shared-channel variant."""

    @pytest.fixture
    def one_model(self, small_grid: Grid, rng: Generator) -> ColonyModel:
        return ColonyModel(
            small_grid,
            rng,
            OnePheromoneStrategy(),
            random_move_chance=0.0,
            pheromone_fall_off=0.0,
        )

    def test_lays_shared_channel(self, one_model: ColonyModel) -> None:
        for carrying in (False, True):
            ant = _place_ant(one_model, 5, 5, Facing.LEFT, carrying_food=carrying)
            one_model.tick()
            node = one_model.grid.node_at(ant.x, ant.y)
            assert node.pheromones.amount(SHARED_CHANNEL) > 0.0
            assert node.pheromones.dominant_channel() == SHARED_CHANNEL
            one_model.set_ant_count(0)

    def test_widens_view_at_edge(self, one_model: ColonyModel) -> None:
        ant = _place_ant(one_model, 9, 5, Facing.RIGHT)
        one_model.tick()
        assert ant.position in {(9, 4), (9, 6)}

    def test_turns_around_when_blocked(self, one_model: ColonyModel) -> None:
        for x in (4, 5, 6):
            one_model.grid.toggle_blocking(x, 4)
        for x in (4, 6):
            one_model.grid.toggle_blocking(x, 5)
        ant = _place_ant(one_model, 5, 5, Facing.UP)
        one_model.tick()
        assert ant.position == (5, 5)
        assert ant.facing is Facing.DOWN

    def test_delivers_food(self, one_model: ColonyModel) -> None:
        ant = _place_ant(one_model, 1, 1, Facing.UP_LEFT, carrying_food=True)
        one_model.tick()
        assert ant.position == (0, 0)
        assert one_model.food_gathered == 1


class TestStrategyRegistry:
    """Tests for strategy lookup by name."""

    def test_known_names(self) -> None:
        assert isinstance(make_strategy("one_pheromone"), OnePheromoneStrategy)
        assert isinstance(make_strategy("two_pheromone"), TwoPheromoneStrategy)

    def test_unknown_name(self) -> None:
        with pytest.raises(ValueError):
            make_strategy("three_pheromone")

    def test_default_strategy(self, model: ColonyModel) -> None:
        assert isinstance(model.strategy, TwoPheromoneStrategy)
