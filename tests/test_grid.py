"""Tests for trailgrid.world — grid layout, nodes and adjacency."""

import pytest

from trailgrid.world.grid import Grid
from trailgrid.world.node import NodeKind


def _neighbour_positions(grid: Grid) -> dict[tuple[int, int], list[tuple[int, int]]]:
    return {
        node.position: [n.position for n in node.neighbours]
        for node in grid.iter_nodes()
    }


class TestGridLayout:
    """Tests for construction and lookup."""

    def test_seeded_with_single_nest(self, small_grid: Grid) -> None:
        assert small_grid.nest_positions == [(0, 0)]
        assert small_grid.food_positions == []
        assert small_grid.node_at(0, 0).kind is NodeKind.NEST
        kinds = [node.kind for node in small_grid.iter_nodes()]
        assert kinds.count(NodeKind.NEST) == 1
        assert kinds.count(NodeKind.TILE) == 99

    def test_node_at_matches_coordinates(self, small_grid: Grid) -> None:
        node = small_grid.node_at(3, 7)
        assert node is not None
        assert node.position == (3, 7)

    @pytest.mark.parametrize("x, y", [(-1, 0), (0, -1), (10, 0), (0, 10)])
    def test_node_at_off_grid(self, small_grid: Grid, x: int, y: int) -> None:
        assert small_grid.node_at(x, y) is None

    def test_cell_size(self, small_grid: Grid) -> None:
        assert small_grid.cell_size == 10

    def test_too_small_raises(self) -> None:
        with pytest.raises(ValueError):
            Grid(cell_count=1)

    def test_nodes_share_grid_pheromone_store(self, small_grid: Grid) -> None:
        small_grid.node_at(2, 3).pheromones.increase(1, 5.0)
        assert small_grid.pheromones.levels[3, 2, 1] == 5.0


class TestNeighbours:
    """Tests for the cached king-move adjacency."""

    @pytest.mark.parametrize(
        "x, y, expected",
        [(0, 0, 3), (9, 9, 3), (0, 5, 5), (5, 9, 5), (5, 5, 8)],
    )
    def test_neighbour_counts(
        self,
        small_grid: Grid,
        x: int,
        y: int,
        expected: int,
    ) -> None:
        assert len(small_grid.node_at(x, y).neighbours) == expected

    def test_neighbours_are_adjacent(self, small_grid: Grid) -> None:
        for node in small_grid.iter_nodes():
            for n in node.neighbours:
                assert max(abs(n.x - node.x), abs(n.y - node.y)) == 1

    def test_rebuild_is_idempotent(self, small_grid: Grid) -> None:
        before = _neighbour_positions(small_grid)
        small_grid.rebuild_neighbours()
        small_grid.rebuild_neighbours()
        assert _neighbour_positions(small_grid) == before

    def test_blocking_nodes_stay_in_neighbour_lists(self, small_grid: Grid) -> None:
        small_grid.toggle_blocking(4, 4)
        small_grid.rebuild_neighbours()
        positions = [n.position for n in small_grid.node_at(5, 5).neighbours]
        assert (4, 4) in positions

    def test_replaced_node_is_linked(self, small_grid: Grid) -> None:
        small_grid.replace_node(5, 5, NodeKind.FOOD_SOURCE)
        food = small_grid.node_at(5, 5)
        assert any(n is food for n in small_grid.node_at(4, 4).neighbours)


class TestReplaceNode:
    """Tests for placing and removing Nests and FoodSources."""

    def test_place_food_source(self, small_grid: Grid) -> None:
        assert small_grid.replace_node(4, 6, NodeKind.FOOD_SOURCE)
        assert small_grid.node_at(4, 6).kind is NodeKind.FOOD_SOURCE
        assert small_grid.food_positions == [(4, 6)]

    def test_remove_food_source(self, small_grid: Grid) -> None:
        small_grid.replace_node(4, 6, NodeKind.FOOD_SOURCE)
        assert small_grid.replace_node(4, 6, NodeKind.TILE)
        assert small_grid.node_at(4, 6).kind is NodeKind.TILE
        assert small_grid.food_positions == []

    def test_last_nest_cannot_be_removed(self, small_grid: Grid) -> None:
        assert not small_grid.replace_node(0, 0, NodeKind.TILE)
        assert small_grid.node_at(0, 0).kind is NodeKind.NEST
        assert small_grid.nest_positions == [(0, 0)]

    def test_nest_removable_when_another_exists(self, small_grid: Grid) -> None:
        assert small_grid.replace_node(9, 9, NodeKind.NEST)
        assert small_grid.replace_node(0, 0, NodeKind.TILE)
        assert small_grid.nest_positions == [(9, 9)]

    def test_replacement_clears_pheromone(self, small_grid: Grid) -> None:
        small_grid.node_at(3, 3).pheromones.increase(0, 40.0)
        small_grid.replace_node(3, 3, NodeKind.FOOD_SOURCE)
        assert small_grid.node_at(3, 3).pheromones.amount(0) == 0.0

    def test_replacement_resets_blocking(self, small_grid: Grid) -> None:
        small_grid.toggle_blocking(3, 3)
        small_grid.replace_node(3, 3, NodeKind.FOOD_SOURCE)
        assert not small_grid.node_at(3, 3).blocking

    def test_off_grid_rejected(self, small_grid: Grid) -> None:
        assert not small_grid.replace_node(10, 10, NodeKind.FOOD_SOURCE)

    def test_topology_listeners_notified(self, small_grid: Grid) -> None:
        calls: list[str] = []
        small_grid.topology_listeners.append(lambda: calls.append("changed"))
        small_grid.replace_node(2, 2, NodeKind.FOOD_SOURCE)
        assert calls == ["changed"]


class TestBlocking:
    """Tests for wall toggling."""

    def test_toggle_tile(self, small_grid: Grid) -> None:
        assert small_grid.toggle_blocking(2, 2)
        assert small_grid.node_at(2, 2).blocking
        assert small_grid.toggle_blocking(2, 2)
        assert not small_grid.node_at(2, 2).blocking

    def test_nest_cannot_block(self, small_grid: Grid) -> None:
        assert not small_grid.toggle_blocking(0, 0)
        assert not small_grid.node_at(0, 0).blocking

    def test_off_grid(self, small_grid: Grid) -> None:
        assert not small_grid.toggle_blocking(-1, 3)


class TestResize:
    """Tests for rebuilding the grid at a new size."""

    def test_resize_resets_layout(self, small_grid: Grid) -> None:
        small_grid.replace_node(4, 4, NodeKind.FOOD_SOURCE)
        small_grid.toggle_blocking(5, 5)
        small_grid.node_at(6, 6).pheromones.increase(0, 10.0)
        small_grid.resize(6)

        assert small_grid.cell_count == 6
        assert len(small_grid.nodes) == 6
        assert all(len(row) == 6 for row in small_grid.nodes)
        assert small_grid.nest_positions == [(0, 0)]
        assert small_grid.food_positions == []
        assert not any(node.blocking for node in small_grid.iter_nodes())
        assert small_grid.pheromones.levels.shape == (6, 6, 8)
        assert small_grid.pheromones.levels.sum() == 0.0

    def test_resize_notifies(self, small_grid: Grid) -> None:
        calls: list[int] = []
        small_grid.topology_listeners.append(lambda: calls.append(1))
        small_grid.resize(12)
        assert calls == [1]

    def test_resize_rejects_small(self, small_grid: Grid) -> None:
        with pytest.raises(ValueError):
            small_grid.resize(1)
        assert small_grid.cell_count == 10

    def test_lowering_max_pheromone(self, small_grid: Grid) -> None:
        small_grid.node_at(1, 1).pheromones.increase(0, 90.0)
        small_grid.set_max_pheromone(30.0)
        assert small_grid.max_pheromone == 30.0
        assert small_grid.node_at(1, 1).pheromones.amount(0) == 30.0
