"""Shared fixtures for the trailgrid test suite."""

from __future__ import annotations

import numpy as np
import pytest
from numpy.random import Generator

from trailgrid.colony.model import ColonyModel
from trailgrid.pathfinding.astar import AStarPathfinder
from trailgrid.simulation.config import SimulationConfig
from trailgrid.simulation.engine import SimulationEngine
from trailgrid.world.grid import Grid


@pytest.fixture
def rng() -> Generator:
    """A deterministic random generator for reproducible tests."""
    return np.random.default_rng(seed=12345)


@pytest.fixture
def small_grid() -> Grid:
    """A small 10x10 grid with the default Nest at (0, 0)."""
    return Grid(cell_count=10, size=100)


@pytest.fixture
def pathfinder(small_grid: Grid) -> AStarPathfinder:
    """A pathfinder attached to the small grid."""
    return AStarPathfinder(small_grid)


@pytest.fixture
def model(small_grid: Grid, rng: Generator) -> ColonyModel:
    """An empty two-pheromone colony on the small grid."""
    return ColonyModel(small_grid, rng)


@pytest.fixture
def default_config() -> SimulationConfig:
    """Small, fast config (no YAML file needed)."""
    return SimulationConfig(seed=7, cell_count=12, grid_size=120, ant_count=10)


@pytest.fixture
def engine(default_config: SimulationConfig) -> SimulationEngine:
    """An engine built from the small config; its thread is not started."""
    return SimulationEngine(config=default_config)
