"""Config — load simulation parameters from YAML files.

All tunable constants (grid size, pheromone rates, ant count, tick rate)
live in YAML and are parsed into a typed dataclass here.  The same
ranges are enforced again by the runtime setters on the model and the
engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml


@dataclass
class SimulationConfig:
    """Top-level simulation configuration.

    Attributes:
        seed: RNG seed for deterministic replay.
        cell_count: Rows and columns of the square grid.
        grid_size: Logical grid width in pixels.
        ant_count: Starting ant population.
        pheromone_strength: Base pheromone deposited per ant per tick.
        evaporation_speed: Amount every channel decays per tick.
        pheromone_fall_off: Fall-off ratio in percent (0 disables).
        random_move_chance: Probability an ant ignores pheromone.
        max_pheromone: Upper bound for every pheromone channel.
        using_dissipation: Whether pheromone spreads to neighbours.
        dissipation_rate: Tunable diffusion constant.
        aggressive_bias: Favour the strongest trail when choosing.
        bias_factor: Weight multiplier used by the aggressive bias.
        memory_capacity: Short-term memory size of each ant.
        model_tick_rate: Model ticks per second while running.
        strategy: Name of the ACO variant to run.
    """

    seed: int = 42
    cell_count: int = 30
    grid_size: int = 900
    ant_count: int = 0

    # Pheromones
    pheromone_strength: float = 8.0
    evaporation_speed: float = 0.95
    pheromone_fall_off: float = 65.0
    max_pheromone: float = 100.0
    using_dissipation: bool = False
    dissipation_rate: float = 1.0

    # Ant decisions
    random_move_chance: float = 0.01
    aggressive_bias: bool = False
    bias_factor: float = 2.0
    memory_capacity: int = 12

    model_tick_rate: int = 30
    strategy: str = "two_pheromone"

    @classmethod
    def from_yaml(cls, path: str | Path) -> SimulationConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML config file.

        Returns:
            A populated and validated SimulationConfig instance.

        Raises:
            FileNotFoundError: If the config file does not exist.
            ValueError: If a value is outside its valid range.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}

        config = cls(
            seed=data.get("seed", cls.seed),
            cell_count=data.get("cell_count", cls.cell_count),
            grid_size=data.get("grid_size", cls.grid_size),
            ant_count=data.get("ant_count", cls.ant_count),
            pheromone_strength=data.get(
                "pheromone_strength",
                cls.pheromone_strength,
            ),
            evaporation_speed=data.get(
                "evaporation_speed",
                cls.evaporation_speed,
            ),
            pheromone_fall_off=data.get(
                "pheromone_fall_off",
                cls.pheromone_fall_off,
            ),
            max_pheromone=data.get("max_pheromone", cls.max_pheromone),
            using_dissipation=data.get(
                "using_dissipation",
                cls.using_dissipation,
            ),
            dissipation_rate=data.get(
                "dissipation_rate",
                cls.dissipation_rate,
            ),
            random_move_chance=data.get(
                "random_move_chance",
                cls.random_move_chance,
            ),
            aggressive_bias=data.get("aggressive_bias", cls.aggressive_bias),
            bias_factor=data.get("bias_factor", cls.bias_factor),
            memory_capacity=data.get("memory_capacity", cls.memory_capacity),
            model_tick_rate=data.get("model_tick_rate", cls.model_tick_rate),
            strategy=data.get("strategy", cls.strategy),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Check every value against its allowed range.

        Raises:
            ValueError: On the first value out of range.
        """
        checks = [
            (self.cell_count >= 2, "cell_count must be >= 2"),
            (self.grid_size > 0, "grid_size must be > 0"),
            (self.ant_count >= 0, "ant_count must be >= 0"),
            (self.pheromone_strength >= 0, "pheromone_strength must be >= 0"),
            (self.evaporation_speed >= 0, "evaporation_speed must be >= 0"),
            (
                0 <= self.pheromone_fall_off <= 100,
                "pheromone_fall_off must be in [0, 100]",
            ),
            (self.max_pheromone > 0, "max_pheromone must be > 0"),
            (self.dissipation_rate >= 0, "dissipation_rate must be >= 0"),
            (
                0 <= self.random_move_chance <= 1,
                "random_move_chance must be in [0, 1]",
            ),
            (self.bias_factor >= 1, "bias_factor must be >= 1"),
            (self.memory_capacity >= 1, "memory_capacity must be >= 1"),
            (self.model_tick_rate > 0, "model_tick_rate must be > 0"),
        ]
        for ok, message in checks:
            if not ok:
                raise ValueError(message)
