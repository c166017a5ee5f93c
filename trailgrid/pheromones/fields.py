"""PheromoneLayers and PheromoneField — multi-channel pheromone storage.

All concentrations for a grid live in one NumPy array of shape
``(cell_count, cell_count, CHANNEL_COUNT)`` owned by ``PheromoneLayers``.
Each grid node holds a ``PheromoneField``, a small handle that reads and
writes its own cell of that array.  Every write is clamped to
``[0, max_pheromone]``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

CHANNEL_COUNT = 8
DEFAULT_MAX_PHEROMONE = 100.0


@dataclass
class PheromoneLayers:
    """Grid-wide pheromone store.

    Attributes:
        cell_count: Rows and columns of the (square) grid.
        max_pheromone: Upper bound for every channel of every cell.
        levels: Concentrations indexed as ``levels[y, x, channel]``.
    """

    cell_count: int
    max_pheromone: float = DEFAULT_MAX_PHEROMONE
    levels: NDArray[np.float64] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Allocate a zeroed store."""
        if self.max_pheromone <= 0:
            msg = f"max_pheromone must be > 0, got {self.max_pheromone}"
            raise ValueError(msg)
        self.reshape(self.cell_count)

    def reshape(self, cell_count: int) -> None:
        """Discard all concentrations and allocate a new square store."""
        self.cell_count = cell_count
        self.levels = np.zeros(
            (cell_count, cell_count, CHANNEL_COUNT),
            dtype=np.float64,
        )

    def cell(self, x: int, y: int) -> PheromoneField:
        """Return the per-cell handle for ``(x, y)``."""
        return PheromoneField(layers=self, x=x, y=y)

    def clear(self) -> None:
        """Zero every channel of every cell."""
        self.levels.fill(0.0)

    def set_max_pheromone(self, value: float) -> None:
        """Change the upper bound and clamp stored values down to it.

        Raises:
            ValueError: If ``value`` is not positive.
        """
        if value <= 0:
            msg = f"max_pheromone must be > 0, got {value}"
            raise ValueError(msg)
        self.max_pheromone = float(value)
        np.clip(self.levels, 0.0, self.max_pheromone, out=self.levels)

    def dominant_channels(self) -> NDArray[np.intp]:
        """Index of the strongest channel per cell (ties → lowest index)."""
        return np.argmax(self.levels, axis=2)

    def saturations(self) -> NDArray[np.float64]:
        """Normalised concentration (0..1) of the dominant channel per cell."""
        return self.levels.max(axis=2) / self.max_pheromone


@dataclass(eq=False)
class PheromoneField:
    """The pheromone channels of a single cell.

    Attributes:
        layers: The grid-wide store this handle points into.
        x: Column of the cell.
        y: Row of the cell.
    """

    layers: PheromoneLayers = field(repr=False)
    x: int
    y: int

    def _check(self, channel: int) -> None:
        if not 0 <= channel < CHANNEL_COUNT:
            msg = f"pheromone channel {channel} out of range 0..{CHANNEL_COUNT - 1}"
            raise IndexError(msg)

    @property
    def amounts(self) -> NDArray[np.float64]:
        """A copy of all channel concentrations for this cell."""
        return self.layers.levels[self.y, self.x].copy()

    def amount(self, channel: int) -> float:
        """Return the concentration of ``channel``.

        Raises:
            IndexError: If ``channel`` is not in ``0..CHANNEL_COUNT-1``.
        """
        self._check(channel)
        return float(self.layers.levels[self.y, self.x, channel])

    def saturation(self, channel: int) -> float:
        """Concentration of ``channel`` relative to ``max_pheromone``."""
        return self.amount(channel) / self.layers.max_pheromone

    def increase(self, channel: int, amount: float) -> None:
        """Add ``amount`` to ``channel``, clamped to ``[0, max_pheromone]``.

        Raises:
            IndexError: If ``channel`` is not in ``0..CHANNEL_COUNT-1``.
        """
        self._set(channel, self.amount(channel) + amount)

    def decrease(self, channel: int, amount: float) -> None:
        """Subtract ``amount`` from ``channel``, clamped to ``[0, max_pheromone]``.

        Raises:
            IndexError: If ``channel`` is not in ``0..CHANNEL_COUNT-1``.
        """
        self._set(channel, self.amount(channel) - amount)

    def _set(self, channel: int, value: float) -> None:
        value = min(max(value, 0.0), self.layers.max_pheromone)
        self.layers.levels[self.y, self.x, channel] = value

    def dominant_channel(self) -> int:
        """Index of the strongest channel; the lowest index wins a tie."""
        levels = self.layers.levels[self.y, self.x]
        best = 0
        for channel in range(1, CHANNEL_COUNT):
            if levels[channel] > levels[best]:
                best = channel
        return best

    def clear(self) -> None:
        """Zero every channel of this cell."""
        self.layers.levels[self.y, self.x] = 0.0
