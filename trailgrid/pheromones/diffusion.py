"""Evaporation and dissipation logic for pheromone layers.

Operates on the raw NumPy array inside ``PheromoneLayers``.  Separated
from ``fields.py`` so that the global update can be tuned or swapped
independently of per-cell reads and writes.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from trailgrid.pheromones.fields import PheromoneLayers

# King-move offsets (dx, dy)
_OFFSETS = (
    (-1, -1),
    (0, -1),
    (1, -1),
    (-1, 0),
    (1, 0),
    (-1, 1),
    (0, 1),
    (1, 1),
)


def _shift_add(
    target: NDArray[np.float64],
    source: NDArray[np.float64],
    dx: int,
    dy: int,
) -> None:
    """Add ``source[y, x]`` into ``target[y + dy, x + dx]`` where in bounds."""
    h, w = source.shape[:2]
    ty = slice(max(dy, 0), h + min(dy, 0))
    tx = slice(max(dx, 0), w + min(dx, 0))
    sy = slice(max(-dy, 0), h - max(dy, 0))
    sx = slice(max(-dx, 0), w - max(dx, 0))
    target[ty, tx] += source[sy, sx]


def neighbour_counts(cell_count: int) -> NDArray[np.float64]:
    """Number of in-bounds king-move neighbours of every cell (3, 5 or 8)."""
    ones = np.ones((cell_count, cell_count), dtype=np.float64)
    counts = np.zeros_like(ones)
    for dx, dy in _OFFSETS:
        _shift_add(counts, ones, dx, dy)
    return counts


def evaporate(layers: PheromoneLayers, speed: float) -> None:
    """Subtract ``speed`` from every channel of every cell, floored at 0.

    Args:
        layers: The pheromone store to update in-place.
        speed: Absolute amount removed per tick.
    """
    layers.levels -= speed
    np.clip(layers.levels, 0.0, layers.max_pheromone, out=layers.levels)


def dissipate(layers: PheromoneLayers, rate: float = 1.0) -> None:
    """Push a fraction of each cell's pheromone out to its neighbours.

    Every cell gives away ``amount / max_pheromone * rate`` per channel,
    split evenly across its in-bounds neighbours, and loses what it gave.
    All transfers are computed from the same snapshot so the result does
    not depend on iteration order.  Modifies ``layers.levels`` in-place.

    Args:
        layers: The pheromone store to update.
        rate: Tunable diffusion constant.
    """
    if rate <= 0:
        return

    levels = layers.levels
    given = levels / layers.max_pheromone * rate
    share = given / neighbour_counts(layers.cell_count)[..., np.newaxis]

    received = np.zeros_like(levels)
    for dx, dy in _OFFSETS:
        _shift_add(received, share, dx, dy)

    levels += received - given
    np.clip(levels, 0.0, layers.max_pheromone, out=levels)


def update_layers(
    layers: PheromoneLayers,
    evaporation_speed: float,
    *,
    using_dissipation: bool = False,
    dissipation_rate: float = 1.0,
) -> None:
    """Run one global pheromone update: evaporation, then optional dissipation.

    Args:
        layers: The complete pheromone store.
        evaporation_speed: Amount every channel decays by.
        using_dissipation: Whether to diffuse to neighbours afterwards.
        dissipation_rate: Tunable diffusion constant for ``dissipate``.
    """
    evaporate(layers, evaporation_speed)
    if using_dissipation:
        dissipate(layers, dissipation_rate)
