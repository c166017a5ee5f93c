"""Entry point for ``python -m trailgrid``.

Loads the default YAML config, builds a simulation engine and opens a
Pygame window to watch the colony find its paths.
"""

from __future__ import annotations

import argparse
import logging
import pathlib

from trailgrid.simulation.config import SimulationConfig
from trailgrid.simulation.engine import SimulationEngine
from trailgrid.ui.pygame_client import PygameRenderer

_DEFAULT_CONFIG = (
    pathlib.Path(__file__).resolve().parent.parent / "config" / "default.yaml"
)


def main() -> None:
    """Parse CLI args, create engine, launch renderer."""
    parser = argparse.ArgumentParser(
        prog="trailgrid",
        description="trailgrid - ant colony optimization on a grid",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=_DEFAULT_CONFIG,
        help="Path to YAML config file (default: config/default.yaml)",
    )
    parser.add_argument(
        "--window-size",
        type=int,
        default=900,
        help="Pixel size of the grid area (default: 900)",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=60,
        help="Target frames per second (default: 60)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Override the RNG seed from the config file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = SimulationConfig.from_yaml(args.config)
    if args.seed is not None:
        config.seed = args.seed
    engine = SimulationEngine(config=config)

    renderer = PygameRenderer(engine=engine, window_size=args.window_size)
    renderer.run(fps=args.fps)


if __name__ == "__main__":
    main()
