"""Pygame 2D visualization for the trailgrid simulation.

Renders the grid, pheromone colours, ants and shortest-path overlays in
a window, and turns mouse/keyboard input into engine intents.  The model
ticks on the engine's background thread at its own rate while this loop
redraws at the Pygame frame rate.
"""

from __future__ import annotations

import colorsys
import math
from typing import TYPE_CHECKING, ClassVar

import pygame

if TYPE_CHECKING:
    from trailgrid.simulation.engine import SimulationEngine
    from trailgrid.simulation.snapshot import NodeView, Snapshot

from trailgrid.world.node import NodeKind

# Colour palette
_BG = (128, 128, 128)
_WALL = (64, 64, 64)
_NEST = (133, 87, 35)
_FOOD = (0, 255, 0)
_PATH = (255, 0, 0)
_TEXT = (230, 230, 230)

_ANT_COLOURS: dict[bool, tuple[int, int, int]] = {
    False: (20, 20, 20),
    True: (255, 200, 50),
}

# Hue of channel 0; each further channel shifts by _HUE_STEP
_HUE_BASE = 0.49
_HUE_STEP = 0.1


def node_colour(view: NodeView) -> tuple[int, int, int]:
    """RGB colour for a cell: kind first, then strongest pheromone."""
    match view.kind:
        case NodeKind.NEST:
            return _NEST
        case NodeKind.FOOD_SOURCE:
            return _FOOD
        case NodeKind.TILE if view.blocking:
            return _WALL
        case NodeKind.TILE:
            hue = (_HUE_BASE + _HUE_STEP * view.dominant_channel) % 1.0
            r, g, b = colorsys.hsv_to_rgb(hue, min(view.saturation, 1.0), 1.0)
            return (int(r * 255), int(g * 255), int(b * 255))
    return _BG


class PygameRenderer:
    """Renders a SimulationEngine snapshot into a Pygame window.

    Attributes:
        engine: The simulation engine to visualise.
        window_size: Pixel width/height of the grid area.
        screen: The Pygame display surface.
    """

    # Tick-rate presets in ticks per second
    _SPEED_STEPS: ClassVar[list[int]] = [1, 2, 5, 10, 15, 30, 60, 120, 240]

    def __init__(self, engine: SimulationEngine, window_size: int = 900) -> None:
        """Initialise the renderer.

        Args:
            engine: The simulation engine to render.
            window_size: Pixel size of the square grid area.
        """
        self.engine = engine
        self.window_size = window_size
        self._speed_index = self._nearest_speed(engine.runner.tick_rate)
        self._hover: tuple[int, int] | None = None
        self._show_paths = False

        self._panel_width = 220
        pygame.init()
        self.screen = pygame.display.set_mode(
            (window_size + self._panel_width, window_size),
        )
        pygame.display.set_caption("trailgrid")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 14)
        self.running = True

    def _nearest_speed(self, tps: int) -> int:
        """Return the index of the closest speed preset."""
        return min(
            range(len(self._SPEED_STEPS)),
            key=lambda i: abs(self._SPEED_STEPS[i] - tps),
        )

    def _cell_pixels(self, cell_count: int) -> int:
        return max(1, self.window_size // cell_count)

    def run(self, fps: int = 60) -> None:
        """Main loop: handle events and render until the window closes.

        Args:
            fps: Target frames per second.
        """
        self.engine.start()
        try:
            while self.running:
                self.clock.tick(fps)
                self._handle_events()
                self._draw(self.engine.snapshot())
        finally:
            self.engine.stop()
            pygame.quit()

    def _cell_under(self, pos: tuple[int, int]) -> tuple[int, int] | None:
        cell_count = self.engine.grid.cell_count
        cs = self._cell_pixels(cell_count)
        x, y = pos[0] // cs, pos[1] // cs
        if 0 <= x < cell_count and 0 <= y < cell_count:
            return (x, y)
        return None

    def _handle_events(self) -> None:
        """Translate Pygame input events into engine intents."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.MOUSEMOTION:
                self._hover = self._cell_under(event.pos)
            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                cell = self._cell_under(event.pos)
                if cell is not None:
                    self.engine.toggle_blocking(*cell)
            elif event.type == pygame.KEYDOWN:
                self._handle_key(event.key)

    def _handle_key(self, key: int) -> None:
        engine = self.engine
        if key == pygame.K_ESCAPE:
            self.running = False
        elif key == pygame.K_SPACE:
            engine.set_model_running(not engine.runner.model_running)
        elif key == pygame.K_f and self._hover is not None:
            if not engine.place_food_source(*self._hover):
                engine.remove_food_source(*self._hover)
        elif key == pygame.K_n and self._hover is not None:
            if not engine.place_nest(*self._hover):
                engine.remove_nest(*self._hover)
        elif key == pygame.K_p:
            self._show_paths = not self._show_paths
            engine.show_shortest_paths(self._show_paths)
        elif key == pygame.K_r:
            engine.reset_model()
        elif key == pygame.K_c:
            engine.clear_grid()
        elif key in (pygame.K_PLUS, pygame.K_EQUALS):
            self._speed_index = min(len(self._SPEED_STEPS) - 1, self._speed_index + 1)
            engine.set_model_tick_rate(self._SPEED_STEPS[self._speed_index])
        elif key == pygame.K_MINUS:
            self._speed_index = max(0, self._speed_index - 1)
            engine.set_model_tick_rate(self._SPEED_STEPS[self._speed_index])

    def _draw(self, snapshot: Snapshot) -> None:
        """Render one frame."""
        self.screen.fill(_BG)
        cs = self._cell_pixels(snapshot.cell_count)
        self._draw_nodes(snapshot, cs)
        self._draw_paths(snapshot, cs)
        self._draw_ants(snapshot, cs)
        self._draw_info_panel(snapshot)
        pygame.display.flip()

    def _draw_nodes(self, snapshot: Snapshot, cs: int) -> None:
        for view in snapshot.nodes:
            pygame.draw.rect(
                self.screen,
                node_colour(view),
                (view.x * cs + 1, view.y * cs + 1, cs - 1, cs - 1),
            )

    def _draw_paths(self, snapshot: Snapshot, cs: int) -> None:
        """Draw path overlays as small red squares."""
        third = max(1, cs // 3)
        for path in snapshot.paths:
            for x, y in path:
                pygame.draw.rect(
                    self.screen,
                    _PATH,
                    (x * cs + third, y * cs + third, third, third),
                )

    def _draw_ants(self, snapshot: Snapshot, cs: int) -> None:
        """Draw each ant as a dot with a short line towards its facing."""
        radius = max(2, cs // 4)
        for ant in snapshot.ants:
            colour = _ANT_COLOURS[ant.carrying_food]
            cx = ant.x * cs + cs // 2
            cy = ant.y * cs + cs // 2
            dx, dy = ant.facing.value
            length = math.hypot(dx, dy)
            tip = (
                int(cx + dx / length * cs * 0.45),
                int(cy + dy / length * cs * 0.45),
            )
            pygame.draw.circle(self.screen, colour, (cx, cy), radius)
            pygame.draw.line(self.screen, colour, (cx, cy), tip, 2)

    def _draw_info_panel(self, snapshot: Snapshot) -> None:
        """Draw a stats panel on the right side of the window."""
        panel_x = self.window_size + 10
        y = 10
        running = self.engine.runner.model_running

        lines = [
            f"Tick: {snapshot.model_ticks}",
            f"Speed: {self.engine.runner.tick_rate} t/s",
            f"{'RUNNING' if running else 'PAUSED'}",
            "",
            f"Ants: {len(snapshot.ants)}",
            f"Food: {snapshot.food_gathered}",
            f"Grid: {snapshot.cell_count}x{snapshot.cell_count}",
            "",
            "--- Controls ---",
            "SPACE: run/pause",
            "click: wall",
            "F/N: food/nest",
            "P: shortest paths",
            "R: reset  C: clear",
            "+/-: speed",
            "ESC: quit",
        ]

        for line in lines:
            surf = self.font.render(line, True, _TEXT)
            self.screen.blit(surf, (panel_x, y))
            y += 18
