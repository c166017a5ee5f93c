"""ModelRunner — the dedicated simulation thread.

Calls a tick function at a configurable rate, independently of however
often a renderer draws.  The runner only decides *when* to tick; the
tick itself takes the grid lock, so rendering and grid edits on other
threads stay consistent.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

log = logging.getLogger(__name__)


class ModelRunner:
    """Runs ``tick`` on a background thread at ``tick_rate`` per second.

    Attributes:
        tick: The function called once per model tick.
        ticks_run: Ticks executed since the thread started.
    """

    def __init__(self, tick: Callable[[], None], tick_rate: int = 30) -> None:
        """Prepare a stopped runner.

        Args:
            tick: Function advancing the model by one tick.
            tick_rate: Ticks per second while the model is running.
        """
        self.tick = tick
        self.tick_rate = tick_rate
        self.ticks_run = 0
        self._model_running = threading.Event()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def tick_rate(self) -> int:
        """Model ticks per second."""
        return self._tick_rate

    @tick_rate.setter
    def tick_rate(self, value: int) -> None:
        if value <= 0:
            msg = f"model_tick_rate must be > 0, got {value}"
            raise ValueError(msg)
        self._tick_rate = int(value)

    @property
    def model_running(self) -> bool:
        """Whether ticks are currently being issued."""
        return self._model_running.is_set()

    def set_model_running(self, running: bool) -> None:
        """Resume or pause ticking without stopping the thread."""
        if running:
            self._model_running.set()
        else:
            self._model_running.clear()

    @property
    def alive(self) -> bool:
        """Whether the background thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background thread (no-op if already started).

        If a previous ``stop`` timed out while a tick was still running,
        waits for that thread to finish first so only one loop ever ticks.
        """
        if self.alive:
            if not self._stop.is_set():
                return
            log.debug("Waiting for the previous model thread to finish")
            self._thread.join()
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop,
            name="trailgrid-model",
            daemon=True,
        )
        self._thread.start()
        log.info("Model runner started at %d ticks/s", self._tick_rate)

    def stop(self, timeout: float | None = None) -> None:
        """Stop the thread after its current tick and wait for it.

        Args:
            timeout: Seconds to wait for the join.  If the thread is still
                finishing a tick afterwards it stays tracked and ``alive``.
        """
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join(timeout)
        if self._thread.is_alive():
            log.warning("Model thread still busy after %s s; stop pending", timeout)
            return
        self._thread = None
        log.info("Model runner stopped after %d ticks", self.ticks_run)

    def _loop(self) -> None:
        while not self._stop.is_set():
            budget = 1.0 / self._tick_rate
            if not self._model_running.is_set():
                self._stop.wait(budget)
                continue

            started = time.monotonic()
            try:
                self.tick()
            except Exception:
                log.exception("Model tick failed; stopping runner")
                raise
            self.ticks_run += 1

            elapsed = time.monotonic() - started
            if elapsed > budget:
                log.warning(
                    "Model tick took %.1f ms, over the %.1f ms budget",
                    elapsed * 1000.0,
                    budget * 1000.0,
                )
            self._stop.wait(max(0.0, budget - elapsed))
