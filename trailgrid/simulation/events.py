"""Change notifications emitted by the model for UI labels and tests."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto


class ModelEvent(Enum):
    """Observable model properties."""

    TICK_COUNT_CHANGED = auto()
    FOOD_GATHERED_CHANGED = auto()
    ANT_COUNT_CHANGED = auto()


@dataclass(frozen=True)
class ChangeEvent:
    """A single property change.

    Attributes:
        kind: Which property changed.
        old: Previous value (None when unknown).
        new: Current value.
    """

    kind: ModelEvent
    old: int | None
    new: int


Listener = Callable[[ChangeEvent], None]


@dataclass
class EventSink:
    """Fan-out of change events to subscribed callables, in order."""

    listeners: list[Listener] = field(default_factory=list)

    def subscribe(self, listener: Listener) -> None:
        """Register ``listener`` for every future event."""
        self.listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        """Stop delivering events to ``listener``."""
        if listener in self.listeners:
            self.listeners.remove(listener)

    def emit(self, kind: ModelEvent, old: int | None, new: int) -> None:
        """Deliver a change to every listener."""
        event = ChangeEvent(kind=kind, old=old, new=new)
        for listener in list(self.listeners):
            listener(event)
