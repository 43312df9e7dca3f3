"""Change notifications published to rendering collaborators."""

from __future__ import annotations

import warnings
from collections import defaultdict
from collections.abc import Callable
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class EventType(StrEnum):
    SELECTION_CHANGED = "selection_changed"
    EXPANSION_CHANGED = "expansion_changed"
    SHAPE_CHANGED = "shape_changed"
    THREAD_SWITCHED = "thread_switched"


class ChangeEvent(BaseModel):
    """Payload describing which nodes changed and their new state."""

    model_config = ConfigDict(strict=True, extra="ignore")

    event_type: EventType
    node_ids: list[str] = Field(default_factory=list)
    selected: bool | None = None
    expanded: bool | None = None
    compressed: bool | None = None
    thread_name: str | None = None
    package_name: str | None = None


Subscriber = Callable[[ChangeEvent], None]


class EventBus:
    """Synchronous publish/subscribe keyed by ``EventType``.

    Subscribers run in subscription order. A subscriber that raises is
    reported with ``warnings.warn`` and the remaining subscribers still run.
    """

    def __init__(self) -> None:
        self._subscribers: dict[EventType, list[Subscriber]] = defaultdict(list)

    def subscribe(self, event_type: EventType, callback: Subscriber) -> Callable[[], None]:
        self._subscribers[event_type].append(callback)

        def unsubscribe() -> None:
            callbacks = self._subscribers[event_type]
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def publish(self, event: ChangeEvent) -> None:
        for callback in list(self._subscribers.get(event.event_type, ())):
            try:
                callback(event)
            except Exception as exc:
                warnings.warn(
                    f"tracestack: subscriber error in {event.event_type.value}: {exc}",
                    stacklevel=2,
                )
