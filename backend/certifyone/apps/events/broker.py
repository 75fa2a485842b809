from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class StoreEvent:
    id: str
    type: str
    entityId: Optional[str]
    action: str
    ok: bool
    message: str
    timestamp: str
    metadata: Dict[str, Any] = field(default_factory=dict)


Subscriber = Callable[[StoreEvent], None]


class EventBroker:
    """
    Fan-out of store events to observer callbacks.

    Callers use this for user-facing notifications; a subscriber that
    raises is logged and skipped so it never affects the publisher.
    """

    def __init__(self, replay_size: int = 200) -> None:
        self._subscribers: List[Subscriber] = []
        self._history: Deque[StoreEvent] = deque(maxlen=replay_size)
        self._lock = threading.Lock()

    def subscribe(self, callback: Subscriber) -> Subscriber:
        with self._lock:
            if callback not in self._subscribers:
                self._subscribers.append(callback)
        return callback

    def unsubscribe(self, callback: Subscriber) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def replay_since(self, *, last_event_id: str) -> tuple[list[StoreEvent], bool]:
        """
        Events published after `last_event_id`.

        The flag is True when the id has already fallen out of history and
        the caller should resynchronise from the store itself.
        """
        with self._lock:
            history = list(self._history)
        if not history:
            return [], False
        ids = [event.id for event in history]
        if last_event_id not in ids:
            return [], True
        return history[ids.index(last_event_id) + 1 :], False

    def history(self) -> list[StoreEvent]:
        with self._lock:
            return list(self._history)

    def publish(self, event: StoreEvent) -> None:
        with self._lock:
            self._history.append(event)
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.warning(
                    "Event subscriber failed",
                    exc_info=True,
                    extra={"event_type": event.type, "entity_id": event.entityId},
                )
