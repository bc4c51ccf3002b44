"""Fire-and-forget delivery of tick, error and schedule events to one observer."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Union

from models import ErrorEvent, ScheduleEvent, TickEvent

logger = logging.getLogger(__name__)

KeeperEvent = Union[TickEvent, ErrorEvent, ScheduleEvent]
Observer = Callable[[KeeperEvent], None]


class EventNotifier:
    """
    Hands each event to the registered observer exactly once.

    No queue, no retry: with no observer attached the event is dropped,
    and an observer that raises only costs that one delivery.
    """

    def __init__(self) -> None:
        self._observer: Optional[Observer] = None
        self._lock = threading.Lock()

    def register_observer(self, callback: Observer) -> None:
        """Attach ``callback``, replacing any previous observer."""
        with self._lock:
            self._observer = callback

    def clear_observer(self) -> None:
        with self._lock:
            self._observer = None

    def has_observer(self) -> bool:
        return self._observer is not None

    def emit(self, event: KeeperEvent) -> None:
        with self._lock:
            observer = self._observer
        if observer is None:
            return
        try:
            observer(event)
        except Exception:
            logger.exception("Observer failed to handle %s", event.kind)
