"""
Action Dispatcher - performs one keep-alive action per tick.

SRP: decides which actuator calls a tick needs and converts every
actuator failure into an ActionResult. It never raises into the caller.
"""

from __future__ import annotations

import logging
from typing import Optional

from clock import Clock
from event_notifier import EventNotifier
from input_actuator import InputActuator
from models import ActionResult, ActionType, ErrorEvent

logger = logging.getLogger(__name__)

POINTER_NUDGE_OFFSET = 10
POINTER_RESTORE_DELAY_SECONDS = 0.1


class ActionDispatcher:
    """
    Requests a pointer nudge or a key press from the Input Actuator.

    A pointer nudge moves the pointer by a fixed offset and arms a one-shot
    timer that puts it back; the tick returns without waiting for it.
    """

    def __init__(
        self,
        actuator: InputActuator,
        clock: Clock,
        notifier: Optional[EventNotifier] = None,
        nudge_offset: int = POINTER_NUDGE_OFFSET,
        restore_delay: float = POINTER_RESTORE_DELAY_SECONDS,
    ):
        self._actuator = actuator
        self._clock = clock
        self._notifier = notifier
        self._nudge_offset = nudge_offset
        self._restore_delay = restore_delay

    def perform(self, action_type: ActionType, key: Optional[str] = None) -> ActionResult:
        """
        Run one action.

        Returns:
            ActionResult: failure carries the actuator's error message
        """
        try:
            if action_type == ActionType.POINTER:
                return self._nudge_pointer()
            if action_type == ActionType.KEY:
                return self._press_key(key)
            return ActionResult.failed(f"Unsupported action type: {action_type}")
        except Exception as e:
            logger.warning("%s action failed: %s", action_type.value, e)
            return ActionResult.failed(str(e) or e.__class__.__name__)

    def _nudge_pointer(self) -> ActionResult:
        x, y = self._actuator.get_pointer_position()
        self._actuator.move_pointer_to(x + self._nudge_offset, y + self._nudge_offset)
        self._clock.after(self._restore_delay, lambda: self._restore_pointer(x, y))
        return ActionResult.ok(f"Pointer nudged from ({x}, {y})")

    def _restore_pointer(self, x: int, y: int) -> None:
        try:
            self._actuator.move_pointer_to(x, y)
        except Exception as e:
            logger.warning("Pointer restore to (%s, %s) failed: %s", x, y, e)
            if self._notifier is not None:
                self._notifier.emit(ErrorEvent(self._clock.now(), f"Pointer restore failed: {e}"))

    def _press_key(self, key: Optional[str]) -> ActionResult:
        if not key:
            return ActionResult.failed("No key configured for key action")
        self._actuator.press_key(key)
        return ActionResult.ok(f"Pressed {key}")
