"""
Keep-Alive Scheduler - the core business logic.

SRP: owns the interval trigger and the daily trigger and nothing else.
It doesn't know about UI, persistence or how input is produced
(Dependency Inversion Principle): the clock, dispatcher and notifier
are handed in.
"""

from __future__ import annotations

import logging
import threading

from action_dispatcher import ActionDispatcher
from clock import Clock
from event_notifier import EventNotifier
from models import (
    AutomationState,
    ErrorEvent,
    KeeperSettings,
    ScheduleEvent,
    SchedulerState,
    TickEvent,
)
from window_gate import format_hhmm, in_window, parse_hhmm

logger = logging.getLogger(__name__)


class KeepAliveScheduler:
    """
    Two-level timer hierarchy driving the keep-alive actions.

    Every arm operation replaces the timer of the same kind, so at most
    one interval timer and one daily timer are ever live. All state
    changes happen under one re-entrant lock: the daily callback calls
    ``start`` while holding it.
    """

    def __init__(self, clock: Clock, dispatcher: ActionDispatcher, notifier: EventNotifier):
        self._clock = clock
        self._dispatcher = dispatcher
        self._notifier = notifier
        self._state = AutomationState()
        self._lock = threading.RLock()

    @property
    def state(self) -> SchedulerState:
        """Current state: RUNNING while an interval timer is live."""
        return SchedulerState.RUNNING if self.is_running() else SchedulerState.IDLE

    def is_running(self) -> bool:
        """Check if an interval timer is currently live."""
        with self._lock:
            return self._state.is_running

    def daily_scheduled(self) -> bool:
        """Check if a daily timer is currently live."""
        with self._lock:
            return self._state.daily_timer is not None

    def start(self, settings: KeeperSettings) -> str:
        """
        Arm the interval trigger with a snapshot of ``settings``.

        A live interval timer is cancelled first; timers never stack.

        Raises:
            InvalidConfiguration: settings are unusable; nothing is changed
        """
        settings.validate()
        period = settings.effective_interval()

        with self._lock:
            self._cancel_interval()
            handle = None

            def tick() -> None:
                self._on_interval_tick(handle, settings)

            handle = self._clock.every(period, tick)
            self._state.interval_timer = handle

        logger.info("Automation started: %s every %ss", settings.action_type.value, period)
        return "Automation started successfully"

    def stop(self) -> str:
        """Cancel the interval trigger. Stopping an idle scheduler is a no-op."""
        with self._lock:
            if self._cancel_interval():
                logger.info("Automation stopped")
        return "Automation stopped successfully"

    def configure_daily(self, enabled: bool, daily_start_time: object, settings: KeeperSettings) -> str:
        """
        Arm, replace or disable the daily trigger.

        When it fires, the daily trigger calls ``start(settings)`` and
        emits a ScheduleEvent.

        Raises:
            InvalidConfiguration: unparseable time or unusable settings;
                the existing daily timer is kept
        """
        if not enabled:
            with self._lock:
                if self._cancel_daily():
                    logger.info("Daily schedule disabled")
            return "Daily schedule disabled"

        at = parse_hhmm(daily_start_time)
        settings.validate()
        label = format_hhmm(at)

        with self._lock:
            self._cancel_daily()
            handle = None

            def fire() -> None:
                self._on_daily_fire(handle, label, settings)

            handle = self._clock.every_day_at(at, fire)
            self._state.daily_timer = handle

        logger.info("Daily schedule set for %s", label)
        return f"Daily schedule set for {label}"

    def shutdown(self) -> None:
        """Cancel both timers; used when the process exits."""
        with self._lock:
            self._cancel_interval()
            self._cancel_daily()

    def _on_interval_tick(self, handle, settings: KeeperSettings) -> None:
        # Held for the whole tick: stop() and start() return only once an in-flight tick is done.
        with self._lock:
            # A tick already taken off the queue when its timer was replaced must not act.
            if handle is None or self._state.interval_timer is not handle:
                return

            now = self._clock.now()
            if settings.use_time_restriction and not in_window(now, settings.start_time, settings.end_time):
                logger.debug("Tick at %s outside %s-%s, skipped", format_hhmm(now), settings.start_time, settings.end_time)
                return

            result = self._dispatcher.perform(settings.action_type, settings.key)
            if result.success:
                self._notifier.emit(TickEvent(now, settings.action_type.value, settings.key))
            else:
                self._notifier.emit(ErrorEvent(now, result.message))

    def _on_daily_fire(self, handle, label: str, settings: KeeperSettings) -> None:
        with self._lock:
            if handle is None or self._state.daily_timer is not handle:
                return
            logger.info("Daily auto-start triggered at %s", self._clock.now().isoformat())
            self.start(settings)
            self._notifier.emit(ScheduleEvent(self._clock.now(), label))

    def _cancel_interval(self) -> bool:
        handle = self._state.interval_timer
        if handle is None:
            return False
        handle.cancel()
        self._state.interval_timer = None
        return True

    def _cancel_daily(self) -> bool:
        handle = self._state.daily_timer
        if handle is None:
            return False
        handle.cancel()
        self._state.daily_timer = None
        return True
