"""
Cancellable timer scheduling for the keep-alive core.

``SchedulerClock`` runs timers on an APScheduler background scheduler with
a single worker, so callbacks never overlap. Daily timers follow the wall
clock (cron trigger), interval and one-shot timers follow elapsed time.
``ManualClock`` moves only when told to, which makes schedules fully
deterministic; it keeps wall time and elapsed time apart so a suspended
machine can be simulated.
"""

from __future__ import annotations

import itertools
import logging
import threading
from datetime import datetime, time, timedelta, timezone
from typing import Callable, List, Optional, Union

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)

Callback = Callable[[], None]

# How late a daily job may still run, e.g. right after the machine resumes.
DAILY_MISFIRE_GRACE_SECONDS = 300
# Upper bound on how long the scheduler sleeps before re-reading the wall clock.
WAKE_INTERVAL_SECONDS = 30


class TimerHandle:
    """Handle returned for every armed timer. Cancelling is final."""

    def __init__(self, description: str) -> None:
        self._cancelled = False
        self.description = description

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "live"
        return f"<{self.__class__.__name__} {self.description} {state}>"


class Clock:
    """Timer contract consumed by the scheduler and the dispatcher."""

    def now(self) -> datetime:  # pragma: no cover - interface
        raise NotImplementedError

    def after(self, delay: float, callback: Callback) -> TimerHandle:  # pragma: no cover - interface
        """Run ``callback`` once, ``delay`` seconds from now."""
        raise NotImplementedError

    def every(self, period: float, callback: Callback) -> TimerHandle:  # pragma: no cover - interface
        """Run ``callback`` every ``period`` seconds; the first run is one period away."""
        raise NotImplementedError

    def every_day_at(self, at: time, callback: Callback) -> TimerHandle:  # pragma: no cover - interface
        """Run ``callback`` each day when the wall clock reaches ``at``."""
        raise NotImplementedError

    def pending(self) -> int:  # pragma: no cover - interface
        """Number of live timers."""
        raise NotImplementedError


class JobHandle(TimerHandle):
    """Timer backed by one APScheduler job; cancelling removes the job."""

    def __init__(self, description: str) -> None:
        super().__init__(description)
        self.job = None

    def cancel(self) -> None:
        super().cancel()
        if self.job is None:
            return
        try:
            self.job.remove()
        except JobLookupError:
            # One-shot jobs are gone once they have run
            pass


class SchedulerClock(Clock):
    """Real clock on an APScheduler ``BackgroundScheduler``."""

    def __init__(self, wake_interval: float = WAKE_INTERVAL_SECONDS) -> None:
        self._scheduler = BackgroundScheduler(
            executors={"default": ThreadPoolExecutor(max_workers=1)},
            job_defaults={"coalesce": True, "max_instances": 1},
        )
        self._scheduler.start()
        # The scheduler sleeps on elapsed time, which stops during suspend; this
        # job bounds the sleep so cron jobs are checked soon after resuming.
        self._scheduler.add_job(_noop, IntervalTrigger(seconds=wake_interval), id="wake")
        logger.debug("APScheduler started")

    def now(self) -> datetime:
        return datetime.now()

    def after(self, delay: float, callback: Callback) -> TimerHandle:
        run_date = datetime.now(timezone.utc) + timedelta(seconds=max(delay, 0.0))
        return self._add(f"after({delay}s)", callback, DateTrigger(run_date=run_date), misfire_grace_time=None)

    def every(self, period: float, callback: Callback) -> TimerHandle:
        if period <= 0:
            raise ValueError("Timer period must be positive")
        return self._add(
            f"every({period}s)", callback, IntervalTrigger(seconds=period), misfire_grace_time=max(int(period), 1)
        )

    def every_day_at(self, at: time, callback: Callback) -> TimerHandle:
        return self._add(
            f"every_day_at({at.strftime('%H:%M')})",
            callback,
            CronTrigger(hour=at.hour, minute=at.minute),
            misfire_grace_time=DAILY_MISFIRE_GRACE_SECONDS,
        )

    def pending(self) -> int:
        return sum(1 for job in self._scheduler.get_jobs() if job.id != "wake")

    def shutdown(self) -> None:
        """Stop the scheduler; queued jobs are dropped."""
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)

    def _add(self, description: str, callback: Callback, trigger, **options) -> JobHandle:
        handle = JobHandle(description)

        def run() -> None:
            # A job already handed to the executor may have been cancelled since.
            if not handle.cancelled:
                callback()

        handle.job = self._scheduler.add_job(run, trigger, name=description, **options)
        return handle


def _noop() -> None:
    pass


class _Entry:
    """One queued ManualClock timer, due at an elapsed-time or wall-clock deadline."""

    def __init__(self, handle: TimerHandle, callback: Callback, deadline: Union[float, datetime], order: int):
        self.handle = handle
        self.callback = callback
        self.deadline = deadline
        self.order = order


class ManualClock(Clock):
    """
    Simulated clock for deterministic runs.

    Time only moves inside ``advance``/``advance_to``/``suspend``. Every
    timer due in the covered span fires, in order, with ``now()`` set to
    its deadline. ``suspend`` moves the wall clock alone, like a machine
    that slept: daily timers that came due fire on the next advance.
    """

    def __init__(self, start: Optional[datetime] = None) -> None:
        self._start = start or datetime(2026, 1, 5, 8, 0, 0)
        self._elapsed = 0.0
        self._suspended = 0.0
        self._entries: List[_Entry] = []
        self._sequence = itertools.count()
        # Callbacks run unlocked; commands on other threads may arm timers meanwhile
        self._lock = threading.Lock()

    def monotonic(self) -> float:
        return self._elapsed

    def now(self) -> datetime:
        return self._start + timedelta(seconds=self._elapsed + self._suspended)

    def after(self, delay: float, callback: Callback) -> TimerHandle:
        handle = TimerHandle(f"after({delay}s)")
        self._push(handle, callback, self._elapsed + max(delay, 0.0))
        return handle

    def every(self, period: float, callback: Callback) -> TimerHandle:
        if period <= 0:
            raise ValueError("Timer period must be positive")
        handle = TimerHandle(f"every({period}s)")

        def fire(deadline: float) -> None:
            # Fixed rate: the next deadline follows the previous one, not the callback.
            self._push(handle, lambda: fire(deadline + period), deadline + period)
            callback()

        first = self._elapsed + period
        self._push(handle, lambda: fire(first), first)
        return handle

    def every_day_at(self, at: time, callback: Callback) -> TimerHandle:
        handle = TimerHandle(f"every_day_at({at.strftime('%H:%M')})")
        now = self.now()
        target = datetime.combine(now.date(), at)
        if target <= now:
            target += timedelta(days=1)

        def fire(current_target: datetime) -> None:
            next_target = current_target + timedelta(days=1)
            self._push(handle, lambda: fire(next_target), next_target)
            callback()

        self._push(handle, lambda: fire(target), target)
        return handle

    def pending(self) -> int:
        with self._lock:
            return sum(1 for entry in self._entries if not entry.handle.cancelled)

    def advance(self, seconds: float) -> None:
        """Move time forward, firing everything due on the way."""
        until = self._elapsed + seconds
        while True:
            entry = self._pop_next(until)
            if entry is None:
                break
            try:
                entry.callback()
            except Exception:
                logger.exception("Timer callback %s failed", entry.handle.description)
        self._elapsed = until

    def advance_to(self, moment: datetime) -> None:
        self.advance(max((moment - self.now()).total_seconds(), 0.0))

    def suspend(self, seconds: float) -> None:
        """Move the wall clock only; elapsed-time timers do not notice."""
        self._suspended += seconds

    def _pop_next(self, until: float) -> Optional[_Entry]:
        with self._lock:
            self._entries = [entry for entry in self._entries if not entry.handle.cancelled]
            if not self._entries:
                return None
            entry = min(self._entries, key=lambda e: (self._position(e), e.order))
            position = self._position(entry)
            if position > until:
                return None
            self._entries.remove(entry)
            self._elapsed = max(self._elapsed, position)
            return entry

    def _position(self, entry: _Entry) -> float:
        """Deadline of ``entry`` on the elapsed-time axis."""
        if isinstance(entry.deadline, datetime):
            return self._elapsed + (entry.deadline - self.now()).total_seconds()
        return entry.deadline

    def _push(self, handle: TimerHandle, callback: Callback, deadline: Union[float, datetime]) -> None:
        with self._lock:
            self._entries.append(_Entry(handle, callback, deadline, next(self._sequence)))
