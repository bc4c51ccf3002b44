"""
Domain models for the Screen Keeper application.
Each class follows the Single Responsibility Principle (SRP).
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


MIN_INTERVAL_SECONDS = 10


class InvalidConfiguration(ValueError):
    """Raised when settings are missing a required field or hold an unparseable value."""


class ActionType(Enum):
    """Enumeration of supported keep-alive actions."""
    POINTER = "pointer"
    KEY = "key"

    @staticmethod
    def parse(raw: Any) -> "ActionType":
        """Accept the current names and the legacy 'mouse'/'keyboard' store values."""
        value = str(raw or "").strip().lower()
        aliases = {"mouse": ActionType.POINTER, "keyboard": ActionType.KEY}
        if value in aliases:
            return aliases[value]
        try:
            return ActionType(value)
        except ValueError:
            raise InvalidConfiguration(f"Unknown action type: {raw!r}")


class SchedulerState(Enum):
    """Enumeration of scheduler states."""
    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class KeeperSettings:
    """
    Immutable snapshot of the automation settings.

    A running timer keeps the snapshot it was armed with; a changed
    snapshot only takes effect when the caller re-arms the scheduler.
    """
    action_type: ActionType = ActionType.POINTER
    key: Optional[str] = "space"
    interval_seconds: int = 60
    use_time_restriction: bool = False
    start_time: Optional[str] = "09:00"
    end_time: Optional[str] = "17:00"
    enabled: bool = False
    daily_auto_start: bool = False
    daily_start_time: Optional[str] = "09:00"

    def effective_interval(self) -> int:
        """Period actually used by a running timer, never below the minimum."""
        return max(self.interval_seconds, MIN_INTERVAL_SECONDS)

    def validate(self) -> None:
        """
        Check that every conditionally required field is usable.

        Raises:
            InvalidConfiguration: on the first problem found
        """
        # window_gate imports this module
        from window_gate import parse_hhmm

        if self.action_type == ActionType.KEY and not (self.key or "").strip():
            raise InvalidConfiguration("A key is required when the action type is 'key'")

        if self.use_time_restriction:
            parse_hhmm(self.start_time)
            parse_hhmm(self.end_time)

        if self.daily_auto_start:
            parse_hhmm(self.daily_start_time)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize settings using the keys of the persisted store."""
        return {
            "actionType": self.action_type.value,
            "key": self.key,
            "interval": self.interval_seconds,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "enabled": self.enabled,
            "useTimeRestriction": self.use_time_restriction,
            "dailyAutoStart": self.daily_auto_start,
            "dailyStartTime": self.daily_start_time,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "KeeperSettings":
        """Create a settings snapshot from a store dictionary."""
        interval_raw = data.get("interval", data.get("intervalSeconds", 60))
        try:
            interval = int(interval_raw) if interval_raw is not None else 60
        except (TypeError, ValueError):
            raise InvalidConfiguration(f"Interval must be a whole number of seconds: {interval_raw!r}")

        key_raw = data.get("key")
        return KeeperSettings(
            action_type=ActionType.parse(data.get("actionType", ActionType.POINTER.value)),
            key=str(key_raw) if key_raw not in (None, "") else None,
            interval_seconds=interval,
            use_time_restriction=bool(data.get("useTimeRestriction", False)),
            start_time=data.get("startTime", "09:00"),
            end_time=data.get("endTime", "17:00"),
            enabled=bool(data.get("enabled", False)),
            daily_auto_start=bool(data.get("dailyAutoStart", False)),
            daily_start_time=data.get("dailyStartTime", "09:00"),
        )


@dataclass
class AutomationState:
    """Timer handles and running flag owned by a single scheduler."""
    interval_timer: Optional[Any] = None
    daily_timer: Optional[Any] = None

    @property
    def is_running(self) -> bool:
        return self.interval_timer is not None


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a single dispatched action."""
    success: bool
    message: str = ""

    @staticmethod
    def ok(message: str = "") -> "ActionResult":
        return ActionResult(True, message)

    @staticmethod
    def failed(message: str) -> "ActionResult":
        return ActionResult(False, message)


@dataclass(frozen=True)
class TickEvent:
    """One interval firing that performed its action."""
    timestamp: datetime
    action: str
    key: Optional[str] = None
    kind: str = field(default="automation-tick", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"timestamp": self.timestamp.isoformat(), "action": self.action, "key": self.key}


@dataclass(frozen=True)
class ScheduleEvent:
    """The daily trigger fired and re-armed the interval trigger."""
    timestamp: datetime
    start_time: str
    kind: str = field(default="daily-automation-started", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"timestamp": self.timestamp.isoformat(), "startTime": self.start_time}


@dataclass(frozen=True)
class ErrorEvent:
    """An action failed; the schedule keeps running."""
    timestamp: datetime
    message: str
    kind: str = field(default="automation-error", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"timestamp": self.timestamp.isoformat(), "message": self.message}
