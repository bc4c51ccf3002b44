"""
Activity Logger - keeps a bounded history of keep-alive events.

SRP: This class has one responsibility - turning scheduler events into
log entries and keeping them for display or export.
"""

from datetime import datetime
from typing import Callable, List, Optional
from dataclasses import dataclass

from event_notifier import KeeperEvent
from models import ErrorEvent, ScheduleEvent, TickEvent


@dataclass
class LogEntry:
    """
    Represents a single log entry.

    Clean Code: Simple data class with descriptive name and fields.
    """
    timestamp: datetime
    message: str
    level: str = "INFO"

    def __str__(self) -> str:
        time_str = self.timestamp.strftime("%H:%M:%S")
        return f"[{time_str}] {self.level}: {self.message}"


class ActivityLog:
    """
    Observer for the event notifier that records every event it receives.

    Clean Code principles:
    - Small, focused methods
    - Clear naming
    - No side effects on external state
    """

    def __init__(self, max_entries: int = 100, echo: Optional[Callable[[LogEntry], None]] = None):
        """
        Initialize the log.

        Args:
            max_entries: Maximum number of log entries to keep in memory
            echo: Optional callback receiving each new entry (e.g. print)
        """
        self._log_entries: List[LogEntry] = []
        self._max_entries = max_entries
        self._echo = echo
        self._tick_count = 0
        self._error_count = 0

    def __call__(self, event: KeeperEvent) -> None:
        """Handle one event from the notifier."""
        if isinstance(event, TickEvent):
            self._tick_count += 1
            detail = f" ({event.key})" if event.key and event.action == "key" else ""
            self._add_entry(event.timestamp, f"Tick: {event.action}{detail}", "INFO")
        elif isinstance(event, ScheduleEvent):
            self._add_entry(event.timestamp, f"Daily automation started at {event.start_time}", "INFO")
        elif isinstance(event, ErrorEvent):
            self._error_count += 1
            self._add_entry(event.timestamp, event.message, "ERROR")

    def log_info(self, message: str) -> None:
        """Log an informational message that is not an event."""
        self._add_entry(datetime.now(), message, "INFO")

    def get_tick_count(self) -> int:
        return self._tick_count

    def get_error_count(self) -> int:
        return self._error_count

    def get_recent_logs(self, count: int = 10) -> List[LogEntry]:
        """
        Get the most recent log entries.

        Args:
            count: Number of recent entries to return
        """
        return self._log_entries[-count:]

    def get_all_logs(self) -> List[LogEntry]:
        """Returns all log entries."""
        return self._log_entries.copy()

    def _add_entry(self, timestamp: datetime, message: str, level: str) -> None:
        entry = LogEntry(timestamp=timestamp, message=message, level=level)
        self._log_entries.append(entry)

        # Trim old entries if we exceed max
        if len(self._log_entries) > self._max_entries:
            self._log_entries = self._log_entries[-self._max_entries:]

        if self._echo:
            self._echo(entry)

    def export_to_file(self, filepath: str) -> None:
        """
        Export all logs to a text file.

        Raises:
            OSError: if the file cannot be written
        """
        with open(filepath, 'w', encoding='utf-8') as f:
            f.write("Screen Keeper - Activity Log Export\n")
            f.write(f"Generated: {datetime.now()}\n")
            f.write("=" * 50 + "\n\n")

            for entry in self._log_entries:
                time_str = entry.timestamp.strftime("%Y-%m-%d %H:%M:%S")
                f.write(f"[{time_str}] {entry.level}: {entry.message}\n")
