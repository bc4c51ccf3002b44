"""
Main entry point for Screen Keeper.

Runs the keep-alive core headless from the stored settings:

    python main.py --start
    python main.py --settings ./settings.json --backend pynput --verbose

Clean Code principles:
- Minimal main file
- Dependency injection at the root
- Clear program flow
"""

from __future__ import annotations

import argparse
import logging
import threading
from pathlib import Path
from typing import List, Optional

from action_dispatcher import ActionDispatcher
from clock import SchedulerClock
from event_notifier import EventNotifier
from input_actuator import ActuatorFailure, create_actuator
from logger import ActivityLog
from models import InvalidConfiguration
from scheduler import KeepAliveScheduler
from settings_manager import SettingsStore, load_settings


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Keep this machine's presence active.")
    parser.add_argument("--settings", type=Path, help="settings JSON file (default: next to this program)")
    parser.add_argument("--backend", help="input backend: pyautogui, pynput or pywinauto")
    parser.add_argument("--start", action="store_true", help="start automation now, even if not enabled in settings")
    parser.add_argument("--export-log", type=Path, help="write the activity log here on exit")
    parser.add_argument("--verbose", action="store_true", help="debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Application entry point.

    Returns:
        int: process exit code
    """
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not args.verbose:
        # APScheduler logs every job run at INFO
        logging.getLogger("apscheduler").setLevel(logging.WARNING)

    store = SettingsStore(args.settings)
    try:
        settings = load_settings(store)
    except InvalidConfiguration as e:
        print(f"Invalid settings in {store.storage_path}: {e}")
        return 2

    try:
        actuator = create_actuator(args.backend)
    except ActuatorFailure as e:
        print(str(e))
        return 2

    clock = SchedulerClock()
    notifier = EventNotifier()
    activity_log = ActivityLog(echo=lambda entry: print(entry))
    notifier.register_observer(activity_log)
    scheduler = KeepAliveScheduler(clock, ActionDispatcher(actuator, clock, notifier), notifier)

    try:
        if settings.daily_auto_start:
            print(scheduler.configure_daily(True, settings.daily_start_time, settings))
        if settings.enabled or args.start:
            print(scheduler.start(settings))
        if not scheduler.is_running() and not scheduler.daily_scheduled():
            print("Nothing scheduled: enable automation or the daily auto start in the settings, or pass --start.")
            return 0

        # Wait until interrupted
        threading.Event().wait()
    except InvalidConfiguration as e:
        print(f"Invalid settings: {e}")
        return 2
    except KeyboardInterrupt:
        print("Stopping...")
    finally:
        scheduler.shutdown()
        clock.shutdown()
        if args.export_log:
            activity_log.export_to_file(str(args.export_log))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
