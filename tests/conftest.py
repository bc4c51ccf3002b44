from datetime import datetime

import pytest

from action_dispatcher import ActionDispatcher
from clock import ManualClock
from event_notifier import EventNotifier
from fakes import RecordingActuator
from scheduler import KeepAliveScheduler


@pytest.fixture
def clock():
    # A Monday morning
    return ManualClock(start=datetime(2026, 1, 5, 8, 0, 0))


@pytest.fixture
def actuator(clock):
    return RecordingActuator(clock)


@pytest.fixture
def events():
    return []


@pytest.fixture
def notifier(events):
    n = EventNotifier()
    n.register_observer(events.append)
    return n


@pytest.fixture
def dispatcher(actuator, clock, notifier):
    return ActionDispatcher(actuator, clock, notifier)


@pytest.fixture
def scheduler(clock, dispatcher, notifier):
    return KeepAliveScheduler(clock, dispatcher, notifier)
