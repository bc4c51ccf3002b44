from datetime import datetime

from event_notifier import EventNotifier
from models import ErrorEvent, ScheduleEvent, TickEvent

NOW = datetime(2026, 1, 5, 9, 0)


def test_emit_without_observer_is_dropped():
    notifier = EventNotifier()
    assert not notifier.has_observer()
    notifier.emit(TickEvent(NOW, "pointer"))


def test_each_emit_is_delivered_once():
    notifier = EventNotifier()
    received = []
    notifier.register_observer(received.append)

    tick = TickEvent(NOW, "key", "space")
    notifier.emit(tick)
    assert received == [tick]


def test_register_replaces_previous_observer():
    notifier = EventNotifier()
    first, second = [], []
    notifier.register_observer(first.append)
    notifier.register_observer(second.append)

    notifier.emit(ScheduleEvent(NOW, "09:00"))
    assert first == []
    assert len(second) == 1


def test_clear_observer():
    notifier = EventNotifier()
    received = []
    notifier.register_observer(received.append)
    notifier.clear_observer()
    notifier.emit(ErrorEvent(NOW, "boom"))
    assert received == []


def test_failing_observer_does_not_raise_or_retry():
    notifier = EventNotifier()
    calls = []

    def observer(event):
        calls.append(event)
        raise RuntimeError("observer broke")

    notifier.register_observer(observer)
    notifier.emit(ErrorEvent(NOW, "boom"))
    assert len(calls) == 1


def test_event_payloads():
    assert TickEvent(NOW, "key", "f15").to_dict() == {"timestamp": "2026-01-05T09:00:00", "action": "key", "key": "f15"}
    assert ScheduleEvent(NOW, "09:00").to_dict() == {"timestamp": "2026-01-05T09:00:00", "startTime": "09:00"}
    assert ErrorEvent(NOW, "boom").kind == "automation-error"
