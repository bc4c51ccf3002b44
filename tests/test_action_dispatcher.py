from action_dispatcher import ActionDispatcher
from models import ActionType, ErrorEvent


def test_pointer_nudge_moves_then_restores_after_delay(dispatcher, actuator, clock):
    result = dispatcher.perform(ActionType.POINTER)

    assert result.success
    assert actuator.moves() == [("move", 0.0, 110, 210)]

    clock.advance(0.05)
    assert len(actuator.moves()) == 1
    clock.advance(0.05)
    assert actuator.moves()[-1] == ("move", 0.1, 100, 200)


def test_pointer_nudge_does_not_wait_for_restore(dispatcher, clock):
    dispatcher.perform(ActionType.POINTER)
    assert clock.monotonic() == 0.0
    assert clock.pending() == 1


def test_key_press(dispatcher, actuator):
    result = dispatcher.perform(ActionType.KEY, "space")
    assert result.success
    assert actuator.keys() == [("key", 0.0, "space")]


def test_key_action_without_key_fails(dispatcher, actuator):
    result = dispatcher.perform(ActionType.KEY, None)
    assert not result.success
    assert actuator.keys() == []


def test_actuator_failure_becomes_failed_result(dispatcher, actuator):
    actuator.fail_keys = 1
    result = dispatcher.perform(ActionType.KEY, "f15")
    assert not result.success
    assert "key press refused" in result.message


def test_failed_nudge_arms_no_restore(dispatcher, actuator, clock):
    actuator.fail_moves = 1
    result = dispatcher.perform(ActionType.POINTER)
    assert not result.success
    assert clock.pending() == 0


def test_failed_restore_is_reported_as_error_event(dispatcher, actuator, clock, events):
    actuator.fail_restores = True
    result = dispatcher.perform(ActionType.POINTER)
    assert result.success

    clock.advance(1)
    assert len(events) == 1
    assert isinstance(events[0], ErrorEvent)
    assert "restore" in events[0].message


def test_failed_restore_without_notifier_is_only_logged(actuator, clock):
    dispatcher = ActionDispatcher(actuator, clock)
    actuator.fail_restores = True
    dispatcher.perform(ActionType.POINTER)
    clock.advance(1)


def test_custom_offset_and_delay(actuator, clock):
    dispatcher = ActionDispatcher(actuator, clock, nudge_offset=3, restore_delay=0.5)
    dispatcher.perform(ActionType.POINTER)
    clock.advance(1)
    assert actuator.moves() == [("move", 0.0, 103, 203), ("move", 0.5, 100, 200)]
