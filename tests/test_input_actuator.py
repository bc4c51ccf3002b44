import sys
import types

import pytest

from input_actuator import (
    ActuatorFailure,
    PyAutoGuiActuator,
    PynputActuator,
    PyWinAutoActuator,
    create_actuator,
)


@pytest.fixture
def fake_pyautogui(monkeypatch):
    module = types.ModuleType("pyautogui")
    module.calls = []
    module.KEYBOARD_KEYS = ["space", "enter", "f15", "a"]
    module.position = lambda: (5, 7)
    module.moveTo = lambda x, y: module.calls.append(("moveTo", x, y))
    module.press = lambda key: module.calls.append(("press", key))
    monkeypatch.setitem(sys.modules, "pyautogui", module)
    return module


@pytest.fixture
def fake_pynput(monkeypatch):
    calls = []

    class Key:
        space = "<space>"
        esc = "<esc>"
        f15 = "<f15>"

    class KeyboardController:
        def press(self, key):
            calls.append(("press", key))

        def release(self, key):
            calls.append(("release", key))

    class MouseController:
        position = (1, 2)

    package = types.ModuleType("pynput")
    keyboard = types.ModuleType("pynput.keyboard")
    keyboard.Key = Key
    keyboard.Controller = KeyboardController
    mouse = types.ModuleType("pynput.mouse")
    mouse.Controller = MouseController
    monkeypatch.setitem(sys.modules, "pynput", package)
    monkeypatch.setitem(sys.modules, "pynput.keyboard", keyboard)
    monkeypatch.setitem(sys.modules, "pynput.mouse", mouse)
    return calls


@pytest.fixture
def fake_pywinauto(monkeypatch, fake_pyautogui):
    sent = []
    package = types.ModuleType("pywinauto")
    keyboard = types.ModuleType("pywinauto.keyboard")
    keyboard.send_keys = lambda text, with_spaces=False, pause=0.0: sent.append(text)
    monkeypatch.setitem(sys.modules, "pywinauto", package)
    monkeypatch.setitem(sys.modules, "pywinauto.keyboard", keyboard)
    return sent


def test_default_backend_off_windows(fake_pyautogui):
    assert isinstance(create_actuator(platform="linux"), PyAutoGuiActuator)
    assert not isinstance(create_actuator(platform="darwin"), PyWinAutoActuator)


def test_default_backend_on_windows(fake_pywinauto):
    assert isinstance(create_actuator(platform="win32"), PyWinAutoActuator)


def test_unknown_backend():
    with pytest.raises(ActuatorFailure):
        create_actuator("xdotool")


def test_missing_library_is_an_actuator_failure(monkeypatch):
    monkeypatch.setitem(sys.modules, "pyautogui", None)
    with pytest.raises(ActuatorFailure) as excinfo:
        create_actuator("pyautogui")
    assert isinstance(excinfo.value.__cause__, ImportError)


def test_pyautogui_actuator(fake_pyautogui):
    actuator = create_actuator("pyautogui")
    assert actuator.get_pointer_position() == (5, 7)
    actuator.move_pointer_to(15, 17)
    actuator.press_key("Space")
    assert fake_pyautogui.calls == [("moveTo", 15, 17), ("press", "space")]
    assert fake_pyautogui.FAILSAFE is True


def test_pyautogui_rejects_unknown_key_names(fake_pyautogui):
    with pytest.raises(ActuatorFailure):
        create_actuator("pyautogui").press_key("hyper")


def test_pynput_actuator(fake_pynput):
    actuator = create_actuator("pynput")
    assert actuator.get_pointer_position() == (1, 2)
    actuator.move_pointer_to(3, 4)
    assert actuator.get_pointer_position() == (3, 4)

    actuator.press_key("escape")
    actuator.press_key("x")
    assert fake_pynput == [("press", "<esc>"), ("release", "<esc>"), ("press", "x"), ("release", "x")]


def test_pynput_unknown_key(fake_pynput):
    with pytest.raises(ActuatorFailure):
        create_actuator("pynput").press_key("hyper")


@pytest.mark.parametrize("name, expected", [
    ("space", "{SPACE}"),
    ("Enter", "{ENTER}"),
    ("f15", "{F15}"),
    ("a", "a"),
    ("+", "{+}"),
])
def test_pywinauto_key_mapping(fake_pywinauto, name, expected):
    create_actuator("pywinauto").press_key(name)
    assert fake_pywinauto == [expected]


def test_empty_key_name(fake_pywinauto):
    with pytest.raises(ActuatorFailure):
        create_actuator("pywinauto").press_key(" ")
