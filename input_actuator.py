"""
Input actuators: the only code that touches the real pointer and keyboard.

Supported backends (``create_actuator`` names):
- pyautogui: pointer and keys through pyautogui (default off Windows)
- pynput:    pointer and keys through pynput controllers
- pywinauto: pyautogui pointer plus pywinauto key dispatch (default on Windows)

Notes
-----
- The backend is chosen once, when the actuator is built; action code
  never branches on the platform.
- Key names use the stored vocabulary ("space", "enter", "f15", "a") and
  every backend maps them to its own names.
- On macOS the process needs Accessibility permission; without it the
  backends raise and the failure surfaces as an error event.
"""

from __future__ import annotations

import sys
from typing import Any, Optional, Tuple


class ActuatorFailure(Exception):
    pass


class InputActuator:
    """Contract consumed by the action dispatcher."""

    name = "abstract"

    def get_pointer_position(self) -> Tuple[int, int]:  # pragma: no cover - interface
        raise NotImplementedError

    def move_pointer_to(self, x: int, y: int) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def press_key(self, name: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class PyAutoGuiActuator(InputActuator):
    name = "pyautogui"

    def __init__(self) -> None:
        try:
            import pyautogui  # local import to avoid a display connection at import time
        except Exception as e:
            raise ActuatorFailure(f"pyautogui backend not available: {e}") from e
        # Keep the corner fail-safe: moving the pointer there aborts the action
        pyautogui.FAILSAFE = True
        pyautogui.PAUSE = 0.0
        self._gui = pyautogui

    def get_pointer_position(self) -> Tuple[int, int]:
        x, y = self._gui.position()
        return int(x), int(y)

    def move_pointer_to(self, x: int, y: int) -> None:
        self._gui.moveTo(x, y)

    def press_key(self, name: str) -> None:
        key = _normalize_key_name(name)
        if len(key) > 1 and key not in self._gui.KEYBOARD_KEYS:
            raise ActuatorFailure(f"Unknown key for pyautogui: {name!r}")
        self._gui.press(key)


class PynputActuator(InputActuator):
    name = "pynput"

    def __init__(self) -> None:
        try:
            from pynput.keyboard import Controller as KeyboardController, Key as KeyModule  # type: ignore
            from pynput.mouse import Controller as MouseController  # type: ignore
        except Exception as e:
            raise ActuatorFailure(f"pynput backend not available: {e}") from e
        self._keys = KeyModule
        self._keyboard = KeyboardController()
        self._mouse = MouseController()

    def get_pointer_position(self) -> Tuple[int, int]:
        x, y = self._mouse.position
        return int(x), int(y)

    def move_pointer_to(self, x: int, y: int) -> None:
        self._mouse.position = (x, y)

    def press_key(self, name: str) -> None:
        key = self._to_pynput_key(name)
        self._keyboard.press(key)
        self._keyboard.release(key)

    def _to_pynput_key(self, name: str) -> Any:
        key = _normalize_key_name(name)
        if len(key) == 1:
            return key
        aliases = {"escape": "esc", "return": "enter", "pageup": "page_up", "pagedown": "page_down"}
        mapped = getattr(self._keys, aliases.get(key, key), None)
        if mapped is None:
            raise ActuatorFailure(f"Unknown key for pynput: {name!r}")
        return mapped


class PyWinAutoActuator(PyAutoGuiActuator):
    """Windows: pointer through pyautogui, keys through pywinauto's send_keys."""

    name = "pywinauto"

    _SEND_KEYS_NAMES = {
        "space": "SPACE",
        "enter": "ENTER",
        "return": "ENTER",
        "tab": "TAB",
        "esc": "ESC",
        "escape": "ESC",
        "backspace": "BACKSPACE",
        "delete": "DELETE",
        "home": "HOME",
        "end": "END",
        "pageup": "PGUP",
        "page_up": "PGUP",
        "pagedown": "PGDN",
        "page_down": "PGDN",
        "up": "UP",
        "down": "DOWN",
        "left": "LEFT",
        "right": "RIGHT",
        "shift": "VK_SHIFT",
        "ctrl": "VK_CONTROL",
        "alt": "VK_MENU",
    }

    def __init__(self) -> None:
        super().__init__()
        try:
            from pywinauto.keyboard import send_keys as pw_send_keys  # type: ignore
        except Exception as e:
            raise ActuatorFailure(f"pywinauto backend not available: {e}") from e
        self._send_keys = pw_send_keys

    def press_key(self, name: str) -> None:
        self._send_keys(self._to_send_keys(name), with_spaces=True, pause=0.0)

    def _to_send_keys(self, name: str) -> str:
        key = _normalize_key_name(name)
        if len(key) == 1:
            # Braces escape send_keys modifiers such as + ^ % ~
            return "{" + key + "}" if key in "+^%~(){}[]" else key
        if key in self._SEND_KEYS_NAMES:
            return "{" + self._SEND_KEYS_NAMES[key] + "}"
        if key.startswith("f") and key[1:].isdigit():
            return "{" + key.upper() + "}"
        raise ActuatorFailure(f"Unknown key for pywinauto: {name!r}")


_BACKENDS = {
    PyAutoGuiActuator.name: PyAutoGuiActuator,
    PynputActuator.name: PynputActuator,
    PyWinAutoActuator.name: PyWinAutoActuator,
}


def create_actuator(backend: Optional[str] = None, platform: str = sys.platform) -> InputActuator:
    """
    Build the actuator for ``backend``, or the platform default when omitted.

    Raises:
        ActuatorFailure: unknown backend name or its library cannot be loaded
    """
    if backend is None:
        backend = PyWinAutoActuator.name if platform.startswith("win") else PyAutoGuiActuator.name
    actuator_cls = _BACKENDS.get(backend.strip().lower())
    if actuator_cls is None:
        raise ActuatorFailure(f"Unknown input backend: {backend!r} (choose from {', '.join(sorted(_BACKENDS))})")
    return actuator_cls()


def _normalize_key_name(name: str) -> str:
    key = (name or "").strip()
    if not key:
        raise ActuatorFailure("Empty key name")
    return key if len(key) == 1 else key.lower()
