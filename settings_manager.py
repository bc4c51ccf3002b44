"""Persistent key-value store for Screen Keeper settings."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from models import KeeperSettings

logger = logging.getLogger(__name__)

SETTINGS_KEY = "settings"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "actionType": "pointer",
    "key": "space",
    "interval": 60,
    "startTime": "09:00",
    "endTime": "17:00",
    "enabled": False,
    "useTimeRestriction": False,
    "dailyAutoStart": False,
    "dailyStartTime": "09:00",
}


class SettingsStore:
    """JSON object on disk exposed as ``get(key, default)`` / ``set(key, value)``."""

    def __init__(self, storage_path: Optional[Path] = None) -> None:
        package_root = Path(__file__).resolve().parent
        self._storage_path = Path(storage_path) if storage_path else package_root / "settings.json"
        self._lock = threading.Lock()
        self._data: Optional[Dict[str, Any]] = None

    @property
    def storage_path(self) -> Path:
        """Absolute path to the settings file."""
        return self._storage_path

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` and persist the whole object atomically."""
        with self._lock:
            data = dict(self._load())
            data[key] = value
            self._write(data)
            self._data = data

    def _load(self) -> Dict[str, Any]:
        if self._data is None:
            self._data = self._read()
        return self._data

    def _read(self) -> Dict[str, Any]:
        """Read the file, returning an empty store if it is missing or corrupt."""
        path = self.storage_path
        if not path.exists():
            return {}

        try:
            raw_data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(raw_data, dict):
                raise ValueError("Settings file has invalid structure")
            return raw_data
        except (OSError, ValueError) as e:
            # Keep the broken file for inspection and start from defaults.
            logger.warning("Ignoring unreadable settings file %s: %s", path, e)
            try:
                path.replace(path.with_suffix(".bak"))
            except OSError as backup_error:
                logger.warning("Could not back up %s: %s", path, backup_error)
            return {}

    def _write(self, data: Dict[str, Any]) -> None:
        path = self.storage_path
        path.parent.mkdir(parents=True, exist_ok=True)

        tmp_path = path.with_suffix(".tmp")
        payload = json.dumps(data, indent=2, ensure_ascii=False)
        tmp_path.write_text(payload, encoding="utf-8")
        tmp_path.replace(path)


def load_settings(store: SettingsStore) -> KeeperSettings:
    """Stored settings merged over the defaults."""
    stored = store.get(SETTINGS_KEY, {}) or {}
    if not isinstance(stored, dict):
        logger.warning("Stored settings are not an object; using defaults")
        stored = {}
    return KeeperSettings.from_dict({**DEFAULT_SETTINGS, **stored})


def save_settings(store: SettingsStore, settings: KeeperSettings) -> None:
    store.set(SETTINGS_KEY, settings.to_dict())
