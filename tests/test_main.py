import json

import main
from fakes import RecordingActuator
from clock import ManualClock
from input_actuator import ActuatorFailure


def test_nothing_scheduled_exits_cleanly(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(main, "create_actuator", lambda backend=None: RecordingActuator(ManualClock()))
    export = tmp_path / "activity.log"

    code = main.main(["--settings", str(tmp_path / "settings.json"), "--export-log", str(export)])

    assert code == 0
    assert "Nothing scheduled" in capsys.readouterr().out
    assert export.exists()


def test_invalid_settings_exit_code(tmp_path, monkeypatch):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"settings": {"actionType": "scroll"}}), encoding="utf-8")
    monkeypatch.setattr(main, "create_actuator", lambda backend=None: RecordingActuator(ManualClock()))

    assert main.main(["--settings", str(path)]) == 2


def test_missing_backend_exit_code(tmp_path, monkeypatch):
    def unavailable(backend=None):
        raise ActuatorFailure("pynput backend not available")

    monkeypatch.setattr(main, "create_actuator", unavailable)
    assert main.main(["--settings", str(tmp_path / "settings.json"), "--backend", "pynput"]) == 2
