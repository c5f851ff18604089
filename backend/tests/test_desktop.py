"""
Tests for the desktop launcher helpers.
"""

import queue
import socket
from pathlib import Path

from thesisflow import desktop, main


class _Process:
    def __init__(self, exit_code=None):
        self.exit_code = exit_code

    def poll(self):
        return self.exit_code


def _lines(*items) -> queue.Queue:
    q: queue.Queue = queue.Queue()
    for item in items:
        q.put(item)
    return q


def test_server_env_switches_to_desktop_mode(tmp_path: Path):
    env = desktop.server_env("127.0.0.1", 5123, tmp_path / "thesis.db")

    assert env["DESKTOP_MODE"] == "true"
    assert env["DESKTOP_DB_PATH"] == str(tmp_path / "thesis.db")
    assert env["PORT"] == "5123"
    assert env["HOST"] == "127.0.0.1"


def test_ready_line_is_detected():
    lines = _lines("INFO starting\n", "INFO thesisflow.main: serving on port 5000\n")

    assert desktop.wait_until_ready(_Process(), lines, timeout=1) is True


def test_early_exit_is_not_ready():
    lines = _lines("Traceback ...\n", None)

    assert desktop.wait_until_ready(_Process(exit_code=1), lines, timeout=1) is False


def test_timeout_without_ready_line():
    assert desktop.wait_until_ready(_Process(), _lines(), timeout=0.2) is False


def test_pick_port_skips_busy_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as busy:
        busy.bind(("127.0.0.1", 0))
        busy.listen()
        port = busy.getsockname()[1]

        assert desktop._pick_port("127.0.0.1", port) != port


def test_server_entry_point_serves_loaded_app(monkeypatch):
    calls = []
    monkeypatch.setattr(main.uvicorn, "run", lambda target, **kwargs: calls.append((target, kwargs)))

    main.run()

    target, kwargs = calls[0]
    assert target is main.app
    assert kwargs["port"] == main.settings.port
