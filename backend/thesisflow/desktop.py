"""
Desktop launcher.

Starts the API server as a child process against a local single-file
database, waits for it to report readiness, then opens the UI in the
system browser. Ctrl+C stops both.
"""

import argparse
import logging
import os
import queue
import socket
import subprocess
import sys
import threading
import time
import webbrowser
from pathlib import Path

logger = logging.getLogger("thesisflow.desktop")

READY_MARKER = "serving on port"
STARTUP_TIMEOUT_SECONDS = 30.0


def _default_db_path() -> Path:
    data_dir = Path(os.environ.get("THESISFLOW_DATA_DIR") or Path.home() / ".thesisflow")
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / "database.db"


def _port_available(host: str, port: int) -> bool:
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind((host, port))
        return True
    except OSError:
        return False


def _pick_port(host: str, preferred: int, max_tries: int = 20) -> int:
    for candidate in range(preferred, preferred + max_tries):
        if _port_available(host, candidate):
            return candidate
    return preferred


def server_env(host: str, port: int, db_path: Path) -> dict[str, str]:
    env = dict(os.environ)
    env.update({
        "DESKTOP_MODE": "true",
        "DESKTOP_DB_PATH": str(db_path),
        "HOST": host,
        "PORT": str(port),
    })
    return env


def _pump_output(stream, lines: "queue.Queue[str | None]") -> None:
    # Mirror the server's log to ours and hand each line to the waiter
    for line in iter(stream.readline, ""):
        sys.stderr.write(line)
        lines.put(line)
    lines.put(None)


def wait_until_ready(process: subprocess.Popen, lines: "queue.Queue[str | None]", timeout: float) -> bool:
    """True once the readiness line shows up; False on timeout or early exit."""
    deadline = time.monotonic() + timeout
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return False
        try:
            line = lines.get(timeout=min(remaining, 0.5))
        except queue.Empty:
            if process.poll() is not None:
                return False
            continue
        if line is None:
            return False
        if READY_MARKER in line:
            return True


def _stop(process: subprocess.Popen) -> None:
    if process.poll() is not None:
        return
    process.terminate()
    try:
        process.wait(timeout=10)
    except subprocess.TimeoutExpired:
        logger.warning("Server did not stop in time; killing it")
        process.kill()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="thesisflow-desktop", description="Run ThesisFlow locally.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=5000)
    parser.add_argument("--db", type=Path, default=None, help="SQLite database file")
    parser.add_argument("--no-browser", action="store_true", help="Do not open the UI automatically")
    parser.add_argument("--timeout", type=float, default=STARTUP_TIMEOUT_SECONDS)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    port = _pick_port(args.host, args.port)
    db_path = (args.db or _default_db_path()).resolve()
    url = f"http://{args.host}:{port}/"
    logger.info("Starting server on %s (database: %s)", url, db_path)

    process = subprocess.Popen(
        [sys.executable, "-m", "thesisflow.main"],
        env=server_env(args.host, port, db_path),
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        bufsize=1,
    )
    lines: "queue.Queue[str | None]" = queue.Queue()
    threading.Thread(target=_pump_output, args=(process.stdout, lines), daemon=True).start()

    try:
        if wait_until_ready(process, lines, args.timeout):
            logger.info("Server ready")
        elif process.poll() is not None:
            logger.error("Server exited during startup (code %s)", process.returncode)
            return process.returncode or 1
        else:
            logger.warning("No readiness signal after %.0fs; opening anyway", args.timeout)

        if not args.no_browser:
            webbrowser.open(url)
        return process.wait()
    except KeyboardInterrupt:
        logger.info("Shutting down")
        return 0
    finally:
        _stop(process)


if __name__ == "__main__":
    sys.exit(main())
