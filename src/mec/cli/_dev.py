"""``mec dev``: restart the app process whenever a file changes.

The app runs as a child process (``python app.py``) sharing the
terminal. Each batch of filesystem changes reported by watchfiles
terminates the current child and starts a fresh one.
"""

import logging
import signal
import subprocess
import sys
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Any

from watchfiles import Change, watch

logger = logging.getLogger("mec.dev")

IGNORED_DIRS = frozenset({"node_modules", "__pycache__"})

# Files the running app writes itself: log files and the SQLite database.
IGNORED_SUFFIXES = (".log", ".db", ".db-journal", ".db-wal", ".db-shm", ".sqlite", ".sqlite3")


class DevServer:
    """Kill-and-respawn supervisor for the application process."""

    def __init__(
        self,
        command: Sequence[str] | None = None,
        *,
        root: str | Path = ".",
        build_dir: str | Path = ".mec",
        stop_timeout: float = 5.0,
        popen: Callable[..., Any] = subprocess.Popen,
        watcher: Callable[..., Iterable[set[tuple[Change, str]]]] = watch,
    ) -> None:
        self.command = list(command or (sys.executable, "app.py"))
        self.root = Path(root).resolve()
        self.build_dir = (self.root / build_dir).resolve()
        self.stop_timeout = stop_timeout
        self._popen = popen
        self._watcher = watcher
        self.process: Any = None

    def should_watch(self, change: Change, path: str) -> bool:
        """False for dotfiles, ``node_modules``, ``__pycache__``, the build dir,
        and the log and database files the app itself writes.
        """
        candidate = Path(path).resolve()
        if candidate.name.endswith(IGNORED_SUFFIXES):
            return False
        if candidate.is_relative_to(self.build_dir):
            return False
        try:
            parts = candidate.relative_to(self.root).parts
        except ValueError:
            parts = candidate.parts
        return not any(part.startswith(".") or part in IGNORED_DIRS for part in parts)

    def restart(self) -> None:
        """SIGTERM the running child (if any), then spawn a new one."""
        self.stop()
        logger.debug("Starting %s", " ".join(self.command))
        self.process = self._popen(self.command, cwd=self.root)

    def stop(self) -> None:
        process, self.process = self.process, None
        if process is None:
            return
        code = process.poll()
        if code is not None:
            logger.info("Server process exited with code %s", code)
            return
        process.send_signal(signal.SIGTERM)
        try:
            process.wait(timeout=self.stop_timeout)
        except subprocess.TimeoutExpired:
            logger.warning("Server process did not stop after SIGTERM, killing it")
            process.kill()
            process.wait()
        logger.debug("Server process was killed with signal SIGTERM")

    def run(self) -> None:
        """Start the app and restart it on every change batch until Ctrl-C."""
        self.restart()
        try:
            # No debounce: every change batch restarts the child.
            for changes in self._watcher(self.root, watch_filter=self.should_watch, debounce=0):
                logger.info("%d change(s) detected, restarting", len(changes))
                self.restart()
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()


def run_dev() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    DevServer().run()
