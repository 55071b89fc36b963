# -*- coding: utf-8 -*-
"""
The proxy engine collaborator.

The lifecycle controller only relies on the ProxyEngine protocol:
- run():   blocks until the engine stops; raises on an ungraceful exit
- close(): asks the engine to stop and returns immediately
- done():  event set exactly once, when run() has returned

SubprocessEngine drives the external engine binary through that protocol.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import signal
import subprocess
import threading
from pathlib import Path
from typing import Callable, List, Optional, Protocol, Sequence

from .config import DEFAULT_ENGINE_COMMAND
from .errors import EngineConstructionError, EngineError

logger = logging.getLogger(__name__)

DiagnosticsSink = Callable[[str], None]


class ProxyEngine(Protocol):
    def run(self) -> None: ...

    def close(self) -> None: ...

    def done(self) -> threading.Event: ...


EngineFactory = Callable[[Path, float, DiagnosticsSink], ProxyEngine]


def log_diagnostics(line: str) -> None:
    logger.info("%s", line)


def format_duration(seconds: float) -> str:
    """Go-style duration string: 60 -> "1m0s", 90 -> "1m30s", 5 -> "5s"."""
    total = int(round(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"


def build_command(template: Sequence[str], config_path: Path, refresh_interval: float) -> List[str]:
    values = {"config": str(config_path), "timeout": format_duration(refresh_interval)}
    try:
        return [part.format(**values) for part in template]
    except (KeyError, IndexError, ValueError) as e:
        raise EngineConstructionError(f"bad engine command template: {e}") from e


if os.name == "nt":
    _CREATION_FLAGS = subprocess.CREATE_NO_WINDOW | subprocess.CREATE_NEW_PROCESS_GROUP
else:
    _CREATION_FLAGS = 0


class SubprocessEngine:
    def __init__(
        self,
        config_path: Path,
        refresh_interval: float,
        diagnostics: DiagnosticsSink = log_diagnostics,
        command: Optional[Sequence[str]] = None,
        cwd: Optional[Path] = None,
    ):
        self.config_path = Path(config_path)
        self.refresh_interval = refresh_interval
        self.diagnostics = diagnostics
        self.cwd = cwd

        # Reject configs the engine would choke on before spawning anything.
        try:
            conf = json.loads(self.config_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise EngineConstructionError(f"invalid engine config {self.config_path}: {e}") from e
        if not isinstance(conf, dict):
            raise EngineConstructionError(f"invalid engine config {self.config_path}: expected a JSON object")

        args = build_command(command or DEFAULT_ENGINE_COMMAND, self.config_path, refresh_interval)
        if not args:
            raise EngineConstructionError("empty engine command")
        args[0] = self._find_executable(args[0])
        self.args = args

        self._lock = threading.Lock()
        self._proc: Optional[subprocess.Popen] = None
        self._closing = False
        self._done = threading.Event()

    def _find_executable(self, name: str) -> str:
        if self.cwd is not None and not Path(name).is_absolute():
            local = self.cwd / name
            if local.is_file():
                return str(local)
        found = shutil.which(name)
        if found is None:
            raise EngineConstructionError(f"engine executable not found: {name}")
        return found

    def done(self) -> threading.Event:
        return self._done

    def run(self) -> None:
        try:
            with self._lock:
                if self._closing:
                    return
                self._proc = subprocess.Popen(
                    self.args,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    text=True,
                    encoding="utf-8",
                    errors="replace",
                    cwd=str(self.cwd) if self.cwd is not None else None,
                    creationflags=_CREATION_FLAGS,
                )
                proc = self._proc
            logger.info("engine started (pid %d)", proc.pid)

            assert proc.stdout is not None
            for line in proc.stdout:
                line = line.rstrip("\r\n")
                if line:
                    self.diagnostics(line)
            code = proc.wait()

            with self._lock:
                closing = self._closing
            logger.info("engine exited with status %d", code)
            if code != 0 and not closing:
                raise EngineError(f"engine exited with status {code}")
        except OSError as e:
            raise EngineError(f"failed to run engine: {e}") from e
        finally:
            self._done.set()

    def close(self) -> None:
        with self._lock:
            self._closing = True
            proc = self._proc
        if proc is None or proc.poll() is not None:
            return
        try:
            if os.name == "nt":
                proc.send_signal(signal.CTRL_BREAK_EVENT)
            else:
                proc.terminate()
        except OSError as e:
            logger.warning("failed to signal engine: %s", e)
