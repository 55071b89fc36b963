# -*- coding: utf-8 -*-
"""
Lifecycle controller: owns the single running proxy engine.

Start and Stop are idempotent. Stop asks the engine to close and then waits,
without holding the controller lock, for either the engine's completion
signal or a fixed timeout. A timeout means the engine is wedged (typically
a blocking call leaked inside it); the process dumps every thread's stack
and exits with status 777 rather than hang the tray forever.
"""

from __future__ import annotations

import enum
import logging
import os
import sys
import threading
import traceback
from pathlib import Path
from typing import Callable, NoReturn, Optional, Tuple

from .engine import DiagnosticsSink, EngineFactory, ProxyEngine, SubprocessEngine, log_diagnostics
from .errors import EngineConstructionError, ShadowError, ShutdownTimeout

logger = logging.getLogger(__name__)

SHUTDOWN_TIMEOUT_SEC = 10.0
REFRESH_INTERVAL_SEC = 60.0
FORCED_EXIT_CODE = 777


class LifecycleState(enum.Enum):
    STOPPED = "stopped"
    RUNNING = "running"


def format_all_stacks() -> str:
    """Best-effort dump of every live thread's stack."""
    names = {t.ident: t.name for t in threading.enumerate()}
    chunks = []
    for ident, frame in sys._current_frames().items():
        chunks.append(f"Thread {names.get(ident, '?')} ({ident}):\n")
        chunks.extend(traceback.format_stack(frame))
    return "".join(chunks)


def terminate_process(exc: ShutdownTimeout) -> NoReturn:
    print(f"Failed to shutdown after {exc.timeout:g} seconds. Probably dead locked. Printing stack and killing.")
    try:
        for line in format_all_stacks().splitlines():
            if line.strip():
                print(line)
        sys.stdout.flush()
    except Exception:
        # Diagnostics only; the exit below must happen regardless.
        pass
    logger.critical("%s; exiting with status %d", exc, exc.exit_code)
    os._exit(exc.exit_code)


def report_to_log(err: BaseException) -> None:
    logger.error("engine error: %s", err)


class LifecycleController:
    def __init__(
        self,
        config_path: Callable[[], Path],
        engine_factory: EngineFactory = SubprocessEngine,
        report_error: Callable[[BaseException], None] = report_to_log,
        diagnostics: DiagnosticsSink = log_diagnostics,
        on_fatal: Callable[[ShutdownTimeout], None] = terminate_process,
        shutdown_timeout: float = SHUTDOWN_TIMEOUT_SEC,
        refresh_interval: float = REFRESH_INTERVAL_SEC,
        exit_code: int = FORCED_EXIT_CODE,
    ):
        """
        config_path: resolves the engine config; raises ConfigNotFound /
            ConfigIsDirectory when it is missing or not a file.
        on_fatal: called when shutdown times out; must not return.
        """
        self._resolve_config = config_path
        self._engine_factory = engine_factory
        self._report_error = report_error
        self._diagnostics = diagnostics
        self._on_fatal = on_fatal
        self.shutdown_timeout = shutdown_timeout
        self.refresh_interval = refresh_interval
        self.exit_code = exit_code

        self._lock = threading.Lock()
        self._state = LifecycleState.STOPPED
        self._engine: Optional[ProxyEngine] = None
        self._stopping = False
        self._thread: Optional[threading.Thread] = None

    @property
    def state(self) -> LifecycleState:
        with self._lock:
            return self._state

    @property
    def is_running(self) -> bool:
        return self.state is LifecycleState.RUNNING

    def snapshot(self) -> Tuple[LifecycleState, bool]:
        """(state, owns an engine), read atomically."""
        with self._lock:
            return self._state, self._engine is not None

    def start(self) -> None:
        """
        Launch a fresh engine unless one is already owned.

        A start() that lands while a stop() is still waiting on the engine is
        a no-op: the state reads RUNNING until that stop resolves, after which
        the engine is stopped. Check `state` rather than assuming it runs.
        """
        with self._lock:
            if self._state is LifecycleState.RUNNING:
                return

            path = self._resolve_config()
            try:
                engine = self._engine_factory(path, self.refresh_interval, self._diagnostics)
            except ShadowError:
                raise
            except Exception as e:
                raise EngineConstructionError(str(e)) from e

            logger.info("shadow - a transparent proxy for Windows, Linux and macOS")
            logger.info("shadow is running... (config %s)", path)
            self._thread = threading.Thread(target=self._run, args=(engine,), name="ShadowEngine", daemon=True)
            self._thread.start()

            self._engine = engine
            self._state = LifecycleState.RUNNING

    def _run(self, engine: ProxyEngine) -> None:
        try:
            engine.run()
        except Exception as e:
            logger.exception("engine run failed")
            self._report_error(e)

    def stop(self) -> None:
        with self._lock:
            if self._state is LifecycleState.STOPPED:
                return
            engine = self._engine
            if engine is None:
                return
            if not self._stopping:
                self._stopping = True
                logger.info("shadow is closing...")
                engine.close()

        # Lock released: a slow engine must not block start() callers.
        if not engine.done().wait(self.shutdown_timeout):
            exc = ShutdownTimeout(self.shutdown_timeout, self.exit_code)
            self._on_fatal(exc)
            raise exc

        with self._lock:
            if self._engine is engine:
                self._engine = None
                self._state = LifecycleState.STOPPED
                self._stopping = False
                self._thread = None
                logger.info("shadow stopped")

    def toggle(self) -> LifecycleState:
        if self.is_running:
            self.stop()
        else:
            self.start()
        return self.state
