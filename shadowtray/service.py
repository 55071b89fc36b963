# -*- coding: utf-8 -*-
"""
Command handlers behind the panel and tray: Generate, Start, Stop.

Nothing here knows about tkinter or pystray, so every operator action can be
driven (and tested) directly.
"""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .config import AppConfig, resolve_dir, resolve_file
from .controller import LifecycleController, LifecycleState, report_to_log
from .engine import EngineFactory, SubprocessEngine
from .errors import FilesystemError, ValidationError
from .generator import ConfigGenerator
from .rules import RuleStore
from .servers import ServerRegistry

logger = logging.getLogger(__name__)


class ShadowService:
    def __init__(
        self,
        base_dir: Path,
        cfg: Optional[AppConfig] = None,
        engine_factory: Optional[EngineFactory] = None,
        report_error: Callable[[BaseException], None] = report_to_log,
        **controller_kwargs,
    ):
        self.base_dir = Path(base_dir)
        self.cfg = cfg or AppConfig()
        if engine_factory is None:
            engine_factory = partial(SubprocessEngine, command=self.cfg.engine_command, cwd=self.base_dir)

        self.registry = ServerRegistry()
        self.rules: Optional[RuleStore] = None
        self.controller = LifecycleController(
            config_path=self.config_path,
            engine_factory=engine_factory,
            report_error=report_error,
            **controller_kwargs,
        )

    def config_path(self) -> Path:
        return resolve_file(self.base_dir, self.cfg.proxy_config_file)

    # --------- inputs ---------
    def reload(self) -> Dict[str, List[str]]:
        """
        Rescan the rules directory and reread the server registry.

        A missing rules directory or servers file just leaves that list empty;
        a present-but-broken one is an error.
        """
        try:
            rules_dir = resolve_dir(self.base_dir, self.cfg.rules_dir)
        except FilesystemError:
            logger.info("no rules directory at %s", self.base_dir / self.cfg.rules_dir)
            self.rules = None
        else:
            store = RuleStore(rules_dir)
            store.reload()
            self.rules = store

        try:
            servers_file = resolve_file(self.base_dir, self.cfg.servers_file)
        except FilesystemError:
            logger.info("no server registry at %s", self.base_dir / self.cfg.servers_file)
            self.registry = ServerRegistry()
        else:
            self.registry = ServerRegistry.load(servers_file)

        return {"servers": self.servers(), "modes": self.modes()}

    def servers(self) -> List[str]:
        return self.registry.names()

    def modes(self) -> List[str]:
        return self.rules.ids if self.rules is not None else []

    # --------- commands ---------
    def generate(self, server_name: str, mode: str) -> dict:
        server_name = (server_name or "").strip()
        mode = (mode or "").strip()
        if not server_name:
            raise ValidationError("Please select a server")
        if not mode:
            raise ValidationError("Please select a mode")
        if self.rules is None:
            raise ValidationError("No rules are loaded")

        parsed = self.rules.parse(mode)
        generator = ConfigGenerator(self.config_path(), self.registry)
        return generator.generate(server_name, parsed.app_patterns, parsed.cidr_blocks)

    def start(self) -> None:
        self.controller.start()

    def stop(self) -> None:
        self.controller.stop()

    def toggle(self) -> LifecycleState:
        return self.controller.toggle()

    @property
    def is_running(self) -> bool:
        return self.controller.is_running

    def shutdown(self) -> None:
        if self.controller.is_running:
            logger.info("stopping engine before exit")
        self.controller.stop()
