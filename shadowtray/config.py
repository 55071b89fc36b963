# -*- coding: utf-8 -*-
"""
App settings persisted in a human-readable JSON file (shadowtray.json),
plus the path helpers every other module uses to locate its inputs.

Settings fields:
- language: "en" | "zh"
- notifications_enabled: bool
- proxy_config_file: str   (engine config, rewritten by Generate)
- servers_file: str        (display name -> URL registry)
- rules_dir: str           (rule file tree)
- engine_command: list[str]  ("{config}" / "{timeout}" placeholders)
- log_level: str
- log_file: str            ("" disables the file handler)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

from .errors import ConfigIsDirectory, ConfigNotFound, NotADirectory

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILENAME = "shadowtray.json"
DEFAULT_ENGINE_COMMAND = ["shadow.exe", "-c", "{config}", "-t", "{timeout}"]


def _to_bool(value, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        s = value.strip().lower()
        if s in ("1", "true", "yes", "on"):
            return True
        if s in ("0", "false", "no", "off"):
            return False
    return default


def _to_str(value, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


@dataclass
class AppConfig:
    language: str = "en"
    notifications_enabled: bool = True
    proxy_config_file: str = "config.json"
    servers_file: str = "servers.json"
    rules_dir: str = "rules"
    engine_command: List[str] = field(default_factory=lambda: list(DEFAULT_ENGINE_COMMAND))
    log_level: str = "INFO"
    log_file: str = "shadowtray.log"

    @classmethod
    def from_dict(cls, data: dict) -> "AppConfig":
        engine_command = data.get("engine_command")
        if not isinstance(engine_command, list) or not engine_command:
            engine_command = list(DEFAULT_ENGINE_COMMAND)
        log_file = data.get("log_file", "shadowtray.log")
        if not isinstance(log_file, str):
            log_file = "shadowtray.log"
        return cls(
            language=_to_str(data.get("language"), "en").lower(),
            notifications_enabled=_to_bool(data.get("notifications_enabled", True), True),
            proxy_config_file=_to_str(data.get("proxy_config_file"), "config.json"),
            servers_file=_to_str(data.get("servers_file"), "servers.json"),
            rules_dir=_to_str(data.get("rules_dir"), "rules"),
            engine_command=[str(x) for x in engine_command],
            log_level=_to_str(data.get("log_level"), "INFO").upper(),
            log_file=log_file.strip(),
        )

    def to_dict(self) -> dict:
        return {
            "language": self.language,
            "notifications_enabled": self.notifications_enabled,
            "proxy_config_file": self.proxy_config_file,
            "servers_file": self.servers_file,
            "rules_dir": self.rules_dir,
            "engine_command": self.engine_command,
            "log_level": self.log_level,
            "log_file": self.log_file,
        }


class ConfigManager:
    def __init__(self, config_path: Path):
        self.config_path = config_path

    def load(self) -> AppConfig:
        if not self.config_path.exists():
            return AppConfig()
        try:
            data = json.loads(self.config_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            # Corrupt settings should not keep the tray from starting.
            logger.warning("ignoring unreadable settings %s: %s", self.config_path, e)
            return AppConfig()
        if not isinstance(data, dict):
            logger.warning("ignoring settings %s: top level is not an object", self.config_path)
            return AppConfig()
        return AppConfig.from_dict(data)

    def save(self, config: AppConfig) -> None:
        try:
            payload = json.dumps(config.to_dict(), ensure_ascii=False, indent=2)
            self.config_path.write_text(payload, encoding="utf-8")
        except OSError as e:
            logger.warning("failed to save settings %s: %s", self.config_path, e)


def _absolute(base_dir: Path, name: Union[str, Path]) -> Path:
    path = Path(name)
    if path.is_absolute():
        return path
    return base_dir / path


def resolve_file(base_dir: Path, name: Union[str, Path]) -> Path:
    """Absolute path of `name`, which must exist and be a regular file."""
    path = _absolute(base_dir, name)
    if not path.exists():
        raise ConfigNotFound(f"{path}: no such file")
    if path.is_dir():
        raise ConfigIsDirectory(f"{path}: not a file")
    return path


def resolve_dir(base_dir: Path, name: Union[str, Path]) -> Path:
    path = _absolute(base_dir, name)
    if not path.is_dir():
        raise NotADirectory(f"{path}: not a dir")
    return path
