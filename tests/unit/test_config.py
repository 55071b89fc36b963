"""
Unit tests for app settings and path resolution.
"""

import json
import logging
from pathlib import Path

import pytest

from shadowtray.config import (
    DEFAULT_ENGINE_COMMAND,
    AppConfig,
    ConfigManager,
    resolve_dir,
    resolve_file,
)
from shadowtray.errors import ConfigIsDirectory, ConfigNotFound, NotADirectory
from shadowtray.log import get_log_level


class TestAppConfig:
    def test_defaults(self):
        cfg = AppConfig.from_dict({})
        assert cfg == AppConfig()
        assert cfg.engine_command == DEFAULT_ENGINE_COMMAND
        assert cfg.engine_command is not DEFAULT_ENGINE_COMMAND

    def test_normalizes_types(self):
        cfg = AppConfig.from_dict({
            "language": " ZH ",
            "notifications_enabled": "off",
            "engine_command": ["engine", 5],
            "rules_dir": "",
            "log_level": "debug",
            "log_file": None,
        })
        assert cfg.language == "zh"
        assert cfg.notifications_enabled is False
        assert cfg.engine_command == ["engine", "5"]
        assert cfg.rules_dir == "rules"
        assert cfg.log_level == "DEBUG"
        assert cfg.log_file == "shadowtray.log"

    def test_empty_log_file_disables_file_logging(self):
        assert AppConfig.from_dict({"log_file": ""}).log_file == ""


class TestConfigManager:
    def test_missing_file(self, tmp_path: Path):
        assert ConfigManager(tmp_path / "shadowtray.json").load() == AppConfig()

    def test_save_and_load(self, tmp_path: Path):
        mgr = ConfigManager(tmp_path / "shadowtray.json")
        cfg = AppConfig(language="zh", servers_file="my-servers.json")
        mgr.save(cfg)
        assert mgr.load() == cfg
        assert json.loads((tmp_path / "shadowtray.json").read_text(encoding="utf-8"))["language"] == "zh"

    @pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
    def test_corrupt_file_falls_back(self, tmp_path: Path, content: str, caplog):
        path = tmp_path / "shadowtray.json"
        path.write_text(content, encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="shadowtray.config"):
            assert ConfigManager(path).load() == AppConfig()
        assert "ignoring" in caplog.text


class TestResolve:
    def test_relative_file(self, tmp_path: Path):
        (tmp_path / "config.json").write_text("{}", encoding="utf-8")
        assert resolve_file(tmp_path, "config.json") == tmp_path / "config.json"

    def test_absolute_file(self, tmp_path: Path):
        path = tmp_path / "abs.json"
        path.write_text("{}", encoding="utf-8")
        assert resolve_file(Path("/elsewhere"), str(path)) == path

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigNotFound):
            resolve_file(tmp_path, "config.json")

    def test_directory_is_not_file(self, tmp_path: Path):
        (tmp_path / "config.json").mkdir()
        with pytest.raises(ConfigIsDirectory):
            resolve_file(tmp_path, "config.json")

    def test_dir(self, tmp_path: Path):
        (tmp_path / "rules").mkdir()
        assert resolve_dir(tmp_path, "rules") == tmp_path / "rules"
        with pytest.raises(NotADirectory):
            resolve_dir(tmp_path, "missing")


class TestLogLevel:
    def test_env_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")
        monkeypatch.setenv("DEBUG", "1")
        assert get_log_level("INFO") == logging.ERROR

    def test_debug_flag(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setenv("DEBUG", "true")
        assert get_log_level("WARNING") == logging.DEBUG

    def test_settings_fallback(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("DEBUG", raising=False)
        assert get_log_level("warning") == logging.WARNING
        assert get_log_level(None) == logging.INFO
        assert get_log_level("bogus") == logging.INFO
