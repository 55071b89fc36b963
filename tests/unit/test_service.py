"""
Unit tests for the command handlers driving generate / start / stop.
"""

import json
import shutil
from pathlib import Path

import pytest

from shadowtray.config import AppConfig
from shadowtray.controller import LifecycleState
from shadowtray.errors import ConfigNotFound, ParseError, UnknownRule, ValidationError
from shadowtray.generator import SENTINEL_CIDR
from shadowtray.service import ShadowService


@pytest.fixture
def base_dir(tmp_path: Path, proxy_config: Path, servers_file: Path, rules_dir: Path) -> Path:
    return tmp_path


@pytest.fixture
def service(base_dir: Path, recorder) -> ShadowService:
    svc = ShadowService(base_dir, AppConfig(), engine_factory=recorder, shutdown_timeout=5)
    svc.reload()
    return svc


class TestReload:
    def test_lists(self, service: ShadowService):
        assert service.servers() == ["Tokyo", "Home SOCKS", "Broken"]
        assert service.modes() == ["cn/china-ip", "games"]

    def test_missing_inputs_give_empty_lists(self, tmp_path: Path, recorder):
        svc = ShadowService(tmp_path, AppConfig(), engine_factory=recorder)
        assert svc.reload() == {"servers": [], "modes": []}

    def test_broken_servers_file(self, base_dir: Path, recorder):
        (base_dir / "servers.json").write_text("nope", encoding="utf-8")
        svc = ShadowService(base_dir, AppConfig(), engine_factory=recorder)
        with pytest.raises(ParseError):
            svc.reload()

    def test_custom_locations(self, base_dir: Path, recorder):
        shutil.move(str(base_dir / "rules"), str(base_dir / "my-rules"))
        cfg = AppConfig(rules_dir="my-rules")
        svc = ShadowService(base_dir, cfg, engine_factory=recorder)
        assert svc.reload()["modes"] == ["cn/china-ip", "games"]


class TestGenerate:
    def test_writes_config(self, service: ShadowService, base_dir: Path):
        service.generate("Tokyo", "games")
        conf = json.loads((base_dir / "config.json").read_text(encoding="utf-8"))
        assert conf["server"]["protocol"] == "ss"
        assert conf["appRules"]["proxy"] == ["steam.exe", "LeagueClient.exe"]
        assert conf["ipCidrRules"]["proxy"] == ["10.0.0.0/8", SENTINEL_CIDR]

    @pytest.mark.parametrize("server,mode,message", [
        ("", "games", "Please select a server"),
        ("  ", "games", "Please select a server"),
        ("Tokyo", "", "Please select a mode"),
    ])
    def test_selection_required(self, service: ShadowService, server, mode, message):
        with pytest.raises(ValidationError, match=message):
            service.generate(server, mode)

    def test_unknown_mode(self, service: ShadowService):
        with pytest.raises(UnknownRule):
            service.generate("Tokyo", "nope")

    def test_no_rules_loaded(self, tmp_path: Path, recorder):
        svc = ShadowService(tmp_path, AppConfig(), engine_factory=recorder)
        with pytest.raises(ValidationError):
            svc.generate("Tokyo", "games")

    def test_missing_engine_config(self, service: ShadowService, base_dir: Path):
        (base_dir / "config.json").unlink()
        with pytest.raises(ConfigNotFound):
            service.generate("Tokyo", "games")


class TestLifecycle:
    def test_start_stop(self, service: ShadowService, recorder, base_dir: Path):
        service.start()
        assert service.is_running
        assert recorder.engines[0].config_path == base_dir / "config.json"
        service.stop()
        assert not service.is_running

    def test_toggle(self, service: ShadowService):
        assert service.toggle() is LifecycleState.RUNNING
        assert service.toggle() is LifecycleState.STOPPED

    def test_shutdown_idempotent(self, service: ShadowService):
        service.start()
        service.shutdown()
        service.shutdown()
        assert not service.is_running

    def test_start_without_config(self, service: ShadowService, base_dir: Path):
        (base_dir / "config.json").unlink()
        with pytest.raises(ConfigNotFound):
            service.start()
        assert not service.is_running
