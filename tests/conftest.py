"""
Pytest configuration and fixtures for shadowtray tests.
"""

import json
import threading
from pathlib import Path
from typing import List, Optional

import pytest


class FakeEngine:
    """In-process stand-in for the proxy engine.

    hang: close() is acknowledged but the completion signal never fires.
    close_delay: completion fires this many seconds after close().
    fail: exception raised from run() once released.
    """

    def __init__(self, config_path, refresh_interval, diagnostics,
                 hang: bool = False, close_delay: float = 0.0,
                 fail: Optional[BaseException] = None):
        self.config_path = config_path
        self.refresh_interval = refresh_interval
        self.diagnostics = diagnostics
        self.hang = hang
        self.close_delay = close_delay
        self.fail = fail
        self.close_calls = 0
        self.started = threading.Event()
        self._release = threading.Event()
        self._done = threading.Event()

    def run(self):
        self.started.set()
        self.diagnostics("engine up")
        try:
            self._release.wait()
            if self.fail is not None:
                raise self.fail
        finally:
            if not self.hang:
                self._done.set()

    def crash(self):
        """Let run() return on its own, without a close request."""
        self._release.set()

    def close(self):
        self.close_calls += 1
        if self.hang:
            return
        if self.close_delay:
            threading.Timer(self.close_delay, self._release.set).start()
        else:
            self._release.set()

    def done(self):
        return self._done


class EngineRecorder:
    """Engine factory that remembers every engine it built."""

    def __init__(self, **engine_kwargs):
        self.engine_kwargs = engine_kwargs
        self.engines: List[FakeEngine] = []
        self.overlap = False
        self._lock = threading.Lock()

    def __call__(self, config_path, refresh_interval, diagnostics):
        with self._lock:
            if any(not e.done().is_set() for e in self.engines):
                self.overlap = True
            engine = FakeEngine(config_path, refresh_interval, diagnostics, **self.engine_kwargs)
            self.engines.append(engine)
            return engine


@pytest.fixture
def recorder() -> EngineRecorder:
    return EngineRecorder()


@pytest.fixture
def proxy_config_data() -> dict:
    return {
        "server": "ss://aes-256-gcm:secret@203.0.113.7:8388",
        "nameServer": "https://1.1.1.1/dns-query",
        "filterString": "outbound and ip",
        "geoIP": {"file": "Country.mmdb", "proxy": ["US"], "final": "direct"},
        "ipCidrRules": {"proxy": ["1.2.3.0/24"], "direct": ["192.168.0.0/16"]},
        "appRules": {"proxy": ["old.exe"], "blocked": ["ads.exe"]},
        "domainRules": {"proxy": ["**.google.com"]},
    }


@pytest.fixture
def proxy_config(tmp_path: Path, proxy_config_data: dict) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(proxy_config_data, indent=4), encoding="utf-8")
    return path


@pytest.fixture
def servers_file(tmp_path: Path) -> Path:
    path = tmp_path / "servers.json"
    path.write_text(json.dumps({
        "Tokyo": "ss://aes-256-gcm:secret@203.0.113.7:8388",
        "Home SOCKS": "socks://127.0.0.1:1080",
        "Broken": "no-scheme-here",
    }), encoding="utf-8")
    return path


@pytest.fixture
def rules_dir(tmp_path: Path) -> Path:
    """
    rules/
      games           (apps + cidr)
      .hidden
      cn/
        china-ip      (cidr only)
        .swap
        deep/         (never visited)
          skipped
      .git/
        config
    """
    root = tmp_path / "rules"
    root.mkdir()
    (root / "games").write_text(
        "# games\n\nsteam.exe\nLeagueClient.exe\n10.0.0.0/8\nnot-a-rule\n", encoding="utf-8"
    )
    (root / ".hidden").write_text("x.exe\n", encoding="utf-8")
    cn = root / "cn"
    cn.mkdir()
    (cn / "china-ip").write_text("1.0.1.0/24\n1.0.2.0/23\n", encoding="utf-8")
    (cn / ".swap").write_text("", encoding="utf-8")
    deep = cn / "deep"
    deep.mkdir()
    (deep / "skipped").write_text("deep.exe\n", encoding="utf-8")
    git = root / ".git"
    git.mkdir()
    (git / "config").write_text("", encoding="utf-8")
    return root
