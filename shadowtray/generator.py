# -*- coding: utf-8 -*-
"""
Engine config generation.

Generate is a read-modify-write of the persisted engine config: only
`server`, `ipCidrRules.proxy` and `appRules.proxy` are replaced, everything
else (nameServer, filterString, unknown keys, sibling rule lists) is written
back exactly as it was read.

The rewrite is not atomic: a failed write can leave a truncated file behind.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Sequence

from .errors import ConfigUnreadable, FilesystemError, ServerResolutionError
from .servers import ServerRegistry, normalize_server

logger = logging.getLogger(__name__)

# Fake-IP range handed out by the engine's resolver; must always be proxied.
SENTINEL_CIDR = "198.18.0.0/16"


def load_proxy_config(path: Path) -> Dict[str, Any]:
    """Read the engine config; a legacy string `server` comes back structured."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigUnreadable(f"{path}: {e.strerror or e}") from e
    try:
        conf = json.loads(text)
    except ValueError as e:
        raise ConfigUnreadable(f"{path}: {e}") from e
    if not isinstance(conf, dict):
        raise ConfigUnreadable(f"{path}: expected a JSON object")

    server = conf.get("server")
    if server:
        try:
            conf["server"] = normalize_server(server).to_dict()
        except ServerResolutionError:
            logger.warning("keeping unrecognized server entry in %s as-is", path)
    return conf


def save_proxy_config(path: Path, conf: Dict[str, Any]) -> None:
    payload = json.dumps(conf, ensure_ascii=False, indent=4)
    try:
        Path(path).write_text(payload, encoding="utf-8")
    except OSError as e:
        raise FilesystemError(f"{path}: {e.strerror or e}") from e


def _rule_section(conf: Dict[str, Any], key: str, path: Path) -> Dict[str, Any]:
    section = conf.get(key)
    if section is None:
        section = {}
        conf[key] = section
    if not isinstance(section, dict):
        raise ConfigUnreadable(f"{path}: {key} must be an object")
    return section


class ConfigGenerator:
    def __init__(self, config_path: Path, registry: ServerRegistry):
        self.config_path = Path(config_path)
        self.registry = registry

    def generate(
        self,
        server_name: str,
        app_patterns: Sequence[str],
        cidr_blocks: Sequence[str],
    ) -> Dict[str, Any]:
        endpoint = self.registry.resolve(server_name)
        conf = load_proxy_config(self.config_path)

        ip_rules = _rule_section(conf, "ipCidrRules", self.config_path)
        app_rules = _rule_section(conf, "appRules", self.config_path)

        conf["server"] = endpoint.to_dict()
        ip_rules["proxy"] = list(cidr_blocks) + [SENTINEL_CIDR]
        app_rules["proxy"] = list(app_patterns)

        save_proxy_config(self.config_path, conf)
        logger.info(
            "generated %s: server=%s apps=%d cidrs=%d",
            self.config_path, server_name, len(app_patterns), len(cidr_blocks),
        )
        return conf
