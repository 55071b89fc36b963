# -*- coding: utf-8 -*-
"""
Server registry (servers.json): display name -> connection URL.

The engine config stores the chosen server as {"protocol": ..., "url": ...}.
Older configs and registries hold a bare URL string instead; both shapes are
normalized to ServerEndpoint when read.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional
from urllib.parse import urlparse

from .errors import FilesystemError, ParseError, ServerResolutionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServerEndpoint:
    protocol: str
    url: str

    def to_dict(self) -> dict:
        return {"protocol": self.protocol, "url": self.url}


def endpoint_from_url(url: str, protocol: Optional[str] = None) -> ServerEndpoint:
    url = (url or "").strip()
    try:
        parts = urlparse(url)
        host = parts.hostname
    except ValueError as e:
        raise ServerResolutionError(f"invalid server url {url!r}: {e}") from e
    if not parts.scheme or not host:
        raise ServerResolutionError(f"invalid server url {url!r}: missing scheme or host")
    return ServerEndpoint(protocol=(protocol or parts.scheme).strip().lower(), url=url)


def normalize_server(value) -> ServerEndpoint:
    """Accept the legacy bare URL string or the structured dict."""
    if isinstance(value, ServerEndpoint):
        return value
    if isinstance(value, str):
        return endpoint_from_url(value)
    if isinstance(value, Mapping):
        url = value.get("url")
        protocol = value.get("protocol")
        if not isinstance(url, str):
            raise ServerResolutionError("server entry has no url")
        if protocol is not None and not isinstance(protocol, str):
            raise ServerResolutionError("server protocol must be a string")
        return endpoint_from_url(url, protocol or None)
    raise ServerResolutionError(f"unsupported server entry: {value!r}")


class ServerRegistry:
    def __init__(self, servers: Optional[Dict[str, object]] = None):
        # Raw entries; validated on resolve so one bad entry doesn't hide the rest.
        self._servers: Dict[str, object] = dict(servers or {})

    @classmethod
    def load(cls, path: Path) -> "ServerRegistry":
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise FilesystemError(f"{path}: {e.strerror or e}") from e
        try:
            data = json.loads(text)
        except ValueError as e:
            raise ParseError(f"{path}: {e}") from e
        if not isinstance(data, dict):
            raise ParseError(f"{path}: expected a JSON object of name -> url")
        logger.debug("loaded %d servers from %s", len(data), path)
        return cls({str(k): v for k, v in data.items()})

    def names(self) -> List[str]:
        return list(self._servers)

    def __contains__(self, name: str) -> bool:
        return name in self._servers

    def __len__(self) -> int:
        return len(self._servers)

    def resolve(self, name: str) -> ServerEndpoint:
        if name not in self._servers:
            raise ServerResolutionError(f"unknown server: {name}")
        return normalize_server(self._servers[name])
