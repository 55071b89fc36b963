# -*- coding: utf-8 -*-
"""
Rule files: discovery (RuleStore) and parsing (parse_rule_file).

Layout of the rules directory:
- a top-level file is one rule set, id = file name
- a top-level subdirectory groups rule sets, id = "<subdir>/<file>"
- nothing deeper than that is visited, and dot-entries are ignored everywhere

Rule file format, one entry per line:
- blank lines and "#" comments are skipped
- "*.exe" lines name applications to proxy
- anything else is tried as an IPv4/IPv6 CIDR block; lines that are not
  valid CIDR are dropped without complaint
"""

from __future__ import annotations

import ipaddress
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple

from .errors import FilesystemError, NotADirectory, UnknownRule

logger = logging.getLogger(__name__)

APP_SUFFIX = ".exe"


@dataclass(frozen=True)
class ParsedRule:
    app_patterns: Tuple[str, ...] = ()
    cidr_blocks: Tuple[str, ...] = ()


@dataclass
class RuleSet:
    ids: List[str] = field(default_factory=list)
    paths: Dict[str, Path] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.ids)


def _list_dir(path: Path) -> List[os.DirEntry]:
    try:
        with os.scandir(path) as it:
            entries = list(it)
    except OSError as e:
        raise FilesystemError(f"{path}: {e.strerror or e}") from e
    entries.sort(key=lambda entry: entry.name)
    return entries


def scan_rules(directory: Path) -> RuleSet:
    directory = Path(directory)
    if not directory.is_dir():
        raise NotADirectory(f"{directory}: not a dir")

    out = RuleSet()

    def add(rule_id: str, path: Path) -> None:
        out.ids.append(rule_id)
        out.paths[rule_id] = path

    for entry in _list_dir(directory):
        if entry.name.startswith("."):
            continue
        if entry.is_dir():
            for sub in _list_dir(Path(entry.path)):
                if sub.name.startswith(".") or sub.is_dir():
                    continue
                add(f"{entry.name}/{sub.name}", Path(sub.path))
            continue
        add(entry.name, Path(entry.path))

    logger.debug("found %d rule sets under %s", len(out), directory)
    return out


def is_cidr(text: str) -> bool:
    """True for "address/prefixlen" with an IPv4 or IPv6 address."""
    addr, sep, prefix = text.partition("/")
    if not sep or not (prefix.isascii() and prefix.isdigit()):
        return False
    try:
        ipaddress.ip_network(f"{addr}/{int(prefix)}", strict=False)
    except ValueError:
        return False
    return True


def parse_rule_file(path: Path) -> ParsedRule:
    apps: List[str] = []
    cidrs: List[str] = []
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise FilesystemError(f"{path}: {e.strerror or e}") from e

    # Lines end at "\n" only; rule files may be in any ANSI code page.
    for raw in data.split(b"\n"):
        line = raw.removesuffix(b"\r").decode("utf-8", errors="replace")
        if not line or line.startswith("#"):
            continue
        if line.endswith(APP_SUFFIX):
            apps.append(line)
            continue
        if is_cidr(line):
            cidrs.append(line)
    return ParsedRule(app_patterns=tuple(apps), cidr_blocks=tuple(cidrs))


class RuleStore:
    """Caches the last scan of a rules directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self._rules = RuleSet()

    def reload(self) -> RuleSet:
        self._rules = scan_rules(self.directory)
        return self._rules

    @property
    def ids(self) -> List[str]:
        return list(self._rules.ids)

    def path_for(self, rule_id: str) -> Path:
        try:
            return self._rules.paths[rule_id]
        except KeyError:
            raise UnknownRule(f"unknown mode: {rule_id}") from None

    def parse(self, rule_id: str) -> ParsedRule:
        return parse_rule_file(self.path_for(rule_id))
