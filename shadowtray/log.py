# -*- coding: utf-8 -*-
"""
Logging setup for the tray app.

Level precedence:
1. LOG_LEVEL environment variable (DEBUG, INFO, WARNING, ERROR, CRITICAL)
2. DEBUG=1 / true / yes / on
3. the `log_level` value from shadowtray.json
4. INFO

Modules log through `logging.getLogger(__name__)`; only the package logger
"shadowtray" gets handlers, so embedding code keeps control of the root logger.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOGGER_NAME = "shadowtray"
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
    "FATAL": logging.CRITICAL,
}

_configured = False


def get_log_level(fallback: Optional[str] = None) -> int:
    level_str = os.environ.get("LOG_LEVEL", "").upper().strip()
    if not level_str:
        debug_flag = os.environ.get("DEBUG", "").lower().strip()
        if debug_flag in ("1", "true", "yes", "on"):
            level_str = "DEBUG"
        else:
            level_str = (fallback or DEFAULT_LOG_LEVEL).upper().strip()
    return _LEVELS.get(level_str, logging.INFO)


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
    force: bool = False,
) -> logging.Logger:
    """
    Attach a stderr handler (and optionally a rotating file handler) to the
    package logger. Safe to call more than once; later calls are no-ops
    unless `force` is set.
    """
    global _configured

    logger = logging.getLogger(LOGGER_NAME)
    if _configured and not force:
        return logger

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    resolved = get_log_level(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(formatter)
    logger.addHandler(stream)

    if log_file is not None:
        try:
            fh = RotatingFileHandler(log_file, maxBytes=1024 * 1024, backupCount=3, encoding="utf-8")
        except OSError as e:
            logger.warning("cannot open log file %s: %s", log_file, e)
        else:
            fh.setFormatter(formatter)
            logger.addHandler(fh)

    logger.setLevel(resolved)
    logger.propagate = False
    _configured = True

    logger.debug("logging configured: level=%s", logging.getLevelName(resolved))
    return logger
