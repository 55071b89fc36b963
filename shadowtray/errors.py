# -*- coding: utf-8 -*-
"""
Exception types shared by the rule store, generator and lifecycle controller.

Everything recoverable derives from ShadowError so the GUI adapter can report
it with a single handler. ShutdownTimeout is deliberately outside that tree.
"""

from __future__ import annotations


class ShadowError(Exception):
    """Base class for errors reported back to the operator."""


class FilesystemError(ShadowError):
    pass


class NotADirectory(FilesystemError):
    pass


class ConfigNotFound(FilesystemError):
    pass


class ConfigIsDirectory(FilesystemError):
    pass


class ParseError(ShadowError):
    pass


class ConfigUnreadable(ParseError):
    pass


class ValidationError(ShadowError):
    pass


class UnknownRule(ValidationError):
    pass


class ServerResolutionError(ShadowError):
    pass


class EngineConstructionError(ShadowError):
    pass


class EngineError(ShadowError):
    """The engine run loop ended without being asked to."""


class ShutdownTimeout(Exception):
    """
    Fatal outcome of a graceful shutdown that never completed.

    Not a ShadowError: nothing should catch this and carry on.
    """

    def __init__(self, timeout: float, exit_code: int):
        super().__init__(f"engine failed to shut down after {timeout:g} seconds")
        self.timeout = timeout
        self.exit_code = exit_code
