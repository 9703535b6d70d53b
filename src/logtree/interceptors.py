"""
Interceptors for capturing standard library logs.
"""

from __future__ import annotations

import logging

from .levels import Level
from .registry import Registry


def stdlib_level(levelno: int) -> Level:
    """Map a stdlib level number onto the closest :class:`Level`."""
    if levelno >= logging.CRITICAL:
        return Level.FATAL
    if levelno >= logging.ERROR:
        return Level.ERROR
    if levelno >= logging.WARNING:
        return Level.WARN
    if levelno >= logging.INFO:
        return Level.INFO
    return Level.DEBUG


class RedirectStdLibHandler(logging.Handler):
    """
    Redirect standard library logging records into a registry.

    Each record goes to the registry logger named after the stdlib logger, so
    third-party libraries pick up per-module sections of the configuration.
    CRITICAL records are logged at fatal level without exiting.
    """

    def __init__(self, registry: Registry, level: int = logging.NOTSET):
        super().__init__(level)
        self.registry = registry

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            name = record.name or self.registry.root_name
            node = self.registry.root().new(name)
            node.log(stdlib_level(record.levelno), msg)
        except Exception:
            self.handleError(record)


def intercept_stdlib_logging(registry: Registry, level: int = logging.NOTSET) -> RedirectStdLibHandler:
    """Replace the stdlib root handlers with a :class:`RedirectStdLibHandler`."""
    handler = RedirectStdLibHandler(registry)
    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    return handler
