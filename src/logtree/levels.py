"""
Severity levels and level-string resolution.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class Level(IntEnum):
    """Ordered severities, least severe first."""

    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40
    FATAL = 50
    PANIC = 60

    @property
    def label(self) -> str:
        """Lower-case name used as the structlog method name and in output."""
        return _LABELS[self]

    @classmethod
    def from_label(cls, label: str) -> "Level":
        return _BY_LABEL[label]


_LABELS = {
    Level.DEBUG: "debug",
    Level.INFO: "info",
    Level.WARN: "warning",
    Level.ERROR: "error",
    Level.FATAL: "fatal",
    Level.PANIC: "panic",
}

_BY_LABEL = {label: level for level, label in _LABELS.items()}

# Literal tokens accepted in configuration. No trimming or case folding.
_TOKENS = {
    "debug": Level.DEBUG,
    "info": Level.INFO,
    "warn": Level.WARN,
    "warning": Level.WARN,
    "error": Level.ERROR,
    "fatal": Level.FATAL,
    "panic": Level.PANIC,
}

FALLBACK_LEVEL = Level.ERROR


def parse_level(text: Any) -> Level:
    """Resolve a configured level string.

    Unrecognised input, including the empty string, resolves to ``error`` and
    emits a warning on the package diagnostic logger.
    """
    if isinstance(text, str):
        level = _TOKENS.get(text)
        if level is not None:
            return level

    logger.warning("invalid log level", value=text, fallback=FALLBACK_LEVEL.label)
    return FALLBACK_LEVEL
