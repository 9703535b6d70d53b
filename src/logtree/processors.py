"""
Per-node structlog pipeline: level filter, timestamp, hooks, renderer.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from .config import EffectiveConfig
from .errors import LogPanic
from .formatters import resolve_formatter
from .hooks import Hook, HookRegistry, default_hooks
from .levels import Level, parse_level
from .writers import NullWriter, StreamLogger, Writer, resolve_writer

# =============================================================================
# Processors
# =============================================================================


def add_log_level(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Record the level label of the method that was called."""
    event_dict["level"] = method_name
    return event_dict


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add ISO 8601 timestamp to log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


class LevelFilter:
    """Drop events below the node's level."""

    def __init__(self, level: Level):
        self.level = level

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        if Level.from_label(method_name) < self.level:
            raise structlog.DropEvent
        return event_dict


class HookDispatcher:
    """Fire each hook whose levels include the event's level.

    A hook that raises gets a one-line notice on stderr; the log call itself
    still completes.
    """

    def __init__(self, hooks: tuple[Hook, ...]):
        self.hooks = hooks

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        level = Level.from_label(method_name)
        for hook in self.hooks:
            if level not in hook.levels:
                continue
            try:
                hook.fire(dict(event_dict))
            except Exception as exc:
                sys.stderr.write(f"Failed to fire hook {hook.name or type(hook).__name__}: {exc}\n")
        return event_dict


# =============================================================================
# Bound logger
# =============================================================================


class EntryLogger(structlog.BoundLoggerBase):
    """Bound logger exposing the six severities.

    ``fatal`` exits the process with status 1 after logging and ``panic``
    raises :class:`LogPanic`; ``log(Level.FATAL, ...)`` only logs.
    """

    def debug(self, event: Any = None, **kw: Any) -> Any:
        return self._proxy_to_logger("debug", event, **kw)

    def info(self, event: Any = None, **kw: Any) -> Any:
        return self._proxy_to_logger("info", event, **kw)

    def warning(self, event: Any = None, **kw: Any) -> Any:
        return self._proxy_to_logger("warning", event, **kw)

    warn = warning

    def error(self, event: Any = None, **kw: Any) -> Any:
        return self._proxy_to_logger("error", event, **kw)

    def fatal(self, event: Any = None, **kw: Any) -> None:
        self._proxy_to_logger("fatal", event, **kw)
        raise SystemExit(1)

    def panic(self, event: Any = None, **kw: Any) -> None:
        self._proxy_to_logger("panic", event, **kw)
        raise LogPanic(event, {**self._context, **kw})

    def log(self, level: Level | int, event: Any = None, **kw: Any) -> Any:
        return self._proxy_to_logger(Level(level).label, event, **kw)


# =============================================================================
# Sink
# =============================================================================


@dataclass(frozen=True)
class Sink:
    """Everything a node writes through, resolved once from its config."""

    level: Level
    formatter: str
    renderer: Processor
    writer: Writer
    hooks: tuple[Hook, ...]

    @property
    def processors(self) -> list[Processor]:
        return [
            add_log_level,
            LevelFilter(self.level),
            add_timestamp,
            structlog.processors.format_exc_info,
            HookDispatcher(self.hooks),
            self.renderer,
        ]

    def bind(self, fields: Mapping[str, Any]) -> EntryLogger:
        return EntryLogger(StreamLogger(self.writer), self.processors, dict(fields))


def _is_tty(writer: Writer) -> bool:
    return bool(getattr(writer, "isatty", lambda: False)())


def build_sink(config: EffectiveConfig, hooks: Optional[HookRegistry] = None) -> Sink:
    """Resolve level, formatter, writer and hooks for one node.

    Hook factory errors propagate to the caller.
    """
    hooks = hooks or default_hooks

    level = parse_level(config.get("level"))
    built = hooks.build_all(config.get("hooks"))

    writer = resolve_writer(config.get("writer"))
    if any(hook.replace for hook in built):
        writer = NullWriter()

    formatter, renderer = resolve_formatter(config.get("format"), use_color=_is_tty(writer))
    return Sink(level=level, formatter=formatter, renderer=renderer, writer=writer, hooks=built)
