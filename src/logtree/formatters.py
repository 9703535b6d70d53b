"""
Renderers turning an event dict into one output line.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import orjson
import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

logger = structlog.get_logger(__name__)

DEFAULT_FORMAT = "text"


def orjson_dumps(v: Any, *, default: Any = str) -> str:
    """Fast JSON serialization using orjson."""
    return orjson.dumps(v, default=default, option=orjson.OPT_UTC_Z | orjson.OPT_NAIVE_UTC).decode()


# =============================================================================
# JSON
# =============================================================================


def render_json(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> str:
    """Render as a single JSON document: time, level and msg first, then fields."""
    data = dict(event_dict)
    document = {
        "time": data.pop("timestamp", None),
        "level": data.pop("level", method_name),
        "msg": data.pop("event", ""),
    }
    document.update(data)
    return orjson_dumps(document)


# =============================================================================
# Text (aligned columns)
# =============================================================================


class TextFormatter:
    """Human-readable, fixed-width columns: time | LEVEL | module | message.

    Remaining fields follow the message as ``key=value`` pairs. Colours are
    only used when the destination is a TTY.
    """

    _RESET = "\x1b[0m"
    _LEVEL_COLORS = {
        "DEBUG": "\x1b[36m",
        "INFO": "\x1b[32m",
        "WARNING": "\x1b[33m",
        "ERROR": "\x1b[31m",
        "FATAL": "\x1b[1;31m",
        "PANIC": "\x1b[1;35m",
    }
    _MODULE_COLOR = "\x1b[35m"
    _KEY_COLOR = "\x1b[34m"
    _TIMESTAMP_COLOR = "\x1b[90m"

    EXCLUDED_KEYS = {"level", "event", "module", "timestamp"}
    TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
    LEVEL_WIDTH = 7
    MODULE_WIDTH = 24
    SEPARATOR = " | "

    def __init__(self, use_color: bool = False):
        self.use_color = use_color

    @staticmethod
    def _fit_right(text: str, width: int) -> str:
        if len(text) > width:
            text = "..." + text[-(width - 3) :]
        return f"{text:>{width}}"

    def _format_timestamp(self, raw: Any) -> str:
        if isinstance(raw, str):
            try:
                dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
                if dt.tzinfo is None:
                    dt = dt.replace(tzinfo=timezone.utc)
                return dt.astimezone().strftime(self.TIMESTAMP_FORMAT)
            except ValueError:
                pass
        return datetime.now().strftime(self.TIMESTAMP_FORMAT)

    def _paint(self, text: str, color: str | None) -> str:
        if not self.use_color or not color:
            return text
        return f"{color}{text}{self._RESET}"

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> str:
        level = str(event_dict.get("level", method_name)).upper()
        module = str(event_dict.get("module", ""))
        message = str(event_dict.get("event", ""))

        extras = [
            f"{self._paint(str(k), self._KEY_COLOR)}={v}"
            for k, v in event_dict.items()
            if k not in self.EXCLUDED_KEYS
        ]
        if extras:
            message = f"{message} " + " ".join(extras)

        return self.SEPARATOR.join(
            [
                self._paint(self._format_timestamp(event_dict.get("timestamp")), self._TIMESTAMP_COLOR),
                self._paint(self._fit_right(level, self.LEVEL_WIDTH), self._LEVEL_COLORS.get(level)),
                self._paint(self._fit_right(module, self.MODULE_WIDTH), self._MODULE_COLOR),
                message,
            ]
        )


def resolve_formatter(name: Any, *, use_color: bool = False) -> tuple[str, Processor]:
    """Return the canonical format name and its renderer.

    Anything other than ``json`` or ``text`` falls back to text.
    """
    if name == "json":
        return "json", render_json
    if name is not None and name != DEFAULT_FORMAT:
        logger.warning("unknown log format", format=name, fallback=DEFAULT_FORMAT)
    return DEFAULT_FORMAT, TextFormatter(use_color=use_color)
