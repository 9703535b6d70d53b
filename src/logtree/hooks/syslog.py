"""
Syslog forwarding hook.

Spec keys::

    hooks:
      - name: syslog
        facility: local0     # SysLogHandler facility name, default "user"
        severity: warn       # lowest level forwarded, default "debug"
        host: 10.0.0.5       # omit for the local syslog socket
        port: 514
        network: udp         # udp | tcp
        tag: my-service
        replace: false       # true: the node stops writing to its own writer

An unknown facility (or any other invalid value) raises ``HookConfigError``
while the logger is being built.
"""

from __future__ import annotations

import logging
import os
import socket
from logging.handlers import SYSLOG_UDP_PORT, SysLogHandler
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from structlog.typing import EventDict

from ..config import ConfigView
from ..errors import HookConfigError
from ..formatters import orjson_dumps
from ..levels import Level, parse_level
from .base import Hook
from .registry import register_hook

HOOK_NAME = "syslog"

LOCAL_SOCKETS = ("/dev/log", "/var/run/syslog")

# Python's logging has no level above CRITICAL.
_STDLIB_LEVELS = {
    Level.DEBUG: logging.DEBUG,
    Level.INFO: logging.INFO,
    Level.WARN: logging.WARNING,
    Level.ERROR: logging.ERROR,
    Level.FATAL: logging.CRITICAL,
    Level.PANIC: logging.CRITICAL,
}


class SyslogHookSpec(BaseModel):
    """Validated parameters of a ``syslog`` hook spec."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str = HOOK_NAME
    facility: str = "user"
    severity: str = "debug"
    host: Optional[str] = None
    port: int = SYSLOG_UDP_PORT
    network: Literal["udp", "tcp"] = "udp"
    tag: Optional[str] = None
    replace: bool = False

    @field_validator("facility")
    @classmethod
    def _known_facility(cls, value: str) -> str:
        if value not in SysLogHandler.facility_names:
            raise ValueError(f"unknown syslog facility '{value}'")
        return value


def _address(spec: SyslogHookSpec) -> str | tuple[str, int]:
    if spec.host:
        return (spec.host, spec.port)
    for path in LOCAL_SOCKETS:
        if os.path.exists(path):
            return path
    return ("localhost", spec.port)


class SyslogHook(Hook):
    """Forwards records as JSON documents through a stdlib ``SysLogHandler``."""

    name = HOOK_NAME

    def __init__(self, spec: SyslogHookSpec, handler: logging.Handler):
        self.spec = spec
        self.handler = handler
        self.severity = parse_level(spec.severity)
        self.levels = frozenset(level for level in Level if level >= self.severity)
        self.replace = spec.replace

    def fire(self, event_dict: EventDict) -> None:
        level = Level.from_label(event_dict.get("level", "info"))
        levelno = _STDLIB_LEVELS[level]
        record = logging.makeLogRecord(
            {
                "name": str(event_dict.get("module", "")),
                "levelno": levelno,
                "levelname": logging.getLevelName(levelno),
                "msg": orjson_dumps(event_dict),
            }
        )
        self.handler.handle(record)


def new_syslog_hook(config: ConfigView) -> SyslogHook:
    try:
        spec = SyslogHookSpec.model_validate(config.to_dict())
    except ValidationError as exc:
        raise HookConfigError(HOOK_NAME, str(exc)) from exc

    socktype = socket.SOCK_STREAM if spec.network == "tcp" else socket.SOCK_DGRAM
    try:
        handler = SysLogHandler(
            address=_address(spec),
            facility=SysLogHandler.facility_names[spec.facility],
            socktype=socktype,
        )
    except OSError as exc:
        raise HookConfigError(HOOK_NAME, f"cannot open syslog connection: {exc}") from exc

    if spec.tag:
        handler.setFormatter(logging.Formatter(spec.tag.replace("%", "%%") + ": %(message)s"))
    return SyslogHook(spec, handler)


register_hook(HOOK_NAME, new_syslog_hook)
