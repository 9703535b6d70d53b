"""
Hierarchical, configuration-driven structured loggers.

Loggers form a tree rooted at a ``root`` configuration section. Each named
logger inherits level, format, writer and hooks from the logger it was
requested from unless the root section carries an override section of the
same name. Loggers are cached per name, so every lookup of a name returns the
same instance.

Library: structlog for the per-logger processor pipeline, orjson for JSON
rendering, pydantic-settings for process settings.
"""

from .config import ConfigView, EffectiveConfig, MappingConfig, add_defaults, merge_config
from .core import configure_logging, get_logger, get_registry
from .errors import FatalConfigError, HookAlreadyRegistered, HookConfigError, LogPanic, LogtreeError
from .hooks import Hook, HookRegistry, known_hooks, register_hook
from .levels import Level, parse_level
from .registry import Logger, Registry
from .settings import LoggingSettings

__all__ = [
    "ConfigView",
    "EffectiveConfig",
    "FatalConfigError",
    "Hook",
    "HookAlreadyRegistered",
    "HookConfigError",
    "HookRegistry",
    "Level",
    "LogPanic",
    "Logger",
    "LoggingSettings",
    "LogtreeError",
    "MappingConfig",
    "Registry",
    "add_defaults",
    "configure_logging",
    "get_logger",
    "get_registry",
    "known_hooks",
    "merge_config",
    "parse_level",
    "register_hook",
]
