"""
Process-wide default registry.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any, Optional

from .config import ConfigView
from .hooks import HookRegistry
from .interceptors import intercept_stdlib_logging
from .registry import Logger, Registry
from .settings import LoggingSettings

# =============================================================================
# Global State
# =============================================================================

_registry: Optional[Registry] = None
_lock = threading.Lock()


def configure_logging(
    config: ConfigView | Mapping[str, Any] | None = None,
    *,
    settings: Optional[LoggingSettings] = None,
    hooks: Optional[HookRegistry] = None,
) -> Registry:
    """
    Build a registry from ``config`` and make it the process default.

    Args:
        config: Configuration document holding the root section
        settings: Registry settings (read from the environment when omitted)
        hooks: Hook factories to use instead of the process-wide ones

    Loggers are built lazily, so a misconfigured hook surfaces as a
    FatalConfigError from the first get_logger() call that needs it.
    """
    global _registry

    settings = settings or LoggingSettings()
    registry = Registry(config, settings=settings, hooks=hooks)
    with _lock:
        _registry = registry

    if settings.intercept_stdlib:
        intercept_stdlib_logging(registry)
    return registry


def get_registry() -> Registry:
    """Return the default registry, creating an unconfigured one on first use."""
    global _registry

    with _lock:
        if _registry is None:
            _registry = Registry()
        return _registry


def get_logger(name: Optional[str] = None, **fields: Any) -> Logger:
    """Get the root logger, or the named logger below it."""
    root = get_registry().root()
    if name is None:
        return root
    return root.new(name, fields)
