"""
Pluggable hooks attached to logger sinks.

Importing this package registers the built-in ``syslog`` factory.
"""

from .base import Hook, HookFactory
from .registry import HookRegistry, build_hook, default_hooks, known_hooks, register_hook
from . import syslog  # noqa: F401  registers the built-in factory

__all__ = [
    "Hook",
    "HookFactory",
    "HookRegistry",
    "build_hook",
    "default_hooks",
    "known_hooks",
    "register_hook",
]
