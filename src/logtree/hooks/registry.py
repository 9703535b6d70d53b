"""
Name → factory registry for hooks.

Hook plugins register their factory when imported, before any logger
registry is created. After start-up the mapping is only read.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any, Optional

import structlog

from ..config import ConfigView, MappingConfig, as_view
from ..errors import HookAlreadyRegistered
from .base import Hook, HookFactory

logger = structlog.get_logger(__name__)


class HookRegistry:
    """Write-once-per-name mapping from hook name to factory."""

    def __init__(self) -> None:
        self._factories: dict[str, HookFactory] = {}
        self._lock = threading.Lock()

    def register(self, name: str, factory: HookFactory) -> None:
        with self._lock:
            existing = self._factories.get(name)
            if existing is not None and existing is not factory:
                raise HookAlreadyRegistered(name)
            self._factories[name] = factory

    def known_hooks(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._factories)

    def __contains__(self, name: object) -> bool:
        return name in self.known_hooks()

    def build(self, spec: ConfigView | Mapping[str, Any]) -> Optional[Hook]:
        """Build one hook from its spec.

        Returns ``None`` for a spec without a registered ``name``. Errors
        raised by the factory itself propagate unchanged.
        """
        view = as_view(spec)
        name = view.get("name")
        with self._lock:
            factory = self._factories.get(name) if isinstance(name, str) else None
        if factory is None:
            logger.warning("skipping unknown hook", hook=name, known=sorted(self.known_hooks()))
            return None
        return factory(view)

    def build_all(self, specs: Any) -> tuple[Hook, ...]:
        """Build every hook in ``specs`` (one spec or a list of specs)."""
        if specs is None:
            return ()
        if isinstance(specs, (Mapping, MappingConfig)):
            specs = [specs]
        if not isinstance(specs, (list, tuple)):
            logger.warning("ignoring malformed hooks entry", hooks=specs)
            return ()

        hooks = []
        for spec in specs:
            if not isinstance(spec, (Mapping, MappingConfig)):
                logger.warning("ignoring malformed hook spec", spec=spec)
                continue
            hook = self.build(spec)
            if hook is not None:
                hooks.append(hook)
        return tuple(hooks)


# Process-wide default used by registries that are not given their own.
default_hooks = HookRegistry()


def register_hook(name: str, factory: HookFactory) -> None:
    default_hooks.register(name, factory)


def known_hooks() -> frozenset[str]:
    """Names of all hook factories registered on the default registry."""
    return default_hooks.known_hooks()


def build_hook(spec: ConfigView | Mapping[str, Any]) -> Optional[Hook]:
    return default_hooks.build(spec)
