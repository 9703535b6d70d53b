"""
Logger registry and logger nodes.

A registry owns the root section of a configuration document and a cache of
every logger created from it. Loggers are requested by name from any node;
the name is looked up in the single shared cache, and on a miss the new
logger's config is resolved from the section of the same name directly under
the root section (never under the calling node's own section), merged over the
calling node's effective config.

Example configuration::

    root:
      level: debug
      format: json
      writer:
        stdout:
      someModule:
        level: warn
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any, Optional

from .config import RECOGNIZED_KEYS, ConfigView, EffectiveConfig, MappingConfig, add_defaults, as_view, merge_config
from .hooks import Hook, HookRegistry, default_hooks
from .levels import Level
from .processors import EntryLogger, Sink, build_sink
from .settings import LoggingSettings
from .writers import Writer


class Logger:
    """A named logger bound to an effective config and structured fields.

    The sink is built once, at construction. A logger never changes after it
    has been created.
    """

    def __init__(
        self,
        name: str,
        fields: Mapping[str, Any],
        config: EffectiveConfig,
        registry: Optional["Registry"] = None,
    ):
        self.name = name
        self.config = config
        self._fields = dict(fields)
        self._registry = registry
        self.sink: Sink = build_sink(config, registry.hooks if registry is not None else None)
        self.entry: EntryLogger = self.sink.bind(self._fields)

    @property
    def fields(self) -> dict[str, Any]:
        return dict(self._fields)

    @property
    def level(self) -> Level:
        return self.sink.level

    @property
    def formatter(self) -> str:
        return self.sink.formatter

    @property
    def writer(self) -> Writer:
        return self.sink.writer

    @property
    def hooks(self) -> tuple[Hook, ...]:
        return self.sink.hooks

    def new(self, name: str, fields: Optional[Mapping[str, Any]] = None) -> "Logger":
        """Get or create the logger called ``name``.

        ``fields`` only apply when the logger is created; a cached logger is
        returned as is.
        """
        if self._registry is None:
            raise RuntimeError(f"Logger '{self.name}' is not attached to a registry")
        return self._registry._obtain(name, self, fields)

    def bind(self, **kw: Any) -> EntryLogger:
        """Return a structlog bound logger carrying extra fields."""
        return self.entry.bind(**kw)

    def debug(self, event: Any = None, **kw: Any) -> Any:
        return self.entry.debug(event, **kw)

    def info(self, event: Any = None, **kw: Any) -> Any:
        return self.entry.info(event, **kw)

    def warning(self, event: Any = None, **kw: Any) -> Any:
        return self.entry.warning(event, **kw)

    warn = warning

    def error(self, event: Any = None, **kw: Any) -> Any:
        return self.entry.error(event, **kw)

    def fatal(self, event: Any = None, **kw: Any) -> None:
        self.entry.fatal(event, **kw)

    def panic(self, event: Any = None, **kw: Any) -> None:
        self.entry.panic(event, **kw)

    def log(self, level: Level | int, event: Any = None, **kw: Any) -> Any:
        return self.entry.log(level, event, **kw)

    def __repr__(self) -> str:
        return f"<Logger {self.name!r} level={self.level.label} format={self.formatter}>"


class Registry:
    """Shared cache and factory root for all named loggers of an application.

    Creating a registry only snapshots the root section; the root logger is
    built on the first :meth:`root` call.
    """

    def __init__(
        self,
        config: ConfigView | Mapping[str, Any] | None = None,
        *,
        settings: Optional[LoggingSettings] = None,
        hooks: Optional[HookRegistry] = None,
    ):
        self.settings = settings or LoggingSettings()
        self.hooks = hooks or default_hooks
        self.root_name = self.settings.root_name

        view = as_view(config)
        section = view.sub(self.root_name)
        if section is None:
            section = view
        self.root_config = EffectiveConfig(add_defaults(MappingConfig(section.to_dict()), self.settings))

        self._store: dict[str, Logger] = {}
        self._lock = threading.RLock()

    def root(self) -> Logger:
        return self._obtain(self.root_name, None, None)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._store

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def _override(self, name: str) -> Optional[EffectiveConfig]:
        if name.lower() in RECOGNIZED_KEYS:
            return None
        return self.root_config.sub(name)

    def _obtain(self, name: str, parent: Optional[Logger], fields: Optional[Mapping[str, Any]]) -> Logger:
        # Lookup, construction and insertion happen under one lock so that at
        # most one logger is ever built per name and a logger whose hooks
        # fail to build is never published.
        with self._lock:
            cached = self._store.get(name)
            if cached is not None:
                return cached

            if parent is None or name == self.root_name:
                config = self.root_config
                node_fields: dict[str, Any] = {"module": name}
            else:
                override = self._override(name)
                config = parent.config if override is None else merge_config(override, parent.config)
                node_fields = {**parent.fields, **(fields or {}), "module": name}

            node = Logger(name, node_fields, config, registry=self)
            self._store[name] = node
            return node
