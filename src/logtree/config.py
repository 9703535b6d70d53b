"""
Configuration views, snapshots and the inheritance merge.

A configuration document is a nested string-keyed tree. Keys are matched
case-insensitively. The recognised keys at any logger section are ``level``,
``format`` (``formatter`` is accepted as an alias), ``writer`` and ``hooks``;
every other mapping-valued key of the root section is a child override
section.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any, Iterator, Protocol, runtime_checkable

from .settings import LoggingSettings

RECOGNIZED_KEYS = ("level", "format", "writer", "hooks")
FORMAT_ALIAS = "formatter"


@runtime_checkable
class ConfigView(Protocol):
    """Read-only nested key/value tree consumed by the registry."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def sub(self, key: str) -> "ConfigView | None": ...

    def __contains__(self, key: object) -> bool: ...

    def to_dict(self) -> dict[str, Any]: ...


def _key(key: object) -> str:
    return str(key).lower()


def _normalize(value: Any) -> Any:
    """Deep-copy ``value`` with every mapping key lower-cased."""
    if isinstance(value, ConfigView) and not isinstance(value, Mapping):
        value = value.to_dict()
    if isinstance(value, Mapping):
        return {_key(k): _normalize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    return copy.deepcopy(value)


def _canonical(data: dict[str, Any]) -> dict[str, Any]:
    if FORMAT_ALIAS in data:
        alias = data.pop(FORMAT_ALIAS)
        data.setdefault("format", alias)
    return data


def _snapshot(config: ConfigView | Mapping[str, Any] | None) -> dict[str, Any]:
    if config is None:
        return {}
    return _canonical(_normalize(config))


class MappingConfig:
    """Mutable, dict-backed configuration tree.

    Mirrors the lookups a configuration library offers: ``get``, ``sub`` and
    ``set``. Values handed in are copied, so later changes to the source
    mapping are not seen.
    """

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = _normalize(data) if data is not None else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(_key(key), default)

    def set(self, key: str, value: Any) -> None:
        self._data[_key(key)] = _normalize(value)

    def sub(self, key: str) -> "MappingConfig | None":
        value = self._data.get(_key(key))
        if not isinstance(value, Mapping):
            return None
        return MappingConfig(value)

    def keys(self) -> list[str]:
        return list(self._data)

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    def __contains__(self, key: object) -> bool:
        return _key(key) in self._data

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (MappingConfig, EffectiveConfig)):
            return self.to_dict() == other.to_dict()
        if isinstance(other, Mapping):
            return self._data == _normalize(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"MappingConfig({self._data!r})"


class EffectiveConfig(Mapping):
    """Immutable snapshot of the configuration applied to one logger.

    The snapshot owns deep copies of its data and hands out copies on read, so
    neither the source it was built from nor a caller holding a returned value
    can change it.
    """

    def __init__(self, data: ConfigView | Mapping[str, Any] | None = None) -> None:
        self._data = _snapshot(data)

    def __getitem__(self, key: str) -> Any:
        return copy.deepcopy(self._data[_key(key)])

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return _key(key) in self._data

    def sub(self, key: str) -> "EffectiveConfig | None":
        value = self._data.get(_key(key))
        if not isinstance(value, Mapping):
            return None
        return EffectiveConfig(value)

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    def __repr__(self) -> str:
        return f"EffectiveConfig({self._data!r})"


def as_view(config: ConfigView | Mapping[str, Any] | None) -> ConfigView:
    """Adapt a plain mapping (or ``None``) to a :class:`ConfigView`."""
    if config is None:
        return MappingConfig()
    if isinstance(config, (MappingConfig, EffectiveConfig)):
        return config
    if isinstance(config, Mapping):
        return MappingConfig(config)
    if isinstance(config, ConfigView):
        return config
    raise TypeError(f"Unsupported configuration type: {type(config).__name__}")


def add_defaults(config: MappingConfig, settings: LoggingSettings | None = None) -> MappingConfig:
    """Fill in ``level`` and ``writer`` on a root section where they are absent.

    Existing values are never overwritten, so applying this twice is the same
    as applying it once.
    """
    settings = settings or LoggingSettings()
    if "level" not in config:
        config.set("level", settings.default_level)
    if "writer" not in config:
        config.set("writer", {settings.default_writer: None})
    return config


def merge_config(
    child: ConfigView | Mapping[str, Any] | None,
    parent: ConfigView | Mapping[str, Any],
) -> EffectiveConfig:
    """Resolve a child's effective configuration against its parent's.

    For each recognised key the child's value wins in full when the child
    defines it; otherwise the parent's value is inherited. Only recognised keys
    are carried into the result.
    """
    parent_data = _snapshot(parent)
    child_data = _snapshot(child)

    merged = {key: parent_data[key] for key in RECOGNIZED_KEYS if key in parent_data}
    merged.update({key: child_data[key] for key in RECOGNIZED_KEYS if key in child_data})
    return EffectiveConfig(merged)
