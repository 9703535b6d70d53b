import logging
import typing as t

import pytest

from logtree import core
from logtree.config import ConfigView
from logtree.hooks import Hook, HookRegistry
from logtree.interceptors import RedirectStdLibHandler
from logtree.levels import parse_level


class RecordingHook(Hook):
    """Test hook keeping every event it receives."""

    name = "recorder"

    def __init__(self, config: ConfigView):
        self.config = config.to_dict()
        self.events: list[dict[str, t.Any]] = []
        self.replace = bool(config.get("replace", False))
        levels = config.get("levels")
        if levels:
            self.levels = frozenset(parse_level(level) for level in levels)

    def fire(self, event_dict):
        self.events.append(event_dict)


class ExplodingHook(Hook):
    """Test hook failing on every record."""

    name = "exploding"

    def __init__(self, config: ConfigView):
        pass

    def fire(self, event_dict):
        raise RuntimeError("collector unavailable")


@pytest.fixture
def hook_registry() -> HookRegistry:
    """Isolated hook registry with the test hooks registered."""
    registry = HookRegistry()
    registry.register("recorder", RecordingHook)
    registry.register("exploding", ExplodingHook)
    return registry


@pytest.fixture(autouse=True)
def reset_default_registry(monkeypatch):
    """Each test starts without a process-wide registry."""
    monkeypatch.setattr(core, "_registry", None)
    yield


@pytest.fixture
def restore_stdlib_logging():
    """Detach the registry bridge from the stdlib root logger after the test."""
    root_logger = logging.getLogger()
    level = root_logger.level
    yield root_logger
    for handler in list(root_logger.handlers):
        if isinstance(handler, RedirectStdLibHandler):
            root_logger.removeHandler(handler)
    root_logger.setLevel(level)
