"""
Hook abstraction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, FrozenSet

from structlog.typing import EventDict

from ..config import ConfigView
from ..levels import Level


class Hook(ABC):
    """A side-effect sink fired for every record a node emits at ``levels``.

    ``replace`` asks the owning node to discard its own writer output so the
    hook becomes the only destination.
    """

    name: str = ""
    levels: FrozenSet[Level] = frozenset(Level)
    replace: bool = False

    @abstractmethod
    def fire(self, event_dict: EventDict) -> None:
        """Receive a copy of the event dict before it is rendered."""
        ...


HookFactory = Callable[[ConfigView], Hook]
