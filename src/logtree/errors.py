"""
Exception hierarchy for logger construction.

Only hook parameter failures are fatal. Misspelled levels, unknown hook names,
unknown formats and unresolvable writer entries degrade to defaults with a
diagnostic instead of raising.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class LogtreeError(Exception):
    """Root of all logtree exceptions."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


class FatalConfigError(LogtreeError):
    """Logging configuration that must stop the process from starting.

    The registry never catches this. Start-up code is expected to let it
    propagate so a misconfigured sink is noticed instead of silently dropping
    records.
    """


class HookConfigError(FatalConfigError):
    """A hook factory rejected its parameters."""

    def __init__(self, hook: str, reason: str) -> None:
        super().__init__(
            f"Invalid configuration for hook '{hook}': {reason}",
            code="HOOK_CONFIG_INVALID",
            details={"hook": hook, "reason": reason},
        )
        self.hook = hook


class HookAlreadyRegistered(LogtreeError):
    """A different factory was already registered under the same name."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Hook factory '{name}' is already registered",
            code="HOOK_ALREADY_REGISTERED",
            details={"hook": name},
        )


class LogPanic(LogtreeError):
    """Raised after a record is logged at panic level."""

    def __init__(self, event: Any, fields: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(str(event), code="LOG_PANIC", details=dict(fields or {}))
        self.event = event
