"""Exception types raised by make_async_function."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .actions import Action


class MakeAsyncFunctionError(Exception):
    """Base class for all errors raised by this package."""

    pass


class ConfigError(MakeAsyncFunctionError):
    """Raised when an async function configuration cannot be bound."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__("; ".join(self.problems) or "Invalid configuration")


class RejectedError(MakeAsyncFunctionError):
    """Rejection of a pending call whose error value is not an exception.

    Futures can only be failed with exceptions, so a plain rejection value
    (e.g. the payload of a ``SAVE_ERROR`` action) travels in ``error``.
    """

    def __init__(self, error: Any, action: Action | None = None) -> None:
        self.error = error
        self.action = action
        super().__init__(error)


class LifecycleError(MakeAsyncFunctionError):
    """Raised when a torn-down controller is asked to bind again."""

    pass
