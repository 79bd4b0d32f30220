"""Async function configuration and its validation."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

from .actions import Action, Matcher, is_matcher, payload_of
from .errors import ConfigError
from .settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AsyncFunctionConfig:
    """Which actions start, resolve and reject an async function.

    Attributes:
        start: Action type dispatched when the function is called
        resolve: Action type or predicate that resolves the pending call
        reject: Action type or predicate that rejects the pending call
        set_payload: Maps the call argument to the start action payload
        get_payload: Maps the resolve action to the resolution value
        get_error: Maps the reject action to the rejection value
    """

    start: str
    resolve: Matcher
    reject: Matcher
    set_payload: Callable[[Any], Any] | None = None
    get_payload: Callable[[Action], Any] = payload_of
    get_error: Callable[[Action], Any] = payload_of

    def binding_key(self) -> tuple[Any, Any, Any]:
        """The fields whose change requires new subscriptions."""
        return (self.start, self.resolve, self.reject)

    def requires_rebind(self, other: AsyncFunctionConfig) -> bool:
        """True if ``other`` subscribes to different actions than this config."""
        return any(
            mine is not theirs and mine != theirs
            for mine, theirs in zip(self.binding_key(), other.binding_key(), strict=True)
        )

    def with_changes(self, **changes: Any) -> AsyncFunctionConfig:
        """Return a copy with some fields replaced."""
        return replace(self, **changes)


def is_missing(value: Any) -> bool:
    return value is None or value == ""


def _type_name(value: Any) -> str:
    return type(value).__name__


def validate_config(config: AsyncFunctionConfig) -> tuple[list[str], list[str]]:
    """Inspect a config.

    Returns:
        (missing, invalid): problems with absent required fields, and
        problems with fields of the wrong type
    """
    missing: list[str] = []
    invalid: list[str] = []

    if is_missing(config.start):
        missing.append("`start` is required")
    elif not isinstance(config.start, str):
        invalid.append(f"`start` must be a string, got {_type_name(config.start)}")

    for name in ("resolve", "reject"):
        value = getattr(config, name)
        if is_missing(value):
            missing.append(f"`{name}` is required")
        elif not is_matcher(value):
            invalid.append(f"`{name}` must be a string or callable, got {_type_name(value)}")

    if config.set_payload is not None and not callable(config.set_payload):
        invalid.append(f"`set_payload` must be callable, got {_type_name(config.set_payload)}")
    for name in ("get_payload", "get_error"):
        value = getattr(config, name)
        if not callable(value):
            invalid.append(f"`{name}` must be callable, got {_type_name(value)}")

    return missing, invalid


def check_config(config: AsyncFunctionConfig, settings: Settings | None = None) -> None:
    """Report configuration problems.

    Missing fields are logged and tolerated so a config can be filled in
    gradually. Wrong types cannot be bound and raise.

    Raises:
        ConfigError: For wrong-typed fields, or for any problem in strict mode
    """
    settings = settings or Settings.from_env()
    missing, invalid = validate_config(config)

    if settings.diagnostics_enabled:
        for problem in missing + invalid:
            logger.warning(f"Warning: Failed config type: {problem}")

    if invalid:
        raise ConfigError(invalid)
    if missing and settings.strict:
        raise ConfigError(missing)
