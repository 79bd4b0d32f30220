"""Action model and matching helpers.

An action is the unit that flows through the bus: a ``type`` identifier
plus an arbitrary ``payload``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, Field

WILDCARD = "*"


class Action(BaseModel):
    """A dispatched action.

    Example:
        {"type": "SAVE_SUCCESS", "payload": "Awesome!"}
    """

    type: str
    payload: Any = None
    error: bool = False
    meta: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def create(cls, type: str, payload: Any = None, **meta: Any) -> Action:
        """Factory method for creating actions."""
        return cls(type=type, payload=payload, meta=meta)

    @classmethod
    def coerce(cls, value: Action | Mapping[str, Any]) -> Action:
        """Accept an ``Action`` or a plain mapping."""
        if isinstance(value, Action):
            return value
        if isinstance(value, Mapping):
            return cls.model_validate(dict(value))
        raise TypeError(f"Cannot dispatch {type(value).__name__}; expected an Action or mapping")


# A string identifier or a predicate over actions
Matcher = str | Callable[[Action], bool]


def is_matcher(value: Any) -> bool:
    """Check whether a value can be used to match actions."""
    return isinstance(value, str) or callable(value)


def matches(matcher: Matcher, action: Action) -> bool:
    """Return True if ``action`` is selected by ``matcher``."""
    if isinstance(matcher, str):
        return matcher == WILDCARD or matcher == action.type
    return bool(matcher(action))


def describe_matcher(matcher: Matcher) -> str:
    """Readable form of a matcher for log messages."""
    if isinstance(matcher, str):
        return matcher
    return getattr(matcher, "__qualname__", None) or repr(matcher)


def payload_of(action: Action) -> Any:
    """Default extractor: the action's payload."""
    return action.payload
