"""Action Bus - ordered, synchronous pub/sub for actions.

Subscribers register a matcher (an action type, a predicate, or the
``"*"`` wildcard) and are called in registration order, on the caller's
stack, before ``dispatch`` returns.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from .actions import WILDCARD, Action, Matcher, describe_matcher, is_matcher, matches

logger = logging.getLogger(__name__)

# Type for action callbacks
ActionCallback = Callable[[Action], Any]


@dataclass(eq=False)
class Subscription:
    """A registered callback and the matcher that selects its actions."""

    matcher: Matcher
    callback: ActionCallback
    active: bool = True


class Bus:
    """In-process action bus.

    The subscriber registry is the only shared state; registration and
    removal are single list operations, so a dispatch never observes a
    half-registered subscriber.
    """

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []

    @property
    def subscriber_count(self) -> int:
        """Number of active subscriptions."""
        return len(self._subscriptions)

    def subscribe(self, matcher: Matcher, callback: ActionCallback) -> Callable[[], None]:
        """Subscribe to actions selected by ``matcher``.

        Args:
            matcher: Action type, predicate over actions, or ``"*"``
            callback: Called with each matching action

        Returns:
            Unsubscribe function

        Raises:
            TypeError: If the matcher or callback is unusable
        """
        if not is_matcher(matcher):
            raise TypeError(f"Matcher must be a string or callable, got {type(matcher).__name__}")
        if not callable(callback):
            raise TypeError(f"Callback must be callable, got {type(callback).__name__}")

        subscription = Subscription(matcher=matcher, callback=callback)
        self._subscriptions.append(subscription)
        logger.debug(f"Subscribed to {describe_matcher(matcher)}")

        def unsubscribe() -> None:
            self._remove(subscription)

        return unsubscribe

    def subscribe_all(self, callback: ActionCallback) -> Callable[[], None]:
        """Subscribe to ALL actions."""
        return self.subscribe(WILDCARD, callback)

    def unsubscribe(self, token: Callable[[], None]) -> None:
        """Remove a subscription given the token returned by ``subscribe``."""
        token()

    def _remove(self, subscription: Subscription) -> None:
        if not subscription.active:
            return
        subscription.active = False
        self._subscriptions.remove(subscription)
        logger.debug(f"Unsubscribed from {describe_matcher(subscription.matcher)}")

    def dispatch(self, action: Action | Mapping[str, Any]) -> Action:
        """Deliver an action to every matching subscriber.

        Returns:
            The dispatched Action
        """
        action = Action.coerce(action)

        # Copy so subscribers added during delivery wait for the next dispatch
        for subscription in list(self._subscriptions):
            # Removed mid-dispatch: must not fire again
            if not subscription.active:
                continue
            try:
                selected = matches(subscription.matcher, action)
            except Exception:
                logger.exception(f"Error matching action {action.type}")
                continue
            if not selected:
                continue
            try:
                subscription.callback(action)
            except Exception:
                logger.exception(f"Error in subscriber for {action.type}")

        return action

    def reset(self) -> None:
        """Reset bus state (for testing)."""
        for subscription in self._subscriptions:
            subscription.active = False
        self._subscriptions = []


bus = Bus()
