"""Binds an awaitable function to start/resolve/reject actions on a bus.

Calling the function dispatches the start action and returns a future.
The future is settled by the next resolve or reject action, not by a
return value.

Correlation is by action type only. With several calls in flight, each
matching action settles the earliest call still pending (FIFO); one
action never settles more than one call.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .actions import Action, Matcher, describe_matcher
from .bus import Bus
from .config import AsyncFunctionConfig, check_config, is_missing
from .errors import ConfigError, RejectedError
from .settings import Settings

logger = logging.getLogger(__name__)


def _never(action: Action) -> bool:
    return False


def _matcher_or_never(matcher: Matcher) -> Matcher:
    # A missing matcher still occupies its subscription slot
    return _never if is_missing(matcher) else matcher


class AsyncFunction:
    """The callable half of a binding.

    Each call is a pending invocation: a future queued at call time,
    after the start action has been dispatched.
    """

    def __init__(self, bus: Bus, config: AsyncFunctionConfig) -> None:
        self._bus = bus
        self._config = config
        self._pending: deque[asyncio.Future[Any]] = deque()
        self._disposed = False

    @property
    def config(self) -> AsyncFunctionConfig:
        return self._config

    @property
    def pending_count(self) -> int:
        """Number of calls still waiting for a resolve or reject action.

        A cancelled call drops out once its done callbacks have run.
        """
        return len(self._pending)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def __call__(self, arg: Any = None) -> asyncio.Future[Any]:
        """Dispatch the start action and return a future for the outcome.

        Must be called from a running event loop. After the binding is
        disposed the start action is still dispatched, but the returned
        future never settles.

        Raises:
            ConfigError: If no start action type is configured
        """
        config = self._config
        if is_missing(config.start):
            raise ConfigError(["Cannot dispatch: `start` is required"])

        loop = asyncio.get_running_loop()
        payload = config.set_payload(arg) if config.set_payload else arg
        self._bus.dispatch(Action(type=config.start, payload=payload))

        future: asyncio.Future[Any] = loop.create_future()
        if self._disposed:
            logger.warning(f"{config.start} called after its binding was disposed; it will never settle")
        else:
            self._pending.append(future)
            future.add_done_callback(self._forget_cancelled)
        return future

    def _forget_cancelled(self, future: asyncio.Future[Any]) -> None:
        if not future.cancelled():
            return
        try:
            self._pending.remove(future)
        except ValueError:
            # Already popped or disposed
            pass

    def _next_pending(self) -> asyncio.Future[Any] | None:
        while self._pending:
            future = self._pending.popleft()
            if not future.done():
                return future
        return None

    def _on_resolve(self, action: Action) -> None:
        future = self._next_pending()
        if future is None:
            return
        try:
            value = self._config.get_payload(action)
        except Exception as e:
            future.set_exception(e)
            return
        future.set_result(value)
        logger.debug(f"{self._config.start} resolved by {action.type}")

    def _on_reject(self, action: Action) -> None:
        future = self._next_pending()
        if future is None:
            return
        try:
            error = self._config.get_error(action)
        except Exception as e:
            future.set_exception(e)
            return
        if not isinstance(error, BaseException):
            error = RejectedError(error, action)
        future.set_exception(error)
        logger.debug(f"{self._config.start} rejected by {action.type}")

    def _dispose(self) -> None:
        self._disposed = True
        abandoned = self.pending_count
        # Abandoned futures stay pending forever
        self._pending.clear()
        if abandoned:
            logger.debug(f"Abandoned {abandoned} pending call(s) to {self._config.start}")


@dataclass
class Binding:
    """A live async function and the handle that removes its subscriptions."""

    async_function: AsyncFunction
    _unsubscribe_resolve: Callable[[], None]
    _unsubscribe_reject: Callable[[], None]

    @property
    def disposed(self) -> bool:
        return self.async_function.disposed

    def unsubscribe(self) -> None:
        """Remove both subscriptions. Safe to call more than once."""
        if self.async_function.disposed:
            return
        self._unsubscribe_resolve()
        self._unsubscribe_reject()
        self.async_function._dispose()
        logger.debug(f"Unbound {self.async_function.config.start}")


def create_async_function(
    bus: Bus,
    config: AsyncFunctionConfig,
    settings: Settings | None = None,
) -> Binding:
    """Subscribe to a config's resolve and reject actions.

    Args:
        bus: Bus to dispatch on and subscribe to
        config: Which actions start, resolve and reject the function
        settings: Diagnostics settings (defaults to the environment)

    Returns:
        Binding holding the async function and its unsubscribe handle

    Raises:
        ConfigError: If the config cannot be bound
        TypeError: If the bus rejects a subscription
    """
    check_config(config, settings)

    async_function = AsyncFunction(bus, config)
    unsubscribe_resolve = bus.subscribe(_matcher_or_never(config.resolve), async_function._on_resolve)
    try:
        unsubscribe_reject = bus.subscribe(_matcher_or_never(config.reject), async_function._on_reject)
    except Exception:
        unsubscribe_resolve()
        raise

    logger.debug(
        f"Bound {config.start} -> resolve {describe_matcher(config.resolve)}, "
        f"reject {describe_matcher(config.reject)}"
    )
    return Binding(
        async_function=async_function,
        _unsubscribe_resolve=unsubscribe_resolve,
        _unsubscribe_reject=unsubscribe_reject,
    )
