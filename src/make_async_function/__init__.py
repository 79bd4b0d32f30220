"""make_async_function - awaitable functions settled by bus actions."""

from .actions import Action, Matcher, matches, payload_of
from .bus import Bus
from .config import AsyncFunctionConfig, check_config, validate_config
from .controller import ControllerState, LifecycleController, LifecycleOwner, MakeAsyncFunction
from .errors import ConfigError, LifecycleError, MakeAsyncFunctionError, RejectedError
from .listener import AsyncFunction, Binding, create_async_function
from .settings import Settings

__all__ = [
    "Action",
    "AsyncFunction",
    "AsyncFunctionConfig",
    "Binding",
    "Bus",
    "ConfigError",
    "ControllerState",
    "LifecycleController",
    "LifecycleError",
    "LifecycleOwner",
    "MakeAsyncFunction",
    "MakeAsyncFunctionError",
    "Matcher",
    "RejectedError",
    "Settings",
    "check_config",
    "create_async_function",
    "matches",
    "payload_of",
    "validate_config",
]
