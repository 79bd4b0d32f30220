"""Lifecycle management for bound async functions.

A ``LifecycleController`` owns at most one binding. Reconfiguring it
disposes the old binding before the new one subscribes, so two bindings
are never live at once and calls made under an old configuration can
never be settled by actions that arrive later.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from .bus import Bus
from .config import AsyncFunctionConfig
from .errors import LifecycleError
from .listener import AsyncFunction, Binding, create_async_function
from .settings import Settings

logger = logging.getLogger(__name__)


class ControllerState(str, Enum):
    """Controller lifecycle states."""

    UNINITIALIZED = "uninitialized"
    BOUND = "bound"
    DISPOSED = "disposed"


class LifecycleController:
    """Keeps exactly one binding active for the current configuration."""

    def __init__(self, bus: Bus, settings: Settings | None = None) -> None:
        self._bus = bus
        self._settings = settings or Settings.from_env()
        self._state = ControllerState.UNINITIALIZED
        self._binding: Binding | None = None
        self._config: AsyncFunctionConfig | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def binding(self) -> Binding | None:
        return self._binding

    @property
    def config(self) -> AsyncFunctionConfig | None:
        """The most recently supplied configuration."""
        return self._config

    @property
    def async_function(self) -> AsyncFunction | None:
        return self._binding.async_function if self._binding else None

    def activate(self, config: AsyncFunctionConfig) -> AsyncFunction:
        """Bind ``config``, replacing any current binding.

        Raises:
            LifecycleError: If the controller was already torn down
            ConfigError: If the config cannot be bound
        """
        if self._state is ControllerState.DISPOSED:
            raise LifecycleError("Controller has been deactivated")

        rebinding = self._binding is not None
        self._dispose_binding()
        self._state = ControllerState.UNINITIALIZED
        self._config = config
        self._binding = create_async_function(self._bus, config, self._settings)
        self._state = ControllerState.BOUND
        logger.debug(f"{'Rebound' if rebinding else 'Activated'} {config.start}")
        return self._binding.async_function

    def update(self, config: AsyncFunctionConfig) -> AsyncFunction:
        """Apply a new config, rebinding only if its actions changed.

        Changes limited to ``set_payload``, ``get_payload`` or ``get_error``
        keep the current binding, along with its original extractors.
        """
        if self._binding is None or self._config is None:
            return self.activate(config)
        if self._config.requires_rebind(config):
            return self.activate(config)
        self._config = config
        return self._binding.async_function

    def deactivate(self) -> None:
        """Remove the current binding. Calling again is a no-op."""
        self._dispose_binding()
        if self._state is not ControllerState.DISPOSED:
            logger.debug("Deactivated controller")
        self._state = ControllerState.DISPOSED

    def _dispose_binding(self) -> None:
        if self._binding is not None:
            self._binding.unsubscribe()
            self._binding = None

    def __enter__(self) -> LifecycleController:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.deactivate()


@runtime_checkable
class LifecycleOwner(Protocol):
    """Interface for whatever embeds a controller (UI, orchestrator, ...)."""

    def on_activate(self, config: AsyncFunctionConfig) -> None: ...

    def on_config_change(self, new_config: AsyncFunctionConfig) -> None: ...

    def on_teardown(self) -> None: ...


RenderFunction = Callable[[AsyncFunction], Any]


class MakeAsyncFunction:
    """Hands a bound async function to a render callable.

    Example:
        component = MakeAsyncFunction(bus, config, render=lambda save: Button(on_click=save))
        component.mount()
        component.render()
        component.update(config.with_changes(resolve="OTHER_SAVE_SUCCESS"))
        component.unmount()
    """

    def __init__(
        self,
        bus: Bus,
        config: AsyncFunctionConfig,
        render: RenderFunction | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.controller = LifecycleController(bus, settings)
        if self.controller.settings.diagnostics_enabled and not callable(render):
            logger.error("Warning: Must provide a render function as children")
        self.config = config
        self.render_fn = render

    @property
    def async_function(self) -> AsyncFunction | None:
        return self.controller.async_function

    def on_activate(self, config: AsyncFunctionConfig) -> None:
        self.config = config
        self.controller.activate(config)

    def on_config_change(self, new_config: AsyncFunctionConfig) -> None:
        self.config = new_config
        self.controller.update(new_config)

    def on_teardown(self) -> None:
        self.controller.deactivate()

    def mount(self) -> None:
        self.on_activate(self.config)

    def update(self, config: AsyncFunctionConfig) -> None:
        self.on_config_change(config)

    def unmount(self) -> None:
        self.on_teardown()

    def render(self) -> Any:
        """Call the render function with the current async function, if both exist."""
        async_function = self.async_function
        if callable(self.render_fn) and async_function is not None:
            return self.render_fn(async_function)
        return None
