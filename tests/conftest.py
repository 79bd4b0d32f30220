"""Pytest configuration and shared fixtures."""

import pytest

from make_async_function import AsyncFunctionConfig, Bus, Settings


@pytest.fixture(scope="module")
def anyio_backend():
    """Configure anyio to use asyncio backend."""
    return "asyncio"


@pytest.fixture
def bus() -> Bus:
    """A fresh bus per test."""
    return Bus()


@pytest.fixture
def settings() -> Settings:
    """Development settings, independent of the environment."""
    return Settings()


@pytest.fixture
def save_config() -> AsyncFunctionConfig:
    return AsyncFunctionConfig(start="SAVE", resolve="SAVE_SUCCESS", reject="SAVE_ERROR")


@pytest.fixture
def recorded(bus: Bus) -> list[dict]:
    """Every action dispatched on ``bus``, as plain dicts."""
    actions: list[dict] = []
    bus.subscribe_all(lambda action: actions.append(action.model_dump(exclude_defaults=True)))
    return actions
