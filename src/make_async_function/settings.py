"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass

ENV_VAR = "MAKE_ASYNC_FUNCTION_ENV"
STRICT_VAR = "MAKE_ASYNC_FUNCTION_STRICT"

PRODUCTION = "production"
DEVELOPMENT = "development"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Diagnostics switches.

    Attributes:
        environment: ``production`` silences development diagnostics
        strict: Escalate every configuration problem to ``ConfigError``
    """

    environment: str = DEVELOPMENT
    strict: bool = False

    @property
    def diagnostics_enabled(self) -> bool:
        return self.environment != PRODUCTION

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from ``MAKE_ASYNC_FUNCTION_*`` environment variables."""
        environment = os.getenv(ENV_VAR, DEVELOPMENT).strip().lower() or DEVELOPMENT
        strict = os.getenv(STRICT_VAR, "").strip().lower() in _TRUTHY
        return cls(environment=environment, strict=strict)
