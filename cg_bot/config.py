"""SDK configuration settings.

Library classes take explicit values. This module is the thin adapter
that reads them from the process environment at an entry point (the CLI
or your own application bootstrap).
"""

import os
from dataclasses import dataclass

DEFAULT_BASE_URL = "https://app.commonground.cg"
DEFAULT_TIMEOUT_SECONDS = 30.0


def _get_bool_env(name: str, default: bool = False) -> bool:
    """Get a boolean value from environment variable.

    Args:
        name: Environment variable name.
        default: Default value if not set.

    Returns:
        Boolean value from environment.
    """
    value = os.getenv(name, "").lower()
    if value in ("true", "1", "yes", "on"):
        return True
    if value in ("false", "0", "no", "off"):
        return False
    return default


def _get_float_env(name: str, default: float) -> float:
    """Get a float value from environment variable, falling back on bad input."""
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass
class Settings:
    """SDK settings.

    Attributes:
        BOT_TOKEN: Bot authentication token.
        CG_BASE_URL: Common Ground API base URL.
        CG_REQUEST_TIMEOUT: Outbound request timeout in seconds.
        WEBHOOK_SECRET: Shared secret for inbound webhook verification.
        DEBUG_SDK: Log request and response bodies at debug level.
        LOG_LEVEL: Logging level.
    """

    BOT_TOKEN: str | None = None
    CG_BASE_URL: str = DEFAULT_BASE_URL
    CG_REQUEST_TIMEOUT: float = DEFAULT_TIMEOUT_SECONDS
    WEBHOOK_SECRET: str | None = None

    # Logging
    DEBUG_SDK: bool = False
    LOG_LEVEL: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables.

        Returns:
            Settings instance populated from environment.
        """
        return cls(
            BOT_TOKEN=os.getenv("BOT_TOKEN") or None,
            CG_BASE_URL=os.getenv("CG_BASE_URL") or DEFAULT_BASE_URL,
            CG_REQUEST_TIMEOUT=_get_float_env("CG_REQUEST_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
            WEBHOOK_SECRET=os.getenv("WEBHOOK_SECRET") or None,
            DEBUG_SDK=_get_bool_env("DEBUG_SDK", default=False),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        )
