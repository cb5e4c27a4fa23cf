"""Runtime configuration model for Sluice.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os

from core.constants import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_USER_AGENT
from core.errors import SluiceConfigError


@dataclass(frozen=True)
class SluiceConfig:
    """Validated runtime configuration.

    Attributes:
        port: Listening port for the HTTP service.
        port_from_env: Whether ``PORT`` was provided by the environment.
        host: Listening interface for the HTTP service.
        http_timeout: Outbound HTTP timeout in seconds, None for no timeout.
        user_agent: Outbound User-Agent header value.
    """

    port: int
    port_from_env: bool
    host: str
    http_timeout: float | None
    user_agent: str

    @classmethod
    def from_env(cls) -> "SluiceConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            SluiceConfigError: If environment values are invalid.
        """
        port_value = os.getenv("PORT", "")
        timeout_value = os.getenv("SLUICE_HTTP_TIMEOUT", "")
        return cls(
            port=_parse_port(port_value) if port_value else DEFAULT_PORT,
            port_from_env=bool(port_value),
            host=os.getenv("SLUICE_HOST") or DEFAULT_HOST,
            http_timeout=_parse_timeout(timeout_value) if timeout_value else None,
            user_agent=os.getenv("SLUICE_USER_AGENT") or DEFAULT_USER_AGENT,
        )


def _parse_port(raw_value: str) -> int:
    """Parse the listening port environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed port number.

    Raises:
        SluiceConfigError: If value is not an integer in 1..65535.
    """
    try:
        port = int(raw_value)
    except ValueError as error:
        raise SluiceConfigError(
            f"Invalid PORT value: expected integer, got '{raw_value}'. "
            "Set PORT to a numeric value."
        ) from error
    if not 1 <= port <= 65535:
        raise SluiceConfigError(f"Invalid PORT value {port}: expected a port in 1..65535.")
    return port


def _parse_timeout(raw_value: str) -> float:
    try:
        timeout = float(raw_value)
    except ValueError as error:
        raise SluiceConfigError(
            f"Invalid SLUICE_HTTP_TIMEOUT value: expected seconds, got '{raw_value}'."
        ) from error
    if timeout <= 0:
        raise SluiceConfigError(
            f"Invalid SLUICE_HTTP_TIMEOUT value {timeout}: expected a positive number."
        )
    return timeout
