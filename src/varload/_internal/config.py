"""Configuration loading for varload."""

from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlsplit

from varload._internal.errors import ConfigError

DEFAULT_URL = "http://localhost:8080/"


@dataclass(frozen=True)
class VarloadConfig:
    """Process-wide defaults for an attack.

    Attributes:
        url: Target URL attacked when ``--url`` is not given.
        max_in_flight: Upper bound on concurrently outstanding requests.
        request_timeout: Per-request timeout in seconds.
    """

    url: str = DEFAULT_URL
    max_in_flight: int = 1000
    request_timeout: float = 30.0


def validate_url(url: str) -> str:
    """Check that *url* is an absolute http(s) request URI.

    Args:
        url: URL to validate.

    Returns:
        The URL unchanged.

    Raises:
        ConfigError: If the scheme is not http/https or the host is missing.
    """
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        msg = f"invalid URL {url!r}: expected an absolute http(s) URL"
        raise ConfigError(msg)
    return url


def load_config() -> VarloadConfig:
    """Load configuration from environment variables with defaults.

    Environment variables:
        VARLOAD_URL: Default target URL.  Checked with :func:`validate_url`
            only when no explicit URL overrides it.
        VARLOAD_MAX_IN_FLIGHT: Maximum in-flight requests (default: 1000).
        VARLOAD_TIMEOUT: Request timeout in seconds (default: 30.0).

    Returns:
        Populated VarloadConfig instance.

    Raises:
        ConfigError: If an environment variable has an invalid value.
    """
    url = os.environ.get("VARLOAD_URL", DEFAULT_URL)
    max_in_flight_str = os.environ.get("VARLOAD_MAX_IN_FLIGHT", "1000")
    timeout_str = os.environ.get("VARLOAD_TIMEOUT", "30.0")

    try:
        max_in_flight = int(max_in_flight_str)
    except ValueError:
        msg = f"VARLOAD_MAX_IN_FLIGHT must be an integer, got: {max_in_flight_str!r}"
        raise ConfigError(msg) from None

    if max_in_flight < 1:
        msg = f"VARLOAD_MAX_IN_FLIGHT must be >= 1, got: {max_in_flight}"
        raise ConfigError(msg)

    try:
        timeout = float(timeout_str)
    except ValueError:
        msg = f"VARLOAD_TIMEOUT must be a number, got: {timeout_str!r}"
        raise ConfigError(msg) from None

    if timeout <= 0:
        msg = f"VARLOAD_TIMEOUT must be positive, got: {timeout}"
        raise ConfigError(msg)

    return VarloadConfig(
        url=url,
        max_in_flight=max_in_flight,
        request_timeout=timeout,
    )
