"""Benchmark configuration for EchoForge."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from echoforge._internal.errors import ConfigError

if TYPE_CHECKING:
    from echoforge._internal.types import Endpoint

DEFAULT_ADDRESS = "127.0.0.1:12345"
DEFAULT_LENGTH = 512
DEFAULT_DURATION = 60
DEFAULT_CONNECTIONS = 50
DEFAULT_CONNECT_TIMEOUT = 10.0


def parse_address(address: str) -> Endpoint:
    """Split a ``host:port`` string into its parts.

    IPv6 literals must be bracketed, e.g. ``[::1]:8080``.

    Args:
        address: Target address.

    Returns:
        A ``(host, port)`` tuple.

    Raises:
        ConfigError: If the address is malformed or the port is out of range.
    """
    host, sep, port_str = address.rpartition(":")
    if not sep or not host:
        msg = f"address must be in host:port form, got: {address!r}"
        raise ConfigError(msg)

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        msg = f"IPv6 addresses must be bracketed, got: {address!r}"
        raise ConfigError(msg)

    try:
        port = int(port_str)
    except ValueError:
        msg = f"port must be an integer, got: {port_str!r}"
        raise ConfigError(msg) from None

    if not 0 < port < 65536:
        msg = f"port must be between 1 and 65535, got: {port}"
        raise ConfigError(msg)

    return host, port


@dataclass(frozen=True)
class BenchConfig:
    """Resolved configuration for one benchmark run.

    Created once, owned by the driver and read by every worker.

    Attributes:
        address: Target echo server as ``host:port``.
        length: Payload length in bytes; the last byte is a newline.
        duration: Run duration in seconds.
        connections: Number of concurrent connections.
        connect_timeout: Seconds allowed for each initial connect.
    """

    address: str = DEFAULT_ADDRESS
    length: int = DEFAULT_LENGTH
    duration: int = DEFAULT_DURATION
    connections: int = DEFAULT_CONNECTIONS
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT

    def __post_init__(self) -> None:
        parse_address(self.address)
        for name in ("length", "duration", "connections"):
            value = getattr(self, name)
            if value < 1:
                msg = f"{name} must be >= 1, got: {value}"
                raise ConfigError(msg)
        if self.connect_timeout <= 0:
            msg = f"connect_timeout must be positive, got: {self.connect_timeout}"
            raise ConfigError(msg)

    @property
    def endpoint(self) -> Endpoint:
        """Return the parsed ``(host, port)`` of the target."""
        return parse_address(self.address)


def _env_int(var: str, default: int) -> int:
    raw = os.environ.get(var)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        msg = f"{var} must be an integer, got: {raw!r}"
        raise ConfigError(msg) from None
    if value < 1:
        msg = f"{var} must be >= 1, got: {value}"
        raise ConfigError(msg)
    return value


def load_config(
    *,
    address: str | None = None,
    length: int | None = None,
    duration: int | None = None,
    connections: int | None = None,
) -> BenchConfig:
    """Resolve a BenchConfig from explicit values, environment and defaults.

    Explicit arguments win over environment variables, which win over the
    built-in defaults.

    Environment variables:
        ECHOFORGE_ADDRESS: Target address (default: 127.0.0.1:12345).
        ECHOFORGE_LENGTH: Payload length in bytes (default: 512).
        ECHOFORGE_DURATION: Run duration in seconds (default: 60).
        ECHOFORGE_NUMBER: Concurrent connections (default: 50).
        ECHOFORGE_CONNECT_TIMEOUT: Connect timeout in seconds (default: 10.0).

    Returns:
        Validated BenchConfig instance.

    Raises:
        ConfigError: If any value is missing, unparsable or out of range.
    """
    timeout_str = os.environ.get("ECHOFORGE_CONNECT_TIMEOUT", str(DEFAULT_CONNECT_TIMEOUT))
    try:
        connect_timeout = float(timeout_str)
    except ValueError:
        msg = f"ECHOFORGE_CONNECT_TIMEOUT must be a number, got: {timeout_str!r}"
        raise ConfigError(msg) from None

    if connect_timeout <= 0:
        msg = f"ECHOFORGE_CONNECT_TIMEOUT must be positive, got: {connect_timeout}"
        raise ConfigError(msg)

    return BenchConfig(
        address=(
            address
            if address is not None
            else os.environ.get("ECHOFORGE_ADDRESS", DEFAULT_ADDRESS)
        ),
        length=length if length is not None else _env_int("ECHOFORGE_LENGTH", DEFAULT_LENGTH),
        duration=(
            duration if duration is not None else _env_int("ECHOFORGE_DURATION", DEFAULT_DURATION)
        ),
        connections=(
            connections
            if connections is not None
            else _env_int("ECHOFORGE_NUMBER", DEFAULT_CONNECTIONS)
        ),
        connect_timeout=connect_timeout,
    )
