"""Custom exception hierarchy for EchoForge."""

from __future__ import annotations


class EchoForgeError(Exception):
    """Base exception for all EchoForge errors.

    Everything raised on purpose by the benchmark harness inherits from this
    class, so the CLI can turn any of them into a clean diagnostic with a
    single except clause.
    """


class ConfigError(EchoForgeError):
    """Raised when configuration is invalid or missing.

    Examples:
        - An environment variable is not a number.
        - Message length, duration or connection count is below 1.
        - The target address is not in ``host:port`` form.
    """


class EngineError(EchoForgeError):
    """Raised when a benchmark run cannot be started or completed."""


class ConnectError(EngineError):
    """Raised when a worker cannot establish its initial connection.

    This is a startup precondition: the whole run is aborted and no
    partial result is produced.
    """


class ResourceLimitError(EngineError):
    """Raised when the process cannot hold enough open file descriptors."""


class ShortReadError(ConnectionError):
    """Raised when the peer closes the connection before a full reply arrives."""
