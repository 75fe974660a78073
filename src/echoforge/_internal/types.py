"""Shared type aliases for EchoForge."""

from __future__ import annotations

# Resolved TCP endpoint (host, port).
Endpoint = tuple[str, int]
