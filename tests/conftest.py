"""Shared test fixtures for the EchoForge test suite."""

from __future__ import annotations

import asyncio
import socket
import threading
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterator

    Handler = Callable[[asyncio.StreamReader, asyncio.StreamWriter], Awaitable[None]]


# =============================================================================
# Pytest configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-apply markers based on test directory structure."""
    for item in items:
        test_path = str(item.fspath)
        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/e2e/" in test_path:
            item.add_marker(pytest.mark.e2e)


# =============================================================================
# Network utilities
# =============================================================================


def _get_free_port() -> int:
    """Find a port on localhost with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


# =============================================================================
# TCP server handlers
# =============================================================================


async def _echo_handler(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
    """Return every byte received, unchanged."""
    try:
        while True:
            data = await reader.read(65536)
            if not data:
                break
            writer.write(data)
            await writer.drain()
    except ConnectionError:
        pass
    finally:
        writer.close()


async def _close_handler(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
    """Close every connection right after accept."""
    writer.close()


def _silent_handler(hold: float) -> Handler:
    """Accept, never reply, then close after ``hold`` seconds."""

    async def _handler(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        await asyncio.sleep(hold)
        writer.close()

    return _handler


async def _short_reply_handler(
    reader: asyncio.StreamReader, writer: asyncio.StreamWriter
) -> None:
    """Reply with one byte less than received, then close."""
    data = await reader.read(65536)
    writer.write(data[:-1])
    await writer.drain()
    writer.close()


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def tcp_server() -> Iterator[Callable[[Handler], str]]:
    """Factory fixture running asyncio TCP servers in background threads.

    Call it with a connection handler; it returns the ``host:port`` address
    the server listens on. All servers are stopped at teardown.
    """
    running: list[tuple[asyncio.AbstractEventLoop, threading.Thread]] = []

    def _start(handler: Handler) -> str:
        started = threading.Event()
        holder: list[tuple[asyncio.AbstractEventLoop, int]] = []

        def _thread_target() -> None:
            loop = asyncio.new_event_loop()
            asyncio.set_event_loop(loop)
            server = loop.run_until_complete(asyncio.start_server(handler, "127.0.0.1", 0))
            holder.append((loop, server.sockets[0].getsockname()[1]))
            started.set()
            loop.run_forever()
            server.close()
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.close()

        thread = threading.Thread(target=_thread_target, daemon=True)
        thread.start()
        started.wait(timeout=5.0)
        loop, port = holder[0]
        running.append((loop, thread))
        return f"127.0.0.1:{port}"

    yield _start

    for loop, thread in running:
        loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout=5.0)


@pytest.fixture
def echo_server(tcp_server: Callable[[Handler], str]) -> str:
    """Well-behaved echo server; returns its address."""
    return tcp_server(_echo_handler)


@pytest.fixture
def closing_server(tcp_server: Callable[[Handler], str]) -> str:
    """Server that closes every connection immediately after accept."""
    return tcp_server(_close_handler)


@pytest.fixture
def silent_server(tcp_server: Callable[[Handler], str]) -> str:
    """Server that never replies and drops each connection after 2 seconds."""
    return tcp_server(_silent_handler(2.0))


@pytest.fixture
def short_reply_server(tcp_server: Callable[[Handler], str]) -> str:
    """Server that answers one byte short and then closes."""
    return tcp_server(_short_reply_handler)


@pytest.fixture
def refused_address() -> str:
    """Address with no listener, so connecting is refused."""
    return f"127.0.0.1:{_get_free_port()}"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep ECHOFORGE_* variables from the outer environment out of tests."""
    for var in (
        "ECHOFORGE_ADDRESS",
        "ECHOFORGE_LENGTH",
        "ECHOFORGE_DURATION",
        "ECHOFORGE_NUMBER",
        "ECHOFORGE_CONNECT_TIMEOUT",
    ):
        monkeypatch.delenv(var, raising=False)
