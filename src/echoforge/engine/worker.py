"""Connection worker: one TCP connection driven by a write/read loop."""

from __future__ import annotations

import socket
from typing import TYPE_CHECKING

from echoforge._internal.errors import ConnectError, EngineError, ShortReadError
from echoforge._internal.logging import get_logger
from echoforge.engine.protocol import WorkerOutcome

if TYPE_CHECKING:
    from echoforge._internal.types import Endpoint
    from echoforge.engine.stop import StopSignal

logger = get_logger("engine.worker")


def build_payload(length: int) -> bytes:
    """Return a zero-filled payload of ``length`` bytes ending in a newline.

    Raises:
        ValueError: If ``length`` is less than 1.
    """
    if length < 1:
        msg = f"payload length must be >= 1, got: {length}"
        raise ValueError(msg)
    return bytes(length - 1) + b"\n"


def recv_exactly(sock: socket.socket, buf: bytearray) -> None:
    """Fill ``buf`` completely from ``sock``.

    Raises:
        ShortReadError: If the peer closes before ``len(buf)`` bytes arrive.
        OSError: On any other socket failure.
    """
    view = memoryview(buf)
    expected = len(buf)
    received = 0
    while received < expected:
        n = sock.recv_into(view[received:])
        if n == 0:
            msg = f"connection closed after {received} of {expected} bytes"
            raise ShortReadError(msg)
        received += n


class ConnectionWorker:
    """Owns one TCP connection to the echo server for the whole run.

    The worker must be connected with :meth:`connect` before :meth:`run`
    is called. ``run`` loops until the stop signal is observed or an I/O
    error occurs, and always closes the socket before returning.

    Attributes:
        worker_id: Identifier used in diagnostics.
        length: Payload length in bytes.
    """

    def __init__(
        self,
        worker_id: int,
        endpoint: Endpoint,
        stop: StopSignal,
        length: int,
    ) -> None:
        self.worker_id = worker_id
        self.length = length
        self._endpoint = endpoint
        self._stop = stop
        self._payload = build_payload(length)
        self._sock: socket.socket | None = None

    @property
    def connected(self) -> bool:
        """Return True while the worker holds an open connection."""
        return self._sock is not None

    def connect(self, timeout: float | None = None) -> None:
        """Open the connection.

        ``timeout`` bounds only the connect itself; afterwards the socket
        is fully blocking.

        Raises:
            ConnectError: If the connection cannot be established.
        """
        host, port = self._endpoint
        try:
            sock = socket.create_connection((host, port), timeout=timeout)
        except (OSError, ValueError) as exc:
            # ValueError covers hostnames the idna codec rejects
            msg = f"worker {self.worker_id} could not connect to {host}:{port}: {exc}"
            raise ConnectError(msg) from exc
        sock.settimeout(None)
        self._sock = sock
        logger.debug("Worker %d connected to %s:%d", self.worker_id, host, port)

    def close(self) -> None:
        """Close the connection if it is open."""
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def run(self) -> WorkerOutcome:
        """Drive round trips until stopped or an I/O error occurs.

        Returns:
            The outcome with the number of completed round trips.

        Raises:
            EngineError: If called before :meth:`connect`.
        """
        if self._sock is None:
            msg = f"worker {self.worker_id} is not connected"
            raise EngineError(msg)

        sock = self._sock
        in_buf = bytearray(self.length)
        count = 0

        try:
            while not self._stop.is_set():
                try:
                    sock.sendall(self._payload)
                except OSError as exc:
                    logger.info("worker %d write error: %s", self.worker_id, exc)
                    return WorkerOutcome(self.worker_id, count, failed=True, error=str(exc))

                try:
                    recv_exactly(sock, in_buf)
                except OSError as exc:
                    logger.info("worker %d read error: %s", self.worker_id, exc)
                    return WorkerOutcome(self.worker_id, count, failed=True, error=str(exc))

                count += 1
        finally:
            self.close()

        logger.debug("Worker %d stopped after %d requests", self.worker_id, count)
        return WorkerOutcome(self.worker_id, count)
