"""
Output destinations for rendered log lines.
"""

from __future__ import annotations

import socket
import sys
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Iterator, Protocol, Sequence

import structlog

logger = structlog.get_logger(__name__)


class Writer(Protocol):
    def write(self, s: str) -> Any: ...

    def flush(self) -> None: ...


# =============================================================================
# Wrapped logger
# =============================================================================


class StreamLogger:
    """structlog wrapped logger that writes each rendered line to a writer."""

    def __init__(self, writer: Writer):
        self._writer = writer
        self._lock = threading.Lock()

    @property
    def writer(self) -> Writer:
        return self._writer

    def msg(self, message: str) -> None:
        with self._lock:
            self._writer.write(message + "\n")
            self._writer.flush()

    debug = info = warning = error = fatal = panic = msg


# =============================================================================
# Destinations
# =============================================================================


class NullWriter:
    """Discards everything. Used when a hook replaces the node's output."""

    def write(self, s: str) -> None:
        pass

    def flush(self) -> None:
        pass


class FileWriter:
    """Appends lines to a local file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.path, "a", encoding="utf-8")

    def write(self, s: str) -> None:
        self._file.write(s)

    def flush(self) -> None:
        self._file.flush()

    def close(self) -> None:
        self._file.close()


class SocketWriter:
    """Streams lines to a remote collector, connecting on first write."""

    def __init__(self, host: str, port: int, network: str = "tcp"):
        self.host = host
        self.port = port
        self.network = network
        self._sock: socket.socket | None = None

    def _connect(self) -> socket.socket:
        if self._sock is None:
            if self.network == "udp":
                self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
                self._sock.connect((self.host, self.port))
            else:
                self._sock = socket.create_connection((self.host, self.port))
        return self._sock

    def write(self, s: str) -> None:
        try:
            self._connect().sendall(s.encode("utf-8"))
        except OSError as exc:
            # Drop the line and reconnect on the next write.
            self.close()
            sys.stderr.write(f"Failed to write to {self.network}://{self.host}:{self.port}: {exc}\n")

    def flush(self) -> None:
        pass

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None


class TeeWriter:
    """Duplicates every write to several destinations."""

    def __init__(self, writers: Sequence[Writer]):
        self.writers = tuple(writers)

    def write(self, s: str) -> None:
        for writer in self.writers:
            writer.write(s)

    def flush(self) -> None:
        for writer in self.writers:
            writer.flush()


# =============================================================================
# Resolution
# =============================================================================


def _file_path(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        return value.get("path")
    return None


def _port(value: Any) -> int | None:
    try:
        port = int(value)
    except (TypeError, ValueError):
        return None
    return port if 0 < port < 65536 else None


def _destinations(spec: Any) -> Iterator[Writer]:
    if spec is None:
        return
    if isinstance(spec, str):
        yield from _destinations({spec: None})
        return
    if isinstance(spec, (list, tuple)):
        for item in spec:
            yield from _destinations(item)
        return
    if not isinstance(spec, Mapping):
        logger.warning("ignoring writer entry", writer=spec)
        return

    # Remote parameters are checked before any file is opened.
    remote = None
    if "host" in spec:
        port = _port(spec.get("port"))
        if port is None:
            logger.warning("remote writer without a valid port", host=spec["host"], port=spec.get("port"))
        else:
            remote = SocketWriter(str(spec["host"]), port, str(spec.get("network") or "tcp"))

    if "stdout" in spec:
        yield sys.stdout
    if "stderr" in spec:
        yield sys.stderr
    if "file" in spec:
        path = _file_path(spec["file"])
        if path:
            yield FileWriter(path)
        else:
            logger.warning("file writer without a path", writer=spec["file"])
    if remote is not None:
        yield remote


def resolve_writer(spec: Any) -> Writer:
    """Turn a ``writer`` config value into a single output stream.

    Falls back to stderr when nothing in ``spec`` names a destination.
    """
    writers = list(_destinations(spec))
    if not writers:
        return sys.stderr
    if len(writers) == 1:
        return writers[0]
    return TeeWriter(writers)
