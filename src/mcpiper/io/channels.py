"""Debug channel discovery and reading.

A debug channel is a named pipe under the fifo root. Each line written to it
is one decoded message event as a JSON object (see McMessage.from_dict).

ChannelManager multiplexes every matching pipe on one thread with
`selectors`, rescans the root for new pipes every poll interval, and hands
each event synchronously to a MessageConsumer. A pipe whose writer goes
away is closed and picked up again by the next rescan.
"""

from __future__ import annotations

import errno
import json
import logging
import os
import re
import selectors
import stat
import time
from pathlib import Path
from typing import IO, Iterable

from mcpiper.core.messages import McMessage, MessageDecodeError
from mcpiper.pipeline.trace_pipeline import MessageConsumer

logger = logging.getLogger(__name__)

_READ_SIZE = 64 * 1024


def decode_record(line: bytes) -> McMessage:
    """Decode one channel line. Raises ValueError on malformed input."""
    try:
        record = json.loads(line)
    except RecursionError as exc:
        raise MessageDecodeError("record nested too deeply") from exc
    return McMessage.from_dict(record)


def dispatch_lines(lines: Iterable[bytes], consumer: MessageConsumer, source: str) -> int:
    """Decode and hand each non-blank line to consumer; returns events delivered.

    Malformed lines are logged and skipped.
    """
    delivered = 0
    for line in lines:
        if not line.strip():
            continue
        try:
            msg = decode_record(line)
        except ValueError as exc:
            logger.warning("skipping malformed record from %s: %s", source, exc)
            continue
        consumer.accept(msg)
        delivered += 1
    return delivered


def discover_channels(root: str | os.PathLike, pattern: re.Pattern | None = None) -> list[Path]:
    """Named pipes directly under root whose file name matches pattern.

    A missing root yields no channels.
    """
    root_path = Path(root)
    try:
        entries = sorted(root_path.iterdir())
    except FileNotFoundError:
        return []
    found = []
    for path in entries:
        if pattern is not None and pattern.search(path.name) is None:
            continue
        try:
            mode = path.stat().st_mode
        except OSError:
            continue
        if stat.S_ISFIFO(mode):
            found.append(path)
    return found


class ChannelReader:
    """Non-blocking, line-oriented reader over one pipe."""

    def __init__(self, path: Path):
        self.path = path
        self._fd = os.open(path, os.O_RDONLY | os.O_NONBLOCK)
        self._buffer = b""

    def fileno(self) -> int:
        return self._fd

    @property
    def name(self) -> str:
        return self.path.name

    def read_lines(self) -> tuple[list[bytes], bool]:
        """Read what is available. Returns (complete lines, eof)."""
        try:
            chunk = os.read(self._fd, _READ_SIZE)
        except BlockingIOError:
            return [], False
        except OSError as exc:
            if exc.errno == errno.EAGAIN:
                return [], False
            raise
        if not chunk:
            # Writer closed; flush a trailing unterminated line
            tail, self._buffer = self._buffer, b""
            return ([tail] if tail else []), True
        self._buffer += chunk
        *lines, self._buffer = self._buffer.split(b"\n")
        return lines, False

    def close(self) -> None:
        if self._fd >= 0:
            os.close(self._fd)
            self._fd = -1


class ChannelManager:
    """Single-threaded reader over every matching channel under fifo_root."""

    def __init__(
        self,
        fifo_root: str | os.PathLike,
        consumer: MessageConsumer,
        filename_pattern: re.Pattern | None = None,
        poll_interval: float = 1.0,
    ):
        self.fifo_root = Path(fifo_root)
        self.consumer = consumer
        self.filename_pattern = filename_pattern
        self.poll_interval = poll_interval
        self._selector = selectors.DefaultSelector()
        self._channels: dict[Path, ChannelReader] = {}
        self._last_scan = float("-inf")

    @property
    def channels(self) -> list[Path]:
        return sorted(self._channels)

    def rescan(self) -> None:
        """Open channels that appeared since the last scan."""
        self._last_scan = time.monotonic()
        for path in discover_channels(self.fifo_root, self.filename_pattern):
            if path in self._channels:
                continue
            try:
                reader = ChannelReader(path)
            except OSError as exc:
                logger.warning("cannot open channel %s: %s", path, exc)
                continue
            self._channels[path] = reader
            self._selector.register(reader, selectors.EVENT_READ)
            logger.info("attached to channel %s", path)

    def _drop(self, reader: ChannelReader) -> None:
        self._selector.unregister(reader)
        reader.close()
        self._channels.pop(reader.path, None)
        logger.info("detached from channel %s", reader.path)

    def poll_once(self, timeout: float | None = None) -> int:
        """Wait up to timeout for data and dispatch it; returns events delivered."""
        if not self._channels:
            if timeout:
                time.sleep(timeout)
            return 0
        delivered = 0
        for key, _ in self._selector.select(timeout):
            reader: ChannelReader = key.fileobj
            try:
                lines, eof = reader.read_lines()
            except OSError as exc:
                logger.warning("read failed on channel %s: %s", reader.path, exc)
                self._drop(reader)
                continue
            delivered += dispatch_lines(lines, self.consumer, reader.name)
            if eof:
                self._drop(reader)
        return delivered

    def run_forever(self) -> None:
        """Read until interrupted; rescans the fifo root every poll interval."""
        while True:
            if time.monotonic() - self._last_scan >= self.poll_interval:
                self.rescan()
            self.poll_once(self.poll_interval)

    def close(self) -> None:
        for reader in list(self._channels.values()):
            self._drop(reader)
        self._selector.close()


def replay(stream: IO[bytes], consumer: MessageConsumer, source: str = "replay") -> int:
    """Feed a recorded JSON-lines trace to consumer; returns events delivered."""
    return dispatch_lines(stream, consumer, source)
