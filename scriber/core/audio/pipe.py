"""Bounded in-memory byte pipe connecting a producer thread to a consumer thread."""

from __future__ import annotations

import io
import queue
import threading
from typing import Optional, Union

_POLL_INTERVAL = 0.05


class _EndOfStream:
    pass


_EOF = _EndOfStream()

_Item = Union[bytes, _EndOfStream]


class _PipeState:
    def __init__(self, capacity: int) -> None:
        self.queue: "queue.Queue[_Item]" = queue.Queue(maxsize=capacity)
        self.reader_closed = threading.Event()


class PipeWriter(io.RawIOBase):
    """Write end of a :class:`StreamPipe`; blocks while the pipe is full."""

    def __init__(self, state: _PipeState, chunk_size: int) -> None:
        super().__init__()
        self._state = state
        self._chunk_size = chunk_size

    def writable(self) -> bool:
        return True

    def write(self, data) -> int:  # type: ignore[override]
        if self.closed:
            raise ValueError("I/O operation on closed pipe")
        payload = bytes(data)
        for offset in range(0, len(payload), self._chunk_size):
            self._put(payload[offset : offset + self._chunk_size])
        return len(payload)

    def close(self) -> None:
        if not self.closed:
            try:
                self._put(_EOF)
            except BrokenPipeError:
                pass
        super().close()

    def __del__(self) -> None:
        # Finalizers must never block on a full pipe.
        pass

    def _put(self, item: _Item) -> None:
        while True:
            if self._state.reader_closed.is_set():
                raise BrokenPipeError("pipe reader is closed")
            try:
                self._state.queue.put(item, timeout=_POLL_INTERVAL)
                return
            except queue.Full:
                continue


class PipeReader(io.RawIOBase):
    """Read end of a :class:`StreamPipe`; blocks while the pipe is empty."""

    def __init__(self, state: _PipeState) -> None:
        super().__init__()
        self._state = state
        self._pending = b""
        self._eof = False
        self._interrupt: Optional[BaseException] = None

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:  # type: ignore[override]
        if self.closed:
            raise ValueError("I/O operation on closed pipe")
        if self._interrupt is not None:
            raise self._interrupt
        if not self._pending and not self._eof:
            item = self._next()
            if isinstance(item, _EndOfStream):
                self._eof = True
            else:
                self._pending = item
        if not self._pending:
            return 0

        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size

    def interrupt(self, error: BaseException) -> None:
        """Make blocked and future reads raise ``error``."""

        self._interrupt = error

    def close(self) -> None:
        if not self.closed:
            self._state.reader_closed.set()
            self._pending = b""
            while True:
                try:
                    self._state.queue.get_nowait()
                except queue.Empty:
                    break
        super().close()

    def _next(self) -> _Item:
        while True:
            if self._interrupt is not None:
                raise self._interrupt
            try:
                return self._state.queue.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                continue


class StreamPipe:
    """Connected writer/reader pair holding at most ``capacity`` chunks in flight.

    Writes are split into chunks of ``chunk_size`` bytes. Once the reader is
    closed, writes raise :class:`BrokenPipeError`; once the writer is closed,
    reads drain what is buffered and then return end of stream.
    """

    def __init__(self, capacity: int = 16, chunk_size: int = 64 * 1024) -> None:
        if capacity <= 0:
            raise ValueError("pipe capacity must be positive")
        if chunk_size <= 0:
            raise ValueError("pipe chunk_size must be positive")
        state = _PipeState(capacity)
        self.writer = PipeWriter(state, chunk_size)
        self.reader = PipeReader(state)


__all__ = ["PipeReader", "PipeWriter", "StreamPipe"]
