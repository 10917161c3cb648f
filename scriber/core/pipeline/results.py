"""Bounded hand-off channel between finished submissions and their consumers."""

from __future__ import annotations

import queue
from typing import Iterator, Optional

from ...data.models import Result
from ..cancellation import CancellationToken

_POLL_INTERVAL = 0.05


class ResultCollector:
    """Thread-safe FIFO of :class:`Result` objects holding at most ``capacity`` items.

    Publishing blocks while the collector is full, which throttles producers to
    the pace of the slowest consumer. The collector is never closed; iteration
    waits for new results indefinitely.
    """

    def __init__(self, capacity: int = 10) -> None:
        if capacity <= 0:
            raise ValueError("collector capacity must be positive")
        self.capacity = capacity
        self._queue: "queue.Queue[Result]" = queue.Queue(maxsize=capacity)

    def publish(self, result: Result, token: Optional[CancellationToken] = None) -> None:
        """Enqueue ``result``, giving up with the token's error if it fires first."""

        while True:
            if token is not None:
                token.raise_if_cancelled()
            try:
                self._queue.put(result, timeout=_POLL_INTERVAL)
                return
            except queue.Full:
                continue

    def get(self, timeout: Optional[float] = None) -> Optional[Result]:
        """Return the next result, or ``None`` when ``timeout`` elapses first."""

        try:
            if timeout is not None and timeout <= 0:
                return self._queue.get_nowait()
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def qsize(self) -> int:
        return self._queue.qsize()

    def __iter__(self) -> Iterator[Result]:
        while True:
            yield self._queue.get()

    def reader(self) -> "ResultStream":
        return ResultStream(self)


class ResultStream:
    """Consumer side of a :class:`ResultCollector`; it cannot publish."""

    def __init__(self, collector: ResultCollector) -> None:
        self._collector = collector

    @property
    def capacity(self) -> int:
        return self._collector.capacity

    def get(self, timeout: Optional[float] = None) -> Optional[Result]:
        return self._collector.get(timeout)

    def qsize(self) -> int:
        return self._collector.qsize()

    def __iter__(self) -> Iterator[Result]:
        return iter(self._collector)


__all__ = ["ResultCollector", "ResultStream"]
