"""Cancellation tokens shared by the pipeline's threads."""

from __future__ import annotations

import threading
import time
from typing import Callable, List, Optional

from ..errors import CancelledError, DeadlineExceededError, PipelineError

Callback = Callable[[], None]


class CancellationToken:
    """Thread-safe cancellation signal with an optional deadline.

    A token is cancelled at most once; the first error passed to :meth:`cancel`
    sticks. Child tokens created with :meth:`child` follow their parent and may
    add a deadline of their own. Children must be closed (or used as context
    managers) so their timer and parent registration are released.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callback] = []
        self._error: Optional[PipelineError] = None
        self._deadline: Optional[float] = None
        self._timer: Optional[threading.Timer] = None
        self._detach: Optional[Callback] = None

        if timeout is not None:
            self._deadline = time.monotonic() + max(timeout, 0.0)
            self._timer = threading.Timer(
                max(timeout, 0.0),
                self.cancel,
                args=(DeadlineExceededError(f"deadline of {timeout:g}s exceeded"),),
            )
            self._timer.daemon = True
            self._timer.start()

    def child(self, timeout: Optional[float] = None) -> "CancellationToken":
        """Return a token cancelled with this one or when ``timeout`` elapses."""

        token = CancellationToken(timeout=timeout)
        token._detach = self.add_callback(lambda: token.cancel(self.error))
        return token

    def cancel(self, error: Optional[PipelineError] = None) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._error = error or CancelledError("operation cancelled")
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def error(self) -> Optional[PipelineError]:
        return self._error

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or ``timeout`` elapses; return :attr:`cancelled`."""

        return self._event.wait(timeout)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            assert self._error is not None
            raise self._error

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or ``None`` when unbounded."""

        if self._deadline is None:
            return None
        return max(self._deadline - time.monotonic(), 0.0)

    def add_callback(self, callback: Callback) -> Callback:
        """Run ``callback`` once on cancellation and return a function removing it.

        The callback runs immediately on the calling thread when the token is
        already cancelled.
        """

        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return lambda: self._remove_callback(callback)
        callback()
        return lambda: None

    def close(self) -> None:
        """Stop the deadline timer and detach from the parent token."""

        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._detach is not None:
            self._detach()
            self._detach = None

    def _remove_callback(self, callback: Callback) -> None:
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

    def __enter__(self) -> "CancellationToken":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["CancellationToken"]
