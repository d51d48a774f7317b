"""Cancellation and deadline scope bound to a request at construction."""

import threading
import time
from typing import Callable, List, Optional

from .exceptions import CancelledError, DeadlineExceededError, TransportError


class CancelScope:
    """
    Cancellation signal with an optional deadline.

    Scopes form a tree: a child inherits the earlier of its own and its
    parent's deadline and is cancelled together with the parent. A child
    stays registered on its parent until it is cancelled or released, so
    finished children should be cancelled (``with`` does it on exit). The scope
    never starts timers. Whoever blocks on it (the transport) asks for
    ``remaining()`` and waits at most that long.

    Deadlines use ``time.monotonic()``.

    Example:
        >>> scope = CancelScope.with_timeout(0.5)
        >>> ctx = get(scope, "https://api.example.com/users")
        >>> ctx.do()  # raises DeadlineExceededError after ~0.5s
    """

    def __init__(self, parent: Optional["CancelScope"] = None, deadline: Optional[float] = None):
        self._parent = parent
        self._lock = threading.Lock()
        self._cancelled = threading.Event()
        self._callbacks: List[Callable[[], None]] = []

        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self._deadline = deadline

        self._detach: Callable[[], None] = lambda: None
        if parent is not None:
            self._detach = parent.add_cancel_callback(self.cancel)

    # ==================== Конструкторы ====================

    @classmethod
    def background(cls) -> "CancelScope":
        """Scope that is never cancelled and has no deadline."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float, parent: Optional["CancelScope"] = None) -> "CancelScope":
        """Scope whose deadline is ``seconds`` from now."""
        if seconds < 0:
            raise ValueError("timeout must be non-negative")
        return cls(parent=parent, deadline=time.monotonic() + seconds)

    @classmethod
    def with_deadline(cls, deadline: float, parent: Optional["CancelScope"] = None) -> "CancelScope":
        """Scope with an absolute ``time.monotonic()`` deadline."""
        return cls(parent=parent, deadline=deadline)

    @classmethod
    def with_cancel(cls, parent: Optional["CancelScope"] = None) -> "CancelScope":
        """Scope without its own deadline, cancelled through ``cancel()``."""
        return cls(parent=parent)

    # ==================== Состояние ====================

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> Optional[float]:
        """
        Seconds left until the deadline.

        Returns:
            None if there is no deadline, otherwise a non-negative float
        """
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def done(self) -> bool:
        return self.cancelled or self.expired()

    def error(self) -> Optional[TransportError]:
        """
        Reason the scope is done, or None while it is still live.

        Explicit cancellation wins over an elapsed deadline.
        """
        if self.cancelled:
            return CancelledError()
        if self.expired():
            return DeadlineExceededError()
        return None

    # ==================== Отмена ====================

    def cancel(self) -> None:
        """Cancel the scope and all of its children. Idempotent."""
        with self._lock:
            if self._cancelled.is_set():
                return
            self._cancelled.set()
            callbacks, self._callbacks = self._callbacks, []

        self._detach()
        for callback in callbacks:
            callback()

    def release(self) -> None:
        """
        Detach from the parent without cancelling.

        The parent stops holding a reference to this scope; its later
        cancellation no longer reaches it. Idempotent.
        """
        self._detach()

    def add_cancel_callback(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Register ``callback`` to run on cancellation.

        Runs immediately if the scope is already cancelled.

        Returns:
            Function that unregisters the callback
        """
        with self._lock:
            if not self._cancelled.is_set():
                self._callbacks.append(callback)
                return lambda: self._remove_callback(callback)

        callback()
        return lambda: None

    def _remove_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cancel()
        return False

    def __repr__(self) -> str:
        return (
            f"CancelScope(cancelled={self.cancelled}, "
            f"remaining={self.remaining()})"
        )
