"""
Exactly-once barrier used by RequestContext.

First caller wins, every other caller blocks until it finishes and then
observes the same memoized result or the same exception instance.
"""

import threading
from enum import Enum
from typing import Any, Callable, Optional


class OnceState(str, Enum):
    """Barrier states."""
    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"


class OnceBarrier:
    """
    State flag guarded by a lock plus a completion event.

    Example:
        >>> barrier = OnceBarrier()
        >>> barrier.run(lambda: 42)
        42
        >>> barrier.run(lambda: 43)  # not called
        42
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._attempt = threading.Event()
        self._state = OnceState.PENDING
        self._result: Any = None
        self._error: Optional[Exception] = None
        self._owner: Optional[int] = None

    @property
    def state(self) -> OnceState:
        with self._lock:
            return self._state

    @property
    def done(self) -> bool:
        return self._done.is_set()

    @property
    def error(self) -> Optional[Exception]:
        """Memoized exception (only meaningful once done)."""
        return self._error

    def run(self, func: Callable[[], Any]) -> Any:
        """
        Run ``func`` if nobody ran it yet, otherwise wait for the winner.

        KeyboardInterrupt and other BaseExceptions that are not Exceptions
        are not memoized: the barrier goes back to PENDING and the next
        caller (or a waiting one) runs ``func`` again.

        Returns:
            Memoized result of the single ``func`` call

        Raises:
            The exception ``func`` raised, the same instance for every caller
        """
        while True:
            with self._lock:
                if self._state is OnceState.DONE:
                    break
                if self._state is OnceState.RUNNING:
                    if self._owner == threading.get_ident():
                        # waiting on ourselves would never return
                        raise RuntimeError("re-entrant call from inside the running operation")
                    attempt = self._attempt
                    leader = False
                else:
                    self._state = OnceState.RUNNING
                    self._owner = threading.get_ident()
                    attempt = self._attempt = threading.Event()
                    leader = True

            if not leader:
                attempt.wait()
                continue

            try:
                self._result = func()
            except Exception as exc:
                self._error = exc
            except BaseException:
                with self._lock:
                    self._state = OnceState.PENDING
                    self._owner = None
                attempt.set()
                raise

            with self._lock:
                self._state = OnceState.DONE
            self._done.set()
            attempt.set()
            break

        if self._error is not None:
            raise self._error
        return self._result
