"""Binary semaphore and timeout helpers for blocking waits."""

from __future__ import annotations

import threading
import time

__all__ = ["NO_WAIT", "FOREVER", "Semaphore", "TimeoutIter", "TakeIter"]

NO_WAIT: float | None = 0.0
FOREVER: float | None = None


class TimeoutIter:
    """Yields the time left until a deadline, forever if ``timeout`` is None.

    Each item is the remaining time in seconds, or None when there is no
    deadline. Iteration stops once the deadline has passed.
    """

    def __init__(self, timeout: float | None) -> None:
        self._start = time.monotonic()
        self.timeout = timeout

    def __iter__(self) -> "TimeoutIter":
        return self

    def __next__(self) -> float | None:
        if self.timeout is None:
            return None
        elapsed = time.monotonic() - self._start
        if self.timeout > elapsed:
            return self.timeout - elapsed
        raise StopIteration


class Semaphore:
    """Binary semaphore: giving an already given semaphore does nothing."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._given = False

    def give(self) -> None:
        with self._cond:
            self._given = True
            self._cond.notify()

    def try_take(self) -> bool:
        """Take the semaphore without waiting; return whether it was given."""
        with self._cond:
            given, self._given = self._given, False
            return given

    def take(self, timeout: float | None) -> bool:
        """Wait until given and take it; return False on timeout."""
        with self._cond:
            for remaining in TimeoutIter(timeout):
                if self._given:
                    self._given = False
                    return True
                if remaining is None:
                    self._cond.wait()
                elif not self._cond.wait(remaining):
                    break
            given, self._given = self._given, False
            return given

    def take_iter(self, timeout: float | None) -> "TakeIter":
        return TakeIter(self, timeout)


class TakeIter:
    """Yields once each time the semaphore is taken, until the timeout runs out."""

    def __init__(self, semaphore: Semaphore, timeout: float | None) -> None:
        self._reset = False
        self._semaphore = semaphore
        self._timeouts = TimeoutIter(timeout)

    def reset(self) -> "TakeIter":
        """Make the first step clear the semaphore and yield immediately."""
        self._reset = True
        return self

    def __iter__(self) -> "TakeIter":
        return self

    def __next__(self) -> None:
        if self._reset:
            self._reset = False
            self._semaphore.try_take()
            return None
        if self._semaphore.take(next(self._timeouts)):
            return None
        raise StopIteration