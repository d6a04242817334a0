"""Ring buffer that wakes waiting coroutines whenever its state changes."""

from __future__ import annotations

import asyncio
import threading

from .rb import RingBuffer

__all__ = ["AsyncWaker", "AsyncRb"]


def _set_done(fut: asyncio.Future) -> None:
    if not fut.done():
        fut.set_result(None)


def _resolve(fut: asyncio.Future) -> None:
    loop = fut.get_loop()
    try:
        running = asyncio.get_running_loop()
    except RuntimeError:
        running = None
    if running is loop:
        _set_done(fut)
        return
    try:
        loop.call_soon_threadsafe(_set_done, fut)
    except RuntimeError:
        # The waiting loop is already closed; nobody is left to wake.
        pass


class AsyncWaker:
    """Holds at most one registered waiter and wakes it on demand.

    A wake with nothing registered is lost, as is the case for a single-slot
    waker: only a waiter registered before the wake is completed.
    Waking is safe from any thread.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._waiter: asyncio.Future | None = None

    def wait(self) -> asyncio.Future:
        """Register a waiter on the running loop and return it to be awaited.

        Registration happens immediately, so a caller can register, re-check
        its condition and only then await. A previously registered waiter is
        released so that it never hangs.
        """
        fut = asyncio.get_running_loop().create_future()
        with self._lock:
            old, self._waiter = self._waiter, fut
        if old is not None:
            _resolve(old)
        return fut

    def wake(self) -> None:
        """Complete the registered waiter, if any, and forget it."""
        with self._lock:
            fut, self._waiter = self._waiter, None
        if fut is not None:
            _resolve(fut)


class AsyncRb(RingBuffer):
    """Ring buffer that wakes its ``read`` and ``write`` wakers on changes.

    ``read`` is woken whenever the consumer side changes (items removed, the
    consumer attached or released); ``write`` whenever the producer side does.
    A producer waits on ``read``, a consumer on ``write``.
    """

    def __init__(self, capacity: int) -> None:
        self.read = AsyncWaker()
        self.write = AsyncWaker()
        super().__init__(capacity)

    def set_write_index(self, value: int) -> None:
        super().set_write_index(value)
        self.write.wake()

    def set_read_index(self, value: int) -> None:
        super().set_read_index(value)
        self.read.wake()

    def hold_read(self, flag: bool) -> bool:
        old = super().hold_read(flag)
        self.read.wake()
        return old

    def hold_write(self, flag: bool) -> bool:
        old = super().hold_write(flag)
        self.write.wake()
        return old