"""Ring buffer whose producer and consumer can block until they can proceed."""

from __future__ import annotations

from typing import Any, Iterable, Iterator

from .rb import Consumer, Producer, RingBuffer
from .sync import Semaphore, TakeIter

__all__ = [
    "WaitError",
    "TimedOut",
    "Closed",
    "BlockingRb",
    "BlockingProd",
    "BlockingCons",
]

_MISSING = object()


class WaitError(Exception):
    """A blocking operation could not complete.

    ``item`` holds the item that could not be pushed, if any.
    """

    default_message = "wait failed"

    def __init__(self, message: str | None = None, item: Any = None) -> None:
        super().__init__(message or self.default_message)
        self.item = item


class TimedOut(WaitError, TimeoutError):
    """The timeout ran out before the operation could complete."""

    default_message = "timed out"


class Closed(WaitError):
    """The other half of the buffer has been closed."""

    default_message = "the other half is closed"


class BlockingRb(RingBuffer):
    """Ring buffer that signals semaphores whenever its state changes.

    ``read`` is given whenever the consumer side changes (items removed or the
    consumer attached or released); ``write`` is given whenever the producer
    side changes.
    """

    def __init__(self, capacity: int) -> None:
        self.read = Semaphore()
        self.write = Semaphore()
        super().__init__(capacity)

    def set_write_index(self, value: int) -> None:
        super().set_write_index(value)
        self.write.give()

    def set_read_index(self, value: int) -> None:
        super().set_read_index(value)
        self.read.give()

    def hold_read(self, flag: bool) -> bool:
        old = super().hold_read(flag)
        self.read.give()
        return old

    def hold_write(self, flag: bool) -> bool:
        old = super().hold_write(flag)
        self.write.give()
        return old

    def split(self) -> tuple["BlockingProd", "BlockingCons"]:
        """Create the blocking producer and consumer halves of this buffer."""
        prod = BlockingProd(self)
        try:
            cons = BlockingCons(self)
        except RuntimeError:
            prod.close()
            raise
        return prod, cons


class _Peekable:
    """Iterator wrapper that can tell whether it is exhausted."""

    def __init__(self, iterable: Iterable[Any]) -> None:
        self._it = iter(iterable)
        self._head = _MISSING

    def __iter__(self) -> "_Peekable":
        return self

    def __next__(self) -> Any:
        if self._head is not _MISSING:
            head, self._head = self._head, _MISSING
            return head
        return next(self._it)

    def exhausted(self) -> bool:
        if self._head is _MISSING:
            try:
                self._head = next(self._it)
            except StopIteration:
                return True
        return False


def _sliceable(items: Any) -> Any:
    if isinstance(items, (bytes, bytearray, memoryview)):
        return memoryview(items)
    return items if isinstance(items, (list, tuple)) else list(items)


class BlockingProd(Producer):
    """Producer half of a :class:`BlockingRb` with waiting operations.

    ``timeout`` is in seconds; None waits forever.
    """

    def __init__(self, rb: BlockingRb) -> None:
        self.timeout: float | None = None
        super().__init__(rb)

    def _waits(self) -> TakeIter:
        return self.rb.read.take_iter(self.timeout).reset()

    def close(self) -> None:
        """Release the producer, letting a waiting consumer see it is closed."""
        self._release()

    def is_closed(self) -> bool:
        """Whether the consumer has been released."""
        return not self.rb.read_is_held()

    def wait_vacant(self, count: int) -> None:
        """Wait until at least ``count`` slots are free.

        Raises Closed if the consumer goes away and TimedOut on timeout.
        """
        if count > self.rb.capacity:
            raise ValueError("count exceeds buffer capacity")
        for _ in self._waits():
            if self.rb.vacant_len() >= count:
                return
            if self.is_closed():
                raise Closed()
        raise TimedOut()

    def push(self, item: Any) -> None:
        """Push ``item``, waiting for room; the error carries the item back."""
        for _ in self._waits():
            if self.rb.try_push(item):
                return
            if self.is_closed():
                raise Closed(item=item)
        raise TimedOut(item=item)

    def push_all_iter(self, iterable: Iterable[Any]) -> int:
        """Push every item of ``iterable``, waiting for room; return how many."""
        items = _Peekable(iterable)
        if items.exhausted():
            return 0
        count = 0
        for _ in self._waits():
            if self.is_closed():
                break
            count += self.rb.push_iter(items)
            if items.exhausted():
                break
        return count

    def push_exact(self, items: Any) -> int:
        """Push the whole sequence, waiting for room; return how many were pushed."""
        remaining = _sliceable(items)
        if not len(remaining):
            return 0
        count = 0
        for _ in self._waits():
            if self.is_closed():
                break
            n = self.rb.push_slice(remaining)
            remaining = remaining[n:]
            count += n
            if not len(remaining):
                break
        return count

    def write(self, data: Any) -> int:
        """Write some bytes, waiting for room; return 0 if the consumer is gone."""
        for _ in self._waits():
            if self.is_closed():
                return 0
            n = self.rb.push_slice(data)
            if n > 0:
                return n
        raise TimedOut()

    def flush(self) -> None:
        """Nothing is buffered outside the ring, so there is nothing to flush."""


class BlockingCons(Consumer):
    """Consumer half of a :class:`BlockingRb` with waiting operations.

    ``timeout`` is in seconds; None waits forever.
    """

    def __init__(self, rb: BlockingRb) -> None:
        self.timeout: float | None = None
        super().__init__(rb)

    def _waits(self) -> TakeIter:
        return self.rb.write.take_iter(self.timeout).reset()

    def _drained(self) -> bool:
        return self.is_closed() and self.rb.is_empty()

    def close(self) -> None:
        """Release the consumer, letting a waiting producer see it is closed."""
        self._release()

    def is_closed(self) -> bool:
        """Whether the producer has been released."""
        return not self.rb.write_is_held()

    def wait_occupied(self, count: int) -> None:
        """Wait until at least ``count`` items are stored.

        Raises Closed if the producer goes away and TimedOut on timeout.
        """
        if count > self.rb.capacity:
            raise ValueError("count exceeds buffer capacity")
        for _ in self._waits():
            if self.rb.occupied_len() >= count:
                return
            if self.is_closed():
                raise Closed()
        raise TimedOut()

    def pop(self) -> Any:
        """Remove and return the oldest item, waiting for one to arrive."""
        for _ in self._waits():
            if not self.rb.is_empty():
                return self.rb.try_pop()
            if self.is_closed():
                raise Closed()
        raise TimedOut()

    def pop_all_iter(self) -> Iterator[Any]:
        """Yield items as they arrive until the producer closes or time runs out."""
        while True:
            try:
                yield self.pop()
            except WaitError:
                return

    def pop_exact(self, count: int) -> list[Any]:
        """Wait for and remove ``count`` items; fewer if the producer closes."""
        items: list[Any] = []
        if count <= 0:
            return items
        for _ in self._waits():
            items.extend(self.rb.pop_slice(count - len(items)))
            if len(items) == count or self._drained():
                break
        return items

    def pop_until_end(self) -> list[Any]:
        """Collect items until the producer closes and the buffer is drained."""
        items: list[Any] = []
        if self._drained():
            return items
        for _ in self._waits():
            while chunk := self.rb.pop_slice(self.rb.occupied_len()):
                items.extend(chunk)
            if self._drained():
                break
        return items

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes, waiting for some; b"" once the producer is gone."""
        for _ in self._waits():
            data = self.rb.pop_slice(size)
            if data:
                return bytes(data)
            if self.is_closed():
                return b""
        raise TimedOut()