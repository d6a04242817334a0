"""Single-producer single-consumer FIFO ring buffer."""

from __future__ import annotations

from itertools import islice
from typing import Any, BinaryIO, Iterable, Iterator

__all__ = ["RingBuffer", "Producer", "Consumer"]


class RingBuffer:
    """Fixed-capacity FIFO ring buffer.

    The ``read`` and ``write`` indices run modulo ``2 * capacity`` so that an
    empty buffer (``read == write``) can be told apart from a full one
    (``write - read == capacity``) without wasting a slot.

    All index changes go through :meth:`set_read_index` and
    :meth:`set_write_index`, and all hold-flag changes go through
    :meth:`hold_read` and :meth:`hold_write`, so subclasses can hook them.
    """

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be greater than zero")
        self.capacity = capacity
        self._slots: list[Any] = [None] * capacity
        self._read = 0
        self._write = 0
        self._read_held = False
        self._write_held = False

    # -- indices and flags -------------------------------------------------

    @property
    def read_index(self) -> int:
        return self._read

    @property
    def write_index(self) -> int:
        return self._write

    def set_read_index(self, value: int) -> None:
        """Publish a new read index."""
        self._read = value

    def set_write_index(self, value: int) -> None:
        """Publish a new write index."""
        self._write = value

    def read_is_held(self) -> bool:
        return self._read_held

    def write_is_held(self) -> bool:
        return self._write_held

    def hold_read(self, flag: bool) -> bool:
        """Set the consumer hold flag and return its previous value."""
        old, self._read_held = self._read_held, flag
        return old

    def hold_write(self, flag: bool) -> bool:
        """Set the producer hold flag and return its previous value."""
        old, self._write_held = self._write_held, flag
        return old

    # -- observation -------------------------------------------------------

    def occupied_len(self) -> int:
        return (self._write - self._read) % (2 * self.capacity)

    def vacant_len(self) -> int:
        return self.capacity - self.occupied_len()

    def is_empty(self) -> bool:
        return self._read == self._write

    def is_full(self) -> bool:
        return self.occupied_len() == self.capacity

    def __len__(self) -> int:
        return self.occupied_len()

    # -- internal helpers --------------------------------------------------

    def _advance(self, index: int, count: int) -> int:
        return (index + count) % (2 * self.capacity)

    def _peek(self, count: int) -> list[Any]:
        start = self._read
        return [self._slots[(start + k) % self.capacity] for k in range(count)]

    def _take(self, count: int) -> list[Any]:
        start = self._read
        items = []
        for k in range(count):
            slot = (start + k) % self.capacity
            items.append(self._slots[slot])
            self._slots[slot] = None
        if count:
            self.set_read_index(self._advance(start, count))
        return items

    def _store(self, items: Iterable[Any]) -> int:
        start = self._write
        count = 0
        for count, item in enumerate(items, 1):
            self._slots[(start + count - 1) % self.capacity] = item
        if count:
            self.set_write_index(self._advance(start, count))
        return count

    # -- producing ---------------------------------------------------------

    def try_push(self, item: Any) -> bool:
        """Append ``item``; return False if the buffer is full."""
        if self.is_full():
            return False
        self._store((item,))
        return True

    def push_overwrite(self, item: Any) -> Any:
        """Append ``item``, evicting and returning the oldest item if full."""
        evicted = self.try_pop() if self.is_full() else None
        self._store((item,))
        return evicted

    def push_slice(self, items: Any) -> int:
        """Append as many leading items of a sequence as fit; return how many."""
        count = min(len(items), self.vacant_len())
        return self._store(islice(items, count))

    def push_iter(self, iterable: Iterable[Any]) -> int:
        """Append items from ``iterable`` until it ends or the buffer fills.

        No item beyond those stored is taken from the iterator.
        """
        return self._store(islice(iter(iterable), self.vacant_len()))

    # -- consuming ---------------------------------------------------------

    def try_pop(self) -> Any:
        """Remove and return the oldest item, or None if empty."""
        if self.is_empty():
            return None
        return self._take(1)[0]

    def pop_slice(self, count: int) -> list[Any]:
        """Remove and return up to ``count`` oldest items."""
        return self._take(min(count, self.occupied_len()))

    def pop_iter(self) -> Iterator[Any]:
        """Lazily remove and yield items while the buffer is not empty."""
        while not self.is_empty():
            yield self._take(1)[0]

    def skip(self, count: int) -> int:
        """Drop up to ``count`` oldest items; return how many were dropped."""
        return len(self._take(min(count, self.occupied_len())))

    def clear(self) -> int:
        """Drop every item; return how many were dropped."""
        return len(self._take(self.occupied_len()))

    def split(self) -> tuple["Producer", "Consumer"]:
        """Create the producer and consumer halves of this buffer."""
        prod = Producer(self)
        try:
            cons = Consumer(self)
        except RuntimeError:
            prod.close()
            raise
        return prod, cons


class _Half:
    _hold_name = ""

    def __init__(self, rb: RingBuffer) -> None:
        self._rb: RingBuffer | None = None
        if getattr(rb, self._hold_name)(True):
            raise RuntimeError(f"{type(self).__name__.lower()} is already held")
        self._rb = rb

    @property
    def rb(self) -> RingBuffer:
        if self._rb is None:
            raise RuntimeError(f"{type(self).__name__.lower()} is closed")
        return self._rb

    @property
    def closed(self) -> bool:
        """Whether this half has been closed."""
        return self._rb is None

    def _release(self) -> None:
        rb, self._rb = self._rb, None
        if rb is not None:
            getattr(rb, self._hold_name)(False)

    def close(self) -> None:
        """Release this half so the buffer can hand out a new one."""
        self._release()

    def __enter__(self):
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_rb", None) is not None:
            self.close()


class Producer(_Half):
    """Write half of a :class:`RingBuffer`."""

    _hold_name = "hold_write"

    def __init__(self, rb: RingBuffer) -> None:
        super().__init__(rb)

    def close(self) -> None:
        """Release the producer so the buffer can hand out a new one."""
        self._release()

    def is_full(self) -> bool:
        return self.rb.is_full()

    def vacant_len(self) -> int:
        return self.rb.vacant_len()

    def try_push(self, item: Any) -> bool:
        return self.rb.try_push(item)

    def push_slice(self, items: Any) -> int:
        return self.rb.push_slice(items)

    def push_iter(self, iterable: Iterable[Any]) -> int:
        return self.rb.push_iter(iterable)

    def read_from(self, reader: BinaryIO, count: int | None = None) -> int | None:
        """Read bytes from ``reader`` straight into vacant space.

        Returns the number of bytes stored, or None if there was no room.
        """
        rb = self.rb
        vacant = rb.vacant_len()
        size = vacant if count is None else min(count, vacant)
        if size == 0:
            return None
        data = reader.read(size)
        if not data:
            return 0
        return rb.push_slice(data)


class Consumer(_Half):
    """Read half of a :class:`RingBuffer`."""

    _hold_name = "hold_read"

    def __init__(self, rb: RingBuffer) -> None:
        super().__init__(rb)

    def close(self) -> None:
        """Release the consumer so the buffer can hand out a new one."""
        self._release()

    def is_empty(self) -> bool:
        return self.rb.is_empty()

    def occupied_len(self) -> int:
        return self.rb.occupied_len()

    def try_pop(self) -> Any:
        return self.rb.try_pop()

    def pop_slice(self, count: int) -> list[Any]:
        return self.rb.pop_slice(count)

    def pop_iter(self) -> Iterator[Any]:
        return self.rb.pop_iter()

    def skip(self, count: int) -> int:
        return self.rb.skip(count)

    def write_into(self, writer: BinaryIO, count: int | None = None) -> int | None:
        """Write stored bytes into ``writer`` and drop what it accepted.

        Returns the number of bytes written, or None if the buffer was empty.
        """
        rb = self.rb
        occupied = rb.occupied_len()
        size = occupied if count is None else min(count, occupied)
        if size == 0:
            return None
        data = bytes(rb._peek(size))
        written = writer.write(data)
        if written is None:
            written = len(data)
        rb.skip(written)
        return written