# spscring

A fixed-capacity FIFO ring buffer meant for one producer and one consumer.
It has no dependencies beyond the standard library.

- `spscring.rb`: the plain, non-blocking ring buffer (`RingBuffer`) and its
  `Producer` / `Consumer` halves.
- `spscring.sync`: a binary `Semaphore` with `TimeoutIter` and `TakeIter`
  helpers for waiting with a deadline.
- `spscring.blocking`: `BlockingRb`, whose halves wait, with an optional
  timeout, until room or items are available. The halves work across threads.
- `spscring.aio_rb`: `AsyncRb`, a ring buffer that wakes a registered asyncio
  waiter (`AsyncWaker`) whenever its state changes.

## Installation

```
pip install .
```

## Plain ring buffer

A buffer hands out at most one producer and one consumer at a time. Asking
for a second one raises `RuntimeError` until the first is closed. The halves
can also be used as context managers.

```python
from spscring.rb import RingBuffer

prod, cons = RingBuffer(2).split()

prod.try_push(0)          # True
prod.try_push(1)          # True
prod.try_push(2)          # False: the buffer is full

cons.try_pop()            # 0
prod.try_push(2)          # True
cons.try_pop()            # 1
cons.try_pop()            # 2
cons.try_pop()            # None: the buffer is empty
```

`try_pop` also returns `None` for a stored `None` item. Use `is_empty()` or
`occupied_len()` when the two cases have to be told apart.

In overwriting mode the oldest item is dropped when the buffer is full:

```python
rb = RingBuffer(2)
rb.push_overwrite(0)      # None
rb.push_overwrite(1)      # None
rb.push_overwrite(2)      # 0, the evicted item
rb.try_pop()              # 1
```

The bulk operations are:

- `push_slice(items)` stores as many leading items of a sequence as fit and
  returns how many it stored.
- `push_iter(iterable)` stores items until the iterable ends or the buffer
  fills. It takes no item from the iterator beyond those it stored.
- `pop_slice(count)` removes up to `count` items and returns them as a list.
- `pop_iter()` removes and yields items until the buffer is empty.
- `skip(count)` and `clear()` drop items and return how many they dropped.

`Producer.read_from(reader, count=None)` reads bytes from a binary reader
straight into the free space. It returns the number of bytes stored, `0` at
end of input, or `None` if there was no room.
`Consumer.write_into(writer, count=None)` writes stored bytes to a binary
writer and drops what the writer accepted. It returns the number written, or
`None` if the buffer was empty.

## Blocking halves

```python
import threading
from spscring.blocking import BlockingRb

prod, cons = BlockingRb(7).split()
prod.timeout = 1.0        # seconds; None (the default) waits forever
cons.timeout = 1.0

def send():
    prod.push_exact(b"hello, world")
    prod.close()

threading.Thread(target=send).start()
data = bytes(cons.pop_until_end())   # b"hello, world"
```

`BlockingProd` offers `wait_vacant`, `push`, `push_all_iter`, `push_exact`,
`write` and `flush`. `BlockingCons` offers `wait_occupied`, `pop`,
`pop_all_iter`, `pop_exact`, `pop_until_end` and `read`. Both halves have
`is_closed()`, which tells whether the other half has been released.

- `wait_vacant`, `wait_occupied`, `push` and `pop` raise `TimedOut` when the
  timeout runs out and `Closed` when the other half has gone away.
- Both errors derive from `WaitError`. `TimedOut` is also a `TimeoutError`.
- A failed `push` carries the item back in the error's `item` attribute.
- Asking `wait_vacant` or `wait_occupied` for more than the capacity raises
  `ValueError`.
- `write` returns `0` once the consumer is gone, and `read` returns `b""`
  once the producer is gone and the buffer is drained.

## asyncio wake-ups

`AsyncRb` is a `RingBuffer` with two `AsyncWaker`s:

- `read` is woken when items are removed or the consumer is attached or
  released.
- `write` is woken when items are added or the producer is attached or
  released.

`AsyncWaker.wait()` registers a waiter at once and returns a future to await.
A wake that comes with no waiter registered is lost, so register first, check
the condition, and then await. Waking is safe from any thread.

```python
import asyncio
from spscring.aio_rb import AsyncRb

async def main():
    rb = AsyncRb(2)
    prod, cons = rb.split()

    async def next_item():
        while True:
            waiter = rb.write.wait()
            if not cons.is_empty():
                return cons.try_pop()
            await waiter

    getter = asyncio.ensure_future(next_item())
    await asyncio.sleep(0)
    prod.try_push(42)
    return await getter   # 42

asyncio.run(main())
```

## What the package does not do

There are no awaitable producer or consumer halves. Nothing awaits a push or
a pop for you, nothing iterates a consumer with `async for`, and there is no
coroutine that moves items from one buffer to another. With `AsyncRb`,
waiting is done by hand on its `read` and `write` wakers, as shown above.
The package has no command-line program.

## Running the tests

```
pip install .[test]
pytest
```