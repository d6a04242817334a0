import asyncio
import threading

import pytest

from spscring.aio_rb import AsyncRb, AsyncWaker
from spscring.rb import Consumer, Producer


async def _completes(fut, timeout=1.0):
    await asyncio.wait_for(fut, timeout)
    return fut.done()


@pytest.mark.asyncio
async def test_wait_then_wake_completes():
    waker = AsyncWaker()
    fut = waker.wait()
    assert not fut.done()
    waker.wake()
    assert await _completes(fut)


@pytest.mark.asyncio
async def test_wake_without_waiter_is_lost():
    waker = AsyncWaker()
    waker.wake()
    fut = waker.wait()
    done, pending = await asyncio.wait({fut}, timeout=0.05)
    assert fut in pending
    assert not done
    assert fut.done() is False
    fut.cancel()


@pytest.mark.asyncio
async def test_wake_only_completes_once():
    waker = AsyncWaker()
    first = waker.wait()
    waker.wake()
    await asyncio.wait_for(first, 1.0)
    assert first.done() is True
    waker.wake()
    second = waker.wait()
    done, pending = await asyncio.wait({second}, timeout=0.05)
    assert second in pending
    assert second.done() is False
    second.cancel()


@pytest.mark.asyncio
async def test_reregistering_releases_previous_waiter():
    waker = AsyncWaker()
    first = waker.wait()
    second = waker.wait()
    assert await _completes(first)
    assert not second.done()


@pytest.mark.asyncio
async def test_wake_from_other_thread():
    waker = AsyncWaker()
    fut = waker.wait()
    assert fut.done() is False
    thread = threading.Thread(target=waker.wake)
    thread.start()
    await asyncio.wait_for(fut, 2.0)
    thread.join()
    assert fut.done() is True
    assert fut.cancelled() is False


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        AsyncRb(0)


def test_behaves_as_ring_buffer():
    rb = AsyncRb(2)
    assert rb.try_push(0)
    assert rb.try_push(1)
    assert not rb.try_push(2)
    assert rb.try_pop() == 0
    assert rb.try_push(2)
    assert rb.pop_slice(5) == [1, 2]
    assert rb.is_empty()


@pytest.mark.asyncio
async def test_push_wakes_write_waker():
    rb = AsyncRb(3)
    fut = rb.write.wait()
    assert rb.try_push(7)
    assert await _completes(fut)


@pytest.mark.asyncio
async def test_pop_wakes_read_waker():
    rb = AsyncRb(3)
    rb.try_push(7)
    fut = rb.read.wait()
    assert rb.try_pop() == 7
    assert await _completes(fut)


@pytest.mark.asyncio
async def test_hold_flags_wake_and_return_previous():
    rb = AsyncRb(3)
    read_fut = rb.read.wait()
    assert rb.hold_read(True) is False
    assert await _completes(read_fut)
    write_fut = rb.write.wait()
    assert rb.hold_write(True) is False
    assert await _completes(write_fut)
    assert rb.hold_read(False) is True
    assert rb.read_is_held() is False


@pytest.mark.asyncio
async def test_releasing_consumer_wakes_producer_side():
    rb = AsyncRb(1)
    prod = Producer(rb)
    cons = Consumer(rb)
    fut = rb.read.wait()
    cons.close()
    assert await _completes(fut)
    assert rb.read_is_held() is False
    assert rb.write_is_held() is True
    prod.close()