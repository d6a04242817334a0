import threading
import time

from spscring.sync import FOREVER, NO_WAIT, Semaphore, TakeIter, TimeoutIter


def test_try_take_returns_previous_state():
    sem = Semaphore()
    assert sem.try_take() is False
    sem.give()
    sem.give()
    assert sem.try_take() is True
    assert sem.try_take() is False


def test_take_no_wait():
    sem = Semaphore()
    assert sem.take(NO_WAIT) is False
    sem.give()
    assert sem.take(NO_WAIT) is True
    assert sem.take(NO_WAIT) is False


def test_take_times_out():
    sem = Semaphore()
    start = time.monotonic()
    assert sem.take(0.05) is False
    assert time.monotonic() - start >= 0.04


def test_take_wakes_on_give_from_other_thread():
    sem = Semaphore()

    def giver():
        time.sleep(0.05)
        sem.give()

    thread = threading.Thread(target=giver)
    thread.start()
    assert sem.take(5.0) is True
    thread.join()
    assert sem.try_take() is False


def test_take_forever_waits_for_give():
    sem = Semaphore()
    thread = threading.Timer(0.02, sem.give)
    thread.start()
    assert sem.take(FOREVER) is True
    thread.join()


def test_timeout_iter_forever_yields_none():
    it = TimeoutIter(FOREVER)
    assert [next(it) for _ in range(3)] == [None, None, None]


def test_timeout_iter_no_wait_is_empty():
    assert list(TimeoutIter(NO_WAIT)) == []


def test_timeout_iter_remaining_decreases():
    it = TimeoutIter(0.2)
    first = next(it)
    time.sleep(0.01)
    second = next(it)
    assert 0 < second < first <= 0.2


def test_timeout_iter_stops_after_deadline():
    it = TimeoutIter(0.01)
    time.sleep(0.02)
    assert list(it) == []


def test_take_iter_without_reset_no_wait_is_empty():
    sem = Semaphore()
    sem.give()
    assert list(sem.take_iter(NO_WAIT)) == []
    assert sem.try_take() is True


def test_take_iter_reset_yields_once_and_clears():
    sem = Semaphore()
    sem.give()
    steps = list(TakeIter(sem, NO_WAIT).reset())
    assert len(steps) == 1
    assert sem.try_take() is False


def test_take_iter_counts_gives():
    sem = Semaphore()
    it = sem.take_iter(0.5)
    sem.give()
    assert next(it) is None
    start = time.monotonic()
    assert list(it) == []
    assert time.monotonic() - start > 0