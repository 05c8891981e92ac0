import threading

import pytest

from hashmap_lib.storage.locking import ReadWriteLock


def test_readers_share_the_lock():
    lock = ReadWriteLock()
    # Both readers must be inside the lock at the same time to pass the barrier.
    barrier = threading.Barrier(2, timeout=5)
    errors = []

    def reader():
        try:
            with lock.read():
                barrier.wait()
        except threading.BrokenBarrierError as exc:
            errors.append(exc)

    threads = [threading.Thread(target=reader) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert errors == []


def test_writer_excludes_readers():
    lock = ReadWriteLock()
    entered = threading.Event()

    def reader():
        with lock.read():
            entered.set()

    with lock.write():
        t = threading.Thread(target=reader)
        t.start()
        assert not entered.wait(0.2)
    t.join(timeout=5)
    assert entered.is_set()


def test_writer_waits_for_readers():
    lock = ReadWriteLock()
    entered = threading.Event()

    def writer():
        with lock.write():
            entered.set()

    with lock.read():
        t = threading.Thread(target=writer)
        t.start()
        assert not entered.wait(0.2)
    t.join(timeout=5)
    assert entered.is_set()


def test_lock_released_on_error():
    lock = ReadWriteLock()
    with pytest.raises(RuntimeError):
        with lock.write():
            raise RuntimeError('boom')
    # would deadlock if the write lock leaked
    with lock.read():
        pass
    with lock.write():
        pass
