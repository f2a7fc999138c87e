from __future__ import annotations

import threading
import time

import pytest

from swiftstore.services.pool import ConnectionPool


def test_pool_rejects_zero_size():
    with pytest.raises(ValueError):
        ConnectionPool(0)


def test_slot_is_released_on_error():
    pool = ConnectionPool(1)

    with pytest.raises(RuntimeError, match="boom"):
        with pool.slot():
            assert pool.in_use == 1
            raise RuntimeError("boom")

    assert pool.in_use == 0


def test_release_without_acquire_fails():
    pool = ConnectionPool(2)

    with pytest.raises(RuntimeError):
        pool.release()


def test_acquire_blocks_until_release():
    pool = ConnectionPool(1)
    pool.acquire()
    acquired = threading.Event()

    def worker():
        with pool.slot():
            acquired.set()

    thread = threading.Thread(target=worker)
    thread.start()
    assert not acquired.wait(0.1)

    pool.release()
    assert acquired.wait(2)
    thread.join(2)
    assert pool.in_use == 0


def test_concurrent_use_never_exceeds_capacity():
    pool = ConnectionPool(3)
    lock = threading.Lock()
    peak = 0

    def worker():
        nonlocal peak
        with pool.slot():
            with lock:
                peak = max(peak, pool.in_use)
            time.sleep(0.01)

    threads = [threading.Thread(target=worker) for _ in range(20)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(5)

    assert 1 <= peak <= 3
    assert pool.in_use == 0
