from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Generator

from swiftstore.infra.observability.metrics import POOL_IN_USE

DEFAULT_CONNECTIONS = 10


class ConnectionPool:
    """Fixed number of slots gating concurrent data transfers.

    ``acquire`` blocks until a slot is free, ``release`` never blocks. Use
    ``slot()`` so the slot comes back on every exit path.
    """

    def __init__(self, size: int = DEFAULT_CONNECTIONS) -> None:
        if size < 1:
            raise ValueError("connection pool size must be at least 1")
        self._size = size
        self._slots = threading.BoundedSemaphore(size)
        self._lock = threading.Lock()
        self._in_use = 0

    @property
    def size(self) -> int:
        return self._size

    @property
    def in_use(self) -> int:
        with self._lock:
            return self._in_use

    def acquire(self) -> None:
        self._slots.acquire()
        with self._lock:
            self._in_use += 1
        POOL_IN_USE.inc()

    def release(self) -> None:
        with self._lock:
            if self._in_use == 0:
                raise RuntimeError("release of a slot that was never acquired")
            self._in_use -= 1
        POOL_IN_USE.dec()
        self._slots.release()

    @contextmanager
    def slot(self) -> Generator[None, None, None]:
        self.acquire()
        try:
            yield
        finally:
            self.release()
