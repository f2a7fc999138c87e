"""Background enumeration of object names.

A worker thread pages through the remote listing and hands names over one
at a time. Cancellation is cooperative: the worker checks the caller's cancel event
and its own stop event before each page request and while waiting to hand
over a name, and never issues another request once either is set. The
caller's event is only ever read, so one event can serve several listings.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Generator

from swiftstore.infra.storage.client import StorageClient, StorageError
from swiftstore.services.base import NetworkError

logger = logging.getLogger(__name__)

_DONE = object()
POLL_INTERVAL = 0.05


class ObjectNameLister:
    """Lists the names below one prefix, with the prefix stripped.

    Iterate once. Breaking out of the loop and closing the iterator, or
    setting the cancel event from elsewhere, stops the worker.
    """

    def __init__(
        self,
        client: StorageClient,
        *,
        container: str,
        prefix: str,
        page_size: int,
        cancel: threading.Event | None = None,
    ) -> None:
        self._client = client
        self._container = container
        self._prefix = prefix
        self._page_size = page_size
        self._cancel = cancel
        self._stop = threading.Event()
        self._queue: queue.Queue[object] = queue.Queue(maxsize=1)
        self._error: Exception | None = None
        self._pages_requested = 0
        self._consumed = False
        self._thread = threading.Thread(
            target=self._run, name=f"swiftstore-list:{prefix}", daemon=True
        )

    @property
    def pages_requested(self) -> int:
        return self._pages_requested

    @property
    def worker(self) -> threading.Thread:
        return self._thread

    def cancel(self) -> None:
        self._stop.set()

    def _cancelled(self) -> bool:
        if self._stop.is_set():
            return True
        return self._cancel is not None and self._cancel.is_set()

    def __iter__(self) -> Generator[str, None, None]:
        if self._consumed:
            raise RuntimeError("an object listing can only be consumed once")
        self._consumed = True
        return self._consume()

    def _run(self) -> None:
        marker: str | None = None
        try:
            while not self._cancelled():
                self._pages_requested += 1
                names = self._client.list_object_names(
                    container=self._container,
                    prefix=self._prefix,
                    marker=marker,
                    limit=self._page_size,
                )
                if not names:
                    return
                for name in names:
                    item = name.removeprefix(self._prefix)
                    if not item:
                        continue
                    if not self._offer(item):
                        return
                marker = names[-1]
        except Exception as exc:
            logger.warning(
                "listing %s stopped after %d pages: %s",
                self._prefix,
                self._pages_requested,
                exc,
                extra={
                    "operation": "list",
                    "container": self._container,
                    "key": self._prefix,
                },
            )
            self._error = exc
        finally:
            self._offer(_DONE)

    def _offer(self, item: object) -> bool:
        while not self._cancelled():
            try:
                self._queue.put(item, timeout=POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    def _consume(self) -> Generator[str, None, None]:
        # The worker starts on the first next(), so a generator that is
        # never iterated never issues a request.
        self._thread.start()
        try:
            while not self._cancelled():
                try:
                    item = self._queue.get(timeout=POLL_INTERVAL)
                except queue.Empty:
                    continue
                if item is _DONE:
                    self._raise_error()
                    return
                yield str(item)
        finally:
            self._stop.set()

    def _raise_error(self) -> None:
        error = self._error
        if error is None:
            return
        if isinstance(error, StorageError):
            raise NetworkError(str(error), operation="list", key=self._prefix) from error
        raise error
