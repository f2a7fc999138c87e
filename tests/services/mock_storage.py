"""Mock storage client for testing backend operations."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from swiftstore.infra.storage.client import (
    ContainerNotFoundError,
    ObjectHead,
    ObjectNotFoundError,
)


@dataclass
class MockObjectReader:
    """Reader over an in-memory payload, optionally cut short or failing on close."""

    data: bytes
    advertised_length: int | None = None
    close_error: Exception | None = None
    position: int = 0
    closed: bool = False
    seeks: list[int] = field(default_factory=list)

    def length(self) -> int:
        if self.advertised_length is not None:
            return self.advertised_length
        return len(self.data)

    def seek(self, offset: int) -> None:
        self.seeks.append(offset)
        self.position = offset

    def readinto(self, buffer: memoryview) -> int:
        # Hand out small chunks so callers have to loop.
        chunk = self.data[self.position : self.position + min(len(buffer), 7)]
        buffer[: len(chunk)] = chunk
        self.position += len(chunk)
        return len(chunk)

    def close(self) -> None:
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


@dataclass
class MockStorageClient:
    """In-memory mock of StorageClient for testing."""

    containers: dict[str, dict[str, Any]] = field(default_factory=dict)
    objects: dict[str, dict[str, Any]] = field(default_factory=dict)
    authenticated: bool = True
    auth_error: Exception | None = None
    errors: dict[str, Exception] = field(default_factory=dict)
    readers: list[MockObjectReader] = field(default_factory=list)
    reader_overrides: dict[str, dict[str, Any]] = field(default_factory=dict)
    list_calls: list[dict[str, Any]] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    list_page_hook: Any = None
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def _fail(self, operation: str) -> None:
        error = self.errors.get(operation)
        if error is not None:
            raise error

    def _require_container(self, container: str) -> None:
        if container not in self.containers:
            raise ContainerNotFoundError(f"Container not found: {container}")

    def is_authenticated(self) -> bool:
        return self.authenticated

    def authenticate(self) -> None:
        if self.auth_error is not None:
            raise self.auth_error
        self.authenticated = True

    def head_container(self, *, container: str) -> None:
        self._fail("head_container")
        self._require_container(container)

    def create_container(
        self, *, container: str, headers: dict[str, str] | None = None
    ) -> None:
        self._fail("create_container")
        self.containers[container] = {"headers": dict(headers or {})}

    def open_object(self, *, container: str, object_key: str) -> MockObjectReader:
        self._fail("open_object")
        key = f"{container}/{object_key}"
        if key not in self.objects:
            raise ObjectNotFoundError(f"Object not found: {object_key}")
        reader = MockObjectReader(
            data=self.objects[key]["data"], **self.reader_overrides.get(object_key, {})
        )
        self.readers.append(reader)
        return reader

    def put_object(
        self,
        *,
        container: str,
        object_key: str,
        data: bytes,
        content_type: str,
    ) -> None:
        self._fail("put_object")
        self._require_container(container)
        with self._lock:
            self.objects[f"{container}/{object_key}"] = {
                "data": bytes(data),
                "content_type": content_type,
            }

    def head_object(self, *, container: str, object_key: str) -> ObjectHead:
        self._fail("head_object")
        key = f"{container}/{object_key}"
        if key not in self.objects:
            raise ObjectNotFoundError(f"Object not found: {object_key}")
        obj = self.objects[key]
        return ObjectHead(
            size_bytes=len(obj["data"]),
            etag=None,
            content_type=obj["content_type"],
        )

    def delete_object(self, *, container: str, object_key: str) -> None:
        self._fail("delete_object")
        key = f"{container}/{object_key}"
        with self._lock:
            if key not in self.objects:
                raise ObjectNotFoundError(f"Object not found: {object_key}")
            del self.objects[key]
            self.deleted.append(object_key)

    def list_object_names(
        self,
        *,
        container: str,
        prefix: str,
        marker: str | None = None,
        limit: int | None = None,
    ) -> list[str]:
        self.list_calls.append({"prefix": prefix, "marker": marker, "limit": limit})
        if self.list_page_hook is not None:
            self.list_page_hook(len(self.list_calls))
        self._fail("list_object_names")
        self._require_container(container)
        start = len(container) + 1
        with self._lock:
            names = sorted(
                key[start:]
                for key in self.objects
                if key.startswith(f"{container}/{prefix}")
            )
        if marker:
            names = [name for name in names if name > marker]
        return names[:limit] if limit else names

    def add_object(self, container: str, object_key: str, data: bytes) -> None:
        """Test helper to store an object without going through a backend."""
        self.containers.setdefault(container, {"headers": {}})
        self.objects[f"{container}/{object_key}"] = {
            "data": data,
            "content_type": "binary/octet-stream",
        }
