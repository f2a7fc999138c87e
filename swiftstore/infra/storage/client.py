"""Storage client protocol and data types.

This module defines the primitive operations a remote object store must offer
to back a repository: authentication, container management, streamed reads,
single-shot uploads, metadata lookups and paginated name listing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


class StorageError(RuntimeError):
    """Raised when object storage operations fail."""


class ObjectNotFoundError(StorageError):
    """Raised when the requested object does not exist."""


class ContainerNotFoundError(StorageError):
    """Raised when the requested container does not exist."""


class StorageAuthenticationError(StorageError):
    """Raised when the storage service rejects the supplied credentials."""


@dataclass(frozen=True, slots=True)
class ObjectHead:
    """Metadata from a HEAD object request."""

    size_bytes: int
    etag: str | None
    content_type: str | None


class ObjectReader(Protocol):
    """A seekable, readable stream over one remote object."""

    def length(self) -> int:
        """Return the total size of the object in bytes.

        Raises:
            StorageError: If the size cannot be determined.
        """
        ...

    def seek(self, offset: int) -> None:
        """Position the stream so the next read starts at offset.

        Raises:
            StorageError: If offset is negative or the stream is closed.
        """
        ...

    def readinto(self, buffer: memoryview) -> int:
        """Read up to len(buffer) bytes into buffer.

        Returns:
            Number of bytes read; 0 once the end of the object is reached.

        Raises:
            StorageError: If the transfer fails.
        """
        ...

    def close(self) -> None:
        """Release the underlying connection.

        Raises:
            StorageError: If the stream cannot be closed cleanly.
        """
        ...


class RangedObjectReader:
    """Seekable reader built on ranged GET requests.

    A body stream is kept open while reads continue where the previous one
    stopped. Any other position drops it and re-issues the GET from there.
    Subclasses set ``_length`` and implement :meth:`_fetch`.
    """

    def __init__(self, object_key: str) -> None:
        self._object_key = object_key
        self._length = 0
        self._body: Any = None
        self._body_offset = 0
        self._position = 0
        self._closed = False

    def _fetch(self, offset: int) -> Any:
        """Return a readable body that starts at offset."""
        raise NotImplementedError

    def _use_body(self, body: Any, offset: int) -> None:
        self._body = body
        self._body_offset = offset

    def _release_body(self) -> None:
        body, self._body = self._body, None
        if body is None:
            return
        try:
            body.close()
        except Exception as exc:
            raise StorageError(f"Failed to close object stream: {exc}") from exc

    def length(self) -> int:
        return self._length

    def seek(self, offset: int) -> None:
        if self._closed:
            raise StorageError("Seek on closed object stream")
        if offset < 0:
            raise StorageError(f"Negative seek offset: {offset}")
        self._position = offset

    def readinto(self, buffer: memoryview) -> int:
        if self._closed:
            raise StorageError("Read from closed object stream")
        if not len(buffer) or self._position >= self._length:
            return 0
        if self._body is None or self._body_offset != self._position:
            self._release_body()
            self._use_body(self._fetch(self._position), self._position)

        try:
            data = self._body.read(len(buffer))
        except Exception as exc:
            raise StorageError(f"Failed to read object: {exc}") from exc

        count = len(data)
        buffer[:count] = data
        self._position += count
        self._body_offset += count
        return count

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._release_body()


class StorageClient(Protocol):
    """Protocol defining the interface for object storage backends.

    Implementations must provide all methods defined here and must raise
    StorageError (or one of its subclasses) for every failure.
    """

    def is_authenticated(self) -> bool:
        """Return True when the client already holds a storage URL and token."""
        ...

    def authenticate(self) -> None:
        """Obtain a storage URL and token from the identity service.

        Raises:
            StorageAuthenticationError: If the credentials are rejected.
            StorageError: If the identity service cannot be reached.
        """
        ...

    def head_container(self, *, container: str) -> None:
        """Check that a container exists.

        Raises:
            ContainerNotFoundError: If the container does not exist.
            StorageError: If the operation fails.
        """
        ...

    def create_container(
        self, *, container: str, headers: dict[str, str] | None = None
    ) -> None:
        """Create a container.

        Args:
            container: Container name.
            headers: Extra request headers, e.g. a storage policy.

        Raises:
            StorageError: If the operation fails.
        """
        ...

    def open_object(self, *, container: str, object_key: str) -> ObjectReader:
        """Open an object for reading.

        Raises:
            ObjectNotFoundError: If the object does not exist.
            StorageError: If the operation fails.
        """
        ...

    def put_object(
        self,
        *,
        container: str,
        object_key: str,
        data: bytes,
        content_type: str,
    ) -> None:
        """Upload data as the complete content of an object.

        Raises:
            StorageError: If the operation fails.
        """
        ...

    def head_object(self, *, container: str, object_key: str) -> ObjectHead:
        """Get object metadata without downloading the content.

        Raises:
            ObjectNotFoundError: If the object does not exist.
            StorageError: If the operation fails.
        """
        ...

    def delete_object(self, *, container: str, object_key: str) -> None:
        """Delete an object from storage.

        Raises:
            ObjectNotFoundError: If the object does not exist.
            StorageError: If the operation fails.
        """
        ...

    def list_object_names(
        self,
        *,
        container: str,
        prefix: str,
        marker: str | None = None,
        limit: int | None = None,
    ) -> list[str]:
        """Return one page of object names starting with prefix.

        Args:
            container: Container name.
            prefix: Only names starting with this prefix are returned.
            marker: Only names sorting after this one are returned.
            limit: Maximum number of names in the page.

        Raises:
            StorageError: If the operation fails.
        """
        ...
