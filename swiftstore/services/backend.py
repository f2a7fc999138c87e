"""Repository backend on top of an object store container.

This module provides the application service that stores repository files
(data, keys, locks, snapshots, indexes and the config) as objects below a
prefix in a single container. Streaming transfers share a bounded pool of
connection slots; metadata calls are not throttled.
"""

from __future__ import annotations

import logging
import threading
from typing import Generator

from swiftstore.common.config import Settings, get_settings
from swiftstore.domain.config import BackendConfig
from swiftstore.domain.handle import FileInfo, FileType, Handle, object_key, type_prefix
from swiftstore.infra.observability.metrics import observe_operation
from swiftstore.infra.storage.client import (
    ContainerNotFoundError,
    ObjectNotFoundError,
    ObjectReader,
    StorageClient,
    StorageError,
)
from swiftstore.infra.storage.s3_client import S3StorageClient
from swiftstore.infra.storage.swift_client import SwiftStorageClient
from swiftstore.services.base import (
    AlreadyExistsError,
    AuthenticationFailedError,
    BackendError,
    ContainerCreateFailedError,
    EndOfFileError,
    NetworkError,
    NotFoundError,
    UnexpectedEndOfFileError,
)
from swiftstore.services.listing import ObjectNameLister
from swiftstore.services.pool import ConnectionPool

logger = logging.getLogger(__name__)

CONTENT_TYPE = "binary/octet-stream"
STORAGE_POLICY_HEADER = "X-Storage-Policy"

# Order in which delete() empties the repository; the config goes last.
DELETE_ORDER: tuple[FileType, ...] = (
    FileType.DATA,
    FileType.KEY,
    FileType.LOCK,
    FileType.SNAPSHOT,
    FileType.INDEX,
)


def _translate(exc: StorageError, operation: str, key: str) -> BackendError:
    if isinstance(exc, (ObjectNotFoundError, ContainerNotFoundError)):
        return NotFoundError(str(exc), operation=operation, key=key)
    return NetworkError(str(exc), operation=operation, key=key)


class SwiftBackend:
    """Stores repository files in one container below an optional prefix.

    Instances are safe to share between threads. Use :meth:`open` or
    :meth:`create` rather than the constructor, which does not talk to the
    storage service.
    """

    def __init__(
        self,
        client: StorageClient,
        *,
        container: str,
        prefix: str = "",
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._client = client
        self._container = container
        self._prefix = prefix
        self._pool = ConnectionPool(self._settings.SWIFTSTORE_CONNECTIONS)

    @staticmethod
    def _build_storage_client(config: BackendConfig, settings: Settings) -> StorageClient:
        """Build the storage client selected by STORAGE_BACKEND."""
        if settings.STORAGE_BACKEND == "s3":
            return S3StorageClient(settings=settings)
        return SwiftStorageClient(config=config, settings=settings)

    @classmethod
    def open(
        cls,
        config: BackendConfig,
        *,
        client: StorageClient | None = None,
        settings: Settings | None = None,
    ) -> "SwiftBackend":
        """Connect to the container described by config.

        Authenticates unless the client already holds a storage URL and
        token, then makes sure the container exists, creating it with the
        configured storage policy if needed.

        Raises:
            AuthenticationFailedError: If authentication fails.
            ContainerCreateFailedError: If a missing container cannot be created.
            NetworkError: If the container cannot be checked.
        """
        settings = settings or get_settings()
        storage = client or cls._build_storage_client(config, settings)
        backend = cls(
            storage,
            container=config.container,
            prefix=config.prefix,
            settings=settings,
        )
        with observe_operation("open", enabled=settings.ENABLE_METRICS):
            backend._connect(config.default_container_policy)
        return backend

    @classmethod
    def create(
        cls,
        config: BackendConfig,
        *,
        client: StorageClient | None = None,
        settings: Settings | None = None,
    ) -> "SwiftBackend":
        """Open the backend for a new repository.

        Raises:
            AlreadyExistsError: If a repository config is already stored.
        """
        backend = cls.open(config, client=client, settings=settings)
        if backend.test(FileType.CONFIG):
            raise AlreadyExistsError(
                "config already exists",
                operation="create",
                key=backend._key(FileType.CONFIG),
            )
        return backend

    def _connect(self, container_policy: str) -> None:
        if not self._client.is_authenticated():
            try:
                self._client.authenticate()
            except StorageError as exc:
                raise AuthenticationFailedError(
                    str(exc), operation="authenticate"
                ) from exc

        try:
            self._client.head_container(container=self._container)
        except ContainerNotFoundError:
            self._create_container(container_policy)
        except StorageError as exc:
            raise NetworkError(
                str(exc), operation="head_container", key=self._container
            ) from exc

    def _create_container(self, policy: str) -> None:
        headers = {STORAGE_POLICY_HEADER: policy} if policy else None
        try:
            self._client.create_container(container=self._container, headers=headers)
        except StorageError as exc:
            raise ContainerCreateFailedError(
                str(exc), operation="create_container", key=self._container
            ) from exc
        logger.info(
            "created container %s (policy %r)",
            self._container,
            policy or None,
            extra=self._log_context("create_container"),
        )

    def _log_context(self, operation: str, key: str = "") -> dict[str, str]:
        return {"operation": operation, "container": self._container, "key": key}

    def _key(self, file_type: FileType, name: str = "") -> str:
        return object_key(self._prefix, file_type, name)

    @property
    def pool(self) -> ConnectionPool:
        return self._pool

    def location(self) -> str:
        """Return the container name."""
        return self._container

    def load(self, handle: Handle, buffer: bytearray | memoryview, offset: int = 0) -> int:
        """Read the object for handle into buffer, starting at offset.

        A negative offset counts from the end of the object and is clamped to
        the start when it reaches past it.

        Returns:
            Number of bytes read, always len(buffer) on success.

        Raises:
            InvalidHandleError: If the handle is not valid.
            EndOfFileError: If offset lies beyond the end of the object.
            UnexpectedEndOfFileError: If the object ends before buffer is
                full. ``bytes_read`` bytes have been written to buffer.
            NotFoundError: If the object does not exist.
            NetworkError: If the transfer fails.
        """
        handle.validate()
        view = memoryview(buffer).cast("B")
        if view.readonly:
            raise TypeError("load() needs a writable buffer")

        key = self._key(handle.type, handle.name)
        logger.debug("load %s, offset %d, len %d", handle, offset, len(view))

        with observe_operation("load", enabled=self._settings.ENABLE_METRICS):
            with self._pool.slot():
                reader = self._open_reader(key)
                try:
                    count, short = self._read_range(reader, view, offset, key)
                except Exception:
                    self._close_reader(reader, key, quiet=True)
                    raise
                # A pending short read takes precedence over a close failure.
                self._close_reader(reader, key, quiet=short)

                if short:
                    raise UnexpectedEndOfFileError(
                        f"read {count} of {len(view)} bytes",
                        bytes_read=count,
                        operation="load",
                        key=key,
                    )
                return count

    def _open_reader(self, key: str) -> ObjectReader:
        try:
            return self._client.open_object(container=self._container, object_key=key)
        except StorageError as exc:
            logger.debug("open %s failed: %s", key, exc, extra=self._log_context("load", key))
            raise _translate(exc, "load", key) from exc

    def _read_range(
        self, reader: ObjectReader, view: memoryview, offset: int, key: str
    ) -> tuple[int, bool]:
        try:
            length = reader.length()
        except StorageError as exc:
            raise _translate(exc, "load", key) from exc

        if offset < 0:
            offset = 0 if -offset > length else length + offset

        if offset > length:
            raise EndOfFileError(
                f"offset {offset} is beyond the end of the object ({length} bytes)",
                operation="load",
                key=key,
            )

        short = False
        if offset + len(view) > length:
            view = view[: length - offset]
            short = True
            logger.debug("capped buffer to %d bytes", len(view))

        count = 0
        try:
            reader.seek(offset)
            while count < len(view):
                read = reader.readinto(view[count:])
                if not read:
                    break
                count += read
        except StorageError as exc:
            raise _translate(exc, "load", key) from exc

        if count < len(view):
            raise UnexpectedEndOfFileError(
                f"object stream ended after {count} of {len(view)} bytes",
                bytes_read=count,
                operation="load",
                key=key,
            )
        return count, short

    def _close_reader(self, reader: ObjectReader, key: str, *, quiet: bool) -> None:
        try:
            reader.close()
        except StorageError as exc:
            if not quiet:
                raise NetworkError(str(exc), operation="close", key=key) from exc
            logger.warning(
                "discarding close failure for %s: %s",
                key,
                exc,
                extra=self._log_context("close", key),
            )

    def save(self, handle: Handle, data: bytes) -> None:
        """Store data as the object for handle.

        The object must not exist yet. The existence check and the upload
        are separate requests, so two concurrent saves of the same handle
        can both succeed; the last upload wins.

        Raises:
            InvalidHandleError: If the handle is not valid.
            AlreadyExistsError: If the object already exists.
            NetworkError: If the existence check or the upload fails.
        """
        handle.validate()
        key = self._key(handle.type, handle.name)
        payload = bytes(data)
        logger.debug("save %s with %d bytes", handle, len(payload))

        with observe_operation("save", enabled=self._settings.ENABLE_METRICS):
            try:
                self._client.head_object(container=self._container, object_key=key)
            except ObjectNotFoundError:
                pass
            except StorageError as exc:
                raise _translate(exc, "save", key) from exc
            else:
                logger.debug("%s already exists", handle)
                raise AlreadyExistsError("key already exists", operation="save", key=key)

            with self._pool.slot():
                try:
                    self._client.put_object(
                        container=self._container,
                        object_key=key,
                        data=payload,
                        content_type=CONTENT_TYPE,
                    )
                except StorageError as exc:
                    raise _translate(exc, "save", key) from exc
            logger.debug("%s -> %d bytes", key, len(payload))

    def stat(self, handle: Handle) -> FileInfo:
        """Return size information for the object behind handle."""
        handle.validate()
        key = self._key(handle.type, handle.name)
        with observe_operation("stat", enabled=self._settings.ENABLE_METRICS):
            try:
                head = self._client.head_object(container=self._container, object_key=key)
            except StorageError as exc:
                logger.debug("stat %s failed: %s", key, exc, extra=self._log_context("stat", key))
                raise _translate(exc, "stat", key) from exc
        return FileInfo(size=head.size_bytes)

    def test(self, file_type: FileType, name: str = "") -> bool:
        """Return True if an object of file_type named name exists.

        Raises:
            InvalidHandleError: If file_type or name cannot form a key.
        """
        key = self._key(file_type, name)
        with observe_operation("test", enabled=self._settings.ENABLE_METRICS):
            try:
                self._client.head_object(container=self._container, object_key=key)
            except ObjectNotFoundError:
                return False
            except StorageError as exc:
                raise _translate(exc, "test", key) from exc
        return True

    def remove(self, file_type: FileType, name: str = "") -> None:
        """Remove the object of file_type named name.

        Raises:
            InvalidHandleError: If file_type or name cannot form a key.
            NotFoundError: If there is no such object.
            NetworkError: If the request fails.
        """
        key = self._key(file_type, name)
        with observe_operation("remove", enabled=self._settings.ENABLE_METRICS):
            try:
                self._client.delete_object(container=self._container, object_key=key)
            except StorageError as exc:
                logger.debug(
                    "remove %s failed: %s", key, exc, extra=self._log_context("remove", key)
                )
                raise _translate(exc, "remove", key) from exc
        logger.debug("removed %s", key)

    def list(
        self, file_type: FileType, cancel: threading.Event | None = None
    ) -> Generator[str, None, None]:
        """Yield the names of all objects of file_type.

        Names come from a background worker in the order the storage
        service returns them. Setting cancel, or closing the returned
        generator, stops the worker before its next request.

        Raises:
            NetworkError: From the generator, if listing fails part way.
        """
        prefix = type_prefix(self._prefix, file_type)
        logger.debug("listing %s under %s", file_type, prefix)
        lister = ObjectNameLister(
            self._client,
            container=self._container,
            prefix=prefix,
            page_size=self._settings.SWIFTSTORE_LIST_PAGE_SIZE,
            cancel=cancel,
        )
        return iter(lister)

    def _remove_all(self, file_type: FileType) -> None:
        names = self.list(file_type)
        try:
            for name in names:
                self.remove(file_type, name)
        finally:
            names.close()

    def delete(self) -> None:
        """Remove every repository object, then the config.

        The container itself is kept. Objects are removed one at a time, so
        a failure leaves the repository partly deleted; the first failure
        stops the run and is raised.
        """
        with observe_operation("delete", enabled=self._settings.ENABLE_METRICS):
            for file_type in DELETE_ORDER:
                self._remove_all(file_type)
            self.remove(FileType.CONFIG)

    def close(self) -> None:
        """Nothing to release; every call frees its own resources."""
