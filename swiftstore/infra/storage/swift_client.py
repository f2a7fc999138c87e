"""OpenStack Swift storage client implementation.

This module provides the Swift storage client used by default. It speaks to
Swift through python-swiftclient, authenticating against v1 (TempAuth),
v2 or v3 (Keystone) identity endpoints, or reusing a pre-authenticated
storage URL and token.

Dependencies:
    - python-swiftclient
    - python-keystoneclient (only for v2/v3 authentication)
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from swiftclient.client import Connection
from swiftclient.exceptions import ClientException

from swiftstore.infra.storage.client import (
    ContainerNotFoundError,
    ObjectHead,
    ObjectNotFoundError,
    RangedObjectReader,
    StorageAuthenticationError,
    StorageError,
)

if TYPE_CHECKING:
    from swiftstore.common.config import Settings
    from swiftstore.domain.config import BackendConfig

logger = logging.getLogger(__name__)


def _status(exc: BaseException) -> int | None:
    return getattr(exc, "http_status", None)


def _auth_version(cfg: "BackendConfig") -> str:
    """Pick the identity API version from the auth URL, then from the credentials."""
    auth_url = cfg.auth_url.rstrip("/")
    if auth_url.endswith("/v3"):
        return "3"
    if auth_url.endswith("/v2.0"):
        return "2.0"
    if cfg.domain or cfg.tenant_domain or cfg.trust_id:
        return "3"
    if cfg.tenant or cfg.tenant_id:
        return "2.0"
    return "1.0"


class SwiftObjectReader(RangedObjectReader):
    """Seekable reader over a Swift object.

    The object is fetched with a GET when opened, which also yields its
    length; later positions are served with Range requests.
    """

    def __init__(
        self,
        connection: Any,
        *,
        container: str,
        object_key: str,
        chunk_size: int,
    ) -> None:
        super().__init__(object_key)
        self._conn = connection
        self._container = container
        self._chunk_size = chunk_size
        headers, body = self._get(0)
        self._length = int(headers.get("content-length") or 0)
        self._use_body(body, 0)

    def _get(self, offset: int) -> tuple[dict[str, str], Any]:
        headers = {"Range": f"bytes={offset}-"} if offset else None
        try:
            return self._conn.get_object(
                self._container,
                self._object_key,
                resp_chunk_size=self._chunk_size,
                headers=headers,
            )
        except ClientException as exc:
            if _status(exc) == 404:
                raise ObjectNotFoundError(
                    f"Object not found: {self._object_key}"
                ) from exc
            raise StorageError(f"Failed to open object: {exc}") from exc
        except Exception as exc:
            raise StorageError(f"Failed to open object: {exc}") from exc

    def _fetch(self, offset: int) -> Any:
        return self._get(offset)[1]


class SwiftStorageClient:
    """OpenStack Swift object storage client.

    Uses python-swiftclient for all storage operations. swiftclient
    connections must not be shared between threads, so each thread gets its
    own, all reusing the storage URL and token obtained by ``authenticate``.
    Connections never retry; every failure is reported to the caller.
    """

    def __init__(self, *, config: "BackendConfig", settings: "Settings") -> None:
        self._config = config
        self._settings = settings
        self._local = threading.local()
        self._auth_lock = threading.Lock()
        self._storage_url = config.storage_url or None
        self._auth_token = config.auth_token or None

    @property
    def _conn(self) -> Any:
        conn = getattr(self._local, "conn", None)
        if conn is None:
            conn = self._build_connection(
                self._config,
                self._settings,
                storage_url=self._storage_url,
                auth_token=self._auth_token,
            )
            self._local.conn = conn
        return conn

    @staticmethod
    def _build_connection(
        config: "BackendConfig",
        settings: "Settings",
        *,
        storage_url: str | None = None,
        auth_token: str | None = None,
    ) -> Any:
        """Create a swiftclient Connection from the backend config."""
        os_options = {
            "region_name": config.region or None,
            "tenant_id": config.tenant_id or None,
            "tenant_name": config.tenant or None,
            "project_name": config.tenant or None,
            "user_domain_name": config.domain or None,
            "project_domain_name": config.tenant_domain or None,
            "trust_id": config.trust_id or None,
        }
        return Connection(
            authurl=config.auth_url or None,
            user=config.user_name or None,
            key=config.api_key or None,
            retries=0,
            preauthurl=storage_url,
            preauthtoken=auth_token,
            tenant_name=config.tenant or None,
            os_options={k: v for k, v in os_options.items() if v},
            auth_version=_auth_version(config),
            timeout=(settings.SWIFTSTORE_CONNECT_TIMEOUT, settings.SWIFTSTORE_TIMEOUT),
        )

    def is_authenticated(self) -> bool:
        return bool(self._storage_url and self._auth_token)

    def authenticate(self) -> None:
        """Authenticate against the identity service."""
        try:
            with self._auth_lock:
                url, token = self._conn.get_auth()
                self._storage_url, self._auth_token = url, token
        except ClientException as exc:
            if _status(exc) in (401, 403):
                raise StorageAuthenticationError(
                    f"Authentication rejected: {exc}"
                ) from exc
            raise StorageError(f"Failed to authenticate: {exc}") from exc
        except Exception as exc:
            raise StorageError(f"Failed to authenticate: {exc}") from exc

    def head_container(self, *, container: str) -> None:
        try:
            self._conn.head_container(container)
        except ClientException as exc:
            if _status(exc) == 404:
                raise ContainerNotFoundError(
                    f"Container not found: {container}"
                ) from exc
            raise StorageError(f"Failed to get container metadata: {exc}") from exc
        except Exception as exc:
            raise StorageError(f"Failed to get container metadata: {exc}") from exc

    def create_container(
        self, *, container: str, headers: dict[str, str] | None = None
    ) -> None:
        try:
            self._conn.put_container(container, headers=headers)
        except Exception as exc:
            raise StorageError(f"Failed to create container: {exc}") from exc

    def open_object(self, *, container: str, object_key: str) -> SwiftObjectReader:
        return SwiftObjectReader(
            self._conn,
            container=container,
            object_key=object_key,
            chunk_size=int(self._settings.SWIFTSTORE_READ_CHUNK_SIZE),
        )

    def put_object(
        self,
        *,
        container: str,
        object_key: str,
        data: bytes,
        content_type: str,
    ) -> None:
        try:
            self._conn.put_object(
                container,
                object_key,
                contents=data,
                content_length=len(data),
                content_type=content_type,
            )
        except Exception as exc:
            raise StorageError(f"Failed to upload object: {exc}") from exc

    def head_object(self, *, container: str, object_key: str) -> ObjectHead:
        """Get object metadata without downloading the content."""
        try:
            headers = self._conn.head_object(container, object_key)
        except ClientException as exc:
            if _status(exc) == 404:
                raise ObjectNotFoundError(f"Object not found: {object_key}") from exc
            raise StorageError(f"Failed to get object metadata: {exc}") from exc
        except Exception as exc:
            raise StorageError(f"Failed to get object metadata: {exc}") from exc

        size = headers.get("content-length")
        return ObjectHead(
            size_bytes=int(size) if size is not None else 0,
            etag=headers.get("etag"),
            content_type=headers.get("content-type"),
        )

    def delete_object(self, *, container: str, object_key: str) -> None:
        """Delete an object from storage."""
        try:
            self._conn.delete_object(container, object_key)
        except ClientException as exc:
            if _status(exc) == 404:
                raise ObjectNotFoundError(f"Object not found: {object_key}") from exc
            raise StorageError(f"Failed to delete object: {exc}") from exc
        except Exception as exc:
            raise StorageError(f"Failed to delete object: {exc}") from exc

    def list_object_names(
        self,
        *,
        container: str,
        prefix: str,
        marker: str | None = None,
        limit: int | None = None,
    ) -> list[str]:
        try:
            _, objects = self._conn.get_container(
                container,
                marker=marker or "",
                limit=limit,
                prefix=prefix,
            )
        except ClientException as exc:
            if _status(exc) == 404:
                raise ContainerNotFoundError(
                    f"Container not found: {container}"
                ) from exc
            raise StorageError(f"Failed to list objects: {exc}") from exc
        except Exception as exc:
            raise StorageError(f"Failed to list objects: {exc}") from exc

        logger.debug("listed %d names under %s after %r", len(objects), prefix, marker)
        return [str(obj["name"]) for obj in objects]
