"""S3-compatible storage client implementation.

This module provides an S3-compatible storage client that works with
AWS S3, MinIO, Swift's s3api middleware and other S3-compatible services.
Containers map to buckets.

Dependencies:
    - boto3
    - botocore
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from swiftstore.infra.storage.client import (
    ContainerNotFoundError,
    ObjectHead,
    ObjectNotFoundError,
    RangedObjectReader,
    StorageError,
)

if TYPE_CHECKING:
    from swiftstore.common.config import Settings

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NoSuchBucket", "NotFound"}


def _is_not_found(exc: Exception) -> bool:
    response = getattr(exc, "response", None) or {}
    code = str(response.get("Error", {}).get("Code", ""))
    return code in _NOT_FOUND_CODES


class S3ObjectReader(RangedObjectReader):
    """Seekable reader over an S3 object; the length comes from a HEAD."""

    def __init__(self, client: Any, *, bucket: str, object_key: str, length: int) -> None:
        super().__init__(object_key)
        self._client = client
        self._bucket = bucket
        self._length = length

    def _fetch(self, offset: int) -> Any:
        try:
            response = self._client.get_object(
                Bucket=self._bucket,
                Key=self._object_key,
                Range=f"bytes={offset}-",
            )
        except Exception as exc:
            if _is_not_found(exc):
                raise ObjectNotFoundError(
                    f"Object not found: {self._object_key}"
                ) from exc
            raise StorageError(f"Failed to get object: {exc}") from exc
        return response["Body"]


class S3StorageClient:
    """S3-compatible object storage client.

    Supports AWS S3, MinIO, and other S3-compatible services.
    Uses boto3 for all storage operations. Credentials come from settings,
    so there is no separate authentication step.
    """

    def __init__(self, *, settings: "Settings") -> None:
        """Initialize the S3 client with configuration from settings.

        Args:
            settings: Process settings containing S3 configuration.

        Raises:
            StorageError: If boto3 is not installed.
        """
        self._settings = settings
        self._client = self._build_client(settings)

    @staticmethod
    def _build_client(settings: "Settings") -> Any:
        """Create a boto3 S3 client from settings."""
        try:
            import boto3
            from botocore.config import Config
        except ImportError as exc:
            raise StorageError(
                "boto3 and botocore are required for S3 storage backend. "
                "Install with: pip install boto3"
            ) from exc

        addressing_style = (settings.S3_ADDRESSING_STYLE or "path").strip().lower()
        config = Config(
            s3={"addressing_style": addressing_style},
            retries={"max_attempts": 1, "mode": "standard"},
            connect_timeout=settings.SWIFTSTORE_CONNECT_TIMEOUT,
            read_timeout=settings.SWIFTSTORE_TIMEOUT,
        )

        return boto3.client(
            "s3",
            endpoint_url=settings.S3_ENDPOINT_URL,
            region_name=settings.S3_REGION,
            aws_access_key_id=settings.S3_ACCESS_KEY_ID,
            aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY,
            use_ssl=bool(settings.S3_USE_SSL),
            config=config,
        )

    def is_authenticated(self) -> bool:
        return True

    def authenticate(self) -> None:
        """Requests are signed individually; nothing to do."""

    def head_container(self, *, container: str) -> None:
        try:
            self._client.head_bucket(Bucket=container)
        except Exception as exc:
            if _is_not_found(exc):
                raise ContainerNotFoundError(
                    f"Bucket not found: {container}"
                ) from exc
            raise StorageError(f"Failed to get bucket metadata: {exc}") from exc

    def create_container(
        self, *, container: str, headers: dict[str, str] | None = None
    ) -> None:
        if headers:
            # Storage policies are a Swift concept.
            logger.debug("ignoring container headers %s for bucket %s", headers, container)
        params: dict[str, Any] = {"Bucket": container}
        region = self._settings.S3_REGION
        # us-east-1 is the default location and rejects an explicit constraint.
        if region and region != "us-east-1":
            params["CreateBucketConfiguration"] = {"LocationConstraint": region}
        try:
            self._client.create_bucket(**params)
        except Exception as exc:
            raise StorageError(f"Failed to create bucket: {exc}") from exc

    def open_object(self, *, container: str, object_key: str) -> S3ObjectReader:
        head = self.head_object(container=container, object_key=object_key)
        return S3ObjectReader(
            self._client,
            bucket=container,
            object_key=object_key,
            length=head.size_bytes,
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
            self._client.put_object(
                Bucket=container,
                Key=object_key,
                Body=data,
                ContentType=content_type,
            )
        except Exception as exc:
            raise StorageError(f"Failed to upload object: {exc}") from exc

    def head_object(self, *, container: str, object_key: str) -> ObjectHead:
        """Get object metadata without downloading the content."""
        try:
            response = self._client.head_object(Bucket=container, Key=object_key)
        except Exception as exc:
            if _is_not_found(exc):
                raise ObjectNotFoundError(f"Object not found: {object_key}") from exc
            raise StorageError(f"Failed to get object metadata: {exc}") from exc

        size = response.get("ContentLength")
        return ObjectHead(
            size_bytes=int(size) if size is not None else 0,
            etag=response.get("ETag"),
            content_type=response.get("ContentType"),
        )

    def delete_object(self, *, container: str, object_key: str) -> None:
        """Delete an object from storage.

        S3 reports success for keys that do not exist.
        """
        try:
            self._client.delete_object(Bucket=container, Key=object_key)
        except Exception as exc:
            if _is_not_found(exc):
                raise ObjectNotFoundError(f"Object not found: {object_key}") from exc
            raise StorageError(f"Failed to delete object: {exc}") from exc

    def list_object_names(
        self,
        *,
        container: str,
        prefix: str,
        marker: str | None = None,
        limit: int | None = None,
    ) -> list[str]:
        params: dict[str, Any] = {"Bucket": container, "Prefix": prefix}
        if marker:
            params["StartAfter"] = marker
        if limit:
            params["MaxKeys"] = int(limit)

        try:
            response = self._client.list_objects_v2(**params)
        except Exception as exc:
            if _is_not_found(exc):
                raise ContainerNotFoundError(
                    f"Bucket not found: {container}"
                ) from exc
            raise StorageError(f"Failed to list objects: {exc}") from exc

        return [str(item["Key"]) for item in response.get("Contents", [])]
