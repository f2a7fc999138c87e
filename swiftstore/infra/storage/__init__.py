"""Object storage abstraction layer.

This module provides a protocol-based abstraction for object storage backends,
enabling support for OpenStack Swift and S3-compatible services.
"""

from .client import (
    ContainerNotFoundError,
    ObjectHead,
    ObjectNotFoundError,
    ObjectReader,
    RangedObjectReader,
    StorageAuthenticationError,
    StorageClient,
    StorageError,
)

__all__ = [
    "ContainerNotFoundError",
    "ObjectHead",
    "ObjectNotFoundError",
    "ObjectReader",
    "RangedObjectReader",
    "StorageAuthenticationError",
    "StorageClient",
    "StorageError",
]
