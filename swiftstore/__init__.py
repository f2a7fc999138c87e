"""Repository storage backend for OpenStack Swift and S3-compatible object stores."""

from swiftstore.domain import (
    BackendConfig,
    FileInfo,
    FileType,
    Handle,
    parse_config,
    resolve_config,
)
from swiftstore.services import SwiftBackend

__all__ = [
    "BackendConfig",
    "FileInfo",
    "FileType",
    "Handle",
    "SwiftBackend",
    "parse_config",
    "resolve_config",
]
