"""
Domain layer: handles, remote key mapping and backend configuration.
"""

from .config import (
    BackendConfig,
    ConfigParseError,
    HostNotSupportedError,
    MissingContainerError,
    apply_environment,
    parse_config,
    resolve_config,
)
from .handle import FileInfo, FileType, Handle, InvalidHandleError, object_key, type_prefix

__all__ = [
    "BackendConfig",
    "ConfigParseError",
    "HostNotSupportedError",
    "MissingContainerError",
    "apply_environment",
    "parse_config",
    "resolve_config",
    "FileInfo",
    "FileType",
    "Handle",
    "InvalidHandleError",
    "object_key",
    "type_prefix",
]
