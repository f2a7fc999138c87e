"""File types, handles and the mapping from handles to remote object keys."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from enum import Enum


class InvalidHandleError(ValueError):
    """Raised when a handle cannot identify a stored object."""


class FileType(str, Enum):
    DATA = "data"
    KEY = "key"
    LOCK = "lock"
    SNAPSHOT = "snapshot"
    INDEX = "index"
    CONFIG = "config"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Handle:
    """Identifies a logical object by file type and name."""

    type: FileType
    name: str = ""

    def validate(self) -> None:
        """Raise InvalidHandleError unless the handle names a storable object.

        The config object is a singleton and carries no name; every other
        type requires a name without empty, "." or ".." path segments.
        """
        _check_type(self.type)
        if self.type is not FileType.CONFIG:
            _check_name(self.type, self.name)

    def __str__(self) -> str:
        if self.type is FileType.CONFIG:
            return "<config>"
        return f"<{self.type}/{self.name}>"


@dataclass(frozen=True, slots=True)
class FileInfo:
    size: int


def _check_type(file_type: object) -> None:
    if not isinstance(file_type, FileType):
        raise InvalidHandleError(f"invalid file type {file_type!r}")


def _check_name(file_type: FileType, name: str) -> None:
    if not name:
        raise InvalidHandleError(f"invalid handle: name is empty for {file_type}")
    if any(segment in ("", ".", "..") for segment in name.split("/")):
        raise InvalidHandleError(f"invalid handle: bad path segment in name {name!r}")


def _type_dir(prefix: str, file_type: FileType) -> str:
    # Only the prefix is normalised; names are appended verbatim.
    joined = "/".join(part for part in (prefix, file_type.value) if part)
    return posixpath.normpath(joined).lstrip("/")


def object_key(prefix: str, file_type: FileType, name: str = "") -> str:
    """Return the remote key for (file_type, name) below prefix."""
    _check_type(file_type)
    if file_type is FileType.CONFIG:
        return _type_dir(prefix, file_type)
    _check_name(file_type, name)
    return f"{_type_dir(prefix, file_type)}/{name}"


def type_prefix(prefix: str, file_type: FileType) -> str:
    """Return the listing prefix covering every object of file_type."""
    _check_type(file_type)
    return _type_dir(prefix, file_type) + "/"
