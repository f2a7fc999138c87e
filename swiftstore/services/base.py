from __future__ import annotations

from swiftstore.domain.handle import InvalidHandleError


class BackendError(Exception):
    """Base class for backend operation failures.

    Carries the operation name and the remote key involved so callers can
    report and decide on retries without parsing messages.
    """

    def __init__(self, message: str, *, operation: str = "", key: str = "") -> None:
        self.operation = operation
        self.key = key
        context = " ".join(part for part in (operation, key) if part)
        super().__init__(f"{context}: {message}" if context else message)


class NotFoundError(BackendError):
    """Raised when the container or object does not exist."""


class AlreadyExistsError(BackendError):
    """Raised when saving to a key that is already taken."""


class EndOfFileError(BackendError):
    """Raised when a read starts beyond the end of the object."""


class UnexpectedEndOfFileError(BackendError):
    """Raised when fewer bytes than requested could be read.

    The bytes that were read are already in the caller's buffer.
    """

    def __init__(
        self, message: str, *, bytes_read: int, operation: str = "", key: str = ""
    ) -> None:
        self.bytes_read = bytes_read
        super().__init__(message, operation=operation, key=key)


class NetworkError(BackendError):
    """Raised when the storage service or the transport fails."""


class AuthenticationFailedError(BackendError):
    """Raised when the storage service rejects the credentials."""


class ContainerCreateFailedError(BackendError):
    """Raised when a missing container cannot be created."""


__all__ = [
    "AlreadyExistsError",
    "AuthenticationFailedError",
    "BackendError",
    "ContainerCreateFailedError",
    "EndOfFileError",
    "InvalidHandleError",
    "NetworkError",
    "NotFoundError",
    "UnexpectedEndOfFileError",
]
