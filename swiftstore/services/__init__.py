from .backend import CONTENT_TYPE, DELETE_ORDER, SwiftBackend
from .base import (
    AlreadyExistsError,
    AuthenticationFailedError,
    BackendError,
    ContainerCreateFailedError,
    EndOfFileError,
    InvalidHandleError,
    NetworkError,
    NotFoundError,
    UnexpectedEndOfFileError,
)
from .listing import ObjectNameLister
from .pool import ConnectionPool

__all__ = [
    "SwiftBackend",
    "CONTENT_TYPE",
    "DELETE_ORDER",
    "ConnectionPool",
    "ObjectNameLister",
    "BackendError",
    "AlreadyExistsError",
    "AuthenticationFailedError",
    "ContainerCreateFailedError",
    "EndOfFileError",
    "InvalidHandleError",
    "NetworkError",
    "NotFoundError",
    "UnexpectedEndOfFileError",
]
