from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

ENV_FILE = Path(".env")

SUPPORTED_STORAGE_BACKENDS: tuple[str, ...] = ("swift", "s3")


def _load_env_file() -> None:
    if not ENV_FILE.exists():
        return
    for raw_line in ENV_FILE.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "y", "on"}


@dataclass
class Settings:
    STORAGE_BACKEND: str = "swift"
    SWIFTSTORE_CONNECTIONS: int = 10
    SWIFTSTORE_CONNECT_TIMEOUT: float = 60.0
    SWIFTSTORE_TIMEOUT: float = 60.0
    SWIFTSTORE_LIST_PAGE_SIZE: int = 1000
    SWIFTSTORE_READ_CHUNK_SIZE: int = 64 * 1024
    ENABLE_METRICS: bool = True
    LOG_LEVEL: str = "INFO"
    S3_ENDPOINT_URL: str | None = None
    S3_REGION: str | None = None
    S3_ACCESS_KEY_ID: str | None = None
    S3_SECRET_ACCESS_KEY: str | None = None
    S3_USE_SSL: bool = True
    S3_ADDRESSING_STYLE: str = "path"

    def __post_init__(self) -> None:
        backend = (self.STORAGE_BACKEND or "").strip().lower()
        if backend not in SUPPORTED_STORAGE_BACKENDS:
            raise ValueError(
                f"STORAGE_BACKEND must be one of {', '.join(SUPPORTED_STORAGE_BACKENDS)}."
            )
        self.STORAGE_BACKEND = backend
        if self.SWIFTSTORE_CONNECTIONS < 1:
            raise ValueError("SWIFTSTORE_CONNECTIONS must be at least 1.")
        if self.SWIFTSTORE_LIST_PAGE_SIZE < 1:
            raise ValueError("SWIFTSTORE_LIST_PAGE_SIZE must be at least 1.")

    @classmethod
    def from_environment(cls) -> "Settings":
        _load_env_file()
        return cls(
            STORAGE_BACKEND=os.environ.get("STORAGE_BACKEND", cls.STORAGE_BACKEND),
            SWIFTSTORE_CONNECTIONS=int(
                os.environ.get("SWIFTSTORE_CONNECTIONS", cls.SWIFTSTORE_CONNECTIONS)
            ),
            SWIFTSTORE_CONNECT_TIMEOUT=float(
                os.environ.get(
                    "SWIFTSTORE_CONNECT_TIMEOUT", cls.SWIFTSTORE_CONNECT_TIMEOUT
                )
            ),
            SWIFTSTORE_TIMEOUT=float(
                os.environ.get("SWIFTSTORE_TIMEOUT", cls.SWIFTSTORE_TIMEOUT)
            ),
            SWIFTSTORE_LIST_PAGE_SIZE=int(
                os.environ.get(
                    "SWIFTSTORE_LIST_PAGE_SIZE", cls.SWIFTSTORE_LIST_PAGE_SIZE
                )
            ),
            SWIFTSTORE_READ_CHUNK_SIZE=int(
                os.environ.get(
                    "SWIFTSTORE_READ_CHUNK_SIZE", cls.SWIFTSTORE_READ_CHUNK_SIZE
                )
            ),
            ENABLE_METRICS=_as_bool(
                os.environ.get("ENABLE_METRICS"), cls.ENABLE_METRICS
            ),
            LOG_LEVEL=os.environ.get("LOG_LEVEL", cls.LOG_LEVEL).upper(),
            S3_ENDPOINT_URL=os.environ.get("S3_ENDPOINT_URL") or None,
            S3_REGION=os.environ.get("S3_REGION") or None,
            S3_ACCESS_KEY_ID=os.environ.get("S3_ACCESS_KEY_ID") or None,
            S3_SECRET_ACCESS_KEY=os.environ.get("S3_SECRET_ACCESS_KEY") or None,
            S3_USE_SSL=_as_bool(os.environ.get("S3_USE_SSL"), cls.S3_USE_SSL),
            S3_ADDRESSING_STYLE=os.environ.get(
                "S3_ADDRESSING_STYLE", cls.S3_ADDRESSING_STYLE
            ),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_environment()
