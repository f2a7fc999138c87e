from __future__ import annotations

import pytest

from swiftstore.common.config import Settings, get_settings
from swiftstore.domain.config import BackendConfig
from swiftstore.services.backend import SwiftBackend
from tests.services.mock_storage import MockStorageClient

CONTAINER = "cnt3"
PREFIX = "pre"


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()  # type: ignore[attr-defined]
    yield
    get_settings.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture
def settings() -> Settings:
    return Settings(SWIFTSTORE_CONNECTIONS=3, SWIFTSTORE_LIST_PAGE_SIZE=2)


@pytest.fixture
def storage() -> MockStorageClient:
    client = MockStorageClient()
    client.containers[CONTAINER] = {"headers": {}}
    return client


@pytest.fixture
def backend(storage: MockStorageClient, settings: Settings) -> SwiftBackend:
    return SwiftBackend.open(
        BackendConfig(container=CONTAINER, prefix=PREFIX),
        client=storage,
        settings=settings,
    )
