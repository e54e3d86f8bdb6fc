"""
E2E test fixtures for the couchdoc SDK.

These tests require a running CouchDB (COUCHDOC_COUCHDB_URL, default
http://localhost:5984/) that accepts database creation.
"""

import os
import socket
import time
import uuid
from urllib.parse import urlsplit

import pytest
import pytest_asyncio

from sdk.couchdoc_sdk.client import CouchClient
from sdk.couchdoc_sdk.config import Settings

# Skip E2E tests if not in E2E mode
E2E_ENABLED = os.environ.get("COUCHDOC_E2E_TESTS", "0") == "1"

pytestmark = pytest.mark.skipif(
    not E2E_ENABLED,
    reason="E2E tests disabled. Set COUCHDOC_E2E_TESTS=1 to enable."
)


def wait_for_service(host: str, port: int, timeout: int = 60) -> bool:
    """Wait for a service to become available."""
    start = time.time()
    while time.time() - start < timeout:
        try:
            with socket.create_connection((host, port), timeout=1):
                return True
        except OSError:
            time.sleep(1)
    return False


@pytest.fixture(scope="session")
def settings() -> Settings:
    """Settings for the CouchDB under test."""
    settings = Settings()
    if E2E_ENABLED:
        url = urlsplit(settings.couchdb_url)
        assert wait_for_service(url.hostname, url.port or 5984), "CouchDB not ready"
    return settings


@pytest.fixture
def prefix() -> str:
    """Unique database prefix for test isolation."""
    return f"e2e-{uuid.uuid4().hex[:8]}-"


@pytest_asyncio.fixture
async def db(settings):
    """Connected client for the CouchDB under test."""
    async with CouchClient.from_settings(settings) as client:
        yield client
