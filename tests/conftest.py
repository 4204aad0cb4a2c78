"""
Test configuration and fixtures for the URL pool.
This centralizes all test setup, making individual tests clean.
"""

import random

import pytest
from fastapi.testclient import TestClient

from main import app
from urlpool_app.config import settings
from urlpool_app.dependencies import get_store, get_url_pool_service
from urlpool_app.services.url_pool_service import URLPoolService
from urlpool_app.store.strategies import InMemoryKVStore


class TickingClock:
    """Millisecond clock that advances by one on every call"""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        self.now += 1
        return self.now


@pytest.fixture(scope="function")
def store():
    """
    Fresh in-memory store for each test.
    This ensures tests are isolated and don't affect each other.
    """
    return InMemoryKVStore()


@pytest.fixture(scope="function")
def service(store):
    """URLPoolService over the test store with a deterministic clock and rng"""
    return URLPoolService(store, clock=TickingClock(), rng=random.Random(1234))


@pytest.fixture(scope="function")
def client(store):
    """
    Create a test client with the store dependency overridden.
    This is the main fixture that tests will use.
    """
    # One clock for the whole test so back-to-back submissions get distinct keys
    clock = TickingClock()
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_url_pool_service] = lambda: URLPoolService(store, clock=clock)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def secret(monkeypatch):
    """Configure a shared secret for the duration of one test"""
    monkeypatch.setattr(settings, "secret", "s3cret")
    return "s3cret"
