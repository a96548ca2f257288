"""
Shared pytest fixtures.

Redis is replaced by fakeredis so the repository, the registry and
the HTTP routes all run against the same in-memory keyspace.
"""
from datetime import datetime, timedelta, timezone

import fakeredis
import pytest
from fastapi.testclient import TestClient

from safeguard.family_links import FamilyLinkRegistry
from safeguard.kv_store import KVStore, get_kv_store
from safeguard.main import app
from safeguard.repository import AlertRepository


class Clock:
    """Settable stand-in for utcnow()."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **delta) -> None:
        self.current = self.current + timedelta(**delta)


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def kv(redis_client):
    return KVStore(redis_client)


@pytest.fixture
def registry(kv):
    return FamilyLinkRegistry(kv)


@pytest.fixture
def clock():
    return Clock(datetime(2026, 10, 19, 8, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def repo(kv, registry, clock):
    return AlertRepository(kv, registry, now=clock)


@pytest.fixture
def client(kv):
    """HTTP client wired to the fakeredis-backed store."""
    app.dependency_overrides[get_kv_store] = lambda: kv
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def api_prefix():
    from safeguard.config import settings
    return settings.api_prefix
