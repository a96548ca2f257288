"""
Tests for the background retention sweep wired up in main.py.
"""
import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from safeguard import main
from safeguard.repository import AlertRepository


def test_sweep_once_uses_configured_store(monkeypatch, kv):
    monkeypatch.setattr(main, "get_kv_store", lambda: kv)
    long_ago = datetime.now(timezone.utc) - timedelta(days=60)
    old = AlertRepository(kv, now=lambda: long_ago).create("user:1", "Ann", "1")
    fresh = AlertRepository(kv).create("user:1", "Ann", "1")

    assert main.sweep_once() == 1
    assert AlertRepository(kv).get_by_id(old.id) is None
    assert AlertRepository(kv).get_by_id(fresh.id) is not None


def test_loop_survives_a_failed_pass(monkeypatch):
    calls = []
    sleeps = []

    def flaky_sweep():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("redis went away")
        return 0

    async def fake_sleep(seconds):
        sleeps.append(seconds)
        if len(sleeps) > 3:
            raise asyncio.CancelledError()

    monkeypatch.setattr(main, "sweep_once", flaky_sweep)
    monkeypatch.setattr(main.asyncio, "sleep", fake_sleep)

    with pytest.raises(asyncio.CancelledError):
        asyncio.run(main.retention_loop(120))

    assert len(calls) == 3
    assert sleeps == [120, 120, 120, 120]


class TestLifespan:
    """App startup/shutdown with the sweep task switched on and off."""

    @pytest.fixture
    def fake_loop(self, monkeypatch):
        events = []

        async def loop(interval_sec):
            events.append(("started", interval_sec))
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                events.append(("cancelled", interval_sec))
                raise

        monkeypatch.setattr(main, "retention_loop", loop)
        return events

    def test_sweep_task_starts_and_is_cancelled(self, monkeypatch, client, api_prefix, fake_loop):
        monkeypatch.setattr(main.settings, "cleanup_enabled", True)
        monkeypatch.setattr(main.settings, "cleanup_interval_sec", 900)

        with client:
            assert client.get(f"{api_prefix}/health").status_code == 200

        assert fake_loop == [("started", 900), ("cancelled", 900)]

    def test_sweep_disabled(self, monkeypatch, client, api_prefix, fake_loop):
        monkeypatch.setattr(main.settings, "cleanup_enabled", False)

        with client:
            assert client.get(f"{api_prefix}/health").status_code == 200

        assert fake_loop == []
