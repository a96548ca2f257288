"""
Tests for the Redis-backed key-value store.
"""
from safeguard.kv_store import get_kv_store, get_redis


def test_redis_client_is_shared():
    """Requests reuse one client (and its connection pool)."""
    assert get_redis() is get_redis()
    assert get_kv_store().client is get_kv_store().client


def test_scan_prefix_only_returns_matching_keys(kv, redis_client):
    redis_client.set("emergency_alert:1", "{}")
    redis_client.set("emergency_alert:2", "{}")
    redis_client.set("user_alerts:A", "[]")

    assert sorted(kv.scan_prefix("emergency_alert:")) == ["emergency_alert:1", "emergency_alert:2"]


def test_get_set_delete(kv):
    assert kv.get("family_link:user:1") is None

    kv.set("family_link:user:1", '["user:2"]')
    assert kv.get("family_link:user:1") == '["user:2"]'

    kv.delete("family_link:user:1")
    assert kv.get("family_link:user:1") is None
