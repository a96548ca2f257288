# safeguard/kv_store.py
# ------------------------------------------------------------
# Key-value store used by the alert service.
#
# The service only needs four primitives over string keys/values:
# get, set, delete and prefix scan. Redis provides them; everything
# above this module stores JSON strings and never touches Redis
# data types directly.
#
# Key namespaces:
# - emergency_alert:<alert_id>   -> JSON EmergencyAlert
# - user_alerts:<family_id>      -> JSON list of alert ids (newest first)
# - family_link:<elderly_id>     -> JSON list of family ids
# ------------------------------------------------------------

from functools import lru_cache
from typing import List, Optional
import logging

import redis

from .config import settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_redis() -> redis.Redis:
    """
    Returns the process-wide Redis client (one connection pool).

    decode_responses=True so values come back as str (JSON payloads).
    """
    return redis.Redis.from_url(
        settings.redis_url,
        decode_responses=True,
    )


class KVStore:
    """
    Thin string -> string mapping over a Redis client.

    Redis errors are not caught here; the HTTP layer turns them
    into 500 responses.
    """

    def __init__(self, client: redis.Redis):
        self.client = client

    def get(self, key: str) -> Optional[str]:
        return self.client.get(key)

    def set(self, key: str, value: str) -> None:
        self.client.set(key, value)

    def delete(self, key: str) -> None:
        self.client.delete(key)

    def scan_prefix(self, prefix: str) -> List[str]:
        """
        All keys starting with `prefix`.

        SCAN cursor, not KEYS.
        """
        return list(self.client.scan_iter(match=f"{prefix}*", count=500))

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.exceptions.RedisError as exc:
            logger.warning("Redis ping failed: %s", exc)
            return False


def get_kv_store() -> KVStore:
    """
    FastAPI dependency. Overridden in tests with a fakeredis-backed store.
    """
    return KVStore(get_redis())
