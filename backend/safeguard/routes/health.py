# safeguard/routes/health.py
# ------------------------------------------------------------
# Health endpoint
#
# Liveness only: always 200 with status "ok" while the API is up.
# Redis reachability is reported alongside but does not flip it.
# ------------------------------------------------------------

from fastapi import APIRouter, Depends
from datetime import datetime, timezone

from ..config import settings
from ..kv_store import KVStore, get_kv_store
from ..models import iso_utc

router = APIRouter(prefix=settings.api_prefix, tags=["health"])

# server start reference (module load time)
STARTED_AT = datetime.now(timezone.utc)


@router.get("/health")
def health(kv: KVStore = Depends(get_kv_store)):
    now = datetime.now(timezone.utc)
    return {
        "status": "ok",
        "utc": iso_utc(now),
        "started_at": iso_utc(STARTED_AT),
        "uptime_seconds": int((now - STARTED_AT).total_seconds()),
        "redis": {"ok": kv.ping()},
    }
