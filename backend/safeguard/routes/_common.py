# safeguard/routes/_common.py
# ------------------------------------------------------------
# Shared helpers for the alert routes.
# Keeps route files small and consistent.
# ------------------------------------------------------------

from typing import Optional

from fastapi import Depends

from ..errors import ValidationFailed
from ..family_links import FamilyLinkRegistry
from ..kv_store import KVStore, get_kv_store
from ..repository import AlertRepository


def get_registry(kv: KVStore = Depends(get_kv_store)) -> FamilyLinkRegistry:
    return FamilyLinkRegistry(kv)


def get_repository(registry: FamilyLinkRegistry = Depends(get_registry)) -> AlertRepository:
    return AlertRepository(registry.kv, registry)


def require_fields(message: str, **fields: Optional[str]) -> None:
    """
    Raise a 400 if any of the named string fields is missing or empty.

    Example:
        require_fields("Missing familyMemberId", familyMemberId=body.family_member_id)
    """
    if any(not v for v in fields.values()):
        raise ValidationFailed(message)
