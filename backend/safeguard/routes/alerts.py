# safeguard/routes/alerts.py
# ------------------------------------------------------------
# Emergency alerts API
#
# Elderly clients create alerts; family clients poll their list,
# active list and unread count, acknowledge alerts and change
# their status. No authentication: ids are trusted as sent.
# ------------------------------------------------------------

from fastapi import APIRouter, Depends
import logging

from ..config import settings
from ..errors import AlertNotFound, ValidationFailed, storage_errors
from ..family_links import FamilyLinkRegistry
from ..models import (
    ALERT_STATUSES,
    CreateAlertRequest,
    LinkFamilyRequest,
    MarkReadRequest,
    StatusUpdateRequest,
)
from ..repository import AlertRepository
from ._common import get_registry, get_repository, require_fields

router = APIRouter(prefix=f"{settings.api_prefix}/alerts", tags=["alerts"])

logger = logging.getLogger(__name__)


# ---------------- CREATE ----------------
@router.post("/create")
def create_alert(body: CreateAlertRequest, repo: AlertRepository = Depends(get_repository)):
    """
    Raise an alert for an elderly user and fan it out to every
    family member linked at this moment.
    """
    require_fields(
        "Missing required fields: elderlyUserId, elderlyName, elderlyPhone",
        elderlyUserId=body.elderly_user_id,
        elderlyName=body.elderly_name,
        elderlyPhone=body.elderly_phone,
    )

    with storage_errors("Failed to create emergency alert"):
        alert = repo.create(
            body.elderly_user_id,
            body.elderly_name,
            body.elderly_phone,
            elderly_email=body.elderly_email,
            location=body.location,
            medical_info=body.medical_info,
        )

    return {"success": True, "alert": alert.to_json_dict()}


# ---------------- LINK FAMILY ----------------
@router.post("/link-family")
def link_family(body: LinkFamilyRequest, registry: FamilyLinkRegistry = Depends(get_registry)):
    require_fields(
        "Missing elderlyPhone or familyPhone",
        elderlyPhone=body.elderly_phone,
        familyPhone=body.family_phone,
    )

    with storage_errors("Failed to link family member"):
        registry.link_by_contact(body.elderly_phone, body.family_phone)

    return {"success": True, "message": "Family member linked successfully"}


# ---------------- RETENTION SWEEP ----------------
@router.post("/cleanup")
def cleanup_alerts(repo: AlertRepository = Depends(get_repository)):
    with storage_errors("Failed to clean old alerts"):
        deleted = repo.cleanup(settings.alert_retention_days)

    return {"success": True, "deletedCount": deleted}


# ---------------- FAMILY VIEWS ----------------
@router.get("/family/{family_member_id}")
def list_family_alerts(family_member_id: str, repo: AlertRepository = Depends(get_repository)):
    """
    Every alert fanned out to this family member, newest first.
    """
    with storage_errors("Failed to fetch alerts"):
        alerts = repo.list_for_recipient(family_member_id)

    return {"success": True, "alerts": [a.to_json_dict() for a in alerts]}


@router.get("/family/{family_member_id}/active")
def list_active_family_alerts(family_member_id: str, repo: AlertRepository = Depends(get_repository)):
    with storage_errors("Failed to fetch active alerts"):
        alerts = repo.list_active_for_recipient(family_member_id)

    return {"success": True, "alerts": [a.to_json_dict() for a in alerts]}


@router.get("/family/{family_member_id}/unread-count")
def unread_count(family_member_id: str, repo: AlertRepository = Depends(get_repository)):
    with storage_errors("Failed to fetch unread count"):
        count = repo.count_unread_for_recipient(family_member_id)

    return {"success": True, "count": count}


# ---------------- SINGLE ALERT ----------------
@router.get("/{alert_id}")
def get_alert(alert_id: str, repo: AlertRepository = Depends(get_repository)):
    with storage_errors("Failed to fetch alert"):
        alert = repo.get_by_id(alert_id)

    if not alert:
        raise AlertNotFound()
    return {"success": True, "alert": alert.to_json_dict()}


@router.put("/{alert_id}/status")
def update_alert_status(
    alert_id: str,
    body: StatusUpdateRequest,
    repo: AlertRepository = Depends(get_repository),
):
    """
    Set status to active / resolved / cancelled. Any transition is
    accepted, including reopening a resolved alert.
    """
    if body.status not in ALERT_STATUSES:
        raise ValidationFailed("Invalid status. Must be: active, resolved, or cancelled")

    with storage_errors("Failed to update alert status"):
        alert = repo.update_status(alert_id, body.status)

    if not alert:
        raise AlertNotFound()
    return {"success": True, "alert": alert.to_json_dict()}


@router.post("/{alert_id}/read")
def mark_alert_read(
    alert_id: str,
    body: MarkReadRequest,
    repo: AlertRepository = Depends(get_repository),
):
    require_fields("Missing familyMemberId", familyMemberId=body.family_member_id)

    with storage_errors("Failed to mark alert as read"):
        alert = repo.mark_read(alert_id, body.family_member_id)

    if not alert:
        raise AlertNotFound()
    return {"success": True, "alert": alert.to_json_dict()}
