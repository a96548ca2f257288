# safeguard/repository.py
# ------------------------------------------------------------
# Alert repository
#
# Storage model:
# - emergency_alert:<id>        -> JSON EmergencyAlert
# - user_alerts:<family_id>     -> JSON list of alert ids (head is newest)
#
# The JSON codecs below are the only place raw storage strings are
# turned into typed records; routes only ever see EmergencyAlert.
#
# Fan-out is best effort: the alert is written first, then each
# recipient index in turn. A failure half way leaves the alert
# missing from the remaining recipients' lists.
# ------------------------------------------------------------

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, List, Optional
import json
import logging

from pydantic import ValidationError

from .family_links import FamilyLinkRegistry
from .kv_store import KVStore
from .models import (
    AlertStatus,
    EmergencyAlert,
    Location,
    MedicalInfo,
    alert_uid,
    iso_utc,
    parse_iso,
    utcnow,
)

logger = logging.getLogger(__name__)

K_ALERT = "emergency_alert:"
K_USER_ALERTS = "user_alerts:"

DEFAULT_RETENTION_DAYS = 30


# -------------------------------
# Codecs
# -------------------------------
def encode_alert(alert: EmergencyAlert) -> str:
    return json.dumps(alert.to_json_dict())


def decode_alert(raw: str) -> EmergencyAlert:
    return EmergencyAlert.model_validate_json(raw)


def record_timestamp(raw: str) -> Optional[datetime]:
    """
    Creation time of a stored record, read from the raw JSON so records
    that no longer match EmergencyAlert still age normally.
    None when the payload or its timestamp cannot be read.
    """
    try:
        payload = json.loads(raw)
        return parse_iso(payload["timestamp"])
    except (ValueError, TypeError, KeyError, AttributeError):
        return None


def encode_ids(ids: List[str]) -> str:
    return json.dumps(ids)


def decode_ids(raw: Optional[str]) -> List[str]:
    return list(json.loads(raw)) if raw else []


# -------------------------------
# Repository
# -------------------------------
class AlertRepository:
    """
    Create / read / update / sweep emergency alerts over a KVStore.

    `now` is injectable so creation time and the retention cutoff can
    be pinned in tests.
    """

    def __init__(
        self,
        kv: KVStore,
        registry: Optional[FamilyLinkRegistry] = None,
        now: Callable[[], datetime] = utcnow,
    ):
        self.kv = kv
        self.registry = registry or FamilyLinkRegistry(kv)
        self.now = now

    # --- internals

    def _save(self, alert: EmergencyAlert) -> None:
        self.kv.set(f"{K_ALERT}{alert.id}", encode_alert(alert))

    def _new_id(self) -> str:
        alert_id = alert_uid()
        while self.kv.get(f"{K_ALERT}{alert_id}") is not None:
            alert_id = alert_uid()
        return alert_id

    def _prepend_to_index(self, family_member_id: str, alert_id: str) -> None:
        key = f"{K_USER_ALERTS}{family_member_id}"
        ids = decode_ids(self.kv.get(key))
        ids.insert(0, alert_id)
        self.kv.set(key, encode_ids(ids))

    # --- public API

    def create(
        self,
        elderly_user_id: str,
        elderly_name: str,
        elderly_phone: str,
        elderly_email: Optional[str] = None,
        location: Optional[Location] = None,
        medical_info: Optional[MedicalInfo] = None,
    ) -> EmergencyAlert:
        # snapshot: links added later never see this alert
        family_member_ids = self.registry.list_family_members(elderly_user_id)

        alert = EmergencyAlert(
            id=self._new_id(),
            elderly_user_id=elderly_user_id,
            elderly_name=elderly_name,
            elderly_phone=elderly_phone,
            elderly_email=elderly_email,
            timestamp=iso_utc(self.now()),
            status="active",
            location=location,
            medical_info=medical_info,
            family_member_ids=family_member_ids,
            read_by=[],
        )
        self._save(alert)

        for family_member_id in family_member_ids:
            self._prepend_to_index(family_member_id, alert.id)

        logger.info(
            "Emergency alert created: %s for %s (%d recipients)",
            alert.id, elderly_name, len(family_member_ids),
        )
        return alert

    def get_by_id(self, alert_id: str) -> Optional[EmergencyAlert]:
        raw = self.kv.get(f"{K_ALERT}{alert_id}")
        return decode_alert(raw) if raw else None

    def list_for_recipient(self, family_member_id: str) -> List[EmergencyAlert]:
        """
        Newest first. Ids whose alert has been swept are skipped, and
        so are records that no longer decode as an EmergencyAlert.
        """
        ids = decode_ids(self.kv.get(f"{K_USER_ALERTS}{family_member_id}"))

        out: List[EmergencyAlert] = []
        for alert_id in ids:
            try:
                alert = self.get_by_id(alert_id)
            except ValidationError as exc:
                logger.warning("Skipping unreadable alert %s for %s: %s", alert_id, family_member_id, exc)
                continue
            if alert:
                out.append(alert)
        return out

    def list_active_for_recipient(self, family_member_id: str) -> List[EmergencyAlert]:
        return [a for a in self.list_for_recipient(family_member_id) if a.status == "active"]

    def count_unread_for_recipient(self, family_member_id: str) -> int:
        return sum(
            1
            for a in self.list_active_for_recipient(family_member_id)
            if family_member_id not in a.read_by
        )

    def update_status(self, alert_id: str, status: AlertStatus) -> Optional[EmergencyAlert]:
        """
        Unconditional overwrite; any status may follow any other.
        """
        alert = self.get_by_id(alert_id)
        if not alert:
            return None

        alert.status = status
        self._save(alert)
        logger.info("Alert %s status updated to: %s", alert_id, status)
        return alert

    def mark_read(self, alert_id: str, family_member_id: str) -> Optional[EmergencyAlert]:
        """
        Record that a recipient has seen the alert.

        Idempotent. Ids that were not recipients at creation are
        ignored so read_by stays a subset of family_member_ids.
        """
        alert = self.get_by_id(alert_id)
        if not alert:
            return None

        if family_member_id not in alert.family_member_ids:
            logger.info("Ignoring read mark on %s from non-recipient %s", alert_id, family_member_id)
            return alert

        if family_member_id not in alert.read_by:
            alert.read_by.append(family_member_id)
            self._save(alert)
        return alert

    def cleanup(self, retention_days: int = DEFAULT_RETENTION_DAYS) -> int:
        """
        Delete alerts older than `retention_days`, whatever their status.

        Records without a readable timestamp can never age out, so
        they are deleted too. Recipient index lists are left alone;
        listing skips the dangling ids.
        """
        cutoff = self.now() - timedelta(days=retention_days)
        deleted = 0

        for key in self.kv.scan_prefix(K_ALERT):
            raw = self.kv.get(key)
            if not raw:
                continue

            created_at = record_timestamp(raw)
            if created_at is None:
                logger.warning("Deleting unreadable alert record %s", key)

            if created_at is None or created_at < cutoff:
                self.kv.delete(key)
                deleted += 1

        logger.info("Cleaned up %d old alerts", deleted)
        return deleted
