# safeguard/models.py
# ------------------------------------------------------------
# Domain and request models for the emergency-alert service.
#
# Field names are snake_case in Python and camelCase on the wire
# and in storage (alias generator), so the JSON contract used by
# the web clients stays unchanged.
# ------------------------------------------------------------

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, Literal, List, Dict, Any, get_args
from datetime import datetime, timezone
import random
import string
import time


# -------------------------------
# Shared helpers & enums
# -------------------------------
AlertStatus = Literal["active", "resolved", "cancelled"]
ALERT_STATUSES = get_args(AlertStatus)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def alert_uid() -> str:
    """
    Time-based id with a random suffix.
    Example: 1760861730123-k3j9x0a1b
    """
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{int(time.time() * 1000)}-{suffix}"


def utcnow() -> datetime:
    """
    Always return timezone-aware UTC datetime.
    """
    return datetime.now(timezone.utc)


def iso_utc(dt: datetime) -> str:
    """
    UTC ISO string, millisecond precision, 'Z' suffix.

    The fixed width keeps string order equal to time order.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str) -> datetime:
    """
    Inverse of iso_utc(); also accepts offsets other than 'Z'.
    Naive values are taken as UTC.
    """
    s = value.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> Dict[str, Any]:
        """
        Wire/storage form: camelCase keys, unset optionals omitted.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# -------------------------------
# Snapshots captured at alert time
# -------------------------------
class Location(CamelModel):
    latitude: float
    longitude: float
    address: str


class MedicalInfo(CamelModel):
    blood_type: Optional[str] = None
    allergies: Optional[str] = None
    medical_conditions: Optional[str] = None
    current_medications: Optional[str] = None


# -------------------------------
# EmergencyAlert
# -------------------------------
class EmergencyAlert(CamelModel):
    """
    A single emergency raised by an elderly user.

    Everything except `status` and `read_by` is a snapshot taken at
    creation and never rewritten.
    """

    id: str = Field(default_factory=alert_uid)

    elderly_user_id: str
    elderly_name: str
    elderly_phone: str
    elderly_email: Optional[str] = None

    timestamp: str = Field(default_factory=lambda: iso_utc(utcnow()))
    status: AlertStatus = "active"

    location: Optional[Location] = None
    medical_info: Optional[MedicalInfo] = None

    # Recipients resolved from the family-link registry at creation
    family_member_ids: List[str] = Field(default_factory=list)
    read_by: List[str] = Field(default_factory=list)


# -------------------------------
# Request bodies
# -------------------------------
# Required strings are Optional; the routes report missing fields
# with their own 400 message.

class CreateAlertRequest(CamelModel):
    elderly_user_id: Optional[str] = None
    elderly_name: Optional[str] = None
    elderly_phone: Optional[str] = None
    elderly_email: Optional[str] = None
    location: Optional[Location] = None
    medical_info: Optional[MedicalInfo] = None


class StatusUpdateRequest(CamelModel):
    status: Optional[str] = None


class MarkReadRequest(CamelModel):
    family_member_id: Optional[str] = None


class LinkFamilyRequest(CamelModel):
    elderly_phone: Optional[str] = None
    family_phone: Optional[str] = None
