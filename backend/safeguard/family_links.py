# safeguard/family_links.py
# ------------------------------------------------------------
# Family-link registry
#
# family_link:<elderly_user_id> -> JSON list of family member ids
# (link order, first linked first, no duplicates)
#
# There is no ownership check: any caller may link any two ids.
# ------------------------------------------------------------

from typing import List, Tuple
import json
import logging

from .kv_store import KVStore

logger = logging.getLogger(__name__)

K_FAMILY_LINK = "family_link:"


def user_id_for_phone(phone: str) -> str:
    """
    Phone numbers double as user ids: "+15551234567" -> "user:+15551234567".
    """
    return f"user:{phone}"


class FamilyLinkRegistry:
    def __init__(self, kv: KVStore):
        self.kv = kv

    def list_family_members(self, elderly_user_id: str) -> List[str]:
        """
        Recipients for an elderly user. No entry yet means no recipients.
        """
        raw = self.kv.get(f"{K_FAMILY_LINK}{elderly_user_id}")
        if not raw:
            return []
        return list(json.loads(raw))

    def link(self, elderly_user_id: str, family_member_id: str) -> None:
        members = self.list_family_members(elderly_user_id)
        if family_member_id in members:
            return

        members.append(family_member_id)
        self.kv.set(f"{K_FAMILY_LINK}{elderly_user_id}", json.dumps(members))
        logger.info("Linked family member %s to %s", family_member_id, elderly_user_id)

    def link_by_contact(self, elderly_phone: str, family_phone: str) -> Tuple[str, str]:
        """
        Link two users known only by phone number.
        Returns the (elderly_user_id, family_member_id) pair that was linked.
        """
        elderly_user_id = user_id_for_phone(elderly_phone)
        family_member_id = user_id_for_phone(family_phone)
        self.link(elderly_user_id, family_member_id)
        return elderly_user_id, family_member_id
