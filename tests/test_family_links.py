"""
Tests for the family-link registry.
"""
import json

from safeguard.family_links import user_id_for_phone


class TestFamilyLinkRegistry:

    def test_unknown_user_has_no_family(self, registry):
        """No registry entry is an empty recipient list, not an error."""
        assert registry.list_family_members("user:nobody") == []

    def test_link_preserves_insertion_order(self, registry):
        registry.link("user:123", "user:456")
        registry.link("user:123", "user:789")
        registry.link("user:123", "user:111")

        assert registry.list_family_members("user:123") == ["user:456", "user:789", "user:111"]

    def test_linking_twice_keeps_one_entry(self, registry, redis_client):
        registry.link("user:123", "user:456")
        registry.link("user:123", "user:456")

        assert registry.list_family_members("user:123") == ["user:456"]
        assert json.loads(redis_client.get("family_link:user:123")) == ["user:456"]

    def test_links_are_one_directional(self, registry):
        registry.link("user:123", "user:456")

        assert registry.list_family_members("user:456") == []

    def test_link_by_contact_derives_ids_from_phones(self, registry):
        pair = registry.link_by_contact("+15551234567", "+15559876543")

        assert pair == ("user:+15551234567", "user:+15559876543")
        assert registry.list_family_members("user:+15551234567") == ["user:+15559876543"]

    def test_user_id_for_phone(self):
        assert user_id_for_phone("+442071234567") == "user:+442071234567"
