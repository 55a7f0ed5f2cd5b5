"""Unit tests for organization context resolution

Tests cover:
- Choosing between the requested organization and the first membership
- Membership ordering (creation order) and invite status filtering
- Anonymous requests
- Storage failures resolving to no organization
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from orgscope.models import Organization, User
from orgscope.tenancy.repository import get_organizations_by_user_id
from orgscope.tenancy.resolver import build_request_context, choose_organization, resolve_organization

from fixtures.multi_org import add_member


class TestChooseOrganization:
    """Test the pure selection rule"""

    def test_requested_member_organization_returned(self):
        assert choose_organization("b", ["a", "b", "c"]) == "b"

    def test_requested_non_member_organization_falls_back_to_first(self):
        assert choose_organization("z", ["a", "b"]) == "a"

    def test_no_request_returns_first(self):
        assert choose_organization(None, ["a", "b"]) == "a"

    def test_no_memberships_returns_none(self):
        assert choose_organization("a", []) is None
        assert choose_organization(None, []) is None


class TestResolveOrganization:
    """Test resolution against the database"""

    def test_anonymous_request_skips_lookup(self):
        db = MagicMock()

        assert resolve_organization(db, None, "org-a") is None
        db.scalars.assert_not_called()

    def test_principal_without_memberships(self, db_session, multi_org_setup):
        assert resolve_organization(db_session, "nobody") is None
        assert resolve_organization(db_session, "nobody", "org-a") is None

    def test_first_membership_by_creation_order(self, db_session, multi_member):
        assert resolve_organization(db_session, multi_member.id) == "org-a"

    def test_requested_membership_honored(self, db_session, multi_member):
        assert resolve_organization(db_session, multi_member.id, "org-b") == "org-b"

    def test_requested_foreign_organization_falls_back(self, db_session, multi_org_setup):
        org_a, org_b, user_a, user_b = multi_org_setup

        assert resolve_organization(db_session, user_a.id, org_b.id) == org_a.id

    def test_creation_order_not_insertion_order(self, db_session, org_a, org_b):
        user = User(id="late-joiner", email="late@example.test")
        db_session.add(user)
        db_session.commit()
        add_member(db_session, org_b, user, created_at=datetime(2024, 6, 1, tzinfo=timezone.utc))
        add_member(db_session, org_a, user, created_at=datetime(2023, 6, 1, tzinfo=timezone.utc))

        assert resolve_organization(db_session, user.id) == org_a.id

    def test_pending_membership_ignored(self, db_session, org_a, org_b):
        user = User(id="invitee", email="invitee@example.test")
        db_session.add(user)
        db_session.commit()
        add_member(db_session, org_a, user, invite_status="pending")
        add_member(db_session, org_b, user, invite_status="accepted")

        assert resolve_organization(db_session, user.id) == org_b.id
        assert resolve_organization(db_session, user.id, org_a.id) == org_b.id

    def test_storage_failure_resolves_to_none(self, caplog):
        db = MagicMock()
        db.scalars.side_effect = OperationalError("SELECT", {}, Exception("connection refused"))

        assert resolve_organization(db, "1", "org-a") is None
        assert "Organization lookup failed" in caplog.text


class TestRepository:
    """Test membership lookups"""

    def test_organizations_returned_oldest_membership_first(self, db_session, multi_member):
        organizations = get_organizations_by_user_id(db_session, multi_member.id)

        assert [org.id for org in organizations] == ["org-a", "org-b"]
        assert all(isinstance(org, Organization) for org in organizations)


class TestBuildRequestContext:

    def test_context_carries_hint_and_resolution(self, db_session, multi_org_setup):
        org_a, org_b, user_a, user_b = multi_org_setup

        context = build_request_context(db_session, user_a.id, org_b.id)

        assert context.principal_id == user_a.id
        assert context.organization_id == org_a.id
        assert context.requested_organization_id == org_b.id
        assert context.has_organization

    def test_anonymous_context(self, db_session):
        context = build_request_context(db_session, None, "org-a")

        assert not context.is_authenticated
        assert not context.has_organization

    def test_context_is_immutable(self, db_session):
        context = build_request_context(db_session, None)

        with pytest.raises(AttributeError):
            context.organization_id = "org-a"
