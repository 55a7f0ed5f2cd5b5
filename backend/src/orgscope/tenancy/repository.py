"""Read-only membership lookups used by the resolver and the role gate.

Ordering contract: a principal's organizations are returned in membership
creation order (created_at ascending, then membership id ascending). The
resolver's fallback picks the first entry, so this order must stay stable.
"""

from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models.organization import Organization
from ..models.membership import OrganizationMember
from .roles import InviteStatus


def get_organizations_by_user_id(db: Session, user_id: str) -> List[Organization]:
    """Return the organizations in which the user holds an accepted membership.

    Args:
        db: Database session
        user_id: Principal identifier

    Returns:
        Organizations ordered by membership creation (oldest first)
    """
    stmt = (
        select(Organization)
        .join(OrganizationMember, OrganizationMember.organization_id == Organization.id)
        .where(
            OrganizationMember.user_id == user_id,
            OrganizationMember.invite_status == InviteStatus.ACCEPTED.value,
        )
        .order_by(OrganizationMember.created_at.asc(), OrganizationMember.id.asc())
    )
    return list(db.scalars(stmt).all())


def get_organization_members(db: Session, organization_id: str) -> List[OrganizationMember]:
    """Return every membership row of an organization, regardless of invite status.

    Args:
        db: Database session
        organization_id: Organization identifier

    Returns:
        Memberships ordered by creation (oldest first)
    """
    stmt = (
        select(OrganizationMember)
        .where(OrganizationMember.organization_id == organization_id)
        .order_by(OrganizationMember.created_at.asc(), OrganizationMember.id.asc())
    )
    return list(db.scalars(stmt).all())


def get_organization(db: Session, organization_id: str):
    """Return an organization by id, or None."""
    return db.get(Organization, organization_id)
