"""Access enforcement gates.

Two independent gates that can be composed in front of any handler:

- Presence gate: denies requests whose context has no resolved organization.
- Role gate: denies principals whose membership role in the resolved
  organization is not exactly the required role.

Denials raise 403 errors. A membership lookup that fails raises
AccessCheckFailed (500) instead, never a denial.
"""

import logging
from typing import Iterable, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.membership import OrganizationMember
from .context import RequestContext
from .exceptions import OrganizationAccessDenied, InsufficientRole, AccessCheckFailed
from .repository import get_organization_members
from .roles import OrganizationRole, has_role

logger = logging.getLogger(__name__)


def ensure_organization(context: RequestContext) -> str:
    """Presence gate.

    Args:
        context: Resolved request context

    Returns:
        str: The resolved organization id

    Raises:
        OrganizationAccessDenied: If no organization was resolved
    """
    if context.organization_id is None:
        logger.info(
            "Denied request without organization context",
            extra={"principal_id": context.principal_id},
        )
        raise OrganizationAccessDenied()
    return context.organization_id


def find_membership(
    memberships: Iterable[OrganizationMember],
    principal_id: str,
) -> Optional[OrganizationMember]:
    """Return the principal's membership from an organization's member list."""
    for membership in memberships:
        if membership.user_id == principal_id:
            return membership
    return None


def check_role(
    memberships: Iterable[OrganizationMember],
    principal_id: str,
    required_role: Union[OrganizationRole, str],
) -> bool:
    """Decide the role gate from an already-loaded member list.

    Returns:
        True only if the principal has a membership whose role equals
        required_role exactly.
    """
    membership = find_membership(memberships, principal_id)
    return membership is not None and has_role(membership.role, required_role)


def ensure_role(
    db: Session,
    context: RequestContext,
    required_role: Union[OrganizationRole, str],
) -> OrganizationMember:
    """Role gate.

    Args:
        db: Database session for the membership lookup
        context: Resolved request context
        required_role: Role the principal must hold in the resolved organization

    Returns:
        OrganizationMember: The principal's membership

    Raises:
        OrganizationAccessDenied: If there is no principal or no resolved organization
        InsufficientRole: If the membership is missing or its role differs
        AccessCheckFailed: If memberships could not be loaded
    """
    if context.organization_id is None or context.principal_id is None:
        raise OrganizationAccessDenied("Organization access required")

    try:
        memberships = get_organization_members(db, context.organization_id)
    except SQLAlchemyError as e:
        logger.error(
            "Membership lookup failed during role check",
            exc_info=True,
            extra={
                "principal_id": context.principal_id,
                "organization_id": context.organization_id,
            },
        )
        raise AccessCheckFailed() from e

    membership = find_membership(memberships, context.principal_id)
    if membership is None or not has_role(membership.role, required_role):
        logger.info(
            "Denied request lacking required organization role",
            extra={
                "principal_id": context.principal_id,
                "organization_id": context.organization_id,
            },
        )
        raise InsufficientRole(required_role)

    return membership
