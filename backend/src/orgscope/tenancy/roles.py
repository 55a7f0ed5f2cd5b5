"""Organization roles and invitation states.

Roles are a closed set but are stored as plain TEXT in
organization_members.role. The role gate compares the stored value to the
required role exactly: there is no hierarchy, so "admin" does NOT imply
"member". Callers that need hierarchical access must list every role they
accept themselves.
"""

from enum import Enum
from typing import Union


class OrganizationRole(str, Enum):
    """Roles a principal can hold within an organization.

    Values are stored as TEXT in the database and must match exactly.
    """
    ADMIN = "admin"
    MEMBER = "member"


class InviteStatus(str, Enum):
    """Invitation lifecycle of a membership.

    Only ACCEPTED memberships grant access to an organization.
    """
    PENDING = "pending"
    ACCEPTED = "accepted"


def role_value(role: Union[OrganizationRole, str]) -> str:
    """Return the stored TEXT form of a role.

    Examples:
        >>> role_value(OrganizationRole.ADMIN)
        'admin'
        >>> role_value("billing")
        'billing'
    """
    if isinstance(role, OrganizationRole):
        return role.value
    return role


def has_role(membership_role: str, required_role: Union[OrganizationRole, str]) -> bool:
    """Check a stored membership role against the required role.

    Exact string equality, no hierarchy.

    Examples:
        >>> has_role("admin", OrganizationRole.ADMIN)
        True
        >>> has_role("admin", OrganizationRole.MEMBER)
        False
        >>> has_role("Admin", "admin")
        False
    """
    return membership_role == role_value(required_role)
