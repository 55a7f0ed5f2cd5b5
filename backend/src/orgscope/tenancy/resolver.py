"""Organization context resolution.

Determines the single organization a request operates against from the
authenticated principal and an optional requested-organization hint.

Resolution rules:
1. No principal: no organization, storage is not queried.
2. Requested organization among the principal's accepted memberships: use it.
3. Otherwise: the principal's first membership (creation order).
4. No memberships: no organization.

Storage failures resolve to no organization (fail-closed); the presence
gate then denies the request.
"""

import logging
from typing import Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .context import RequestContext
from .repository import get_organizations_by_user_id

logger = logging.getLogger(__name__)


def choose_organization(
    requested_organization_id: Optional[str],
    organization_ids: Sequence[str],
) -> Optional[str]:
    """Pick the organization for a request from an ordered membership list.

    Args:
        requested_organization_id: Organization hint from the request, if any
        organization_ids: The principal's organizations, oldest membership first

    Returns:
        The requested organization if the principal belongs to it, else the
        first organization, else None.

    Examples:
        >>> choose_organization("b", ["a", "b"])
        'b'
        >>> choose_organization("x", ["a", "b"])
        'a'
        >>> choose_organization(None, []) is None
        True
    """
    if requested_organization_id is not None and requested_organization_id in organization_ids:
        return requested_organization_id
    return organization_ids[0] if organization_ids else None


def resolve_organization(
    db: Session,
    principal_id: Optional[str],
    requested_organization_id: Optional[str] = None,
) -> Optional[str]:
    """Resolve the organization a principal's request is scoped to.

    Args:
        db: Database session used for the membership lookup
        principal_id: Authenticated principal, or None
        requested_organization_id: Optional organization hint

    Returns:
        Organization id, or None if none can be resolved
    """
    if not principal_id:
        return None

    try:
        organizations = get_organizations_by_user_id(db, principal_id)
    except SQLAlchemyError:
        logger.error(
            "Organization lookup failed, continuing without organization context",
            exc_info=True,
            extra={"principal_id": principal_id},
        )
        return None

    organization_id = choose_organization(
        requested_organization_id,
        [organization.id for organization in organizations],
    )

    if requested_organization_id and organization_id != requested_organization_id:
        logger.info(
            f"Requested organization {requested_organization_id} is not accessible, "
            f"falling back to {organization_id}",
            extra={"principal_id": principal_id, "organization_id": organization_id},
        )
    else:
        logger.debug(
            f"Request organization context: principal {principal_id}, organization {organization_id}",
            extra={"principal_id": principal_id, "organization_id": organization_id},
        )

    return organization_id


def build_request_context(
    db: Session,
    principal_id: Optional[str],
    requested_organization_id: Optional[str] = None,
) -> RequestContext:
    """Resolve the organization and wrap the result in a RequestContext."""
    return RequestContext(
        principal_id=principal_id or None,
        organization_id=resolve_organization(db, principal_id, requested_organization_id),
        requested_organization_id=requested_organization_id,
    )
