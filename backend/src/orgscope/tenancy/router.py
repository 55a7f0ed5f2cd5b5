"""FastAPI router for organizations.

This module provides endpoints for:
- GET /organizations - Organizations the caller belongs to
- GET /organizations/current - The organization the request resolved to
- PATCH /organizations/current - Update the organization (admin only)
- GET /organizations/current/members - Members of the resolved organization

PATCH /organizations/current is the only path that writes organizations;
everything else in the tenancy package only reads them.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..auth.dependencies import Principal, require_principal
from ..database import get_db
from ..dependencies import require_organization, require_role
from .context import RequestContext
from .repository import get_organizations_by_user_id, get_organization_members, get_organization
from .roles import OrganizationRole
from .schemas import OrganizationResponse, OrganizationUpdate, MemberResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/organizations", tags=["Organizations"])


def _load_organization(db: Session, organization_id: str):
    organization = get_organization(db, organization_id)
    if not organization:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Organization not found",
        )
    return organization


@router.get("", response_model=List[OrganizationResponse])
def list_my_organizations(
    principal: Principal = Depends(require_principal),
    db: Session = Depends(get_db),
):
    """List organizations where the caller holds an accepted membership, oldest first."""
    return get_organizations_by_user_id(db, principal.id)


@router.get("/current", response_model=OrganizationResponse)
def get_current_organization(
    context: RequestContext = Depends(require_organization),
    db: Session = Depends(get_db),
):
    """Return the organization this request is scoped to.

    Raises:
        HTTPException 403: If no organization could be resolved
    """
    return _load_organization(db, context.organization_id)


@router.patch("/current", response_model=OrganizationResponse)
def update_current_organization(
    update: OrganizationUpdate,
    context: RequestContext = Depends(require_role(OrganizationRole.ADMIN)),
    db: Session = Depends(get_db),
):
    """Update the resolved organization (admin only).

    Only provided fields are updated.

    Raises:
        HTTPException 403: If the caller is not an admin of the organization
        HTTPException 422: If validation fails
    """
    organization = _load_organization(db, context.organization_id)

    for key, value in update.model_dump(exclude_unset=True).items():
        setattr(organization, key, value)

    db.commit()
    db.refresh(organization)

    logger.info(
        "Organization updated",
        extra={"organization_id": organization.id, "principal_id": context.principal_id},
    )
    return organization


@router.get("/current/members", response_model=List[MemberResponse])
def list_current_members(
    context: RequestContext = Depends(require_organization),
    db: Session = Depends(get_db),
):
    """List members of the resolved organization."""
    return get_organization_members(db, context.organization_id)
