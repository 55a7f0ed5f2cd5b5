"""FastAPI dependencies for tenant isolation.

This module provides:
- get_request_context: Resolve the organization a request is scoped to
- require_organization: Presence gate (403 without a resolved organization)
- require_role: Role gate factory (403 unless the membership role matches exactly)
- TenantQuery: Helpers that filter tenant-scoped records by organization_id

Usage:
    @router.get("/conversations")
    def list_conversations(
        context: RequestContext = Depends(require_organization),
        db: Session = Depends(get_db),
    ):
        return TenantQuery.scoped_query(db, Conversation, context.organization_id).all()

    @router.patch("/organizations/current")
    def update_organization(
        context: RequestContext = Depends(require_role(OrganizationRole.ADMIN)),
    ):
        ...
"""

from typing import Callable, Optional, Union

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from .auth.dependencies import Principal, get_current_principal
from .config import get_settings
from .database import get_db
from .tenancy.context import RequestContext
from .tenancy.enforcement import ensure_organization, ensure_role
from .tenancy.resolver import build_request_context
from .tenancy.roles import OrganizationRole, role_value


def get_requested_organization_id(request: Request) -> Optional[str]:
    """Read the requested-organization hint.

    The query parameter takes precedence over the header. Blank values are
    treated as absent.
    """
    settings = get_settings()
    requested = (
        request.query_params.get(settings.ORGANIZATION_QUERY_PARAM)
        or request.headers.get(settings.ORGANIZATION_HEADER)
    )
    if requested is None or not requested.strip():
        return None
    return requested.strip()


def get_request_context(
    requested_organization_id: Optional[str] = Depends(get_requested_organization_id),
    principal: Optional[Principal] = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> RequestContext:
    """Resolve the organization context for the current request.

    Never fails for lack of access: anonymous requests and principals
    without memberships get a context whose organization_id is None.
    """
    principal_id = principal.id if principal else None
    return build_request_context(db, principal_id, requested_organization_id)


def require_organization(context: RequestContext = Depends(get_request_context)) -> RequestContext:
    """Presence gate.

    Raises:
        OrganizationAccessDenied (403): If no organization was resolved
    """
    ensure_organization(context)
    return context


def require_role(required_role: Union[OrganizationRole, str]) -> Callable:
    """Create a dependency enforcing an exact organization role.

    There is no role hierarchy: require_role(OrganizationRole.MEMBER)
    rejects admins. Endpoints accepting several roles must check them
    explicitly.

    Args:
        required_role: Role the principal must hold in the resolved organization

    Returns:
        Callable: FastAPI dependency returning the RequestContext

    Raises:
        InsufficientRole (403): If the membership role differs
        AccessCheckFailed (500): If memberships could not be loaded
    """
    required = role_value(required_role)

    def role_dependency(
        context: RequestContext = Depends(get_request_context),
        db: Session = Depends(get_db),
    ) -> RequestContext:
        ensure_role(db, context, required)
        return context

    return role_dependency


class TenantQuery:
    """Utility class for building organization-scoped queries.

    Example:
        conversation = TenantQuery.get_or_404(db, Conversation, conversation_id, context.organization_id)
    """

    @staticmethod
    def scoped_query(session: Session, model, organization_id: str):
        """Create a query filtered by organization_id.

        Raises:
            AttributeError: If model doesn't have an organization_id column
        """
        if not hasattr(model, 'organization_id'):
            raise AttributeError(f"Model {model.__name__} does not have organization_id column")

        return session.query(model).filter(model.organization_id == organization_id)

    @staticmethod
    def get_or_404(session: Session, model, record_id, organization_id: str):
        """Get a record by ID within an organization, or raise 404.

        Records that don't exist and records owned by another organization
        produce the same 404, so existence in other tenants is not revealed.
        """
        record = TenantQuery.scoped_query(session, model, organization_id).filter(
            model.id == record_id
        ).first()

        if not record:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"{model.__name__} not found",
            )

        return record
