"""Immutable per-request organization context."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RequestContext:
    """Organization context of a single request.

    Built once by the resolver at request start and passed explicitly to
    the enforcement gates and handlers. Never persisted.

    Attributes:
        principal_id: Authenticated principal, or None for anonymous requests
        organization_id: Resolved organization, or None if none could be resolved
        requested_organization_id: Raw hint from query parameter or header
    """

    principal_id: Optional[str] = None
    organization_id: Optional[str] = None
    requested_organization_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.principal_id is not None

    @property
    def has_organization(self) -> bool:
        return self.organization_id is not None
