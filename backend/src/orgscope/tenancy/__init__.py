"""Tenancy module - organization context resolution and access enforcement.

This module provides:
- Resolution of the organization a request is scoped to
- Presence and role gates for tenant-scoped handlers
- The migration that retrofits organization scoping onto existing tables

Cross-tenant record access answers 404 (not 403) so record existence in
other organizations is never revealed.
"""

from .context import RequestContext
from .resolver import resolve_organization, choose_organization, build_request_context
from .enforcement import ensure_organization, ensure_role, check_role
from .roles import OrganizationRole, InviteStatus
from .exceptions import (
    OrganizationAccessDenied,
    InsufficientRole,
    AccessCheckFailed,
    MigrationError,
    MigrationFailed,
)

__all__ = [
    "RequestContext",
    "resolve_organization",
    "choose_organization",
    "build_request_context",
    "ensure_organization",
    "ensure_role",
    "check_role",
    "OrganizationRole",
    "InviteStatus",
    "OrganizationAccessDenied",
    "InsufficientRole",
    "AccessCheckFailed",
    "MigrationError",
    "MigrationFailed",
]
