"""Tenancy error taxonomy.

Authorization denials (403) and lookup faults (500) are separate types so
callers and operators can tell "not allowed" apart from "could not decide".
All request-time errors are HTTPExceptions and are rendered by FastAPI.
"""

from typing import Union

from fastapi import HTTPException, status

from .roles import OrganizationRole, role_value


class OrganizationAccessDenied(HTTPException):
    """Raised when no organization could be resolved for the request."""

    def __init__(self, detail: str = "You don't have access to any organization"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class InsufficientRole(HTTPException):
    """Raised when the principal's membership role differs from the required role."""

    def __init__(self, required_role: Union[OrganizationRole, str]):
        self.required_role = role_value(required_role)
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Required role '{self.required_role}' in this organization",
        )


class AccessCheckFailed(HTTPException):
    """Raised when membership storage could not be read during an access check."""

    def __init__(self, detail: str = "Error verifying organization role"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


class MigrationError(Exception):
    """Base class for tenancy migration errors."""


class MigrationFailed(MigrationError):
    """A migration step failed and the whole run was rolled back.

    The originating error is chained as __cause__ and kept on `original`.
    """

    def __init__(self, step: str, original: BaseException, report=None):
        self.step = step
        self.original = original
        self.report = report
        super().__init__(f"Tenancy migration failed at step '{step}': {original}")


class UnsupportedDialect(MigrationError):
    """The database cannot run the migration atomically."""
