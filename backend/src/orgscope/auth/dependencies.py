"""FastAPI dependencies for principal extraction.

Authentication itself is performed by the external provider; these
dependencies only read the principal identifier from the bearer token.
A request without credentials is anonymous, not an error: the organization
resolver treats it as a no-op and the enforcement gates deny it.
"""

from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .jwt import decode_token


# auto_error=False lets anonymous requests through to the resolver
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """Authenticated actor, immutable for the request lifetime."""

    id: str


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[Principal]:
    """Extract the principal from the bearer token, if any.

    Returns:
        Principal or None: None when the request carries no credentials

    Raises:
        HTTPException 401: If a token is present but expired or invalid
    """
    if credentials is None:
        return None

    try:
        payload = decode_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    subject = payload.get("sub")
    if not subject:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing subject claim",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return Principal(id=str(subject))


def require_principal(principal: Optional[Principal] = Depends(get_current_principal)) -> Principal:
    """Require an authenticated principal.

    Raises:
        HTTPException 401: If the request is anonymous
    """
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal
