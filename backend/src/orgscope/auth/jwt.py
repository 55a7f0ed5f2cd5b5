"""Bearer token validation.

Tokens are issued by the external authentication provider. The only claim
this service relies on is `sub`, the principal's stable identifier.

Example Token Payload:
{
  "sub": "1",
  "iat": 1704368400,
  "exp": 1704372000
}
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt

from ..config import get_settings


def create_access_token(principal_id: str, expires_minutes: int = 60, **claims: Any) -> str:
    """Create a signed token for a principal.

    Used by development tooling and tests; production tokens come from the
    authentication provider.

    Args:
        principal_id: Value of the `sub` claim
        expires_minutes: Token lifetime
        **claims: Additional claims to embed

    Returns:
        str: Signed JWT token
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)

    payload = {
        **claims,
        'sub': str(principal_id),
        'iat': int(now.timestamp()),
        'exp': int((now + timedelta(minutes=expires_minutes)).timestamp()),
    }

    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a token.

    Args:
        token: JWT token string

    Returns:
        Dict: Decoded token payload

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid (bad signature, malformed, etc.)
    """
    settings = get_settings()
    return jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": ["sub", "exp"]},
    )
