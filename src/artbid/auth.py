"""Administrator authentication.

Admin endpoints expect ``Authorization: Bearer <ADMIN_TOKEN>``. When no token
is configured, admin auth is disabled (local development and tests).

Bidders are not authenticated here: the bid engine only trusts the mobile
number in the request and looks the user up itself.
"""

import hmac
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import structlog

from .config import get_settings

logger = structlog.get_logger()


@dataclass
class AuthenticatedAdmin:
    """Represents an authenticated administrator."""
    token_configured: bool


# FastAPI dependency for protected routes
security = HTTPBearer(auto_error=False)


def verify_admin_token(token: Optional[str]) -> bool:
    """Constant-time comparison against the configured admin token."""
    expected = get_settings().admin_token
    if not expected or not token:
        return False
    return hmac.compare_digest(token.encode(), expected.encode())


async def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthenticatedAdmin:
    """FastAPI dependency that requires the admin bearer token."""
    if not get_settings().admin_token:
        return AuthenticatedAdmin(token_configured=False)

    token = credentials.credentials if credentials else None
    if not verify_admin_token(token):
        logger.warning("admin_auth_failed", token_present=bool(token))
        raise HTTPException(
            status_code=401,
            detail="Admin authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return AuthenticatedAdmin(token_configured=True)
