"""
Bearer token authentication for the pool API.

Provides:
- APIAuthError for rejected requests
- require_api_token FastAPI dependency
"""

import logging
import secrets
from typing import Optional

from fastapi import HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

logger = logging.getLogger(__name__)


class APIAuthError(HTTPException):
    """Exception raised when API authentication fails."""

    def __init__(self, detail: str = "Invalid or missing API token"):
        super().__init__(
            status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"}
        )


# auto_error=False so a missing header yields our 401 instead of a bare 403
security_scheme = HTTPBearer(auto_error=False)


def check_api_token(
    credentials: Optional[HTTPAuthorizationCredentials], expected_token: Optional[str]
) -> bool:
    """Validate Bearer credentials against the configured token.

    Args:
        credentials: Parsed Authorization header (None if absent)
        expected_token: Configured token; None disables authentication

    Returns:
        True if authentication is successful

    Raises:
        APIAuthError: If token is missing or invalid
    """
    if expected_token is None:
        return True

    if credentials is None:
        raise APIAuthError("Missing Authorization header")

    # Use constant-time comparison to prevent timing attacks
    if not secrets.compare_digest(credentials.credentials, expected_token):
        raise APIAuthError("Invalid API token")

    return True


async def require_api_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security_scheme),
) -> bool:
    """FastAPI dependency enforcing the API token from app settings.

    Args:
        request: FastAPI request (used to reach app settings)
        credentials: HTTP Bearer credentials from Authorization header

    Returns:
        True if authentication is successful

    Raises:
        APIAuthError: If token is missing or invalid
    """
    settings = request.app.state.settings
    try:
        return check_api_token(credentials, settings.api_token)
    except APIAuthError:
        logger.warning(f"Rejected unauthenticated request to {request.url.path}")
        raise
