"""
Bearer token check for the bridge HTTP API.

The orchestrator presents BRIDGE_BEARER_TOKEN on every group and application
request. Missing and wrong tokens both answer 401.
"""

import secrets
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..config import get_settings

# auto_error is off so a missing header reaches verify_bearer_token
bearer_scheme = HTTPBearer(auto_error=False)

_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def _reject(status_code: int, detail: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail=detail, headers=_CHALLENGE)


def verify_bearer_token(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)]
) -> str:
    """
    Return the caller's token once it matches the configured one.

    Raises:
        HTTPException: 500 when the bridge has no token configured, 401 when
            the header is absent or carries another token
    """
    configured = get_settings().bridge_bearer_token
    if not configured:
        raise _reject(status.HTTP_500_INTERNAL_SERVER_ERROR, "BRIDGE_BEARER_TOKEN not configured")

    presented = credentials.credentials if credentials else ""
    if not presented:
        raise _reject(status.HTTP_401_UNAUTHORIZED, "Bearer token missing")

    if not secrets.compare_digest(configured.encode(), presented.encode()):
        raise _reject(status.HTTP_401_UNAUTHORIZED, "Invalid bearer token")

    return presented
