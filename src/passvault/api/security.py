# API Security - Session token for the trusted front end
#
# Generates a random session token on startup.
# Every vault endpoint requires this token; only the front end that
# authenticated the user holds it, so a caller without it cannot
# impersonate an owner by setting X-User-Id.

import secrets
from typing import Optional
from fastapi import Depends, Header, HTTPException, status

from ..core import EventSeverity, EventType, log_security_event

# Global session token (generated once per backend instance)
_SESSION_TOKEN: Optional[str] = None


def initialize_session_token() -> str:
    """
    Generate a new session token for this backend instance.

    Creates a random 256-bit token that must be included in the
    X-Session-Token header for all protected API calls.

    Returns:
        The generated session token (handed to the front end)
    """
    global _SESSION_TOKEN
    _SESSION_TOKEN = secrets.token_urlsafe(32)
    return _SESSION_TOKEN


def get_session_token() -> str:
    """
    Get the current session token.

    Raises:
        RuntimeError: If session token hasn't been initialized
    """
    if _SESSION_TOKEN is None:
        raise RuntimeError("Session token not initialized. Call initialize_session_token() first.")
    return _SESSION_TOKEN


async def verify_session_token(x_session_token: Optional[str] = Header(None)) -> str:
    """
    FastAPI dependency to verify session token.

    Usage in routes:
        @router.get("/protected", dependencies=[Depends(verify_session_token)])

    Raises:
        HTTPException: 401 if token is missing or invalid, 503 before startup
    """
    if _SESSION_TOKEN is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Session token not initialized"
        )

    if x_session_token is None:
        log_security_event(
            EventType.AUTH_FAILED,
            EventSeverity.ALERT,
            "Request without session token",
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )

    # Constant-time comparison to prevent timing attacks
    if not secrets.compare_digest(x_session_token, _SESSION_TOKEN):
        log_security_event(
            EventType.AUTH_FAILED,
            EventSeverity.ALERT,
            "Request with invalid session token",
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )

    return x_session_token


async def get_current_owner(
    x_user_id: Optional[str] = Header(None),
    _token: str = Depends(verify_session_token),
) -> str:
    """
    FastAPI dependency resolving the authenticated owner id.

    Identity lives outside this service: the front end that holds the
    session token authenticates the user and forwards the opaque user id
    in X-User-Id.

    Raises:
        HTTPException: 401 if no owner id was forwarded
    """
    owner_id = (x_user_id or "").strip()
    if not owner_id:
        log_security_event(
            EventType.AUTH_FAILED,
            EventSeverity.ALERT,
            "Request without owner id",
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )
    return owner_id
