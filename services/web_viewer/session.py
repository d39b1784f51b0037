"""
Session resolution for the web viewer.

Authentication happens upstream; the auth proxy forwards the signed-in
user's email in a request header.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, Request, status

from shared.configs.config import get_settings
from shared.utilities.validators import validate_email


@dataclass(frozen=True)
class SessionUser:
    email: str


@dataclass(frozen=True)
class SessionInfo:
    user: SessionUser


def get_session(request: Request) -> Optional[SessionInfo]:
    """
    Resolve the current session.

    Returns:
        SessionInfo, or None when the request is unauthenticated
    """
    email = request.headers.get(get_settings().session_header, "").strip()
    if not validate_email(email):
        return None
    return SessionInfo(user=SessionUser(email=email))


def require_session(request: Request) -> SessionInfo:
    """Dependency for API routes: 401 without a session."""
    session = get_session(request)
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return session
