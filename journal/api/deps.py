"""Shared API dependencies."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from journal.services.auth import UnlockSession, decode_unlock_token

bearer_scheme = HTTPBearer(auto_error=False)


def require_unlock(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> UnlockSession:
    """Validate the unlock token and return the session it represents."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Passphrase required",
        )
    session = decode_unlock_token(credentials.credentials)
    if session is None or not session.is_active():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
    return session
