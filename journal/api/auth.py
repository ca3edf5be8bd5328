"""Passphrase gate API: exchange the shared passphrase for an unlock token."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from journal.api.deps import require_unlock
from journal.schemas.auth import UnlockRequest, UnlockResponse
from journal.services.auth import UnlockSession, create_unlock_token, verify_passphrase

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/unlock", response_model=UnlockResponse)
def unlock(body: UnlockRequest):
    if not verify_passphrase(body.passphrase):
        logger.warning("Rejected unlock attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid passphrase",
        )

    token, expires_at = create_unlock_token()
    return UnlockResponse(access_token=token, expires_at=expires_at)


@router.get("/session")
def session_status(unlock_session: UnlockSession = Depends(require_unlock)):
    """Report when the current unlock expires."""
    return {"unlocked": True, "expires_at": unlock_session.expires_at.isoformat()}
