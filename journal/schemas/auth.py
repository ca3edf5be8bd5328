"""Pydantic schemas for the passphrase gate."""

from datetime import datetime

from pydantic import BaseModel, Field


class UnlockRequest(BaseModel):
    passphrase: str = Field(min_length=1)


class UnlockResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
