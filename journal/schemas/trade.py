"""Pydantic schemas for the trades API."""

import math
from datetime import date as date_type, datetime

from pydantic import BaseModel, Field, field_validator


def _finite(value: float) -> float:
    if math.isnan(value) or math.isinf(value):
        raise ValueError("must be a finite number")
    return value


class TradeCreate(BaseModel):
    date: date_type
    start_amount: float = Field(ge=0)
    end_amount: float = Field(ge=0)

    @field_validator("start_amount", "end_amount")
    @classmethod
    def _validate_amount(cls, value: float) -> float:
        return _finite(value)


class TradeUpdate(BaseModel):
    date: date_type | None = None
    start_amount: float | None = Field(default=None, ge=0)
    end_amount: float | None = Field(default=None, ge=0)

    @field_validator("start_amount", "end_amount")
    @classmethod
    def _validate_optional_amount(cls, value: float | None) -> float | None:
        if value is None:
            return None
        return _finite(value)


class TradeRead(BaseModel):
    id: int
    date: date_type
    start_amount: float
    end_amount: float
    profit: float
    profit_rate: float | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ContinuityRead(BaseModel):
    is_valid: bool
    message: str | None = None
    reason: str | None = None

    model_config = {"from_attributes": True}


class TradeWriteResult(BaseModel):
    """A stored trade plus the advisory continuity verdict for the write."""
    trade: TradeRead
    continuity: ContinuityRead


class ContinuityCheckRequest(BaseModel):
    date: date_type
    start_amount: float = Field(ge=0)
    end_amount: float = Field(ge=0)
    trade_id: int | None = None  # set when checking an edit of an existing trade
