"""TradeRecord model: one journal entry per trading day."""

from datetime import date as date_type, datetime, timezone
from sqlmodel import SQLModel, Field


class TradeRecord(SQLModel, table=True):
    __tablename__ = "trades"

    id: int | None = Field(default=None, primary_key=True)
    date: date_type = Field(index=True)
    start_amount: float
    end_amount: float
    profit: float  # end_amount - start_amount
    profit_rate: float | None = None  # percent; NULL when start_amount == 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
