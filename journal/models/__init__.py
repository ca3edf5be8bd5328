"""Database models."""

from journal.models.trade import TradeRecord

__all__ = [
    "TradeRecord",
]
