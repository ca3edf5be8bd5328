"""System API: health check and price stream status."""

from fastapi import APIRouter

from journal.services.change_feed import trade_changes
from journal.services.price_stream import get_stream_status

router = APIRouter(prefix="/api/system", tags=["system"])


@router.get("/health")
def health_check():
    return {"status": "ok"}


@router.get("/streams")
def stream_status():
    """Price feed connection state and change feed subscribers."""
    return {
        **get_stream_status(),
        "change_subscribers": trade_changes.subscriber_count,
    }
