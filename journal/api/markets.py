"""Markets API: index quotes, live crypto prices and position sizing."""

from fastapi import APIRouter, HTTPException

from journal.services.market_data import fetch_index_quotes, position_sizing
from journal.services.price_stream import price_board

router = APIRouter(prefix="/api/markets", tags=["markets"])


@router.get("/indices")
async def list_indices():
    """Major stock indices with one month of closes and a 7-day SMA."""
    quotes = await fetch_index_quotes()
    if not quotes:
        raise HTTPException(status_code=503, detail="Market data temporarily unavailable")
    return quotes


@router.get("/prices")
def live_prices():
    return price_board.snapshot()


@router.get("/sizing/{symbol}")
def sizing(symbol: str):
    """Position sizing from the latest streamed price; zeros until a tick arrives."""
    tick = price_board.get(symbol.upper())
    price = tick.price if tick else None
    return {"symbol": symbol.upper(), "price": price, **position_sizing(price)}
