"""Market overview data.

Index quotes come from the Yahoo Finance chart API (one month of daily
closes per symbol). Everything here is display-only and never feeds ledger
computation.
"""

import asyncio
import logging
import math

import httpx
import pandas as pd

from journal.config import settings
from journal.utils.constants import INDEX_NAMES, SMA_PERIOD

logger = logging.getLogger(__name__)

_HEADERS = {"User-Agent": "Mozilla/5.0 (trade-journal)"}


def simple_moving_average(prices: list[float | None], period: int = SMA_PERIOD) -> list[float | None]:
    """Trailing SMA aligned with ``prices``; None until a full window exists."""
    if not prices:
        return []
    series = pd.Series(pd.to_numeric(prices, errors="coerce"), dtype=float)
    return _to_optional_floats(series.rolling(window=period).mean())


def _to_optional_floats(series: pd.Series) -> list[float | None]:
    return [None if pd.isna(v) else float(v) for v in series]


def _parse_chart(symbol: str, payload: dict, period: int = SMA_PERIOD) -> dict | None:
    """Parse a chart response into an index quote.

    Payload shape: {"chart": {"result": [{"timestamp": [...],
    "indicators": {"quote": [{"close": [...]}]}}], "error": null}}
    """
    results = (payload.get("chart") or {}).get("result") or []
    if not results:
        logger.warning(f"No chart result for {symbol}")
        return None

    result = results[0]
    timestamps = result.get("timestamp") or []
    closes = ((result.get("indicators") or {}).get("quote") or [{}])[0].get("close") or []
    if not timestamps or len(timestamps) != len(closes):
        logger.warning(f"Malformed chart data for {symbol}")
        return None

    prices = pd.Series(pd.to_numeric(closes, errors="coerce"), dtype=float)
    valid = prices.dropna()
    if valid.empty:
        return None

    last_close = float(valid.iloc[-1])
    prev_close = float(valid.iloc[-2]) if len(valid) > 1 else last_close
    change_amount = last_close - prev_close
    change = change_amount / prev_close * 100 if prev_close else 0.0

    dates = pd.to_datetime(timestamps, unit="s", utc=True).strftime("%Y-%m-%d").tolist()

    return {
        "symbol": symbol,
        "name": INDEX_NAMES.get(symbol, symbol),
        "price": last_close,
        "change": change,
        "change_amount": change_amount,
        "historical": {
            "dates": dates,
            "prices": _to_optional_floats(prices),
            "sma": _to_optional_floats(prices.rolling(window=period).mean()),
        },
    }


async def fetch_index_quote(client: httpx.AsyncClient, symbol: str) -> dict | None:
    """Fetch and parse one symbol. Returns None on any failure."""
    try:
        response = await client.get(
            f"/v8/finance/chart/{symbol}",
            params={"range": "1mo", "interval": "1d"},
        )
        response.raise_for_status()
        return _parse_chart(symbol, response.json())
    except Exception as e:
        logger.error(f"Error fetching index quote for {symbol}: {e}")
        return None


async def fetch_index_quotes(
    symbols: list[str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[dict]:
    """Fetch all index quotes concurrently, skipping symbols that fail."""
    symbols = symbols or list(INDEX_NAMES)
    async with httpx.AsyncClient(
        base_url=settings.yahoo_base_url,
        timeout=settings.market_timeout_seconds,
        headers=_HEADERS,
        transport=transport,
    ) as client:
        results = await asyncio.gather(*(fetch_index_quote(client, s) for s in symbols))

    quotes = [q for q in results if q is not None]
    if len(quotes) < len(symbols):
        logger.warning(f"Fetched {len(quotes)}/{len(symbols)} index quotes")
    return quotes


def position_sizing(price: float | None, divisions: int = 40, leverage: int = 15) -> dict:
    """Split a price into ``divisions`` slices and scale one slice by leverage."""
    if not price:
        return {"division": 0, "leverage": 0}
    division = math.floor(price / divisions)
    return {"division": division, "leverage": math.floor(division * leverage)}
