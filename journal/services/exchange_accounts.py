"""Read-only exchange account lookups (MEXC futures assets, Binance testnet balance).

Both exchanges sign the query string with HMAC-SHA256 of the API secret.
"""

import hashlib
import hmac
import logging
import time
from urllib.parse import urlencode

import httpx

from journal.config import settings

logger = logging.getLogger(__name__)

RECV_WINDOW_MS = 5000


class ExchangeAccountError(RuntimeError):
    """Raised when an account lookup cannot produce a result."""


def sign_query(query: str, secret: str) -> str:
    return hmac.new(secret.encode(), query.encode(), hashlib.sha256).hexdigest()


def _signed_params(params: dict, secret: str) -> str:
    query = urlencode(params)
    return f"{query}&signature={sign_query(query, secret)}"


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


async def _get_json(
    base_url: str,
    path: str,
    query: str,
    headers: dict,
    exchange: str,
    transport: httpx.AsyncBaseTransport | None = None,
):
    try:
        async with httpx.AsyncClient(
            base_url=base_url, timeout=settings.market_timeout_seconds, transport=transport
        ) as client:
            response = await client.get(f"{path}?{query}", headers=headers)
    except httpx.HTTPError as e:
        logger.error(f"{exchange} request failed: {e}")
        raise ExchangeAccountError(f"{exchange} request failed: {e}") from e

    try:
        data = response.json()
    except ValueError as e:
        raise ExchangeAccountError(
            f"{exchange} returned non-JSON response (HTTP {response.status_code})"
        ) from e

    if response.is_error:
        logger.error(f"{exchange} API error {response.status_code}: {data}")
        raise ExchangeAccountError(f"{exchange} API error {response.status_code}: {data}")
    return data


async def fetch_mexc_assets(
    api_key: str | None = None,
    api_secret: str | None = None,
    base_url: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict:
    """Futures account assets, returned as MEXC sends them."""
    api_key = api_key or settings.mexc_api_key
    api_secret = api_secret or settings.mexc_api_secret
    if not api_key or not api_secret:
        raise ExchangeAccountError("MEXC API credentials are not configured")

    query = _signed_params(
        {"timestamp": _timestamp_ms(), "recvWindow": RECV_WINDOW_MS}, api_secret
    )
    data = await _get_json(
        base_url or settings.mexc_api_base,
        "/api/v1/private/account/assets",
        query,
        {"X-MEXC-APIKEY": api_key, "Content-Type": "application/json"},
        "MEXC",
        transport,
    )
    if isinstance(data, dict) and data.get("success") is False:
        logger.error(f"MEXC rejected account request: {data}")
        raise ExchangeAccountError(f"MEXC error {data.get('code')}: {data.get('message')}")
    return data


async def fetch_binance_usdt_balance(
    api_key: str | None = None,
    api_secret: str | None = None,
    base_url: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> float:
    """USDT wallet balance on the Binance futures testnet; 0 if no USDT asset."""
    api_key = api_key or settings.binance_api_key
    api_secret = api_secret or settings.binance_api_secret
    if not api_key or not api_secret:
        raise ExchangeAccountError("Binance API credentials are not configured")

    query = _signed_params({"timestamp": _timestamp_ms()}, api_secret)
    data = await _get_json(
        base_url or settings.binance_api_base,
        "/fapi/v2/balance",
        query,
        {"X-MBX-APIKEY": api_key},
        "Binance",
        transport,
    )
    if not isinstance(data, list):
        logger.error(f"Unexpected Binance balance response: {data}")
        raise ExchangeAccountError(f"Unexpected Binance balance response: {data}")

    usdt = next((item for item in data if item.get("asset") == "USDT"), None)
    return float(usdt["balance"]) if usdt else 0.0
