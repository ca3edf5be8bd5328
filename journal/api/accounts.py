"""Exchange accounts API: read-only balances, behind the passphrase gate."""

from fastapi import APIRouter, Depends, HTTPException

from journal.api.deps import require_unlock
from journal.services.exchange_accounts import (
    ExchangeAccountError,
    fetch_binance_usdt_balance,
    fetch_mexc_assets,
)

router = APIRouter(prefix="/api/accounts", tags=["accounts"], dependencies=[Depends(require_unlock)])


@router.get("/mexc")
async def mexc_assets():
    try:
        return await fetch_mexc_assets()
    except ExchangeAccountError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/binance-balance")
async def binance_balance():
    try:
        balance = await fetch_binance_usdt_balance()
    except ExchangeAccountError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"asset": "USDT", "balance": balance}
