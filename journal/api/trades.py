"""Trade journal API: CRUD over daily entries plus continuity checks."""

import asyncio
import logging
from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect
from sqlmodel import Session, select

from journal.api.deps import require_unlock
from journal.database import get_session
from journal.models.trade import TradeRecord
from journal.schemas.trade import (
    ContinuityCheckRequest,
    ContinuityRead,
    TradeCreate,
    TradeRead,
    TradeUpdate,
    TradeWriteResult,
)
from journal.services.auth import UnlockSession
from journal.services.change_feed import trade_changes
from journal.services.ledger import check_continuity, compute_profit, suggested_start_amount
from journal.utils.timezone import today_local

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trades", tags=["trades"])


def _all_trades(session: Session) -> list[TradeRecord]:
    return list(session.exec(select(TradeRecord).order_by(TradeRecord.date)).all())


def _get_or_404(session: Session, trade_id: int) -> TradeRecord:
    trade = session.get(TradeRecord, trade_id)
    if not trade:
        raise HTTPException(status_code=404, detail="Trade not found")
    return trade


def _index_of(records: list[TradeRecord], trade_id: int) -> int | None:
    for i, r in enumerate(records):
        if r.id == trade_id:
            return i
    return None


def _apply_amounts(trade: TradeRecord):
    result = compute_profit(trade.start_amount, trade.end_amount)
    trade.profit = result.profit
    trade.profit_rate = result.profit_rate


@router.get("", response_model=list[TradeRead])
def list_trades(
    start: date | None = None,
    end: date | None = None,
    limit: int | None = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
    session: Session = Depends(get_session),
):
    stmt = select(TradeRecord).order_by(TradeRecord.date.desc())
    if start is not None:
        stmt = stmt.where(TradeRecord.date >= start)
    if end is not None:
        stmt = stmt.where(TradeRecord.date <= end)
    stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    return session.exec(stmt).all()


@router.get("/suggested-start")
def suggested_start(
    day: date | None = Query(default=None, alias="date"),
    session: Session = Depends(get_session),
):
    """Prefill for the entry form: the previous recorded day's end amount."""
    day = day or today_local()
    return {"date": day, "start_amount": suggested_start_amount(_all_trades(session), day)}


@router.post("/continuity", response_model=ContinuityRead)
def continuity_check(body: ContinuityCheckRequest, session: Session = Depends(get_session)):
    """Dry-run the continuity check for a candidate entry."""
    records = _all_trades(session)
    index = None
    if body.trade_id is not None:
        index = _index_of(records, body.trade_id)
        if index is None:
            raise HTTPException(status_code=404, detail="Trade not found")
    return check_continuity(
        records, index, body.start_amount, body.end_amount, candidate_date=body.date
    )


async def _wait_for_disconnect(websocket: WebSocket):
    # Clients never send; any frame other than disconnect is ignored
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@router.websocket("/changes")
async def trade_change_stream(websocket: WebSocket):
    """Push a notification for every trade insert, update and delete.

    The subscription is dropped as soon as the client disconnects, not on the
    next failed send.
    """
    queue = trade_changes.subscribe()
    try:
        await websocket.accept()
        disconnect = asyncio.create_task(_wait_for_disconnect(websocket))
        try:
            while True:
                getter = asyncio.create_task(queue.get())
                done, _ = await asyncio.wait(
                    {getter, disconnect}, return_when=asyncio.FIRST_COMPLETED
                )
                if disconnect in done:
                    getter.cancel()
                    break
                await websocket.send_json(getter.result())
        finally:
            disconnect.cancel()
    except WebSocketDisconnect:
        pass
    finally:
        trade_changes.unsubscribe(queue)


@router.get("/{trade_id}", response_model=TradeRead)
def get_trade(trade_id: int, session: Session = Depends(get_session)):
    return _get_or_404(session, trade_id)


@router.post("", response_model=TradeWriteResult, status_code=201)
def create_trade(
    data: TradeCreate,
    session: Session = Depends(get_session),
    unlock_session: UnlockSession = Depends(require_unlock),
):
    # Advisory only: a discontinuous entry is still stored
    continuity = check_continuity(
        _all_trades(session), None, data.start_amount, data.end_amount, candidate_date=data.date
    )
    if not continuity.is_valid:
        logger.info(f"Storing discontinuous trade for {data.date}: {continuity.message}")

    trade = TradeRecord(**data.model_dump(), profit=0.0)
    _apply_amounts(trade)
    session.add(trade)
    session.commit()
    session.refresh(trade)

    trade_changes.publish("insert", trade.id)
    return TradeWriteResult(
        trade=TradeRead.model_validate(trade),
        continuity=ContinuityRead.model_validate(continuity),
    )


@router.put("/{trade_id}", response_model=TradeWriteResult)
def update_trade(
    trade_id: int,
    data: TradeUpdate,
    session: Session = Depends(get_session),
    unlock_session: UnlockSession = Depends(require_unlock),
):
    trade = _get_or_404(session, trade_id)
    update_data = data.model_dump(exclude_unset=True, exclude_none=True)

    records = _all_trades(session)
    continuity = check_continuity(
        records,
        _index_of(records, trade_id),
        update_data.get("start_amount", trade.start_amount),
        update_data.get("end_amount", trade.end_amount),
        candidate_date=update_data.get("date", trade.date),
    )
    if not continuity.is_valid:
        logger.info(f"Storing discontinuous edit of trade {trade_id}: {continuity.message}")

    for key, value in update_data.items():
        setattr(trade, key, value)
    _apply_amounts(trade)
    trade.updated_at = datetime.now(timezone.utc)

    session.add(trade)
    session.commit()
    session.refresh(trade)

    trade_changes.publish("update", trade.id)
    return TradeWriteResult(
        trade=TradeRead.model_validate(trade),
        continuity=ContinuityRead.model_validate(continuity),
    )


@router.delete("/{trade_id}", status_code=204)
def delete_trade(
    trade_id: int,
    session: Session = Depends(get_session),
    unlock_session: UnlockSession = Depends(require_unlock),
):
    trade = _get_or_404(session, trade_id)
    session.delete(trade)
    session.commit()
    trade_changes.publish("delete", trade_id)
