"""Dashboard API: ledger statistics, targets, calendar and projections.

Every endpoint reloads the full ledger and recomputes; nothing is cached.
"""

import calendar
from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session, select

from journal.database import get_session
from journal.models.trade import TradeRecord
from journal.services import ledger
from journal.utils.timezone import today_local

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


def _load_ledger(session: Session) -> list[TradeRecord]:
    return list(session.exec(select(TradeRecord).order_by(TradeRecord.date)).all())


def _resolve_month(year: int | None, month: int | None) -> tuple[int, int]:
    today = today_local()
    return year or today.year, month or today.month


@router.get("/summary")
def dashboard_summary(session: Session = Depends(get_session)):
    """Aggregated stats across the whole ledger."""
    records = _load_ledger(session)
    today = today_local()
    summary = ledger.summarize(records)

    return {
        **asdict(summary),
        "trade_count": len(records),
        "latest_end_amount": ledger.latest_end_amount(records),
        "today_profit": ledger.profit_for_day(records, today),
        "month_profit": ledger.profit_for_month(records, today.year, today.month),
        "average_daily_profit": ledger.average_daily_profit(records),
        "average_daily_profit_rate": ledger.average_daily_profit_rate(records),
    }


@router.get("/projections")
def compound_projections(
    months: int = Query(default=12, ge=1, le=120),
    session: Session = Depends(get_session),
):
    """Forward projection at the historical average daily rate."""
    records = _load_ledger(session)
    return {
        "daily_rate": ledger.average_daily_profit_rate(records),
        "base_amount": ledger.latest_end_amount(records),
        "projections": ledger.monthly_compound_projection(records, months=months),
    }


@router.get("/calendar")
def month_calendar(
    year: int | None = Query(default=None, ge=1970, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
    session: Session = Depends(get_session),
):
    year, month = _resolve_month(year, month)
    records = _load_ledger(session)
    return {
        "year": year,
        "month": month,
        "days_in_month": calendar.monthrange(year, month)[1],
        "daily_target_rate": ledger.daily_target_rate_for(year, month),
        "weeks": ledger.build_calendar(records, year, month),
    }


@router.get("/daily-target")
def daily_target(
    day: date | None = Query(default=None, alias="date"),
    session: Session = Depends(get_session),
):
    """Target comparison for one recorded day."""
    day = day or today_local()
    info = ledger.daily_target_info(ledger.record_for_date(_load_ledger(session), day))
    if info is None:
        raise HTTPException(status_code=404, detail="No trade recorded for this date")
    return info


@router.get("/monthly-progress")
def monthly_progress(
    day: date | None = Query(default=None, alias="date"),
    session: Session = Depends(get_session),
):
    """Progress toward the monthly target and the profit still needed per day."""
    day = day or today_local()
    records = _load_ledger(session)
    return {
        "date": day,
        "month_start_amount": ledger.month_start_amount(records, day),
        "daily_target": ledger.daily_target(records, day),
        **asdict(ledger.required_daily_profit(records, day)),
    }


@router.get("/target-rate")
def target_rate(
    year: int | None = Query(default=None, ge=1970, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
):
    year, month = _resolve_month(year, month)
    days = calendar.monthrange(year, month)[1]
    return {
        "year": year,
        "month": month,
        "days_in_month": days,
        "daily_target_rate": ledger.daily_target_rate_for_month(days),
    }
