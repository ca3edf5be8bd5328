"""Ledger arithmetic for the trade journal.

All functions are pure computation over a collection of trade records: no I/O,
no database access. A record is anything exposing ``date``, ``start_amount``,
``end_amount`` and ``profit`` (the ``TradeRecord`` model, or a plain namespace
in tests). Input order does not matter; every function sorts what it needs.

Zero start amounts never raise. Rates degrade to ``None`` (``compute_profit``)
or ``0.0`` (aggregates) so callers can render a placeholder.
"""

import calendar
import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Sequence

from journal.utils.constants import (
    CONTINUITY_TOLERANCE,
    DAILY_TARGET_RATE,
    DAYS_PER_PROJECTION_MONTH,
    MONTHLY_TARGET_RATIO,
    PROJECTION_MONTHS,
)

DIVISION_BY_ZERO = "division_by_zero"
CONTINUITY_VIOLATION = "continuity_violation"


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class ProfitResult:
    profit: float
    profit_rate: float | None  # None when start is 0
    issue: str | None = None  # "division_by_zero"


@dataclass
class ContinuityResult:
    """Advisory continuity check; callers may persist regardless."""
    is_valid: bool
    message: str | None = None
    reason: str | None = None  # "continuity_violation"


@dataclass
class LedgerSummary:
    total_start_amount: float = 0.0
    total_end_amount: float = 0.0
    total_profit: float = 0.0
    total_profit_rate: float = 0.0


@dataclass
class CompoundProjection:
    month: int
    amount: float | None  # None when growth exceeds float range
    profit: float | None
    profit_rate: float | None
    overflow: bool = False


@dataclass
class MonthlyProgress:
    required_daily: float
    progress: float
    target: float
    remaining: float
    progress_rate: float


@dataclass
class DailyTargetInfo:
    start_amount: float
    end_amount: float
    target_profit: float
    actual_profit: float
    profit_diff: float
    profit_rate: float
    remaining_target: float
    is_above_target: bool


@dataclass
class CalendarDay:
    date: date
    profit: float | None
    daily_target: float
    target_info: DailyTargetInfo | None = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _sorted(records: Sequence[Any]) -> list[Any]:
    return sorted(records, key=lambda r: r.date)


def _rate(numerator: float, base: float) -> float | None:
    if base == 0:
        return None
    return numerator * 100 / base


def _month_end(day: date) -> date:
    return date(day.year, day.month, calendar.monthrange(day.year, day.month)[1])


def _format_amount(value: float) -> str:
    text = f"{value:,.4f}".rstrip("0").rstrip(".")
    return f"{text} USDT"


# ---------------------------------------------------------------------------
# Per-record figures
# ---------------------------------------------------------------------------

def compute_profit(start: float, end: float) -> ProfitResult:
    """Profit and profit rate (percent) for one day."""
    profit = end - start
    rate = _rate(profit, start)
    if rate is None:
        return ProfitResult(profit=profit, profit_rate=None, issue=DIVISION_BY_ZERO)
    return ProfitResult(profit=profit, profit_rate=rate)


def check_continuity(
    records: Sequence[Any],
    index: int | None,
    candidate_start: float,
    candidate_end: float,
    candidate_date: date | None = None,
) -> ContinuityResult:
    """Compare a candidate entry against its date-order neighbours.

    ``index`` points at the record being edited in ``records``; pass None for a
    new entry, in which case ``candidate_date`` positions it. When editing,
    ``candidate_date`` (if given) overrides the stored date.
    """
    current = records[index] if index is not None else None
    if candidate_date is None:
        if current is None:
            raise ValueError("candidate_date is required for a new record")
        candidate_date = current.date

    others = [r for r in _sorted(records) if r is not current]
    earlier = [r for r in others if r.date < candidate_date]
    later = [r for r in others if r.date > candidate_date]

    if earlier:
        prev = earlier[-1]
        if abs(candidate_start - prev.end_amount) > CONTINUITY_TOLERANCE:
            return ContinuityResult(
                is_valid=False,
                message=(
                    f"Previous trade end amount ({_format_amount(prev.end_amount)}) "
                    f"differs from this start amount ({_format_amount(candidate_start)})."
                ),
                reason=CONTINUITY_VIOLATION,
            )

    if later:
        nxt = later[0]
        if abs(candidate_end - nxt.start_amount) > CONTINUITY_TOLERANCE:
            return ContinuityResult(
                is_valid=False,
                message=(
                    f"This end amount ({_format_amount(candidate_end)}) differs from "
                    f"the next trade start amount ({_format_amount(nxt.start_amount)})."
                ),
                reason=CONTINUITY_VIOLATION,
            )

    return ContinuityResult(is_valid=True)


def record_for_date(records: Sequence[Any], day: date) -> Any | None:
    """The record dated ``day``.

    Dates are not unique; when several records share a day the most recently
    created one (highest ``id``) wins, whatever the input order.
    """
    matches = [r for r in records if r.date == day]
    if not matches:
        return None
    return max(matches, key=lambda r: getattr(r, "id", None) or 0)


def suggested_start_amount(records: Sequence[Any], day: date) -> float | None:
    """End amount of the latest record dated strictly before ``day``."""
    earlier = [r for r in _sorted(records) if r.date < day]
    if not earlier:
        return None
    return earlier[-1].end_amount


def latest_end_amount(records: Sequence[Any]) -> float:
    if not records:
        return 0.0
    return _sorted(records)[-1].end_amount


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

def summarize(records: Sequence[Any]) -> LedgerSummary:
    """Ledger-wide start, end, profit and return.

    ``total_profit`` sums the stored ``profit`` fields rather than recomputing
    them from amounts.
    """
    if not records:
        return LedgerSummary()

    ordered = _sorted(records)
    start = ordered[0].start_amount
    end = ordered[-1].end_amount
    total_profit = sum(float(r.profit) for r in ordered)
    rate = _rate(end - start, start)

    return LedgerSummary(
        total_start_amount=start,
        total_end_amount=end,
        total_profit=total_profit,
        total_profit_rate=rate if rate is not None else 0.0,
    )


def _span_days(ordered: list[Any]) -> int:
    return max(1, (ordered[-1].date - ordered[0].date).days + 1)


def average_daily_profit_rate(records: Sequence[Any]) -> float:
    """Total return divided by the number of calendar days covered.

    This is an arithmetic approximation, not a compounded (geometric) rate.
    """
    if not records:
        return 0.0
    ordered = _sorted(records)
    total_rate = _rate(ordered[-1].end_amount - ordered[0].start_amount, ordered[0].start_amount)
    if total_rate is None:
        return 0.0
    return total_rate / _span_days(ordered)


def average_daily_profit(records: Sequence[Any]) -> float:
    if not records:
        return 0.0
    ordered = _sorted(records)
    return sum(float(r.profit) for r in ordered) / _span_days(ordered)


def profit_for_day(records: Sequence[Any], day: date) -> float:
    record = record_for_date(records, day)
    return float(record.profit) if record is not None else 0.0


def profit_for_month(records: Sequence[Any], year: int, month: int) -> float:
    return sum(
        float(r.profit) for r in records if r.date.year == year and r.date.month == month
    )


def monthly_compound_projection(
    records: Sequence[Any],
    months: int = PROJECTION_MONTHS,
) -> list[CompoundProjection]:
    """Project the latest capital forward at the average daily rate.

    Each month counts as exactly 30 days. A month whose growth leaves float
    range is reported with ``overflow=True`` and None amounts.
    """
    if not records:
        return []

    daily_rate = average_daily_profit_rate(records) / 100
    last_amount = latest_end_amount(records)

    result = []
    for month in range(1, months + 1):
        days = month * DAYS_PER_PROJECTION_MONTH
        try:
            growth = (1 + daily_rate) ** days
        except OverflowError:
            growth = math.inf
        future = last_amount * growth if last_amount else 0.0
        profit = future - last_amount
        rate = _rate(profit, last_amount)
        rate = rate if rate is not None else 0.0

        if not all(math.isfinite(v) for v in (future, profit, rate)):
            result.append(CompoundProjection(
                month=month, amount=None, profit=None, profit_rate=None, overflow=True,
            ))
            continue

        result.append(CompoundProjection(
            month=month,
            amount=future,
            profit=profit,
            profit_rate=rate,
        ))
    return result


# ---------------------------------------------------------------------------
# Targets
# ---------------------------------------------------------------------------

def daily_target_rate_for_month(days_in_month: int) -> float:
    """Daily rate (percent) that compounds to the monthly target.

    Solves (1 + x) ** days_in_month == 1 + MONTHLY_TARGET_RATIO for x.
    """
    return ((1 + MONTHLY_TARGET_RATIO) ** (1 / days_in_month) - 1) * 100


def daily_target_rate_for(year: int, month: int) -> float:
    return daily_target_rate_for_month(calendar.monthrange(year, month)[1])


def month_start_amount(records: Sequence[Any], day: date) -> float:
    """Start amount of the month's first record, else the latest end amount."""
    in_month = [
        r for r in _sorted(records) if r.date.year == day.year and r.date.month == day.month
    ]
    if in_month:
        return in_month[0].start_amount
    return latest_end_amount(records)


def required_daily_profit(records: Sequence[Any], day: date) -> MonthlyProgress:
    """Progress toward the monthly target as of ``day`` (inclusive)."""
    target = month_start_amount(records, day) * MONTHLY_TARGET_RATIO
    first_of_month = day.replace(day=1)
    progress = sum(
        float(r.profit) for r in records if first_of_month <= r.date <= day
    )

    remaining = max(0.0, target - progress)
    remaining_days = (_month_end(day) - day).days + 1
    required = remaining / remaining_days if remaining > 0 else 0.0
    progress_rate = _rate(progress, target)

    return MonthlyProgress(
        required_daily=required,
        progress=progress,
        target=target,
        remaining=remaining,
        progress_rate=progress_rate if progress_rate is not None else 0.0,
    )


def daily_target(records: Sequence[Any], day: date) -> float:
    """Target profit amount for ``day`` from month-start capital."""
    rate = daily_target_rate_for(day.year, day.month)
    return month_start_amount(records, day) * rate / 100


def daily_target_info(record: Any | None) -> DailyTargetInfo | None:
    """Compare one day's profit against the fixed daily target rate."""
    if record is None:
        return None

    start = record.start_amount
    profit = float(record.profit)
    target_profit = start * DAILY_TARGET_RATE / 100
    profit_diff = profit - target_profit
    rate = _rate(profit, start)
    profit_rate = rate if rate is not None else 0.0

    return DailyTargetInfo(
        start_amount=start,
        end_amount=record.end_amount,
        target_profit=target_profit,
        actual_profit=profit,
        profit_diff=profit_diff,
        profit_rate=profit_rate,
        remaining_target=abs(profit_diff) if profit_diff < 0 else 0.0,
        is_above_target=profit_rate >= DAILY_TARGET_RATE,
    )


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------

def month_calendar(year: int, month: int) -> list[list[date | None]]:
    """Sunday-first weeks for a month; None pads days outside it."""
    cal = calendar.Calendar(firstweekday=calendar.SUNDAY)
    return [
        [date(year, month, d) if d else None for d in week]
        for week in cal.monthdayscalendar(year, month)
    ]


def build_calendar(records: Sequence[Any], year: int, month: int) -> list[list[CalendarDay | None]]:
    weeks = []
    for week in month_calendar(year, month):
        row = []
        for day in week:
            if day is None:
                row.append(None)
                continue
            record = record_for_date(records, day)
            row.append(CalendarDay(
                date=day,
                profit=float(record.profit) if record is not None else None,
                daily_target=daily_target(records, day),
                target_info=daily_target_info(record),
            ))
        weeks.append(row)
    return weeks
