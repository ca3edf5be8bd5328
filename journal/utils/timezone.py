from datetime import date, datetime
from zoneinfo import ZoneInfo

from journal.config import settings


def now_local() -> datetime:
    return datetime.now(tz=ZoneInfo(settings.timezone))


def today_local() -> date:
    return now_local().date()
