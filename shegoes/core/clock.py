"""Day-boundary helpers. Callers pass the results into the engine explicitly."""

from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from shegoes.core.config import settings


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_now(now: Optional[datetime]) -> datetime:
    if now is None:
        return utc_now()
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def local_today(tz_name: Optional[str] = None, now: Optional[datetime] = None) -> date:
    """Calendar date as observed in ``tz_name`` (defaults to settings.TIMEZONE)."""
    moment = normalize_now(now)
    return moment.astimezone(ZoneInfo(tz_name or settings.TIMEZONE)).date()
