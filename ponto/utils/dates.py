"""날짜/시간 헬퍼 — 모든 타임스탬프는 UTC로 정규화.

Date/time helpers. Every timestamp handled by the API is normalized to UTC;
naive values (as read back from SQLite) are treated as UTC.
"""

from datetime import date, datetime, time, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """naive → UTC 간주, aware → UTC 변환 (Normalize a datetime to aware UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_day(value: datetime | None = None) -> datetime:
    value = ensure_utc(value or utc_now())
    return datetime.combine(value.date(), time.min, tzinfo=timezone.utc)


def start_of_month(value: datetime | None = None) -> datetime:
    value = ensure_utc(value or utc_now())
    return datetime(value.year, value.month, 1, tzinfo=timezone.utc)


def format_br_date(value: date | datetime) -> str:
    """pt-BR 날짜 포맷 (dd/mm/yyyy)."""
    return value.strftime("%d/%m/%Y")
