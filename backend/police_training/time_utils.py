from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Optional


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc_naive(dt: datetime) -> datetime:
    """Normalize an aware or naive datetime to UTC-naive."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 datetime string and normalize to UTC-naive datetime.

    - None / "" -> None
    - "YYYY-MM-DDTHH:MM" (naive) is interpreted as UTC
    - "...Z" or "...+/-HH:MM" is converted to UTC and tzinfo is stripped
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None

    # Accept trailing Z
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    return as_utc_naive(datetime.fromisoformat(s))


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    if value is None or not value.strip():
        return None
    return date.fromisoformat(value.strip())


def parse_iso_time(value: Optional[str]) -> Optional[time]:
    if value is None or not value.strip():
        return None
    return time.fromisoformat(value.strip())


def to_utc_z(dt: Optional[datetime], *, precise: bool = False) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.

    precise=True keeps microseconds; concurrency tokens must round-trip exactly.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc)
    if not precise:
        dt_utc = dt_utc.replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")


def to_iso(value: Optional[date | time]) -> Optional[str]:
    return value.isoformat() if value is not None else None
