from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_utc_now() -> str:
    return utc_now().replace(microsecond=0).isoformat().replace("+00:00", "Z")


def to_iso_utc(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    x = dt.astimezone(timezone.utc)
    x = x.replace(microsecond=(x.microsecond // 1000) * 1000)
    return x.isoformat(timespec="milliseconds").replace("+00:00", "Z")
