"""Date parsing helpers for backend rows."""

from datetime import date, datetime, timezone


def parse_date(value: str | date | None) -> date | None:
    """Parse a YYYY-MM-DD (or full ISO timestamp) string into a date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.split("T")[0])


def parse_datetime(value: str | datetime | None) -> datetime | None:
    """Parse an ISO timestamp. Naive values are taken to be UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
