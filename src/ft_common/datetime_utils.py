"""UTC datetime utilities."""

from datetime import datetime, timezone

# YYYY-MM with a real month number
MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes coming back from the driver as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
