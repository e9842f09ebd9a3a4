from datetime import date, datetime, timezone


def today() -> date:
    """Current calendar day in UTC; bookings compare against this."""
    return datetime.now(timezone.utc).date()


def slot_label(hour: int) -> str:
    return f"{hour:02d}:00"


def time_slots(first_hour: int, last_hour: int) -> tuple[str, ...]:
    """All bookable hourly slots, e.g. ('09:00', ..., '22:00')."""
    return tuple(slot_label(h) for h in range(first_hour, last_hour + 1))


def to_utc(dt: datetime) -> datetime:
    """Converts a naive datetime to a timezone-aware UTC datetime."""
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def api_iso_z(dt: datetime) -> str:
    """Formats a datetime into an ISO 8601 string ending in 'Z' for API responses."""
    return to_utc(dt).astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")
