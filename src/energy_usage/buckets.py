"""Half-hour bucket alignment and day partitioning."""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from .exceptions import MalformedRequestError
from .models import BUCKET_LENGTH

DEFAULT_TIMEZONE = "Europe/London"


def to_instant(value) -> datetime:
    """Resolve epoch seconds, an ISO string or a datetime to a UTC instant.

    Naive datetimes and ISO strings without an offset are taken as UTC.
    """
    if isinstance(value, bool):
        raise MalformedRequestError(f"Not a valid instant: {value!r}")

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise MalformedRequestError(f"Not a valid instant: {value!r}") from e
    elif isinstance(value, str):
        text = value.strip()
        try:
            seconds = float(text)
        except ValueError:
            seconds = None
        if seconds is not None:
            return to_instant(seconds)
        try:
            dt = datetime.fromisoformat(text)
        except ValueError as e:
            raise MalformedRequestError(f"Not a valid instant: {value!r}") from e
    else:
        raise MalformedRequestError(f"Not a valid instant: {value!r}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def day_start(instant: datetime, tz: str = DEFAULT_TIMEZONE) -> datetime:
    """Return local midnight of the instant's calendar day, as a UTC instant."""
    zone = ZoneInfo(tz)
    local_day = instant.astimezone(zone).date()
    return datetime.combine(local_day, time.min, tzinfo=zone).astimezone(timezone.utc)


def buckets_for(start: datetime, end: datetime, tz: str = DEFAULT_TIMEZONE) -> list[datetime]:
    """List every half-hour bucket start from the start's day start up to end.

    The stride is absolute (UTC), so DST transitions yield 46 or 50 buckets
    for the affected local day.
    """
    if end <= start:
        raise MalformedRequestError(
            f"End {end.isoformat()} is not after start {start.isoformat()}"
        )

    buckets = []
    bucket = day_start(start, tz)
    end = end.astimezone(timezone.utc)
    while bucket < end:
        buckets.append(bucket)
        bucket += BUCKET_LENGTH
    return buckets


def partitions_for(start: datetime, end: datetime, tz: str = DEFAULT_TIMEZONE) -> list[date]:
    """List the calendar days (in tz) touched by [day_start(start), end)."""
    if end <= start:
        raise MalformedRequestError(
            f"End {end.isoformat()} is not after start {start.isoformat()}"
        )

    zone = ZoneInfo(tz)
    day = start.astimezone(zone).date()
    days = []
    while datetime.combine(day, time.min, tzinfo=zone) < end:
        days.append(day)
        day += timedelta(days=1)
    return days
