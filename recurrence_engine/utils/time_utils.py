"""Timestamp parsing and time zone helpers.

All instants handled by the engine are aware datetimes in the engine time
zone. Naive values are read as wall-clock time in that zone.
"""
from datetime import date, datetime, time
from typing import Optional, Union

from recurrence_engine.errors import InvalidTimestampError

TimestampInput = Union[str, date, datetime]


def to_engine_time(value: datetime, tz) -> datetime:
    """Return ``value`` as an aware datetime in ``tz``."""
    if value.tzinfo is None:
        return localize_wall_clock(value, tz)
    return value.astimezone(tz)


def localize_wall_clock(naive: datetime, tz) -> datetime:
    """Attach ``tz`` to a wall-clock datetime, resolving DST gaps forward."""
    return tz.normalize(tz.localize(naive, is_dst=False))


def to_storage(value: Optional[datetime], tz) -> Optional[datetime]:
    """Naive wall-clock form used for DateTime columns."""
    if value is None:
        return None
    return to_engine_time(value, tz).replace(tzinfo=None)


def day_bounds(day: date, tz, end_of_day: bool = False) -> datetime:
    """First (or last) instant of ``day`` in ``tz``."""
    return localize_wall_clock(datetime.combine(day, time.max if end_of_day else time.min), tz)


def parse_timestamp(value: TimestampInput, tz, end_of_day: bool = False) -> datetime:
    """
    Parse a query bound into an aware datetime.

    Args:
        value: ISO-8601 string (``Z`` suffix allowed), date or datetime
        tz: Engine time zone
        end_of_day: Expand date-only values to the last instant of the day

    Returns:
        Aware datetime in ``tz``

    Raises:
        InvalidTimestampError: If the value cannot be parsed or falls outside
            the representable range in ``tz``
    """
    if not isinstance(value, (str, date)) or (isinstance(value, str) and not value.strip()):
        raise InvalidTimestampError(
            f"Invalid timestamp: {value!r}",
            details={"value": repr(value)},
        )

    try:
        if isinstance(value, datetime):
            return to_engine_time(value, tz)
        if isinstance(value, date):
            return day_bounds(value, tz, end_of_day)

        text = value.strip()
        if len(text) == 10:
            return day_bounds(date.fromisoformat(text), tz, end_of_day)
        return to_engine_time(datetime.fromisoformat(text.replace("Z", "+00:00")), tz)
    except (ValueError, OverflowError):
        # Unparseable, or outside the representable range once shifted into tz
        raise InvalidTimestampError(
            f"Invalid timestamp: {value}",
            details={"value": str(value)},
        )


def parse_optional_timestamp(value: Optional[TimestampInput], tz) -> Optional[datetime]:
    """Like parse_timestamp, but passes ``None`` and empty strings through."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_timestamp(value, tz)


def parse_date_key(value: Union[str, date]) -> date:
    """Parse an override's original date (``YYYY-MM-DD`` or a date-time)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidTimestampError(f"Invalid date key: {value!r}", details={"value": repr(value)})

    text = value.strip()
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        raise InvalidTimestampError(f"Invalid date key: {value}", details={"value": value})
