"""Time and duration coercion helpers.

Callers may hand the library instants and durations in several shapes; these
helpers normalise them once at the boundary so everything downstream works
with aware UTC ``datetime`` and ``timedelta`` values.

- Strings are ISO-8601 (instants) or ISO-8601 durations (``"PT15M"``)
- Integers/floats given as a duration are milliseconds
- Naive datetimes are assumed to be UTC
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from pydantic import TypeAdapter

DateTimeValue = datetime | str
TimeDuration = timedelta | str | int | float

_datetime_adapter = TypeAdapter(datetime)
_timedelta_adapter = TypeAdapter(timedelta)


def to_utc(value: DateTimeValue) -> datetime:
    """Coerce an instant into an aware UTC datetime."""
    if isinstance(value, str):
        value = _datetime_adapter.validate_python(value)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_timedelta(value: TimeDuration) -> timedelta:
    """Coerce a duration into a timedelta.

    Raises:
        ValueError: If the duration is not positive
    """
    if isinstance(value, timedelta):
        duration = value
    elif isinstance(value, str):
        duration = _timedelta_adapter.validate_python(value)
    else:
        duration = timedelta(milliseconds=value)
    if duration <= timedelta(0):
        raise ValueError(f"Duration must be positive, got {duration}")
    return duration


def format_instant(value: datetime) -> str:
    """Render an instant the way the API expects: UTC, milliseconds, ``Z``."""
    return to_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now() -> datetime:
    return datetime.now(UTC)
