"""Timezone resolution and date math for feed entries."""

import logging
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple, Union

import pytz

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=pytz.utc)

SpanValue = Union[date, datetime]


def resolve_timezone(tz_name: str):
    """Resolve an IANA zone name to a pytz timezone.

    Args:
        tz_name: The timezone name (e.g., "America/Mexico_City").

    Returns:
        The pytz timezone object.

    Raises:
        pytz.UnknownTimeZoneError: If the zone is not known.
    """
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        logger.error("Unknown reference timezone: %s", tz_name)
        raise


def today_in_timezone(tz_name: str, now: Optional[datetime] = None) -> date:
    """Return the current calendar day in the given zone, not the host's.

    Args:
        tz_name: Reference timezone name.
        now: Optional aware instant to evaluate instead of the current time.

    Returns:
        The local date in the reference zone.
    """
    tzobj = resolve_timezone(tz_name)
    instant = now if now is not None else datetime.now(pytz.utc)
    if instant.tzinfo is None:
        instant = pytz.utc.localize(instant)
    return instant.astimezone(tzobj).date()


def timed_span(event_date: date, event_time: time, duration: timedelta) -> Tuple[datetime, datetime]:
    """Local wall-clock start and end of a timed event.

    The values stay naive; they are tagged with the zone id on output.
    Adding the duration to a full datetime rolls over midnight correctly.
    """
    start = datetime.combine(event_date, event_time.replace(microsecond=0))
    return start, start + duration


def all_day_span(event_date: date) -> Tuple[date, date]:
    """Start and exclusive end date of a one-day event."""
    return event_date, event_date + timedelta(days=1)


def event_span(
    event_date: date,
    event_time: Optional[time],
    duration: timedelta,
) -> Tuple[SpanValue, SpanValue]:
    """Return (start, end) for an event, date-only when it has no time."""
    if event_time is None:
        return all_day_span(event_date)
    return timed_span(event_date, event_time, duration)


def utc_stamp(value: Optional[datetime], with_suffix: bool = False) -> datetime:
    """Convert a timestamp to UTC with seconds precision.

    Naive input is taken to be UTC already. Missing input maps to the Unix
    epoch so repeated renders stay identical.

    Args:
        value: The timestamp to convert.
        with_suffix: Keep the result timezone-aware so it serializes with
            a trailing ``Z``; otherwise return a naive UTC datetime.

    Returns:
        The converted datetime.
    """
    if value is None:
        value = EPOCH
    elif value.tzinfo is None:
        value = pytz.utc.localize(value)

    stamp = value.astimezone(pytz.utc).replace(microsecond=0)
    if with_suffix:
        return stamp
    return stamp.replace(tzinfo=None)
