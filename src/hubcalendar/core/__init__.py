"""Core feed logic for hubcalendar."""

from hubcalendar.core.event_model import CalendarPreference, FeedEvent, FeedRequest
from hubcalendar.core.ics_builder import (
    FeedResult,
    build_feed,
    build_vevent,
    derive_calendar_name,
    render_calendar,
    resolve_source_ids,
)

__all__ = [
    "CalendarPreference",
    "FeedEvent",
    "FeedRequest",
    "FeedResult",
    "build_feed",
    "build_vevent",
    "derive_calendar_name",
    "render_calendar",
    "resolve_source_ids",
]
