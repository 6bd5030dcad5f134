"""
hubcalendar - Calendar feed for Hub de Comunidades

Serves approved upcoming community events as an iCalendar (.ics) feed,
filtered by community, category and event source.
"""

__version__ = "1.0.0"

# Public API - import commonly used components
from hubcalendar.config.settings import FeedSettings, load_settings
from hubcalendar.exceptions.errors import (
    HubCalendarError,
    ConfigurationError,
    DataStoreError,
    EventDataError,
)
from hubcalendar.core.event_model import CalendarPreference, FeedEvent, FeedRequest
from hubcalendar.core.ics_builder import FeedResult, build_feed, render_calendar

__all__ = [
    # Version
    "__version__",
    # Config
    "FeedSettings",
    "load_settings",
    # Exceptions
    "HubCalendarError",
    "ConfigurationError",
    "DataStoreError",
    "EventDataError",
    # Core
    "CalendarPreference",
    "FeedEvent",
    "FeedRequest",
    "FeedResult",
    "build_feed",
    "render_calendar",
]
