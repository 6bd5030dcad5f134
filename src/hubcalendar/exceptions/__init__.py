"""Custom exceptions for hubcalendar."""

from hubcalendar.exceptions.errors import (
    HubCalendarError,
    ConfigurationError,
    DataStoreError,
    EventDataError,
)

__all__ = [
    "HubCalendarError",
    "ConfigurationError",
    "DataStoreError",
    "EventDataError",
]
