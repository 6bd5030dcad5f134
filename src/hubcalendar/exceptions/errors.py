"""Exception types raised while building calendar feeds."""

from typing import Iterable, Optional


class HubCalendarError(Exception):
    """Base class for all hubcalendar errors."""


class ConfigurationError(HubCalendarError):
    """Raised when required settings (store URL, service key) are missing."""

    def __init__(self, missing: Iterable[str]):
        self.missing = sorted(missing)
        super().__init__(
            f"Missing required configuration: {', '.join(self.missing)}"
        )


class DataStoreError(HubCalendarError):
    """Raised when the data store is unreachable or rejects a query."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class EventDataError(HubCalendarError):
    """Raised when an event row cannot be mapped to a calendar entry."""

    def __init__(self, reason: str, event_id: Optional[str] = None):
        self.event_id = event_id
        self.reason = reason
        label = f"event {event_id}" if event_id else "event"
        super().__init__(f"Invalid {label}: {reason}")
