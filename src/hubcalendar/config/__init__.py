"""Configuration module for hubcalendar."""

from hubcalendar.config.settings import FeedSettings, load_settings
from hubcalendar.config.constants import (
    DEFAULT_CALENDAR_NAME,
    DEFAULT_DURATION_MINUTES,
    ICS_PRODID,
    REFERENCE_TIMEZONE,
    UID_DOMAIN,
)

__all__ = [
    "FeedSettings",
    "load_settings",
    "DEFAULT_CALENDAR_NAME",
    "DEFAULT_DURATION_MINUTES",
    "ICS_PRODID",
    "REFERENCE_TIMEZONE",
    "UID_DOMAIN",
]
