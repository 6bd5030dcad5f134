"""Utility functions for hubcalendar."""

from hubcalendar.utils.masking import mask_key
from hubcalendar.utils.feed_url import build_feed_url

__all__ = [
    "mask_key",
    "build_feed_url",
]
