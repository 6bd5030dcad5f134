"""HTTP interface for hubcalendar."""

from hubcalendar.web.app import create_app

__all__ = ["create_app"]
