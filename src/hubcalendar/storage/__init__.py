"""Data store access and credential lookup for hubcalendar."""

from hubcalendar.storage.event_store import EventStore
from hubcalendar.storage.credentials import (
    load_service_key,
    get_service_key_source,
    get_user_config_dir,
    get_env_file_path,
)

__all__ = [
    "EventStore",
    "load_service_key",
    "get_service_key_source",
    "get_user_config_dir",
    "get_env_file_path",
]
