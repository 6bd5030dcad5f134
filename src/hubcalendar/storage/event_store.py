"""Read-only PostgREST client for the events database."""

import logging
from datetime import date
from typing import Dict, List, Optional, Sequence

import httpx

from hubcalendar.config.constants import (
    APPROVED_STATUS,
    EVENTS_SELECT,
    EVENTS_TABLE,
    PREFERENCES_TABLE,
    SOURCES_TABLE,
)
from hubcalendar.config.settings import FeedSettings
from hubcalendar.core.event_model import CalendarPreference, FeedEvent
from hubcalendar.exceptions.errors import ConfigurationError, DataStoreError
from hubcalendar.utils.masking import mask_key

logger = logging.getLogger(__name__)


def _in_list(values: Sequence[str]) -> str:
    """PostgREST ``in`` operand, quoting ids that contain reserved chars."""
    items = []
    for value in values:
        if any(ch in value for ch in ',()"'):
            value = '"' + value.replace('"', '\\"') + '"'
        items.append(value)
    return "(" + ",".join(items) + ")"


class EventStore:
    """Reads events, calendar preferences and source names from Supabase."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize the store client.

        Args:
            base_url: Supabase project URL (``https://<ref>.supabase.co``).
            api_key: Service-role or anon key.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport, mainly for tests.
        """
        self.api_key_masked = mask_key(api_key)
        self.client = httpx.Client(
            base_url=base_url.rstrip("/") + "/rest/v1",
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: FeedSettings) -> "EventStore":
        """Create a store from settings.

        Raises:
            ConfigurationError: If the URL or key is missing.
        """
        missing = []
        if not settings.supabase_url:
            missing.append("SUPABASE_URL")
        if not settings.supabase_key:
            missing.append("SUPABASE_SERVICE_ROLE_KEY")
        if missing:
            raise ConfigurationError(missing)
        return cls(settings.supabase_url, settings.supabase_key, timeout=settings.store_timeout)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "EventStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _get(self, table: str, params: List) -> List[Dict]:
        """Run one GET against a table and return the decoded rows.

        Raises:
            DataStoreError: On transport failures or non-2xx responses.
        """
        try:
            response = self.client.get(f"/{table}", params=params)
        except httpx.HTTPError as e:
            logger.error("Request to %s failed (%s): %s", table, self.api_key_masked, e)
            raise DataStoreError(f"Could not reach data store: {e}") from e

        if response.status_code >= 400:
            message = self._error_message(response)
            logger.error("Query on %s rejected with %d: %s", table, response.status_code, message)
            raise DataStoreError(message, status_code=response.status_code)

        try:
            rows = response.json()
        except ValueError as e:
            raise DataStoreError(f"Invalid JSON from data store: {e}") from e
        if not isinstance(rows, list):
            raise DataStoreError(f"Unexpected response shape from {table}")
        return rows

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return f"Data store returned HTTP {response.status_code}"

    def fetch_events(
        self,
        today: date,
        community: Optional[str] = None,
        category: Optional[str] = None,
        source_ids: Sequence[str] = (),
        include_internal: bool = True,
    ) -> List[FeedEvent]:
        """Fetch approved events from ``today`` onwards, oldest date first.

        Args:
            today: First calendar day to include.
            community: Restrict to one organizer id.
            category: Restrict to one category value.
            source_ids: Restrict to these sources; empty means no restriction.
            include_internal: With a source restriction, also keep events
                that have no source.

        Returns:
            List of FeedEvent in ascending date order.
        """
        params = [
            ("select", EVENTS_SELECT),
            ("approval_status", f"eq.{APPROVED_STATUS}"),
            ("event_date", f"gte.{today.isoformat()}"),
            ("order", "event_date.asc"),
        ]
        if community:
            params.append(("organizer_id", f"eq.{community}"))
        if category:
            params.append(("category", f"eq.{category}"))
        if source_ids:
            if include_internal:
                params.append(("or", f"(source_id.in.{_in_list(source_ids)},source_id.is.null)"))
            else:
                params.append(("source_id", f"in.{_in_list(source_ids)}"))

        rows = self._get(EVENTS_TABLE, params)
        logger.debug("Fetched %d event row(s)", len(rows))
        return [FeedEvent.from_row(row) for row in rows]

    def fetch_preference(self, user_id: str) -> Optional[CalendarPreference]:
        """Load a user's calendar preference, or None if there is none."""
        rows = self._get(PREFERENCES_TABLE, [
            ("select", "user_id,include_all_sources,selected_sources"),
            ("user_id", f"eq.{user_id}"),
            ("limit", "1"),
        ])
        if not rows:
            return None
        return CalendarPreference.from_row(rows[0])

    def fetch_source_names(self, source_ids: Sequence[str]) -> List[str]:
        """Return display names of the given sources, ordered by name."""
        if not source_ids:
            return []
        rows = self._get(SOURCES_TABLE, [
            ("select", "id,name"),
            ("id", f"in.{_in_list(source_ids)}"),
            ("order", "name.asc"),
        ])
        return [str(row["name"]) for row in rows if row.get("name")]
