"""Typed records for events, calendar preferences and feed requests."""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Dict, List, Optional

from dateutil import parser

from hubcalendar.config.constants import INTERNAL_DISABLED_VALUES
from hubcalendar.exceptions.errors import EventDataError


def _clean(value) -> Optional[str]:
    """Return a stripped string, or None for missing/blank values."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _joined_name(row: Dict, key: str) -> Optional[str]:
    """Read the display name of an embedded PostgREST relation."""
    related = row.get(key)
    if isinstance(related, dict):
        return _clean(related.get("name"))
    return None


def _parse_timestamp(value, field_name: str, event_id: Optional[str]) -> Optional[datetime]:
    if not _clean(value):
        return None
    try:
        return parser.isoparse(str(value).strip())
    except (ValueError, OverflowError) as e:
        raise EventDataError(f"unparseable {field_name} {value!r}: {e}", event_id) from e


@dataclass
class FeedEvent:
    """An approved event row, ready to be rendered as a VEVENT."""

    id: str
    title: str
    event_date: date
    event_time: Optional[time] = None
    description: Optional[str] = None
    location: Optional[str] = None
    event_type: Optional[str] = None
    category: Optional[str] = None
    organizer_name: Optional[str] = None
    source_id: Optional[str] = None
    source_name: Optional[str] = None
    registration_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_all_day(self) -> bool:
        return self.event_time is None

    @property
    def is_internal(self) -> bool:
        return self.source_id is None

    @classmethod
    def from_row(cls, row: Dict) -> "FeedEvent":
        """Create a FeedEvent from an ``events`` row with joined names.

        Args:
            row: Dictionary as returned by the store, with optional
                ``organizer`` and ``source`` relations embedded.

        Returns:
            A validated FeedEvent.

        Raises:
            EventDataError: If the id or date is missing or a value
                cannot be parsed.
        """
        event_id = _clean(row.get("id"))
        if event_id is None:
            raise EventDataError("missing id")

        raw_date = _clean(row.get("event_date"))
        if raw_date is None:
            raise EventDataError("missing event_date", event_id)
        try:
            event_date = parser.isoparse(raw_date).date()
        except (ValueError, OverflowError) as e:
            raise EventDataError(f"unparseable event_date {raw_date!r}: {e}", event_id) from e

        event_time = None
        raw_time = _clean(row.get("event_time"))
        if raw_time is not None:
            try:
                event_time = parser.parse(raw_time).time().replace(microsecond=0)
            except (ValueError, OverflowError) as e:
                raise EventDataError(f"unparseable event_time {raw_time!r}: {e}", event_id) from e

        return cls(
            id=event_id,
            title=row.get("title") or "",
            event_date=event_date,
            event_time=event_time,
            description=row.get("description"),
            location=_clean(row.get("location")),
            event_type=_clean(row.get("event_type")),
            category=_clean(row.get("category")),
            organizer_name=_joined_name(row, "organizer"),
            source_id=_clean(row.get("source_id")),
            source_name=_joined_name(row, "source"),
            registration_url=_clean(row.get("registration_url")),
            created_at=_parse_timestamp(row.get("created_at"), "created_at", event_id),
            updated_at=_parse_timestamp(row.get("updated_at"), "updated_at", event_id),
        )


@dataclass
class CalendarPreference:
    """A user's stored choice of sources for their calendar subscription."""

    user_id: str
    include_all_sources: bool = True
    selected_sources: List[str] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: Dict) -> "CalendarPreference":
        include_all = row.get("include_all_sources")
        return cls(
            user_id=str(row.get("user_id") or ""),
            # Unset flag means "all sources", same as the preference UI default
            include_all_sources=True if include_all is None else bool(include_all),
            selected_sources=[str(s) for s in (row.get("selected_sources") or []) if _clean(s)],
        )


def parse_source_list(raw: Optional[str]) -> List[str]:
    """Split a comma-separated id list, dropping blanks.

    Args:
        raw: Value of the ``sources`` parameter.

    Returns:
        List of source ids in the given order.
    """
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class FeedRequest:
    """Filter parameters of one feed request. Blank values mean no filter."""

    community: Optional[str] = None
    category: Optional[str] = None
    sources: List[str] = field(default_factory=list)
    user: Optional[str] = None
    include_internal: bool = True

    @classmethod
    def from_params(
        cls,
        community: Optional[str] = None,
        category: Optional[str] = None,
        sources: Optional[str] = None,
        user: Optional[str] = None,
        internal: Optional[str] = None,
    ) -> "FeedRequest":
        """Build a request from raw query-string values.

        Only the literal ``"false"`` disables internal events; any other
        value, or no value at all, keeps them.
        """
        include_internal = (internal or "").strip() not in INTERNAL_DISABLED_VALUES
        return cls(
            community=_clean(community),
            category=_clean(category),
            sources=parse_source_list(sources),
            user=_clean(user),
            include_internal=include_internal,
        )
