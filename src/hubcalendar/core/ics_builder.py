"""Calendar feed building: source resolution, naming and ICS serialization."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Protocol, Sequence

from icalendar import (
    Calendar,
    Event,
    Timezone,
    TimezoneStandard,
    vCalAddress,
    vDDDTypes,
    vText,
)

from hubcalendar.config.constants import (
    CALENDAR_NAME_PREFIX,
    CALENDAR_NAME_SEPARATOR,
    DEFAULT_CALENDAR_NAME,
    DEFAULT_ORGANIZER_NAME,
    EVENT_STATUS,
    ICS_CALSCALE,
    ICS_METHOD,
    ICS_PRODID,
    ICS_VERSION,
    MAX_NAMED_SOURCES,
    ORGANIZER_MAILTO,
    UID_DOMAIN,
    VIRTUAL_LOCATION,
)
from hubcalendar.config.settings import FeedSettings
from hubcalendar.core.event_model import CalendarPreference, FeedEvent, FeedRequest
from hubcalendar.core.timezone_utils import (
    event_span,
    resolve_timezone,
    today_in_timezone,
    utc_stamp,
)

logger = logging.getLogger(__name__)


class FeedText(vText):
    """Text value escaped exactly as RFC 5545 section 3.3.11 lists it.

    Backslash goes first so later escapes are never escaped again.
    Unlike vText, a literal backslash-N is kept as written.
    """

    def to_ical(self) -> bytes:
        escaped = (
            str(self)
            .replace("\\", "\\\\")
            .replace(";", "\\;")
            .replace(",", "\\,")
            .replace("\r\n", "\\n")
            .replace("\n", "\\n")
        )
        return escaped.encode(self.encoding)


class EventSource(Protocol):
    """Read-only view of the data store used by the builder."""

    def fetch_events(
        self,
        today: date,
        community: Optional[str] = None,
        category: Optional[str] = None,
        source_ids: Sequence[str] = (),
        include_internal: bool = True,
    ) -> List[FeedEvent]: ...

    def fetch_preference(self, user_id: str) -> Optional[CalendarPreference]: ...

    def fetch_source_names(self, source_ids: Sequence[str]) -> List[str]: ...


@dataclass
class FeedResult:
    """Result of building a calendar feed."""
    content: str
    calendar_name: str
    event_count: int


def resolve_source_ids(request: FeedRequest, store: EventSource) -> List[str]:
    """Work out which sources the feed is restricted to.

    An explicit ``sources`` list wins. Otherwise the user's stored
    preference applies, unless it asks for all sources. An empty result
    means no source restriction.

    Args:
        request: The parsed feed request.
        store: Data store used for the preference lookup.

    Returns:
        List of source ids, possibly empty.
    """
    if request.sources:
        return list(request.sources)

    if not request.user:
        return []

    preference = store.fetch_preference(request.user)
    if preference is None:
        logger.debug("No calendar preference stored for user %s", request.user)
        return []
    if preference.include_all_sources:
        return []
    return list(preference.selected_sources)


def derive_calendar_name(source_ids: Sequence[str], store: EventSource) -> str:
    """Name the calendar after its sources when there are only a few.

    Args:
        source_ids: The resolved source ids.
        store: Data store used for the name lookup.

    Returns:
        The calendar display name.
    """
    if not 1 <= len(source_ids) <= MAX_NAMED_SOURCES:
        return DEFAULT_CALENDAR_NAME

    names = [name for name in store.fetch_source_names(source_ids) if name]
    if not names:
        return DEFAULT_CALENDAR_NAME
    return CALENDAR_NAME_PREFIX + CALENDAR_NAME_SEPARATOR.join(names)


def build_feed(
    request: FeedRequest,
    store: EventSource,
    settings: Optional[FeedSettings] = None,
    today: Optional[date] = None,
) -> FeedResult:
    """Fetch the matching events and render them as one calendar document.

    Any store or timezone failure propagates; nothing partial is returned.

    Args:
        request: The parsed feed request.
        store: Data store to read from.
        settings: Feed settings (defaults when omitted).
        today: Override for the reference-zone calendar day.

    Returns:
        FeedResult with the ICS text and some metadata.
    """
    settings = settings or FeedSettings()
    if today is None:
        today = today_in_timezone(settings.timezone)

    source_ids = resolve_source_ids(request, store)
    events = store.fetch_events(
        today=today,
        community=request.community,
        category=request.category,
        source_ids=source_ids,
        include_internal=request.include_internal,
    )
    calendar_name = derive_calendar_name(source_ids, store)

    content = render_calendar(events, calendar_name, settings, reference_date=today)
    logger.info(
        "Built calendar '%s' with %d event(s) (sources=%d, internal=%s)",
        calendar_name, len(events), len(source_ids), request.include_internal,
    )
    return FeedResult(content=content, calendar_name=calendar_name, event_count=len(events))


def render_calendar(
    events: Iterable[FeedEvent],
    calendar_name: str,
    settings: Optional[FeedSettings] = None,
    reference_date: Optional[date] = None,
) -> str:
    """Serialize events into a complete calendar document.

    Args:
        events: Events in the order they should appear.
        calendar_name: Value for X-WR-CALNAME.
        settings: Feed settings (defaults when omitted).
        reference_date: Day used to read the zone's UTC offset.

    Returns:
        ICS content string with CRLF line endings.
    """
    settings = settings or FeedSettings()
    if reference_date is None:
        reference_date = today_in_timezone(settings.timezone)

    cal = _create_ics_calendar(calendar_name, settings.timezone)
    cal.add_component(_create_timezone(settings.timezone, reference_date))
    for event in events:
        cal.add_component(build_vevent(event, settings))
    return _format_ics_output(cal)


def _create_ics_calendar(calendar_name: str, tz_name: str) -> Calendar:
    """Create a new calendar with the feed headers."""
    cal = Calendar()
    cal.add("VERSION", ICS_VERSION)
    cal.add("PRODID", ICS_PRODID)
    cal.add("CALSCALE", ICS_CALSCALE)
    cal.add("METHOD", ICS_METHOD)
    cal.add("X-WR-CALNAME", FeedText(calendar_name))
    cal.add("X-WR-TIMEZONE", tz_name)
    return cal


def _create_timezone(tz_name: str, reference_date: date) -> Timezone:
    """Declare the reference zone with one fixed-offset STANDARD block.

    Only fixed-offset zones are accepted by FeedSettings, so no DAYLIGHT
    block is ever needed.
    """
    tzobj = resolve_timezone(tz_name)
    local_noon = tzobj.localize(datetime.combine(reference_date, time(12)))

    standard = TimezoneStandard()
    standard.add("DTSTART", datetime(1970, 1, 1))
    standard.add("TZOFFSETFROM", local_noon.utcoffset())
    standard.add("TZOFFSETTO", local_noon.utcoffset())
    standard.add("TZNAME", local_noon.tzname())

    vtz = Timezone()
    vtz.add("TZID", tz_name)
    vtz.add_component(standard)
    return vtz


def event_uid(event_id: str) -> str:
    return f"{event_id}@{UID_DOMAIN}"


def event_summary(event: FeedEvent) -> str:
    """Title, suffixed with the source name for imported events."""
    if event.source_name:
        return f"{event.title} [{event.source_name}]"
    return event.title


def event_location(event: FeedEvent) -> str:
    if event.location:
        return event.location
    if event.event_type == "virtual":
        return VIRTUAL_LOCATION
    return ""


def build_vevent(event: FeedEvent, settings: Optional[FeedSettings] = None) -> Event:
    """Create the VEVENT component for one event.

    Args:
        event: The event to render.
        settings: Feed settings (defaults when omitted).

    Returns:
        An Event component ready to add to a calendar.
    """
    settings = settings or FeedSettings()
    duration = timedelta(minutes=settings.default_duration_minutes)
    start, end = event_span(event.event_date, event.event_time, duration)

    created = utc_stamp(event.created_at, settings.utc_stamp_suffix)
    updated = utc_stamp(event.updated_at or event.created_at, settings.utc_stamp_suffix)

    ve = Event()
    ve.add("UID", event_uid(event.id))
    # Wrapped values skip icalendar's forced UTC conversion of stamp properties
    ve.add("DTSTAMP", vDDDTypes(created))
    if event.is_all_day:
        ve.add("DTSTART", start)
        ve.add("DTEND", end)
    else:
        ve.add("DTSTART", start, parameters={"TZID": settings.timezone})
        ve.add("DTEND", end, parameters={"TZID": settings.timezone})
    ve.add("CREATED", vDDDTypes(created))
    ve.add("LAST-MODIFIED", vDDDTypes(updated))

    ve.add("SUMMARY", FeedText(event_summary(event)))
    ve.add("DESCRIPTION", FeedText(event.description or ""))
    ve.add("LOCATION", FeedText(event_location(event)))

    organizer = vCalAddress(ORGANIZER_MAILTO)
    organizer.params["CN"] = event.organizer_name or DEFAULT_ORGANIZER_NAME
    ve.add("ORGANIZER", organizer)

    if event.registration_url:
        ve.add("URL", event.registration_url)
    ve.add("STATUS", EVENT_STATUS)
    return ve


def _format_ics_output(cal: Calendar) -> str:
    """Format calendar to ICS string with proper line endings.

    Args:
        cal: The Calendar object to format.

    Returns:
        ICS content string with CRLF line endings.
    """
    # Keep insertion order instead of icalendar's canonical property order
    raw_ical = cal.to_ical(sorted=False)
    decoded_ical = raw_ical.decode("utf-8", errors="replace")
    # Ensure CRLF line endings per RFC5545
    crlf_ical = decoded_ical.replace("\r\n", "\n").replace("\n", "\r\n")
    return crlf_ical
