from datetime import date
from typing import List

import httpx
import pytest

from hubcalendar.config.settings import FeedSettings
from hubcalendar.exceptions import ConfigurationError, DataStoreError
from hubcalendar.storage.event_store import EventStore

TODAY = date(2026, 10, 19)


def make_store(handler, requests: List[httpx.Request]) -> EventStore:
    def recording_handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    return EventStore(
        "https://project.supabase.co/",
        "service-key-123456",
        transport=httpx.MockTransport(recording_handler),
    )


def test_fetch_events_builds_postgrest_query(row_factory) -> None:
    requests: List[httpx.Request] = []
    rows = [row_factory("a", "2026-10-20"), row_factory("b", "2026-10-21", source_id="A")]

    with make_store(lambda r: httpx.Response(200, json=rows), requests) as store:
        events = store.fetch_events(TODAY, community="org-1", category="taller")

    assert [e.id for e in events] == ["a", "b"]
    request = requests[0]
    assert request.url.path == "/rest/v1/events"
    params = request.url.params
    assert params["select"] == "*,organizer:organizer_id(name),source:source_id(name)"
    assert params["approval_status"] == "eq.approved"
    assert params["event_date"] == "gte.2026-10-19"
    assert params["order"] == "event_date.asc"
    assert params["organizer_id"] == "eq.org-1"
    assert params["category"] == "eq.taller"
    assert "or" not in params
    assert "source_id" not in params
    assert request.headers["apikey"] == "service-key-123456"
    assert request.headers["authorization"] == "Bearer service-key-123456"


def test_fetch_events_source_filter_with_internal() -> None:
    requests: List[httpx.Request] = []

    with make_store(lambda r: httpx.Response(200, json=[]), requests) as store:
        store.fetch_events(TODAY, source_ids=["A", "B"], include_internal=True)

    params = requests[0].url.params
    assert params["or"] == "(source_id.in.(A,B),source_id.is.null)"
    assert "source_id" not in params


def test_fetch_events_source_filter_without_internal() -> None:
    requests: List[httpx.Request] = []

    with make_store(lambda r: httpx.Response(200, json=[]), requests) as store:
        store.fetch_events(TODAY, source_ids=["A", "B"], include_internal=False)

    params = requests[0].url.params
    assert params["source_id"] == "in.(A,B)"
    assert "or" not in params


def test_fetch_preference_found_and_missing() -> None:
    requests: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["user_id"] == "eq.u1":
            return httpx.Response(200, json=[
                {"user_id": "u1", "include_all_sources": False, "selected_sources": ["A"]},
            ])
        return httpx.Response(200, json=[])

    with make_store(handler, requests) as store:
        found = store.fetch_preference("u1")
        missing = store.fetch_preference("u2")

    assert found.selected_sources == ["A"]
    assert found.include_all_sources is False
    assert missing is None
    assert requests[0].url.path == "/rest/v1/user_calendar_preferences"
    assert requests[0].url.params["limit"] == "1"


def test_fetch_source_names() -> None:
    requests: List[httpx.Request] = []
    rows = [{"id": "B", "name": "Luma"}, {"id": "A", "name": "Meetup"}, {"id": "C", "name": None}]

    with make_store(lambda r: httpx.Response(200, json=rows), requests) as store:
        names = store.fetch_source_names(["A", "B", "C"])
        assert store.fetch_source_names([]) == []

    assert names == ["Luma", "Meetup"]
    assert len(requests) == 1
    assert requests[0].url.params["id"] == "in.(A,B,C)"


def test_rejected_query_raises_with_message() -> None:
    requests: List[httpx.Request] = []
    response = httpx.Response(400, json={"message": "column events.foo does not exist"})

    with make_store(lambda r: response, requests) as store:
        with pytest.raises(DataStoreError, match="column events.foo does not exist") as excinfo:
            store.fetch_events(TODAY)

    assert excinfo.value.status_code == 400


def test_unreachable_store_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with make_store(handler, []) as store:
        with pytest.raises(DataStoreError, match="Could not reach data store"):
            store.fetch_events(TODAY)


def test_from_settings_requires_url_and_key() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        EventStore.from_settings(FeedSettings())

    assert excinfo.value.missing == ["SUPABASE_SERVICE_ROLE_KEY", "SUPABASE_URL"]
