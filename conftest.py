from datetime import date
from typing import Dict, List, Optional, Sequence

import pytest

from hubcalendar.core.event_model import CalendarPreference, FeedEvent


class FakeStore:
    """In-memory stand-in for EventStore that applies the same filters."""

    def __init__(self) -> None:
        self.rows: List[Dict] = []
        self.sources: Dict[str, str] = {}
        self.preferences: Dict[str, Dict] = {}
        self.calls: List[tuple] = []
        self.fail_with: Optional[Exception] = None
        self.closed = False

    def __enter__(self) -> "FakeStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.closed = True

    def fetch_events(
        self,
        today: date,
        community: Optional[str] = None,
        category: Optional[str] = None,
        source_ids: Sequence[str] = (),
        include_internal: bool = True,
    ) -> List[FeedEvent]:
        self.calls.append(("events", today, community, category, tuple(source_ids), include_internal))
        if self.fail_with is not None:
            raise self.fail_with

        selected = []
        for row in self.rows:
            if row.get("approval_status", "approved") != "approved":
                continue
            if row["event_date"] < today.isoformat():
                continue
            if community and row.get("organizer_id") != community:
                continue
            if category and row.get("category") != category:
                continue
            if source_ids:
                in_list = row.get("source_id") in source_ids
                internal = row.get("source_id") is None
                if not (in_list or (include_internal and internal)):
                    continue
            enriched = dict(row)
            if row.get("source_id") in self.sources:
                enriched["source"] = {"name": self.sources[row["source_id"]]}
            selected.append(enriched)

        selected.sort(key=lambda r: r["event_date"])
        return [FeedEvent.from_row(r) for r in selected]

    def fetch_preference(self, user_id: str) -> Optional[CalendarPreference]:
        self.calls.append(("preference", user_id))
        row = self.preferences.get(user_id)
        return CalendarPreference.from_row(row) if row is not None else None

    def fetch_source_names(self, source_ids: Sequence[str]) -> List[str]:
        self.calls.append(("source_names", tuple(source_ids)))
        return sorted(self.sources[s] for s in source_ids if s in self.sources)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


def make_row(event_id: str, event_date: str, **fields) -> Dict:
    row = {
        "id": event_id,
        "title": f"Event {event_id}",
        "description": "",
        "event_date": event_date,
        "event_time": None,
        "location": "Ciudad de México",
        "event_type": "presencial",
        "category": None,
        "organizer_id": None,
        "organizer": {"name": "Python CDMX"},
        "source_id": None,
        "registration_url": None,
        "approval_status": "approved",
        "created_at": "2026-10-01T15:00:00+00:00",
        "updated_at": "2026-10-02T16:30:45.123456+00:00",
    }
    row.update(fields)
    return row


@pytest.fixture
def row_factory():
    return make_row
