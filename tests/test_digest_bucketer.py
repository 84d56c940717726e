"""
Tests for digest bucketing - "today" vs "this week" in the user's zone.
"""

import pytest
from datetime import datetime, timezone

from secretary.environments.base import ValidationError
from secretary.services.digest_bucketer import bucket, filter_assignment_events


# 08:00 on Wednesday 2025-01-15 in Los Angeles
NOW = datetime(2025, 1, 15, 16, 0, tzinfo=timezone.utc)


class TestBucket:

    def test_late_evening_due_stays_today_in_local_zone(self, make_event):
        # 23:30 PST is already Jan 16 in UTC
        event = make_event("e1", "Essay", start="2025-01-15T23:30:00-08:00", assignment_id="1")

        result = bucket([event], "America/Los_Angeles", now=NOW)

        assert [e.id for e in result.today] == ["e1"]
        assert result.this_week == []

    def test_same_event_is_tomorrow_in_utc(self, make_event):
        event = make_event("e1", "Essay", start="2025-01-15T23:30:00-08:00", assignment_id="1")

        result = bucket([event], "UTC", now=NOW)

        assert result.today == []
        assert [e.id for e in result.this_week] == ["e1"]

    def test_future_days_go_to_this_week_in_order(self, make_event):
        events = [
            make_event("e1", "A", start="2025-01-16T09:00:00-08:00", assignment_id="1"),
            make_event("e2", "B", start="2025-01-18T09:00:00-08:00", assignment_id="2"),
        ]

        result = bucket(events, "America/Los_Angeles", now=NOW)

        assert [e.id for e in result.this_week] == ["e1", "e2"]

    def test_all_day_event_uses_its_calendar_date(self, make_event):
        event = make_event("e1", "Project", date="2025-01-15", assignment_id="1")

        result = bucket([event], "America/Los_Angeles", now=NOW)

        assert [e.id for e in result.today] == ["e1"]

    def test_untagged_events_are_dropped(self, make_event):
        events = [
            make_event("mine", "Dentist", start="2025-01-15T10:00:00-08:00"),
            make_event("e1", "Essay", start="2025-01-15T10:00:00-08:00", assignment_id="1"),
        ]

        result = bucket(events, "America/Los_Angeles", now=NOW)

        assert [e.id for e in result.today] == ["e1"]
        assert result.this_week == []

    def test_events_without_start_are_dropped(self, make_event):
        event = make_event("e1", "Essay", assignment_id="1")

        result = bucket([event], "America/Los_Angeles", now=NOW)

        assert result.today == []
        assert result.this_week == []

    def test_unknown_zone(self, make_event):
        with pytest.raises(ValidationError):
            bucket([], "Nowhere/Special", now=NOW)

    def test_filter_assignment_events(self, make_event):
        events = [
            make_event("a", "Tagged", assignment_id="1"),
            make_event("b", "Personal"),
        ]
        assert [e.id for e in filter_assignment_events(events)] == ["a"]
