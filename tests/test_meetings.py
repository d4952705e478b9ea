"""Tests for meeting lists and reminder checkpoints."""

from datetime import date, datetime, time, timedelta, timezone

import pytest

from ewpm.core.meetings import Meeting, due_checkpoint, upcoming_meetings


@pytest.fixture
def now():
    return datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)


def meeting_at(start: datetime, id="m1", created_by="d1", participants=None) -> Meeting:
    return Meeting(
        id=id,
        title="Weekly review",
        meeting_date=start.date(),
        meeting_time=start.time(),
        created_by=created_by,
        participants=participants or [],
    )


class TestUpcomingMeetings:
    def test_only_mine_and_future_sorted(self, now):
        later = meeting_at(now + timedelta(hours=3), "later", participants=["u1"])
        sooner = meeting_at(now + timedelta(hours=1), "sooner", created_by="u1")
        past = meeting_at(now - timedelta(hours=1), "past", participants=["u1"])
        other = meeting_at(now + timedelta(hours=2), "other", participants=["u2"])

        result = upcoming_meetings([later, sooner, past, other], "u1", now)
        assert [m.id for m in result] == ["sooner", "later"]


class TestDueCheckpoint:
    def test_nothing_before_an_hour(self, now):
        assert due_checkpoint(meeting_at(now + timedelta(minutes=90)), now, set()) is None

    def test_hour_checkpoint(self, now):
        assert due_checkpoint(meeting_at(now + timedelta(minutes=45)), now, set()) == "m1-60"

    def test_fifteen_minute_checkpoint(self, now):
        assert due_checkpoint(meeting_at(now + timedelta(minutes=10)), now, set()) == "m1-15"

    def test_each_key_once(self, now):
        m = meeting_at(now + timedelta(minutes=45))
        assert due_checkpoint(m, now, {"m1-60"}) is None

    def test_missed_hour_not_replayed(self, now):
        m = meeting_at(now + timedelta(minutes=10))
        assert due_checkpoint(m, now, {"m1-15"}) is None

    def test_started_meeting(self, now):
        assert due_checkpoint(meeting_at(now), now, set()) is None


class TestMeetingFromApi:
    def test_parses_row(self):
        m = Meeting.from_api(
            {
                "id": "m2",
                "title": "Kickoff",
                "meeting_date": "2025-03-12",
                "meeting_time": "14:30:00",
                "created_by": "d1",
                "participants": ["u1", "u2"],
            }
        )
        assert m.meeting_date == date(2025, 3, 12)
        assert m.meeting_time == time(14, 30)
        assert m.involves("u2")
        assert m.involves("d1")
        assert not m.involves("u3")
