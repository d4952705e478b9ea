"""Pure meeting logic - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import date, datetime, time

from .dates import parse_date

# Minutes-before-start at which participants are nudged
REMINDER_CHECKPOINTS = (60, 15)


@dataclass
class Meeting:
    id: str
    title: str
    meeting_date: date
    meeting_time: time
    created_by: str
    note: str | None = None
    participants: list[str] = field(default_factory=list)

    def starts_at(self, tz=None) -> datetime:
        return datetime.combine(self.meeting_date, self.meeting_time, tzinfo=tz)

    def involves(self, user_id: str) -> bool:
        return user_id == self.created_by or user_id in self.participants

    @classmethod
    def from_api(cls, data: dict) -> "Meeting":
        return cls(
            id=data["id"],
            title=data["title"],
            meeting_date=parse_date(data["meeting_date"]),
            meeting_time=time.fromisoformat(data["meeting_time"]),
            created_by=data.get("created_by") or "",
            note=data.get("note"),
            participants=list(data.get("participants") or []),
        )


def upcoming_meetings(meetings: list[Meeting], user_id: str, now: datetime) -> list[Meeting]:
    """Meetings the user is part of that have not started, soonest first."""
    mine = [m for m in meetings if m.involves(user_id) and m.starts_at(now.tzinfo) > now]
    return sorted(mine, key=lambda m: m.starts_at(now.tzinfo))


def due_checkpoint(meeting: Meeting, now: datetime, already: set[str]) -> str | None:
    """
    Reminder key due for a meeting, e.g. "<id>-15", or None.

    `already` holds keys handed out earlier; each key is returned once.
    """
    minutes = (meeting.starts_at(now.tzinfo) - now).total_seconds() / 60
    if minutes <= 0:
        return None
    # Only the tightest checkpoint counts; a missed earlier one is not replayed
    within = [c for c in REMINDER_CHECKPOINTS if minutes <= c]
    if not within:
        return None
    key = f"{meeting.id}-{min(within)}"
    return None if key in already else key
