"""Meeting repository interface."""

from datetime import date
from typing import Protocol

from ewpm.core.meetings import Meeting


class MeetingRepository(Protocol):
    """Interface for scheduled meetings and their participants."""

    def fetch_from(self, start: date) -> list[Meeting]:
        """Fetch meetings on or after `start`, participants included."""
        ...
