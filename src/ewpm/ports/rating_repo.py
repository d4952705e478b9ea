"""Employee rating repository interface."""

from typing import Protocol

from ewpm.core.ratings import Rating


class RatingRepository(Protocol):
    """Interface for the scores directors give employees."""

    def fetch_all(self) -> list[Rating]:
        """Fetch every rating, newest first."""
        ...

    def insert(self, row: dict) -> Rating:
        """Store one rating and return it."""
        ...
