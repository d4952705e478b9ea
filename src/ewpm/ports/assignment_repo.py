"""Assignment repository interface."""

from datetime import date
from typing import Protocol

from ewpm.core.assignments import Assignment


class AssignmentRepository(Protocol):
    """Interface for reading and updating assignments in any backend."""

    def fetch_all(self) -> list[Assignment]:
        """Fetch all assignments."""
        ...

    def fetch_created_between(self, start: date, end: date) -> list[Assignment]:
        """Fetch assignments whose created date falls in [start, end]."""
        ...

    def get(self, assignment_id: str) -> Assignment | None:
        """Fetch one assignment. Returns None if not found."""
        ...

    def update(self, assignment_id: str, changes: dict) -> Assignment:
        """Apply column changes and return the stored row."""
        ...
