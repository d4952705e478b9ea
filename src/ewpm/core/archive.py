"""Pure archival rules for completed assignments - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TypeVar

from .assignments import Assignment, AssignmentStatus
from .dates import utcnow

T = TypeVar("T", bound=Assignment)


@dataclass
class AutoArchiveSettings:
    """Automatic archival. Disabled by default; delay 0 archives immediately."""

    enabled: bool = False
    delay_days: int = 0


@dataclass
class ArchiveOverrides:
    """
    Manual archive decisions, which beat the automatic rule.

    An id is in at most one of the two sets.
    """

    archived: set[str] = field(default_factory=set)
    unarchived: set[str] = field(default_factory=set)

    def archive(self, assignment_id: str) -> None:
        self.unarchived.discard(assignment_id)
        self.archived.add(assignment_id)

    def unarchive(self, assignment_id: str) -> None:
        self.archived.discard(assignment_id)
        self.unarchived.add(assignment_id)

    def clear(self, assignment_id: str) -> None:
        self.archived.discard(assignment_id)
        self.unarchived.discard(assignment_id)

    def to_dict(self) -> dict:
        return {"archived": sorted(self.archived), "unarchived": sorted(self.unarchived)}

    @classmethod
    def from_dict(cls, data: dict) -> "ArchiveOverrides":
        archived = set(data.get("archived", []))
        unarchived = set(data.get("unarchived", [])) - archived
        return cls(archived=archived, unarchived=unarchived)


def is_auto_archived(
    assignment: Assignment,
    settings: AutoArchiveSettings,
    now: datetime | None = None,
) -> bool:
    """Completed for at least `delay_days` (inclusive boundary)."""
    if not settings.enabled:
        return False
    if assignment.status != AssignmentStatus.COMPLETED or not assignment.completion_date:
        return False
    now = now or utcnow()
    return now - assignment.completion_date >= timedelta(days=max(0, settings.delay_days))


def is_archived(
    assignment: Assignment,
    settings: AutoArchiveSettings,
    overrides: ArchiveOverrides | None = None,
    now: datetime | None = None,
) -> bool:
    """Whether the assignment is hidden from default views."""
    if overrides is not None:
        if assignment.id in overrides.archived:
            return True
        if assignment.id in overrides.unarchived:
            return False
    return is_auto_archived(assignment, settings, now)


def filter_archived(
    assignments: list[T],
    settings: AutoArchiveSettings,
    overrides: ArchiveOverrides | None = None,
    now: datetime | None = None,
) -> list[T]:
    """Assignments that remain visible."""
    now = now or utcnow()
    return [a for a in assignments if not is_archived(a, settings, overrides, now)]


def archived_only(
    assignments: list[T],
    settings: AutoArchiveSettings,
    overrides: ArchiveOverrides | None = None,
    now: datetime | None = None,
) -> list[T]:
    """Assignments currently archived."""
    now = now or utcnow()
    return [a for a in assignments if is_archived(a, settings, overrides, now)]
