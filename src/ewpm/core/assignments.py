"""Pure assignment domain logic - no I/O dependencies."""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum

from ewpm.errors import InvalidTransitionError, ValidationError

from .dates import parse_date, parse_datetime, utcnow


class AssignmentStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"


class Priority(str, Enum):
    NORMAL = "normal"
    HIGH = "high"
    EMERGENCY = "emergency"


TASK_CATEGORIES = ["general", "inspection", "production", "delivery", "admin", "other"]
DEFAULT_CATEGORY = "general"

# Reopening a completed assignment goes back to in_progress only
STATUS_TRANSITIONS: dict[AssignmentStatus, frozenset[AssignmentStatus]] = {
    AssignmentStatus.NOT_STARTED: frozenset(
        {AssignmentStatus.IN_PROGRESS, AssignmentStatus.ON_HOLD}
    ),
    AssignmentStatus.IN_PROGRESS: frozenset(
        {AssignmentStatus.COMPLETED, AssignmentStatus.ON_HOLD, AssignmentStatus.NOT_STARTED}
    ),
    AssignmentStatus.ON_HOLD: frozenset(
        {AssignmentStatus.IN_PROGRESS, AssignmentStatus.NOT_STARTED}
    ),
    AssignmentStatus.COMPLETED: frozenset({AssignmentStatus.IN_PROGRESS}),
}

MAX_TITLE_LENGTH = 200


@dataclass
class Assignment:
    """A unit of work assigned to one employee."""

    id: str
    title: str
    assignee_id: str
    created_by: str
    status: AssignmentStatus = AssignmentStatus.NOT_STARTED
    priority: Priority = Priority.NORMAL
    category: str = DEFAULT_CATEGORY
    description: str | None = None
    project_id: str | None = None
    due_date: datetime | None = None
    completion_date: datetime | None = None
    total_duration_minutes: int | None = None
    remark: str | None = None
    created_date: date | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == AssignmentStatus.COMPLETED

    def is_overdue(self, now: datetime | None = None) -> bool:
        """Past due and not completed."""
        if self.is_completed or not self.due_date:
            return False
        now = now or utcnow()
        return now > self.due_date

    @classmethod
    def from_api(cls, data: dict) -> "Assignment":
        """Create Assignment from an `assignments` table row."""
        return cls(
            id=data["id"],
            title=data["title"],
            assignee_id=data["assignee_id"],
            created_by=data.get("created_by") or data.get("assigned_by") or "",
            status=AssignmentStatus(data.get("status") or "not_started"),
            priority=Priority(data.get("priority") or "normal"),
            category=data.get("category") or DEFAULT_CATEGORY,
            description=data.get("description"),
            project_id=data.get("project_id"),
            due_date=parse_datetime(data.get("due_date")),
            completion_date=parse_datetime(data.get("completion_date")),
            total_duration_minutes=data.get("total_duration_minutes"),
            remark=data.get("remark"),
            created_date=parse_date(data.get("created_date")),
        )


@dataclass
class AssignmentDraft:
    """Fields entered once by a creator for a batch of assignees."""

    title: str
    created_by: str
    priority: Priority = Priority.NORMAL
    category: str = DEFAULT_CATEGORY
    description: str | None = None
    project_id: str | None = None
    due_date: datetime | None = None
    remark: str | None = None
    assignee_ids: list[str] = field(default_factory=list)


def _status_name(status) -> str:
    return status.value if isinstance(status, Enum) else str(status)


def is_valid_status_transition(current: str, requested: str) -> bool:
    """True if requested is reachable from current in one step."""
    try:
        current_status = AssignmentStatus(current)
        requested_status = AssignmentStatus(requested)
    except ValueError:
        return False
    return requested_status in STATUS_TRANSITIONS[current_status]


def available_transitions(current: str) -> list[AssignmentStatus]:
    """Statuses reachable from current, in table order."""
    try:
        current_status = AssignmentStatus(current)
    except ValueError:
        return []
    allowed = STATUS_TRANSITIONS[current_status]
    return [s for s in AssignmentStatus if s in allowed]


def apply_status_transition(
    assignment: Assignment,
    requested: str,
    remark: str | None = None,
    now: datetime | None = None,
) -> Assignment:
    """
    Return a copy of the assignment moved to the requested status.

    Raises InvalidTransitionError for pairs outside STATUS_TRANSITIONS; the
    input assignment is never modified.
    """
    current = assignment.status
    if not is_valid_status_transition(current, requested):
        raise InvalidTransitionError(current.value, _status_name(requested))

    new_status = AssignmentStatus(requested)
    completion_date = assignment.completion_date
    if new_status == AssignmentStatus.COMPLETED:
        completion_date = now or utcnow()
    elif current == AssignmentStatus.COMPLETED:
        completion_date = None

    return replace(
        assignment,
        status=new_status,
        completion_date=completion_date,
        remark=remark or assignment.remark,
    )


def status_update_payload(before: Assignment, after: Assignment) -> dict:
    """Columns to PATCH for a status change."""
    payload = {"status": after.status.value, "remark": after.remark}
    if after.completion_date != before.completion_date:
        payload["completion_date"] = (
            after.completion_date.isoformat() if after.completion_date else None
        )
    return payload


def build_assignments(draft: AssignmentDraft) -> list[dict]:
    """
    Fan a draft out into one insert row per assignee.

    Raises ValidationError when the title or assignee list is unusable.
    """
    title = draft.title.strip()
    if not title:
        raise ValidationError("Title is required")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Title must be less than {MAX_TITLE_LENGTH} characters")
    if not draft.assignee_ids:
        raise ValidationError("At least one assignee is required")
    if draft.category not in TASK_CATEGORIES:
        raise ValidationError(f"Unknown category: {draft.category}")

    rows = []
    for assignee_id in dict.fromkeys(draft.assignee_ids):
        rows.append(
            {
                "title": title,
                "description": draft.description,
                "assignee_id": assignee_id,
                "created_by": draft.created_by,
                "project_id": draft.project_id,
                "status": AssignmentStatus.NOT_STARTED.value,
                "priority": Priority(draft.priority).value,
                "category": draft.category,
                "due_date": draft.due_date.isoformat() if draft.due_date else None,
                "remark": draft.remark,
            }
        )
    return rows
