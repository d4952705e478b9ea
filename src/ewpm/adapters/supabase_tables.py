"""Table-level Supabase adapters implementing the repository ports."""

import logging
from datetime import date, datetime

from ewpm.core.assignments import Assignment
from ewpm.core.meetings import Meeting
from ewpm.core.payments import Payment
from ewpm.core.profiles import Profile
from ewpm.core.projects import Project
from ewpm.core.ratings import Rating
from ewpm.errors import BackendError

from .supabase_rest import SupabaseClient, in_filter

logger = logging.getLogger(__name__)

ASSIGNMENTS = "assignments"
PAYMENTS = "client_payments"
PROFILES = "profiles"
RATINGS = "employee_ratings"
PROJECTS = "projects"
MEETINGS = "meetings"


def _single(rows: list[dict], table: str, row_id: str) -> dict:
    if not rows:
        raise BackendError(f"No {table} row with id {row_id}")
    return rows[0]


class SupabaseAssignmentRepository:
    """Implements AssignmentRepository over the `assignments` table."""

    def __init__(self, client: SupabaseClient):
        self.client = client

    def fetch_all(self) -> list[Assignment]:
        rows = self.client.select(ASSIGNMENTS, {"select": "*", "order": "due_date.asc"})
        return [Assignment.from_api(r) for r in rows]

    def fetch_created_between(self, start: date, end: date) -> list[Assignment]:
        rows = self.client.select(
            ASSIGNMENTS,
            [
                ("select", "*"),
                ("created_date", f"gte.{start.isoformat()}"),
                ("created_date", f"lte.{end.isoformat()}"),
            ],
        )
        return [Assignment.from_api(r) for r in rows]

    def get(self, assignment_id: str) -> Assignment | None:
        rows = self.client.select(ASSIGNMENTS, {"select": "*", "id": f"eq.{assignment_id}"})
        return Assignment.from_api(rows[0]) if rows else None

    def update(self, assignment_id: str, changes: dict) -> Assignment:
        rows = self.client.update(ASSIGNMENTS, {"id": f"eq.{assignment_id}"}, changes)
        return Assignment.from_api(_single(rows, ASSIGNMENTS, assignment_id))

    def insert_many(self, rows: list[dict]) -> list[Assignment]:
        return [Assignment.from_api(r) for r in self.client.insert(ASSIGNMENTS, rows)]


class SupabasePaymentRepository:
    """Implements PaymentRepository over the `client_payments` table."""

    def __init__(self, client: SupabaseClient):
        self.client = client

    def fetch_unpaid(self) -> list[Payment]:
        rows = self.client.select(
            PAYMENTS, {"select": "*", "status": "neq.paid", "order": "due_date.asc"}
        )
        return [Payment.from_api(r) for r in rows]

    def fetch_by_ids(self, payment_ids: list[str]) -> list[Payment]:
        if not payment_ids:
            return []
        rows = self.client.select(PAYMENTS, {"select": "*", "id": in_filter(payment_ids)})
        return [Payment.from_api(r) for r in rows]

    def fetch_invoiced_between(self, start: date, end: date) -> list[Payment]:
        rows = self.client.select(
            PAYMENTS,
            [
                ("select", "*"),
                ("invoice_date", f"gte.{start.isoformat()}"),
                ("invoice_date", f"lte.{end.isoformat()}"),
            ],
        )
        return [Payment.from_api(r) for r in rows]

    def claim_reminder(self, payment_id: str, field: str, sent_at: datetime) -> bool:
        # Conditional update: only one concurrent run sees the row come back
        rows = self.client.update(
            PAYMENTS,
            {"id": f"eq.{payment_id}", field: "is.null"},
            {field: sent_at.isoformat()},
        )
        return bool(rows)

    def release_reminder(self, payment_id: str, field: str) -> None:
        self.client.update(PAYMENTS, {"id": f"eq.{payment_id}"}, {field: None})

    def mark_reminder_sent(self, payment_id: str, field: str, sent_at: datetime) -> None:
        self.client.update(PAYMENTS, {"id": f"eq.{payment_id}"}, {field: sent_at.isoformat()})

    def update_amounts(self, payment_id: str, changes: dict) -> Payment:
        rows = self.client.update(PAYMENTS, {"id": f"eq.{payment_id}"}, changes)
        return Payment.from_api(_single(rows, PAYMENTS, payment_id))


class SupabaseProfileDirectory:
    """Implements ProfileDirectory over the `profiles` table."""

    def __init__(self, client: SupabaseClient):
        self.client = client

    def fetch_all(self) -> list[Profile]:
        rows = self.client.select(PROFILES, {"select": "id,name,email"})
        return [Profile.from_api(r) for r in rows]

    def fetch_many(self, user_ids: list[str]) -> dict[str, Profile]:
        ids = sorted(set(user_ids))
        if not ids:
            return {}
        rows = self.client.select(PROFILES, {"select": "id,name,email", "id": in_filter(ids)})
        logger.debug(f"Resolved {len(rows)} of {len(ids)} profiles")
        return {r["id"]: Profile.from_api(r) for r in rows}


class SupabaseRatingRepository:
    """Implements RatingRepository over the `employee_ratings` table."""

    def __init__(self, client: SupabaseClient):
        self.client = client

    def fetch_all(self) -> list[Rating]:
        rows = self.client.select(RATINGS, {"select": "*", "order": "created_at.desc"})
        return [Rating.from_api(r) for r in rows]

    def insert(self, row: dict) -> Rating:
        rows = self.client.insert(RATINGS, [row])
        if not rows:
            raise BackendError(f"Insert into {RATINGS} returned no row")
        return Rating.from_api(rows[0])


class SupabaseProjectRepository:
    """Implements ProjectRepository over the `projects` table."""

    def __init__(self, client: SupabaseClient):
        self.client = client

    def fetch_all(self) -> list[Project]:
        rows = self.client.select(PROJECTS, {"select": "*", "order": "start_date.desc"})
        return [Project.from_api(r) for r in rows]

    def get(self, project_id: str) -> Project | None:
        rows = self.client.select(PROJECTS, {"select": "*", "id": f"eq.{project_id}"})
        return Project.from_api(rows[0]) if rows else None

    def update(self, project_id: str, changes: dict) -> Project:
        rows = self.client.update(PROJECTS, {"id": f"eq.{project_id}"}, changes)
        return Project.from_api(_single(rows, PROJECTS, project_id))


class SupabaseMeetingRepository:
    """Implements MeetingRepository over `meetings` joined with `meeting_participants`."""

    def __init__(self, client: SupabaseClient):
        self.client = client

    def fetch_from(self, start: date) -> list[Meeting]:
        rows = self.client.select(
            MEETINGS,
            {
                "select": "*,meeting_participants(user_id)",
                "meeting_date": f"gte.{start.isoformat()}",
                "order": "meeting_date.asc,meeting_time.asc",
            },
        )
        meetings = []
        for row in rows:
            joined = row.pop("meeting_participants", None) or []
            row["participants"] = [p["user_id"] for p in joined]
            meetings.append(Meeting.from_api(row))
        return meetings
