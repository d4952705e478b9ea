"""In-memory port implementations shared by the workflow, server and CLI tests."""

from dataclasses import asdict, replace
from datetime import date, datetime

import pytest

from ewpm.core.assignments import Assignment
from ewpm.core.meetings import Meeting
from ewpm.core.payments import Payment, PaymentStatus
from ewpm.core.profiles import Profile
from ewpm.core.projects import Project
from ewpm.core.ratings import Rating
from ewpm.core.reminders import EmailMessage
from ewpm.errors import BackendError, EmailError
from ewpm.workflows import Backend


class FakePaymentRepository:
    def __init__(self, payments: list[Payment] | None = None):
        self.rows = {p.id: p for p in payments or []}
        self.claims: list[tuple[str, str]] = []
        self.releases: list[tuple[str, str]] = []
        self.marks: list[tuple[str, str]] = []
        self.fail_updates = False

    def add(self, payment: Payment) -> None:
        self.rows[payment.id] = payment

    def fetch_unpaid(self) -> list[Payment]:
        return [replace(p) for p in self.rows.values() if p.status != PaymentStatus.PAID]

    def fetch_by_ids(self, payment_ids: list[str]) -> list[Payment]:
        return [replace(self.rows[i]) for i in payment_ids if i in self.rows]

    def fetch_invoiced_between(self, start: date, end: date) -> list[Payment]:
        return [
            replace(p)
            for p in self.rows.values()
            if p.invoice_date and start <= p.invoice_date <= end
        ]

    def claim_reminder(self, payment_id: str, field: str, sent_at: datetime) -> bool:
        self.claims.append((payment_id, field))
        row = self.rows[payment_id]
        if getattr(row, field) is not None:
            return False
        setattr(row, field, sent_at)
        return True

    def release_reminder(self, payment_id: str, field: str) -> None:
        self.releases.append((payment_id, field))
        setattr(self.rows[payment_id], field, None)

    def mark_reminder_sent(self, payment_id: str, field: str, sent_at: datetime) -> None:
        self.marks.append((payment_id, field))
        setattr(self.rows[payment_id], field, sent_at)

    def update_amounts(self, payment_id: str, changes: dict) -> Payment:
        if self.fail_updates:
            raise BackendError("Network error talking to Supabase", retryable=True)
        row = self.rows[payment_id]
        row.amount_paid = changes["amount_paid"]
        row.status = PaymentStatus(changes["status"])
        return replace(row)


class FakeAssignmentRepository:
    def __init__(self, assignments: list[Assignment] | None = None):
        self.rows = {a.id: a for a in assignments or []}
        self.updates: list[tuple[str, dict]] = []
        self.fail_updates = False

    def fetch_all(self) -> list[Assignment]:
        return [replace(a) for a in self.rows.values()]

    def fetch_created_between(self, start: date, end: date) -> list[Assignment]:
        return [
            replace(a)
            for a in self.rows.values()
            if a.created_date and start <= a.created_date <= end
        ]

    def get(self, assignment_id: str) -> Assignment | None:
        row = self.rows.get(assignment_id)
        return replace(row) if row else None

    def update(self, assignment_id: str, changes: dict) -> Assignment:
        if self.fail_updates:
            raise BackendError("Network error talking to Supabase", retryable=True)
        self.updates.append((assignment_id, changes))
        row = Assignment.from_api({**asdict(self.rows[assignment_id]), **changes})
        self.rows[assignment_id] = row
        return replace(row)


class FakeProfileDirectory:
    def __init__(self, profiles: list[Profile] | None = None):
        self.profiles = list(profiles or [])
        self.fail = False

    def fetch_all(self) -> list[Profile]:
        return list(self.profiles)

    def fetch_many(self, user_ids: list[str]) -> dict[str, Profile]:
        if self.fail:
            raise BackendError("Unauthorized: JWT expired", status_code=401)
        return {p.id: p for p in self.profiles if p.id in user_ids}


class FakeRatingRepository:
    def __init__(self, ratings: list[Rating] | None = None):
        self.rows = list(ratings or [])
        self.inserted: list[dict] = []

    def fetch_all(self) -> list[Rating]:
        return list(self.rows)

    def insert(self, row: dict) -> Rating:
        self.inserted.append(row)
        rating = Rating.from_api({"id": f"r{len(self.rows) + 1}", **row})
        self.rows.append(rating)
        return rating


class FakeProjectRepository:
    def __init__(self, projects: list[Project] | None = None):
        self.rows = {p.id: p for p in projects or []}
        self.updates: list[tuple[str, dict]] = []
        self.fail_updates = False

    def fetch_all(self) -> list[Project]:
        return [replace(p) for p in self.rows.values()]

    def get(self, project_id: str) -> Project | None:
        row = self.rows.get(project_id)
        return replace(row) if row else None

    def update(self, project_id: str, changes: dict) -> Project:
        if self.fail_updates:
            raise BackendError("Network error talking to Supabase", retryable=True)
        self.updates.append((project_id, changes))
        row = replace(self.rows[project_id], **changes)
        self.rows[project_id] = row
        return replace(row)


class FakeMeetingRepository:
    def __init__(self, meetings: list[Meeting] | None = None):
        self.rows = list(meetings or [])

    def fetch_from(self, start: date) -> list[Meeting]:
        return [m for m in self.rows if m.meeting_date >= start]


class RecordingSender:
    def __init__(self, fail_for: set[str] | None = None):
        self.sent: list[EmailMessage] = []
        self.fail_for = fail_for or set()

    def send(self, message: EmailMessage) -> str | None:
        if self.fail_for.intersection(message.to):
            raise EmailError("Email service error (422): invalid recipient")
        self.sent.append(message)
        return f"msg-{len(self.sent)}"


@pytest.fixture
def profiles():
    return FakeProfileDirectory(
        [
            Profile(id="u1", name="Asha Rao", email="asha@example.com"),
            Profile(id="u2", name="Ravi Kumar", email=None),
            Profile(id="u3", name="Meena Iyer", email="meena@example.com"),
        ]
    )


@pytest.fixture
def payment_repo():
    return FakePaymentRepository()


@pytest.fixture
def assignment_repo():
    return FakeAssignmentRepository()


@pytest.fixture
def rating_repo():
    return FakeRatingRepository()


@pytest.fixture
def project_repo():
    return FakeProjectRepository()


@pytest.fixture
def meeting_repo():
    return FakeMeetingRepository()


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def backend(assignment_repo, payment_repo, profiles, rating_repo, project_repo, meeting_repo):
    return Backend(
        assignments=assignment_repo,
        payments=payment_repo,
        profiles=profiles,
        ratings=rating_repo,
        projects=project_repo,
        meetings=meeting_repo,
    )
