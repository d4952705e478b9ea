"""Shared workflow layer between the CLI, the HTTP endpoint and the scheduler.

Each function wires ports to the functional core; none of them know which
entry point called them.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, TypeVar
from zoneinfo import ZoneInfo

from .adapters.file_archive import FileArchiveStore
from .adapters.resend_email import LoggingEmailSender, ResendEmailSender
from .adapters.supabase_rest import SupabaseClient
from .adapters.supabase_tables import (
    SupabaseAssignmentRepository,
    SupabaseMeetingRepository,
    SupabasePaymentRepository,
    SupabaseProfileDirectory,
    SupabaseProjectRepository,
    SupabaseRatingRepository,
)
from .config import FALSE_VALUES, TRUE_VALUES, Config
from .core.analytics import AnalyticsSummary, DateRange, build_summary
from .core.archive import AutoArchiveSettings, archived_only, filter_archived
from .core.assignments import Assignment, apply_status_transition, status_update_payload
from .core.dates import utcnow
from .core.meetings import Meeting, due_checkpoint, upcoming_meetings
from .core.payments import Payment, amount_update_payload, record_payment
from .core.profiles import Profile
from .core.projects import Project, next_stage, set_stage
from .core.ratings import Rating, validate_rating
from .core.reminders import (
    DEFAULT_LEAD_DAYS,
    ReminderKind,
    ReminderSummary,
    build_reminder_email,
    classify_payment,
)
from .errors import EwpmError, ValidationError
from .ports import (
    ArchiveStore,
    AssignmentRepository,
    EmailSender,
    MeetingRepository,
    PaymentRepository,
    ProfileDirectory,
    ProjectRepository,
    RatingRepository,
)

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


def today_in(config: Config) -> date:
    """Today's date in the business timezone."""
    return datetime.now(ZoneInfo(config.timezone)).date()


def get_email_sender(config: Config) -> EmailSender:
    """Resend when a key is configured, otherwise a logging dry run."""
    if config.resend_api_key:
        return ResendEmailSender(config.resend_api_key)
    logger.warning("RESEND_API_KEY not configured - reminders will only be logged")
    return LoggingEmailSender()


def get_archive_store(config: Config) -> FileArchiveStore:
    return FileArchiveStore(config.archive_path)


@dataclass
class Backend:
    """The table repositories bound to one Supabase client."""

    assignments: AssignmentRepository
    payments: PaymentRepository
    profiles: ProfileDirectory
    ratings: RatingRepository
    projects: ProjectRepository
    meetings: MeetingRepository

    @classmethod
    def connect(cls, config: Config) -> "Backend":
        client = SupabaseClient(config)
        return cls(
            assignments=SupabaseAssignmentRepository(client),
            payments=SupabasePaymentRepository(client),
            profiles=SupabaseProfileDirectory(client),
            ratings=SupabaseRatingRepository(client),
            projects=SupabaseProjectRepository(client),
            meetings=SupabaseMeetingRepository(client),
        )


# ============== Payment Reminders ==============


def _flag(body: dict, key: str, default: bool) -> bool:
    """A boolean body field; "true"/"false" style strings are accepted too."""
    value = body.get(key, default)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_VALUES:
            return True
        if lowered in FALSE_VALUES:
            return False
    raise ValidationError(f"Invalid {key}: {value!r}")


@dataclass
class ReminderRequest:
    """Flags accepted by the reminder batch job."""

    automatic: bool = True
    payment_reminders_enabled: bool = True
    reminder_days: int = DEFAULT_LEAD_DAYS
    reminder_time: str | None = None
    payment_ids: list[str] = field(default_factory=list)

    @property
    def idempotent(self) -> bool:
        """Manual runs re-send even if a reminder was already recorded."""
        return self.automatic

    @classmethod
    def from_body(cls, body: dict | None, config: Config) -> "ReminderRequest":
        body = body or {}
        reminder_days = body.get("reminderDays", config.reminder_days)
        try:
            reminder_days = int(reminder_days)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid reminderDays: {reminder_days!r}")
        if reminder_days < 0:
            raise ValidationError("reminderDays cannot be negative")
        return cls(
            automatic=_flag(body, "automatic", True),
            payment_reminders_enabled=_flag(
                body, "paymentRemindersEnabled", config.payment_reminders_enabled
            ),
            reminder_days=reminder_days,
            reminder_time=body.get("reminderTime", config.reminder_time),
            payment_ids=list(body.get("paymentIds") or body.get("payment_ids") or []),
        )


def run_payment_reminders(
    payments: PaymentRepository,
    profiles: ProfileDirectory,
    sender: EmailSender,
    request: ReminderRequest,
    today: date,
    email_from: str,
    app_url: str = "",
    now: datetime | None = None,
) -> ReminderSummary:
    """
    Send at most one reminder per unpaid payment and report the counts.

    Per-record failures are logged and counted as skipped; they never abort
    the batch. In idempotent mode each send is preceded by a claim on the
    payment's "last sent" column so overlapping runs cannot both send.
    """
    summary = ReminderSummary()
    if not request.payment_reminders_enabled:
        logger.info("Payment reminders disabled - nothing to do")
        return summary

    now = now or utcnow()
    if request.payment_ids:
        candidates = payments.fetch_by_ids(request.payment_ids)
    else:
        candidates = payments.fetch_unpaid()
    logger.info(f"Found {len(candidates)} payments to check")

    classified = []
    for payment in candidates:
        kind = classify_payment(payment, today, request.reminder_days, request.idempotent)
        if kind is None:
            summary.skipped += 1
        else:
            classified.append((payment, kind))

    if not classified:
        return summary

    try:
        directory = profiles.fetch_many([p.responsible_user_id for p, _ in classified])
    except EwpmError as e:
        logger.error(f"Profile lookup failed, skipping {len(classified)} reminders: {e}")
        directory = {}

    for payment, kind in classified:
        profile = directory.get(payment.responsible_user_id)
        if profile is None or not profile.email:
            logger.warning(
                f"Skipping payment {payment.id} - no email for user {payment.responsible_user_id}"
            )
            summary.skipped += 1
            continue

        if _send_one(payments, sender, payment, kind, profile, request, today, now, email_from, app_url):
            summary.count_sent(kind)
            summary.details.append(
                {
                    "payment_id": payment.id,
                    "client_name": payment.client_name,
                    "recipient": profile.email,
                    "reminder_type": kind.value,
                }
            )
        else:
            summary.skipped += 1

    logger.info(
        f"Reminder run complete: {summary.sent} sent, {summary.skipped} skipped "
        f"({summary.overdue} overdue, {summary.upcoming_24h} due in 24h, "
        f"{summary.upcoming_lead} due in {request.reminder_days}d)"
    )
    return summary


def _send_one(
    payments: PaymentRepository,
    sender: EmailSender,
    payment: Payment,
    kind: ReminderKind,
    profile: Profile,
    request: ReminderRequest,
    today: date,
    now: datetime,
    email_from: str,
    app_url: str,
) -> bool:
    """Claim, send and record one reminder. False if it was not sent."""
    field_name = kind.sent_field
    try:
        if request.idempotent and not payments.claim_reminder(payment.id, field_name, now):
            logger.info(f"Payment {payment.id} {kind.value} reminder already claimed by another run")
            return False
    except EwpmError as e:
        logger.error(f"Could not claim payment {payment.id}: {e}")
        return False

    message = build_reminder_email(payment, profile, kind, today, email_from, app_url)
    try:
        message_id = sender.send(message)
    except EwpmError as e:
        logger.error(f"Failed to send {kind.value} reminder for payment {payment.id}: {e}")
        if request.idempotent:
            try:
                payments.release_reminder(payment.id, field_name)
            except EwpmError as release_error:
                logger.error(f"Could not release claim on payment {payment.id}: {release_error}")
        return False

    logger.info(f"Sent {kind.value} reminder to {profile.email} for payment {payment.id} ({message_id})")
    if not request.idempotent:
        try:
            payments.mark_reminder_sent(payment.id, field_name, now)
        except EwpmError as e:
            logger.error(f"Reminder sent but not recorded for payment {payment.id}: {e}")
    return True


def handle_reminder_request(
    body: dict | None,
    config: Config,
    backend: Backend | None = None,
    sender: EmailSender | None = None,
    today: date | None = None,
) -> tuple[int, dict]:
    """
    Run the batch job for one HTTP-style invocation.

    Returns (status code, JSON body). Unexpected errors become a failed,
    zeroed response instead of propagating.
    """
    try:
        request = ReminderRequest.from_body(body, config)
        if not request.payment_reminders_enabled:
            return 200, ReminderSummary().to_dict()
        backend = backend or Backend.connect(config)
        sender = sender or get_email_sender(config)
        summary = run_payment_reminders(
            backend.payments,
            backend.profiles,
            sender,
            request,
            today or today_in(config),
            email_from=config.email_from,
            app_url=config.app_url,
        )
        return 200, summary.to_dict()
    except ValidationError as e:
        logger.warning(f"Rejected reminder request: {e}")
        return 400, ReminderSummary.failed(str(e)).to_dict()
    except Exception as e:
        logger.exception("Error in payment reminders")
        return 500, ReminderSummary.failed(str(e)).to_dict()


# ============== Assignments ==============


def optimistic_update(
    cache: dict[K, V],
    key: K,
    new_value: V,
    commit: Callable[[], V],
) -> V:
    """
    Show new_value locally, then commit; restore the old value on failure.

    The committed result replaces the optimistic value on success.
    """
    missing = key not in cache
    previous = cache.get(key)
    cache[key] = new_value
    try:
        result = commit()
    except Exception:
        if missing:
            del cache[key]
        else:
            cache[key] = previous
        raise
    cache[key] = result
    return result


def change_assignment_status(
    repo: AssignmentRepository,
    assignment: Assignment,
    new_status: str,
    remark: str | None = None,
    cache: dict[str, Assignment] | None = None,
    now: datetime | None = None,
) -> Assignment:
    """
    Validate and persist a status change.

    Raises InvalidTransitionError before anything is written.
    """
    updated = apply_status_transition(assignment, new_status, remark, now)
    payload = status_update_payload(assignment, updated)
    cache = cache if cache is not None else {}
    return optimistic_update(
        cache, assignment.id, updated, lambda: repo.update(assignment.id, payload)
    )


def visible_assignments(
    assignments: list[Assignment],
    config: Config,
    store: ArchiveStore,
    show_archived: bool = False,
    now: datetime | None = None,
) -> list[Assignment]:
    """Assignments for the default view, or only the archived ones."""
    settings = AutoArchiveSettings(config.auto_archive_enabled, config.auto_archive_delay_days)
    overrides = store.load()
    if show_archived:
        return archived_only(assignments, settings, overrides, now)
    return filter_archived(assignments, settings, overrides, now)


def set_archived(store: ArchiveStore, assignment_id: str, archived: bool) -> None:
    """Record a manual archive or unarchive decision."""
    overrides = store.load()
    if archived:
        overrides.archive(assignment_id)
    else:
        overrides.unarchive(assignment_id)
    store.save(overrides)


# ============== Payments ==============


def apply_payment(
    repo: PaymentRepository,
    payment: Payment,
    amount: float,
    cache: dict[str, Payment] | None = None,
) -> Payment:
    """Record a received amount; status and amount are written together."""
    updated = record_payment(payment, amount)
    cache = cache if cache is not None else {}
    return optimistic_update(
        cache,
        payment.id,
        updated,
        lambda: repo.update_amounts(payment.id, amount_update_payload(updated)),
    )



# ============== Projects ==============


def change_project_stage(
    repo: ProjectRepository,
    project: Project,
    stage: str | None = None,
    cache: dict[str, Project] | None = None,
) -> Project:
    """Jump to `stage`, or advance one step when no stage is given."""
    updated = set_stage(project, stage) if stage else next_stage(project)
    cache = cache if cache is not None else {}
    return optimistic_update(
        cache, project.id, updated, lambda: repo.update(project.id, {"stage": updated.stage})
    )


# ============== Ratings ==============


def add_rating(
    repo: RatingRepository,
    user_id: str,
    period_type: str,
    period_value: str,
    score: int,
    rated_by: str,
    remarks: str | None = None,
) -> Rating:
    """Validate and store one rating. Nothing is written when validation fails."""
    validate_rating(period_type, period_value, score)
    return repo.insert(
        {
            "user_id": user_id,
            "period_type": period_type,
            "period_value": period_value,
            "score": score,
            "remarks": remarks or None,
            "created_by": rated_by,
        }
    )


# ============== Meetings ==============


@dataclass
class AgendaItem:
    meeting: Meeting
    starts_at: datetime
    reminder_key: str | None = None


def meeting_agenda(
    repo: MeetingRepository,
    user_id: str,
    config: Config,
    now: datetime | None = None,
    already: set[str] | None = None,
) -> list[AgendaItem]:
    """
    Upcoming meetings for a user in the business timezone.

    Items whose reminder checkpoint has just come due carry its key; the
    key is added to `already` so a repeated call does not hand it out again.
    """
    tz = ZoneInfo(config.timezone)
    now = (now or utcnow()).astimezone(tz)
    already = already if already is not None else set()
    agenda = []
    for meeting in upcoming_meetings(repo.fetch_from(now.date()), user_id, now):
        key = due_checkpoint(meeting, now, already)
        if key:
            already.add(key)
        agenda.append(AgendaItem(meeting, meeting.starts_at(tz), key))
    return agenda


# ============== Analytics ==============


def compute_analytics(
    backend: Backend,
    period: DateRange,
    config: Config,
    now: datetime | None = None,
) -> AnalyticsSummary:
    """Fetch both periods and reduce them into the dashboard summary."""
    now = now or utcnow()
    prev = period.previous()
    return build_summary(
        period,
        assignments=backend.assignments.fetch_created_between(period.start, period.end),
        prev_assignments=backend.assignments.fetch_created_between(prev.start, prev.end),
        payments=backend.payments.fetch_invoiced_between(period.start, period.end),
        prev_payments=backend.payments.fetch_invoiced_between(prev.start, prev.end),
        profiles=backend.profiles.fetch_all(),
        now=now,
        # Overdue payments are judged by the business calendar, not UTC
        today=now.astimezone(ZoneInfo(config.timezone)).date(),
        ratings=backend.ratings.fetch_all(),
    )
