"""Functional core - pure business logic with no I/O."""

from .assignments import (
    Assignment,
    AssignmentDraft,
    AssignmentStatus,
    Priority,
    apply_status_transition,
    available_transitions,
    build_assignments,
    is_valid_status_transition,
)
from .archive import ArchiveOverrides, AutoArchiveSettings, archived_only, filter_archived, is_archived
from .payments import Payment, PaymentStatus, derive_status, record_payment, set_amount_paid
from .profiles import Profile
from .reminders import EmailMessage, ReminderKind, ReminderSummary, classify_payment
from .analytics import AnalyticsSummary, DateRange, build_summary, calculate_trend
from .ratings import Rating, RatingSummary, summarize_ratings, validate_rating
from .projects import Project, next_stage, set_stage
from .meetings import Meeting, due_checkpoint, upcoming_meetings

__all__ = [
    # Assignments
    "Assignment",
    "AssignmentDraft",
    "AssignmentStatus",
    "Priority",
    "apply_status_transition",
    "available_transitions",
    "build_assignments",
    "is_valid_status_transition",
    # Archive
    "ArchiveOverrides",
    "AutoArchiveSettings",
    "archived_only",
    "filter_archived",
    "is_archived",
    # Payments
    "Payment",
    "PaymentStatus",
    "derive_status",
    "record_payment",
    "set_amount_paid",
    "Profile",
    # Reminders
    "EmailMessage",
    "ReminderKind",
    "ReminderSummary",
    "classify_payment",
    # Analytics
    "AnalyticsSummary",
    "DateRange",
    "build_summary",
    "calculate_trend",
    # Ratings
    "Rating",
    "RatingSummary",
    "summarize_ratings",
    "validate_rating",
    # Projects
    "Project",
    "next_stage",
    "set_stage",
    # Meetings
    "Meeting",
    "due_checkpoint",
    "upcoming_meetings",
]
