"""Pure payment reminder classification and formatting - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from html import escape

from .payments import Payment, PaymentStatus
from .profiles import Profile

DEFAULT_LEAD_DAYS = 3


class ReminderKind(str, Enum):
    OVERDUE = "overdue"
    DUE_24H = "24h"
    CUSTOM = "custom"

    @property
    def sent_field(self) -> str:
        """Payment column holding the last time this reminder went out."""
        return {
            ReminderKind.OVERDUE: "last_overdue_reminder_at",
            ReminderKind.DUE_24H: "last_24h_reminder_at",
            ReminderKind.CUSTOM: "last_custom_reminder_at",
        }[self]


@dataclass
class EmailMessage:
    """One outbound email, in the shape the email API accepts."""

    sender: str
    to: list[str]
    subject: str
    html: str
    text: str

    def to_api(self) -> dict:
        return {
            "from": self.sender,
            "to": self.to,
            "subject": self.subject,
            "html": self.html,
            "text": self.text,
        }


@dataclass
class ReminderSummary:
    """Aggregate counters for one batch run."""

    success: bool = True
    sent: int = 0
    skipped: int = 0
    overdue: int = 0
    upcoming_lead: int = 0
    upcoming_24h: int = 0
    error: str | None = None
    details: list[dict] = field(default_factory=list)

    def count_sent(self, kind: ReminderKind) -> None:
        self.sent += 1
        match kind:
            case ReminderKind.OVERDUE:
                self.overdue += 1
            case ReminderKind.DUE_24H:
                self.upcoming_24h += 1
            case ReminderKind.CUSTOM:
                self.upcoming_lead += 1

    def to_dict(self) -> dict:
        data = {
            "success": self.success,
            "sent": self.sent,
            "skipped": self.skipped,
            "overdue": self.overdue,
            "upcoming_72h": self.upcoming_lead,
            "upcoming_24h": self.upcoming_24h,
        }
        if self.error:
            data["error"] = self.error
        return data

    @classmethod
    def failed(cls, error: str) -> "ReminderSummary":
        return cls(success=False, error=error)


def already_sent(payment: Payment, kind: ReminderKind) -> bool:
    return getattr(payment, kind.sent_field) is not None


def classify_payment(
    payment: Payment,
    today: date,
    lead_days: int = DEFAULT_LEAD_DAYS,
    idempotent: bool = True,
) -> ReminderKind | None:
    """
    Pick at most one reminder for a payment this run.

    Priority order: overdue, due tomorrow, due in `lead_days`. A kind that
    was already sent is passed over unless idempotent is False.
    """
    if payment.status == PaymentStatus.PAID or payment.remaining <= 0:
        return None

    def eligible(kind: ReminderKind) -> bool:
        return not idempotent or not already_sent(payment, kind)

    if payment.due_date < today:
        # An overdue invoice never falls through to the upcoming checks
        return ReminderKind.OVERDUE if eligible(ReminderKind.OVERDUE) else None
    if payment.due_date == today + timedelta(days=1):
        if eligible(ReminderKind.DUE_24H):
            return ReminderKind.DUE_24H
    if payment.due_date == today + timedelta(days=lead_days):
        if eligible(ReminderKind.CUSTOM):
            return ReminderKind.CUSTOM
    return None


def format_amount(amount: float) -> str:
    if amount == int(amount):
        return f"₹{int(amount):,}"
    return f"₹{amount:,.2f}"


SUBJECTS = {
    ReminderKind.OVERDUE: "OVERDUE PAYMENT REMINDER: {client}",
    ReminderKind.DUE_24H: "Payment due within 24 hours: {client}",
    ReminderKind.CUSTOM: "Upcoming payment due in {days} days: {client}",
}

URGENCY = {
    ReminderKind.OVERDUE: "HIGH - PAYMENT OVERDUE",
    ReminderKind.DUE_24H: "CRITICAL - DUE WITHIN 24H",
    ReminderKind.CUSTOM: "MEDIUM - FOLLOW UP REQUIRED",
}


def build_reminder_email(
    payment: Payment,
    profile: Profile,
    kind: ReminderKind,
    today: date,
    sender: str,
    app_url: str = "",
) -> EmailMessage:
    """Render the reminder for the payment's responsible user."""
    days = payment.days_until_due(today)
    if days < 0:
        timing = f"{-days} day{'s' if days != -1 else ''} overdue"
    else:
        timing = f"{days} day{'s' if days != 1 else ''} remaining"

    name = profile.name or "Team Member"
    status_label = payment.status.value.replace("_", " ").upper()
    subject = SUBJECTS[kind].format(client=payment.client_name, days=days)

    rows = [
        ("Client Name", payment.client_name),
        ("Invoice Amount", format_amount(payment.invoice_amount)),
        ("Amount Due", format_amount(payment.remaining)),
        ("Due Date", payment.due_date.strftime("%d %b %Y")),
        ("Status", status_label),
        ("Timing", timing),
    ]

    text_lines = [
        f"Dear {name},",
        "",
        "You are responsible for collecting the following payment:",
        "",
        *(f"{label}: {value}" for label, value in rows),
        "",
        f"Urgency: {URGENCY[kind]}",
        "",
        "If you have already collected it, please update the payment in the system.",
    ]
    if app_url:
        text_lines.append(f"{app_url.rstrip('/')}/payments")

    html_rows = "\n".join(
        f"<tr><td><strong>{escape(label)}</strong></td><td>{escape(str(value))}</td></tr>"
        for label, value in rows
    )
    link = ""
    if app_url:
        link = f'<p><a href="{escape(app_url.rstrip("/"))}/payments">View payment details</a></p>'
    html = (
        "<!DOCTYPE html><html><body>"
        f"<p>Dear <strong>{escape(name)}</strong>,</p>"
        "<p>You are responsible for collecting the following payment:</p>"
        f"<table>{html_rows}</table>"
        f"<p><strong>Urgency:</strong> {escape(URGENCY[kind])}</p>"
        "<p>If you have already collected it, please update the payment in the system.</p>"
        f"{link}"
        "</body></html>"
    )

    return EmailMessage(
        sender=sender,
        to=[profile.email] if profile.email else [],
        subject=subject,
        html=html,
        text="\n".join(text_lines),
    )
