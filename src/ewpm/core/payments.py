"""Pure client payment logic - no I/O dependencies."""

from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum

from ewpm.errors import ValidationError

from .dates import parse_date, parse_datetime


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"


@dataclass
class Payment:
    """An invoice a responsible user must follow up until it is paid."""

    id: str
    client_name: str
    invoice_amount: float
    due_date: date
    responsible_user_id: str
    amount_paid: float = 0
    status: PaymentStatus = PaymentStatus.PENDING
    invoice_date: date | None = None
    project_id: str | None = None
    remarks: str | None = None
    updated_at: datetime | None = None
    last_overdue_reminder_at: datetime | None = None
    last_24h_reminder_at: datetime | None = None
    last_custom_reminder_at: datetime | None = None

    @property
    def remaining(self) -> float:
        """Amount still owed (never negative)."""
        return max(0, self.invoice_amount - self.amount_paid)

    def is_overdue(self, as_of: date) -> bool:
        """Due before as_of with money still owed."""
        return self.due_date < as_of and self.remaining > 0

    def days_until_due(self, as_of: date) -> int:
        """Days until due date (negative if overdue)."""
        return (self.due_date - as_of).days

    @classmethod
    def from_api(cls, data: dict) -> "Payment":
        """Create Payment from a `client_payments` table row."""
        return cls(
            id=data["id"],
            client_name=data["client_name"],
            invoice_amount=float(data["invoice_amount"]),
            amount_paid=float(data.get("amount_paid") or 0),
            due_date=parse_date(data["due_date"]),
            responsible_user_id=data["responsible_user_id"],
            status=PaymentStatus(data.get("status") or "pending"),
            invoice_date=parse_date(data.get("invoice_date")),
            project_id=data.get("project_id"),
            remarks=data.get("remarks"),
            updated_at=parse_datetime(data.get("updated_at")),
            last_overdue_reminder_at=parse_datetime(data.get("last_overdue_reminder_at")),
            last_24h_reminder_at=parse_datetime(data.get("last_24h_reminder_at")),
            last_custom_reminder_at=parse_datetime(data.get("last_custom_reminder_at")),
        )


def derive_status(invoice_amount: float, amount_paid: float) -> PaymentStatus:
    """The only status consistent with the amounts."""
    if amount_paid <= 0:
        return PaymentStatus.PENDING
    if amount_paid >= invoice_amount:
        return PaymentStatus.PAID
    return PaymentStatus.PARTIALLY_PAID


def status_mismatch(payment: Payment) -> bool:
    """True when a stored row's status disagrees with its amounts."""
    return payment.status != derive_status(payment.invoice_amount, payment.amount_paid)


def set_amount_paid(payment: Payment, amount_paid: float) -> Payment:
    """
    Return a copy with a new paid total and the matching status.

    Raises ValidationError unless 0 <= amount_paid <= invoice_amount.
    """
    if amount_paid < 0:
        raise ValidationError("Amount paid cannot be negative")
    if amount_paid > payment.invoice_amount:
        raise ValidationError(
            f"Amount paid {amount_paid} exceeds invoice amount {payment.invoice_amount}"
        )
    return replace(
        payment,
        amount_paid=amount_paid,
        status=derive_status(payment.invoice_amount, amount_paid),
    )


def record_payment(payment: Payment, amount: float) -> Payment:
    """Add a received instalment to the paid total."""
    if amount <= 0:
        raise ValidationError("Payment amount must be positive")
    return set_amount_paid(payment, payment.amount_paid + amount)


def mark_paid(payment: Payment) -> Payment:
    """Settle the invoice in full."""
    return set_amount_paid(payment, payment.invoice_amount)


def validate_new_payment(
    client_name: str, invoice_amount: float, invoice_date: date, due_date: date
) -> None:
    """Raise ValidationError for an unusable new invoice."""
    if not client_name.strip():
        raise ValidationError("Client name is required")
    if invoice_amount <= 0:
        raise ValidationError("Invoice amount must be positive")
    if due_date < invoice_date:
        raise ValidationError("Due date cannot be before the invoice date")


def amount_update_payload(payment: Payment) -> dict:
    """Columns to PATCH; amount and status always travel together."""
    return {"amount_paid": payment.amount_paid, "status": payment.status.value}
