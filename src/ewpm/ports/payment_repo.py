"""Payment repository interface."""

from datetime import date, datetime
from typing import Protocol

from ewpm.core.payments import Payment


class PaymentRepository(Protocol):
    """Interface for client payment rows and their reminder checkpoints."""

    def fetch_unpaid(self) -> list[Payment]:
        """Fetch payments whose status is not paid."""
        ...

    def fetch_by_ids(self, payment_ids: list[str]) -> list[Payment]:
        """Fetch specific payments."""
        ...

    def fetch_invoiced_between(self, start: date, end: date) -> list[Payment]:
        """Fetch payments whose invoice date falls in [start, end]."""
        ...

    def claim_reminder(self, payment_id: str, field: str, sent_at: datetime) -> bool:
        """Set `field` only if it is still empty. True if this caller won."""
        ...

    def release_reminder(self, payment_id: str, field: str) -> None:
        """Clear a claim taken by claim_reminder."""
        ...

    def mark_reminder_sent(self, payment_id: str, field: str, sent_at: datetime) -> None:
        """Unconditionally record when a reminder went out."""
        ...

    def update_amounts(self, payment_id: str, changes: dict) -> Payment:
        """Apply amount/status changes and return the stored row."""
        ...
