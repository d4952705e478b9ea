"""Tests for core payment logic."""

from datetime import date

import pytest

from ewpm.core.payments import (
    Payment,
    PaymentStatus,
    amount_update_payload,
    derive_status,
    mark_paid,
    record_payment,
    set_amount_paid,
    status_mismatch,
    validate_new_payment,
)
from ewpm.errors import ValidationError


@pytest.fixture
def today():
    return date(2025, 3, 10)


@pytest.fixture
def payment():
    return Payment(
        id="p1",
        client_name="Acme Traders",
        invoice_amount=1000,
        due_date=date(2025, 3, 15),
        responsible_user_id="u1",
    )


class TestDeriveStatus:
    def test_nothing_paid(self):
        assert derive_status(1000, 0) == PaymentStatus.PENDING

    def test_partial(self):
        assert derive_status(1000, 400) == PaymentStatus.PARTIALLY_PAID

    def test_full(self):
        assert derive_status(1000, 1000) == PaymentStatus.PAID

    def test_mismatch_detected(self, payment):
        payment.amount_paid = 400
        assert status_mismatch(payment) is True
        payment.status = PaymentStatus.PARTIALLY_PAID
        assert status_mismatch(payment) is False


class TestPayment:
    def test_remaining(self, payment):
        payment.amount_paid = 400
        assert payment.remaining == 600

    def test_remaining_never_negative(self, payment):
        payment.amount_paid = 1200
        assert payment.remaining == 0

    def test_is_overdue(self, payment):
        assert payment.is_overdue(date(2025, 3, 16)) is True
        assert payment.is_overdue(date(2025, 3, 15)) is False

    def test_paid_is_not_overdue(self, payment):
        payment.amount_paid = 1000
        assert payment.is_overdue(date(2025, 4, 1)) is False

    def test_days_until_due(self, payment, today):
        assert payment.days_until_due(today) == 5
        assert payment.days_until_due(date(2025, 3, 17)) == -2

    def test_from_api(self):
        p = Payment.from_api(
            {
                "id": "p7",
                "client_name": "Globex",
                "invoice_amount": "2500.50",
                "amount_paid": None,
                "due_date": "2025-04-01",
                "invoice_date": "2025-03-01",
                "responsible_user_id": "u3",
                "status": "pending",
                "last_24h_reminder_at": "2025-03-31T03:30:00Z",
            }
        )
        assert p.invoice_amount == 2500.5
        assert p.amount_paid == 0
        assert p.due_date == date(2025, 4, 1)
        assert p.last_24h_reminder_at is not None
        assert p.last_overdue_reminder_at is None


class TestRecordPayment:
    def test_partial_payment(self, payment):
        updated = record_payment(payment, 400)
        assert updated.amount_paid == 400
        assert updated.status == PaymentStatus.PARTIALLY_PAID
        assert updated.remaining == 600

    def test_original_untouched(self, payment):
        record_payment(payment, 400)
        assert payment.amount_paid == 0
        assert payment.status == PaymentStatus.PENDING

    def test_instalments_add_up(self, payment):
        updated = record_payment(record_payment(payment, 400), 600)
        assert updated.status == PaymentStatus.PAID

    def test_overpayment_rejected(self, payment):
        with pytest.raises(ValidationError, match="exceeds"):
            record_payment(payment, 1001)

    def test_non_positive_rejected(self, payment):
        with pytest.raises(ValidationError):
            record_payment(payment, 0)

    def test_negative_paid_rejected(self, payment):
        with pytest.raises(ValidationError):
            set_amount_paid(payment, -1)

    def test_reset_to_zero_is_pending(self, payment):
        assert set_amount_paid(record_payment(payment, 300), 0).status == PaymentStatus.PENDING

    def test_mark_paid(self, payment):
        updated = mark_paid(payment)
        assert updated.amount_paid == 1000
        assert updated.status == PaymentStatus.PAID

    def test_payload_carries_status(self, payment):
        assert amount_update_payload(record_payment(payment, 400)) == {
            "amount_paid": 400,
            "status": "partially_paid",
        }


class TestValidateNewPayment:
    def test_valid(self):
        validate_new_payment("Acme", 100, date(2025, 3, 1), date(2025, 3, 31))

    def test_missing_client(self):
        with pytest.raises(ValidationError):
            validate_new_payment(" ", 100, date(2025, 3, 1), date(2025, 3, 31))

    def test_non_positive_amount(self):
        with pytest.raises(ValidationError):
            validate_new_payment("Acme", 0, date(2025, 3, 1), date(2025, 3, 31))

    def test_due_before_invoice(self):
        with pytest.raises(ValidationError):
            validate_new_payment("Acme", 100, date(2025, 3, 1), date(2025, 2, 28))
