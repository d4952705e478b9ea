"""Tests for the reminder HTTP endpoint."""

from datetime import date, timedelta
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from ewpm.config import Config
from ewpm.core.payments import Payment
from ewpm.server import create_app


@pytest.fixture
def app_client(backend, sender):
    return TestClient(create_app(Config(), backend=backend, sender=sender))


@pytest.fixture
def today():
    return date(2025, 3, 10)


@pytest.fixture
def due_tomorrow(payment_repo, today):
    payment_repo.add(
        Payment(
            id="p1",
            client_name="Acme",
            invoice_amount=1000,
            due_date=today + timedelta(days=1),
            responsible_user_id="u1",
        )
    )


class TestSendPaymentReminders:
    @patch("ewpm.workflows.today_in")
    def test_sends(self, mock_today, app_client, due_tomorrow, sender, today):
        mock_today.return_value = today
        resp = app_client.post("/send-payment-reminders", json={"automatic": True})

        assert resp.status_code == 200
        assert resp.json() == {
            "success": True,
            "sent": 1,
            "skipped": 0,
            "overdue": 0,
            "upcoming_72h": 0,
            "upcoming_24h": 1,
        }
        assert sender.sent[0].to == ["asha@example.com"]

    @patch("ewpm.workflows.today_in")
    def test_empty_body(self, mock_today, app_client, due_tomorrow, today):
        mock_today.return_value = today
        resp = app_client.post("/send-payment-reminders")
        assert resp.status_code == 200
        assert resp.json()["sent"] == 1

    @patch("ewpm.workflows.today_in")
    def test_manual_run_resends(self, mock_today, app_client, due_tomorrow, sender, today):
        mock_today.return_value = today
        app_client.post("/send-payment-reminders", json={})
        resp = app_client.post("/send-payment-reminders", json={"automatic": False})
        assert resp.json()["sent"] == 1
        assert len(sender.sent) == 2

    def test_disabled(self, app_client, due_tomorrow, sender):
        resp = app_client.post("/send-payment-reminders", json={"paymentRemindersEnabled": False})
        assert resp.status_code == 200
        assert resp.json()["sent"] == 0
        assert sender.sent == []

    def test_invalid_body_is_400(self, app_client):
        resp = app_client.post("/send-payment-reminders", json={"reminderDays": "soon"})
        assert resp.status_code == 400
        assert resp.json()["success"] is False
        assert resp.json()["sent"] == 0

    def test_unexpected_error_is_500(self, app_client, payment_repo):
        with patch.object(payment_repo, "fetch_unpaid", side_effect=RuntimeError("db down")):
            resp = app_client.post("/send-payment-reminders", json={})
        assert resp.status_code == 500
        assert resp.json()["error"] == "db down"
        assert resp.json()["sent"] == 0


class TestHealth:
    def test_health(self, app_client):
        assert app_client.get("/health").json() == {"status": "ok"}
