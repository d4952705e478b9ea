"""Tests for the email adapters."""

from unittest.mock import MagicMock

import pytest
import requests

from ewpm.adapters.resend_email import RESEND_API_URL, LoggingEmailSender, ResendEmailSender
from ewpm.core.reminders import EmailMessage
from ewpm.errors import EmailError


@pytest.fixture
def message():
    return EmailMessage(
        sender="EWPM <noreply@example.com>",
        to=["asha@example.com"],
        subject="Payment due within 24 hours: Acme",
        html="<p>hi</p>",
        text="hi",
    )


@pytest.fixture
def session():
    return MagicMock()


class TestResendEmailSender:
    def test_requires_key(self):
        with pytest.raises(EmailError):
            ResendEmailSender("")

    def test_posts_message(self, session, message):
        session.post.return_value = MagicMock(ok=True, **{"json.return_value": {"id": "em_1"}})
        sender = ResendEmailSender("re_123", session=session)

        assert sender.send(message) == "em_1"
        args, kwargs = session.post.call_args
        assert args[0] == RESEND_API_URL
        assert kwargs["headers"] == {"Authorization": "Bearer re_123"}
        assert kwargs["json"]["from"] == "EWPM <noreply@example.com>"
        assert kwargs["json"]["to"] == ["asha@example.com"]

    def test_api_error(self, session, message):
        session.post.return_value = MagicMock(ok=False, status_code=422, text="invalid `to`")
        with pytest.raises(EmailError, match="422"):
            ResendEmailSender("re_123", session=session).send(message)

    def test_network_error(self, session, message):
        session.post.side_effect = requests.ConnectionError("refused")
        with pytest.raises(EmailError, match="unreachable"):
            ResendEmailSender("re_123", session=session).send(message)

    def test_no_recipient(self, session, message):
        message.to = []
        with pytest.raises(EmailError):
            ResendEmailSender("re_123", session=session).send(message)
        session.post.assert_not_called()


class TestLoggingEmailSender:
    def test_records_without_sending(self, message, caplog):
        sender = LoggingEmailSender()
        with caplog.at_level("INFO"):
            assert sender.send(message) is None
        assert sender.sent == [message]
        assert "asha@example.com" in caplog.text
