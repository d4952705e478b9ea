"""Email adapters - Resend HTTP API and a logging dry run."""

import logging

import requests

from ewpm.core.reminders import EmailMessage
from ewpm.errors import EmailError

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
REQUEST_TIMEOUT = 30


class ResendEmailSender:
    """
    Resend email adapter.

    Implements EmailSender protocol. One POST per message, no retries.
    """

    def __init__(self, api_key: str, session: requests.Session | None = None):
        if not api_key:
            raise EmailError("Missing RESEND_API_KEY")
        self.api_key = api_key
        self._session = session or requests.Session()

    def send(self, message: EmailMessage) -> str | None:
        if not message.to:
            raise EmailError("Message has no recipient")
        try:
            resp = self._session.post(
                RESEND_API_URL,
                json=message.to_api(),
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise EmailError(f"Email service unreachable: {e}") from e

        if not resp.ok:
            raise EmailError(f"Email service error ({resp.status_code}): {resp.text}")
        return resp.json().get("id")


class LoggingEmailSender:
    """
    Dry-run sender used when no email API key is configured.

    Implements EmailSender protocol by logging the would-be email.
    """

    def __init__(self):
        self.sent: list[EmailMessage] = []

    def send(self, message: EmailMessage) -> str | None:
        logger.info(
            f"Email service not configured - would send {message.subject!r} to {', '.join(message.to)}"
        )
        self.sent.append(message)
        return None
