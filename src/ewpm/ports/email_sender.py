"""Email sending interface."""

from typing import Protocol

from ewpm.core.reminders import EmailMessage


class EmailSender(Protocol):
    """Interface for delivering one email."""

    def send(self, message: EmailMessage) -> str | None:
        """Send the message. Returns the provider's message id, if any."""
        ...
