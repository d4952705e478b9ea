"""HTTP endpoint for the payment reminder batch job."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .config import Config, load_config
from .core.reminders import ReminderSummary
from .ports import EmailSender
from .workflows import Backend, handle_reminder_request

logger = logging.getLogger(__name__)


class ReminderBody(BaseModel):
    automatic: bool = True
    paymentRemindersEnabled: bool | None = None
    reminderDays: int | None = None
    reminderTime: str | None = None
    paymentIds: list[str] = []


def create_app(
    config: Config | None = None,
    backend: Backend | None = None,
    sender: EmailSender | None = None,
) -> FastAPI:
    """Build the API. Tests pass in fake backends and senders."""
    config = config or load_config()
    app = FastAPI(title="EWPM Payment Reminders API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_body_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Rejected reminder request body: {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content=ReminderSummary.failed("Invalid request body").to_dict(),
        )

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.post("/send-payment-reminders")
    def send_payment_reminders(body: ReminderBody | None = None):
        payload = body.model_dump(exclude_none=True) if body else {}
        status_code, content = handle_reminder_request(
            payload, config, backend=backend, sender=sender
        )
        return JSONResponse(status_code=status_code, content=content)

    return app
