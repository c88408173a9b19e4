"""Transactional email for payment outcomes.

Email is a soft dependency: a missing recipient or an unconfigured provider
turns every send into a logged no-op, and delivery failures are logged and
swallowed so they can never fail a webhook acknowledgement.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.core.settings import EmailSettings
from app.schemas.transaction import NO_EMAIL, ConfirmedTransaction
from app.schemas.webhook import IntentPayload
from app.security.redact import mask_email

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).resolve().parents[1] / "templates"
_ENV = Environment(
    loader=FileSystemLoader(_TEMPLATE_DIR),
    autoescape=select_autoescape(["html", "xml"]),
)


def format_amount(cents: int, currency: str) -> str:
    value = cents / 100
    if currency.lower() == "usd":
        return f"${value:,.2f}"
    return f"{value:,.2f} {currency.upper()}"


def build_confirmation_email(transaction: ConfirmedTransaction) -> tuple[str, str]:
    amount = format_amount(transaction.amount, transaction.currency)
    subject = f"Payment received: {amount}"
    html = _ENV.get_template("payment_confirmation.html").render(
        amount=amount,
        transaction_id=transaction.id,
        paid_at=transaction.timestamp.strftime("%B %d, %Y %H:%M UTC"),
        code=transaction.metadata.get("code"),
    )
    return subject, html


def build_failure_email(intent: IntentPayload) -> tuple[str, str]:
    amount = format_amount(intent.amount, intent.currency)
    subject = "Your payment could not be completed"
    html = _ENV.get_template("payment_failed.html").render(
        amount=amount,
        payment_intent_id=intent.id,
        reason=intent.failure_message,
    )
    return subject, html


class EmailNotifier:
    """Send payment emails through an SMTP relay authenticated by API key."""

    def __init__(self, settings: EmailSettings, *, timeout: float = 10.0) -> None:
        self._settings = settings
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return self._settings.configured

    def _should_send(self, email: str | None, kind: str) -> bool:
        if not email or email == NO_EMAIL:
            logger.debug("No recipient for %s email; skipping", kind)
            return False
        if not self.configured:
            logger.info("Email provider not configured; skipping %s email", kind)
            return False
        return True

    async def send_confirmation(
        self, email: str | None, transaction: ConfirmedTransaction
    ) -> bool:
        if not self._should_send(email, "confirmation"):
            return False
        subject, html = build_confirmation_email(transaction)
        return await self._send(str(email), subject, html, transaction_id=transaction.id)

    async def send_failure_notice(self, email: str | None, intent: IntentPayload) -> bool:
        if not self._should_send(email, "failure"):
            return False
        subject, html = build_failure_email(intent)
        return await self._send(str(email), subject, html, transaction_id=intent.id)

    async def _send(self, to_email: str, subject: str, html: str, **context: Any) -> bool:
        try:
            await asyncio.to_thread(self._deliver, to_email, subject, html)
        except Exception:  # provider failures never propagate
            logger.exception(
                "Failed to send email to %s (%s)", mask_email(to_email), context
            )
            return False
        logger.info("Email sent to %s: %s", mask_email(to_email), subject)
        return True

    def _deliver(self, to_email: str, subject: str, html_body: str) -> None:
        settings = self._settings
        message = EmailMessage()
        message["Subject"] = subject
        message["To"] = to_email
        message["From"] = str(settings.from_address)
        message.set_content("This message contains HTML content.")
        message.add_alternative(html_body, subtype="html")

        with smtplib.SMTP(
            settings.smtp_host, settings.smtp_port, timeout=self._timeout
        ) as server:
            server.starttls()
            server.login(settings.smtp_username, str(settings.api_key))
            server.send_message(message)


__all__ = [
    "EmailNotifier",
    "build_confirmation_email",
    "build_failure_email",
    "format_amount",
]
