"""Email notifier behaviour without a live SMTP relay."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from app.core.settings import EmailSettings
from app.schemas.transaction import NO_EMAIL, ConfirmedTransaction
from app.schemas.webhook import IntentPayload
from app.services import notification_service
from app.services.notification_service import EmailNotifier

CONFIGURED = EmailSettings(api_key="SG.test.key", from_address="noreply@example.com")


def _transaction() -> ConfirmedTransaction:
    return ConfirmedTransaction(
        id="pi_123",
        amount=1234,
        currency="usd",
        customer_email="buyer@example.com",
        timestamp=datetime(2025, 5, 1, 12, tzinfo=UTC),
        metadata={"code": "premium"},
    )


@pytest.fixture()
def sent(monkeypatch: pytest.MonkeyPatch) -> list[tuple[str, str, str]]:
    deliveries: list[tuple[str, str, str]] = []

    def _fake_deliver(self, to_email: str, subject: str, html_body: str) -> None:
        deliveries.append((to_email, subject, html_body))

    monkeypatch.setattr(EmailNotifier, "_deliver", _fake_deliver)
    return deliveries


@pytest.mark.asyncio
async def test_confirmation_renders_and_sends(sent) -> None:
    notifier = EmailNotifier(CONFIGURED)
    assert await notifier.send_confirmation("buyer@example.com", _transaction()) is True

    to_email, subject, html = sent[0]
    assert to_email == "buyer@example.com"
    assert subject == "Payment received: $12.34"
    assert "pi_123" in html
    assert "premium" in html


@pytest.mark.asyncio
@pytest.mark.parametrize("email", [None, "", NO_EMAIL])
async def test_missing_recipient_is_noop(sent, email) -> None:
    notifier = EmailNotifier(CONFIGURED)
    assert await notifier.send_confirmation(email, _transaction()) is False
    assert sent == []


@pytest.mark.asyncio
async def test_unconfigured_provider_is_noop(sent) -> None:
    notifier = EmailNotifier(EmailSettings())
    assert notifier.configured is False
    assert await notifier.send_confirmation("buyer@example.com", _transaction()) is False
    assert sent == []


@pytest.mark.asyncio
async def test_provider_errors_are_swallowed(monkeypatch: pytest.MonkeyPatch) -> None:
    def _boom(self, to_email: str, subject: str, html_body: str) -> None:
        raise ConnectionRefusedError("relay down")

    monkeypatch.setattr(EmailNotifier, "_deliver", _boom)
    notifier = EmailNotifier(CONFIGURED)
    intent = IntentPayload(id="pi_9", amount=500, currency="usd")
    assert await notifier.send_failure_notice("buyer@example.com", intent) is False


def test_failure_email_includes_reason() -> None:
    intent = IntentPayload(
        id="pi_9",
        amount=500,
        currency="usd",
        last_payment_error={"message": "Card declined"},
    )
    subject, html = notification_service.build_failure_email(intent)
    assert subject == "Your payment could not be completed"
    assert "Card declined" in html
    assert "$5.00" in html


def test_format_amount_non_usd() -> None:
    assert notification_service.format_amount(123456, "eur") == "1,234.56 EUR"
