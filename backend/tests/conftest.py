"""Test fixtures for the checkout payments backend."""
from __future__ import annotations

import hashlib
import hmac
import json
import os
import time
from collections.abc import AsyncIterator, Iterator
from decimal import Decimal
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_secret")
os.environ.setdefault("TRANSACTION_STORE_BACKEND", "memory")

from app.core.config import get_settings
from app.core.settings import EmailSettings
from app.integrations import (
    IntentNotFoundError,
    PaymentIntent,
    StripeClient,
    StripeClientError,
    to_cents,
)
from app.main import app
from app.schemas.transaction import ConfirmedTransaction
from app.schemas.webhook import IntentPayload
from app.services.notification_service import EmailNotifier
from app.services.transaction_store import MemoryTransactionStore
from app.services.webhook_service import WebhookDispatcher

WEBHOOK_SECRET = "whsec_test_secret"


class FakeStripeClient(StripeClient):
    """Stripe client that keeps intents in memory but verifies signatures for real."""

    def __init__(self, *, webhook_secret: str | None = WEBHOOK_SECRET) -> None:
        super().__init__("sk_test_dummy", webhook_secret=webhook_secret)
        self.intents: dict[str, PaymentIntent] = {}
        self.create_calls: list[dict[str, Any]] = []
        self.error: StripeClientError | None = None

    def create_payment_intent(
        self,
        *,
        amount: Decimal,
        metadata: dict[str, str] | None = None,
        customer_email: str | None = None,
    ) -> PaymentIntent:
        self.create_calls.append(
            {"amount": amount, "metadata": dict(metadata or {}), "email": customer_email}
        )
        if self.error is not None:
            raise self.error
        intent_id = f"pi_test_{len(self.create_calls)}"
        intent = PaymentIntent(
            id=intent_id,
            client_secret=f"{intent_id}_secret_abc",
            amount=to_cents(amount),
            currency=self.currency,
            status="requires_payment_method",
            metadata=dict(metadata or {}),
        )
        self.intents[intent_id] = intent
        return intent

    def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntent:
        if self.error is not None:
            raise self.error
        try:
            return self.intents[payment_intent_id]
        except KeyError as exc:
            raise IntentNotFoundError(
                f"Payment intent {payment_intent_id} not found"
            ) from exc


class RecordingNotifier(EmailNotifier):
    """Notifier that records sends instead of talking to SMTP."""

    def __init__(self, *, fail: bool = False) -> None:
        super().__init__(
            EmailSettings(api_key="SG.test.key", from_address="noreply@example.com")
        )
        self.fail = fail
        self.confirmations: list[tuple[str | None, ConfirmedTransaction]] = []
        self.failures: list[tuple[str | None, IntentPayload]] = []

    async def send_confirmation(
        self, email: str | None, transaction: ConfirmedTransaction
    ) -> bool:
        self.confirmations.append((email, transaction))
        if self.fail:
            raise RuntimeError("email provider unavailable")
        return True

    async def send_failure_notice(self, email: str | None, intent: IntentPayload) -> bool:
        self.failures.append((email, intent))
        if self.fail:
            raise RuntimeError("email provider unavailable")
        return True


def sign_payload(
    payload: bytes, secret: str = WEBHOOK_SECRET, *, timestamp: int | None = None
) -> str:
    """Build a ``Stripe-Signature`` header for ``payload``."""
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.".encode() + payload
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def intent_event(
    event_type: str,
    intent_id: str,
    *,
    amount: int = 1500,
    email: str | None = "buyer@example.com",
    event_id: str = "evt_test_1",
    **extra: Any,
) -> bytes:
    metadata: dict[str, str] = {"code": "premium"}
    if email:
        metadata["email"] = email
    intent: dict[str, Any] = {
        "id": intent_id,
        "object": "payment_intent",
        "amount": amount,
        "currency": "usd",
        "status": "succeeded" if event_type.endswith("succeeded") else "requires_payment_method",
        "metadata": metadata,
    }
    intent.update(extra)
    event = {
        "id": event_id,
        "object": "event",
        "type": event_type,
        "created": int(time.time()),
        "data": {"object": intent},
    }
    return json.dumps(event).encode()


@pytest.fixture()
def settings_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[pytest.MonkeyPatch]:
    """Allow tests to override environment-driven settings."""
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


@pytest.fixture()
def stripe_client() -> FakeStripeClient:
    return FakeStripeClient()


@pytest.fixture()
def store() -> MemoryTransactionStore:
    return MemoryTransactionStore()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def dispatcher(
    stripe_client: FakeStripeClient,
    store: MemoryTransactionStore,
    notifier: RecordingNotifier,
) -> WebhookDispatcher:
    return WebhookDispatcher(stripe_client, store, notifier, side_effect_timeout=1.0)


@pytest_asyncio.fixture()
async def app_context(
    stripe_client: FakeStripeClient,
    store: MemoryTransactionStore,
    notifier: RecordingNotifier,
    dispatcher: WebhookDispatcher,
) -> AsyncIterator[dict[str, Any]]:
    """Yield an async client wired to in-memory collaborators."""
    app.state.stripe_client = stripe_client
    app.state.transaction_store = store
    app.state.notifier = notifier
    app.state.webhook_dispatcher = dispatcher

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield {
            "client": client,
            "stripe": stripe_client,
            "store": store,
            "notifier": notifier,
            "dispatcher": dispatcher,
        }

    for name in ("stripe_client", "transaction_store", "notifier", "webhook_dispatcher"):
        setattr(app.state, name, None)
