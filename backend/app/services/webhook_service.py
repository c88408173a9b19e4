"""Verify inbound Stripe webhooks and dispatch their side effects.

A delivery moves through ``unverified -> verified -> dispatched -> recorded``.
Only a good signature leaves ``unverified`` (anything else ends in
``rejected`` with no side effects), every verified event is dispatched, and
only succeeded payments reach ``recorded``. Stripe delivers at least once and
in no particular order, so each event is handled purely on its embedded
payment intent id and recording is idempotent on that id.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from pydantic import ValidationError

from app.core.errors import TransactionStoreError, WebhookRejected
from app.integrations import StripeClient, WebhookSignatureError
from app.schemas.transaction import NO_EMAIL, ConfirmedTransaction
from app.schemas.webhook import EventKind, IntentPayload, WebhookEvent
from app.services.notification_service import EmailNotifier
from app.services.transaction_store import TransactionStore

logger = logging.getLogger(__name__)


class WebhookState(str, enum.Enum):
    UNVERIFIED = "unverified"
    VERIFIED = "verified"
    REJECTED = "rejected"
    DISPATCHED = "dispatched"
    RECORDED = "recorded"


@dataclass(slots=True)
class DispatchOutcome:
    """What happened to one verified delivery."""

    event_id: str
    kind: EventKind
    state: WebhookState
    recorded: bool = False
    duplicate: bool = False
    notified: bool = False


def resolve_customer_email(intent: IntentPayload) -> str:
    """Prefer the email this service stored in metadata over ``receipt_email``."""

    return intent.metadata.get("email") or intent.receipt_email or NO_EMAIL


def build_transaction(intent: IntentPayload) -> ConfirmedTransaction:
    return ConfirmedTransaction(
        id=intent.id,
        amount=intent.amount,
        currency=intent.currency,
        customer_email=resolve_customer_email(intent),
        metadata={k: v for k, v in intent.metadata.items() if k != "email"},
    )


class WebhookDispatcher:
    """Signature check plus event-kind dispatch for Stripe deliveries."""

    def __init__(
        self,
        stripe: StripeClient,
        store: TransactionStore,
        notifier: EmailNotifier,
        *,
        side_effect_timeout: float = 5.0,
    ) -> None:
        self._stripe = stripe
        self._store = store
        self._notifier = notifier
        self._timeout = side_effect_timeout

    def verify(self, payload: bytes, signature: str | None) -> WebhookEvent:
        """Return the parsed event or raise ``WebhookRejected``.

        ``payload`` must be the untouched request body. ``ConfigurationError``
        propagates when no webhook secret is configured.
        """

        if not signature:
            raise WebhookRejected("Missing stripe-signature header")
        try:
            raw_event = self._stripe.construct_event(payload, signature)
        except WebhookSignatureError as exc:
            logger.warning("Rejected webhook delivery: %s", exc)
            raise WebhookRejected(str(exc)) from exc
        try:
            return WebhookEvent.from_stripe(raw_event)
        except (ValidationError, TypeError, ValueError) as exc:
            logger.warning("Rejected webhook delivery with malformed event: %s", exc)
            raise WebhookRejected("Invalid webhook payload") from exc

    async def handle(self, payload: bytes, signature: str | None) -> DispatchOutcome:
        event = self.verify(payload, signature)
        return await self.dispatch(event)

    async def dispatch(self, event: WebhookEvent) -> DispatchOutcome:
        if event.kind is EventKind.SUCCEEDED and event.payload is not None:
            return await self._on_succeeded(event, event.payload)
        if event.kind is EventKind.FAILED and event.payload is not None:
            return await self._on_failed(event, event.payload)
        logger.info("Ignoring webhook event %s of type %s", event.id, event.type)
        return DispatchOutcome(event.id, event.kind, WebhookState.DISPATCHED)

    async def _on_succeeded(
        self, event: WebhookEvent, intent: IntentPayload
    ) -> DispatchOutcome:
        outcome = DispatchOutcome(event.id, event.kind, WebhookState.DISPATCHED)
        transaction = build_transaction(intent)
        try:
            written = await asyncio.wait_for(
                self._store.append(transaction), timeout=self._timeout
            )
        except TransactionStoreError as exc:
            logger.error(
                "Transaction store append failed for %s: %s",
                transaction.id,
                exc,
                extra={"operation": exc.operation, "transaction_id": transaction.id},
            )
            return outcome
        except TimeoutError:
            logger.error(
                "Transaction store append for %s timed out after %ss",
                transaction.id,
                self._timeout,
            )
            return outcome

        outcome.state = WebhookState.RECORDED
        outcome.recorded = written
        outcome.duplicate = not written
        if written:
            logger.info(
                "Recorded transaction %s (%s %s)",
                transaction.id,
                transaction.amount,
                transaction.currency,
            )
        else:
            logger.info("Transaction %s already recorded; skipping", transaction.id)

        outcome.notified = await self._guarded(
            "confirmation email",
            transaction.id,
            self._notifier.send_confirmation,
            transaction.customer_email,
            transaction,
        )
        return outcome

    async def _on_failed(self, event: WebhookEvent, intent: IntentPayload) -> DispatchOutcome:
        logger.info(
            "Payment %s failed: %s", intent.id, intent.failure_message or "unknown reason"
        )
        outcome = DispatchOutcome(event.id, event.kind, WebhookState.DISPATCHED)
        outcome.notified = await self._guarded(
            "failure email",
            intent.id,
            self._notifier.send_failure_notice,
            resolve_customer_email(intent),
            intent,
        )
        return outcome

    async def _guarded(
        self,
        label: str,
        intent_id: str,
        send: Callable[..., Awaitable[bool]],
        *args: object,
    ) -> bool:
        try:
            return bool(await asyncio.wait_for(send(*args), timeout=self._timeout))
        except TimeoutError:
            logger.error("%s for %s timed out after %ss", label, intent_id, self._timeout)
        except Exception:  # notification is best effort
            logger.exception("%s for %s failed", label, intent_id)
        return False
