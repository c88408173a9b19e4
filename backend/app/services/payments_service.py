"""Service layer for creating and retrieving charge intents."""

from __future__ import annotations

import logging

from fastapi.concurrency import run_in_threadpool

from app.core.errors import ChargeValidationError
from app.integrations import StripeClient, StripeClientError
from app.schemas.payments import ChargeRequest, SimplifiedIntent
from app.services import pricing_service

logger = logging.getLogger(__name__)


def _intent_metadata(request: ChargeRequest, amount_label: str) -> dict[str, str]:
    metadata = {
        "email": request.email,
        "code": request.code,
        "amount": amount_label,
        "code1": request.code1,
        "code2": request.code2,
    }
    return {key: value for key, value in metadata.items() if value}


async def create_intent(stripe: StripeClient, request: ChargeRequest) -> str:
    """Create a PaymentIntent for ``request`` and return its client secret.

    Validation happens before any provider call. The email and code travel
    as intent metadata so the webhook handler can rely on values Stripe
    round-trips rather than on anything the browser sends later.
    """

    if request.amount is None and not request.code:
        raise ChargeValidationError("Either an amount or a code is required")
    amount = pricing_service.resolve_charge_amount(request.amount, request.code)
    if amount is None or amount < pricing_service.MIN_CHARGE_AMOUNT:
        raise ChargeValidationError(
            f"Amount must be at least ${pricing_service.MIN_CHARGE_AMOUNT:.2f}"
        )
    if amount > pricing_service.MAX_CHARGE_AMOUNT:
        raise ChargeValidationError(
            f"Amount must be at most ${pricing_service.MAX_CHARGE_AMOUNT:,.2f}"
        )

    metadata = _intent_metadata(request, f"{amount:.2f}")
    intent = await run_in_threadpool(
        stripe.create_payment_intent,
        amount=amount,
        metadata=metadata,
        customer_email=request.email,
    )
    logger.info("Created payment intent %s for %s", intent.id, metadata["amount"])
    if not intent.client_secret:
        raise StripeClientError("Payment provider returned no client secret")
    return intent.client_secret


async def retrieve_intent(stripe: StripeClient, payment_intent_id: str) -> SimplifiedIntent:
    """Return a display view of the intent, including card brand/last-4."""

    if not payment_intent_id:
        raise ChargeValidationError("Payment intent id is required")
    intent = await run_in_threadpool(stripe.retrieve_payment_intent, payment_intent_id)
    return SimplifiedIntent.model_validate(intent)
