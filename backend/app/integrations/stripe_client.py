"""Stripe SDK wrapper for payment intents and webhook signatures."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import stripe

from app.core.errors import ConfigurationError


@dataclass(slots=True)
class PaymentIntent:
    """Simplified payment intent payload."""

    id: str
    client_secret: str | None
    amount: int
    currency: str
    status: str
    metadata: dict[str, str] = field(default_factory=dict)
    card_brand: str | None = None
    card_last4: str | None = None


class StripeClientError(RuntimeError):
    """Raised when Stripe interaction fails."""


class IntentNotFoundError(StripeClientError):
    """Raised when Stripe has no payment intent with the requested id."""


class WebhookSignatureError(StripeClientError):
    """Raised when a webhook payload does not carry a valid signature."""


def to_cents(amount: Decimal) -> int:
    """Convert a major-unit amount to integer minor units, rounding half up."""

    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _as_dict(obj: Any) -> dict[str, Any]:
    if obj is None:
        return {}
    if isinstance(obj, dict):
        return obj
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(obj)


def _provider_message(exc: stripe.StripeError) -> str:
    return exc.user_message or str(exc) or exc.__class__.__name__


class StripeClient:
    """Wrapper around the Stripe SDK bound to one secret key."""

    def __init__(
        self,
        secret_key: str | None,
        *,
        webhook_secret: str | None = None,
        currency: str = "usd",
        webhook_tolerance: int = 300,
        max_network_retries: int = 2,
    ) -> None:
        if not secret_key:
            raise ConfigurationError("STRIPE_SECRET_KEY is not configured")
        self._secret_key = secret_key
        self._webhook_secret = webhook_secret
        self._currency = currency
        self._webhook_tolerance = webhook_tolerance
        stripe.max_network_retries = max_network_retries

    @property
    def webhook_secret(self) -> str | None:
        return self._webhook_secret

    @property
    def currency(self) -> str:
        return self._currency

    @staticmethod
    def _to_payment_intent(intent: Any) -> PaymentIntent:
        data = _as_dict(intent)
        metadata = {str(k): str(v) for k, v in _as_dict(data.get("metadata")).items()}
        card_brand = card_last4 = None
        payment_method = data.get("payment_method")
        if payment_method is not None and not isinstance(payment_method, str):
            card = _as_dict(_as_dict(payment_method).get("card"))
            card_brand = card.get("brand")
            card_last4 = card.get("last4")
        return PaymentIntent(
            id=str(data.get("id")),
            client_secret=data.get("client_secret"),
            amount=int(data.get("amount") or 0),
            currency=str(data.get("currency", "usd")),
            status=str(data.get("status", "unknown")),
            metadata=metadata,
            card_brand=card_brand,
            card_last4=card_last4,
        )

    def create_payment_intent(
        self,
        *,
        amount: Decimal,
        metadata: dict[str, str] | None = None,
        customer_email: str | None = None,
    ) -> PaymentIntent:
        kwargs: dict[str, Any] = {
            "amount": to_cents(amount),
            "currency": self._currency,
            "automatic_payment_methods": {"enabled": True},
            "metadata": dict(metadata or {}),
        }
        if customer_email:
            kwargs["receipt_email"] = customer_email

        try:
            intent = stripe.PaymentIntent.create(api_key=self._secret_key, **kwargs)
        except stripe.StripeError as exc:
            raise StripeClientError(_provider_message(exc)) from exc
        return self._to_payment_intent(intent)

    def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntent:
        try:
            intent = stripe.PaymentIntent.retrieve(
                payment_intent_id,
                api_key=self._secret_key,
                expand=["payment_method"],
            )
        except stripe.InvalidRequestError as exc:
            if exc.code == "resource_missing":
                raise IntentNotFoundError(
                    f"Payment intent {payment_intent_id} not found"
                ) from exc
            raise StripeClientError(_provider_message(exc)) from exc
        except stripe.StripeError as exc:
            raise StripeClientError(_provider_message(exc)) from exc
        return self._to_payment_intent(intent)

    def construct_event(self, payload: bytes, signature: str) -> dict[str, Any]:
        """Verify ``signature`` over the raw ``payload`` and decode the event."""

        if not self._webhook_secret:
            raise ConfigurationError("STRIPE_WEBHOOK_SECRET is not configured")
        try:
            body = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise WebhookSignatureError("Webhook payload is not valid UTF-8") from exc
        try:
            stripe.WebhookSignature.verify_header(
                body, signature, self._webhook_secret, self._webhook_tolerance
            )
        except stripe.SignatureVerificationError as exc:
            raise WebhookSignatureError("Invalid webhook signature") from exc
        try:
            event = json.loads(body)
        except json.JSONDecodeError as exc:
            raise WebhookSignatureError("Invalid webhook payload") from exc
        if not isinstance(event, dict):
            raise WebhookSignatureError("Invalid webhook payload")
        return event
