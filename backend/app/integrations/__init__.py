"""Integration shortcuts."""

from .stripe_client import (
    IntentNotFoundError,
    PaymentIntent,
    StripeClient,
    StripeClientError,
    WebhookSignatureError,
    to_cents,
)

__all__ = [
    "IntentNotFoundError",
    "PaymentIntent",
    "StripeClient",
    "StripeClientError",
    "WebhookSignatureError",
    "to_cents",
]
