"""Common API dependencies.

Long-lived collaborators are built once in the application lifespan and kept
on ``app.state``; these helpers hand them to route handlers.
"""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from app.integrations import StripeClient
from app.services.notification_service import EmailNotifier
from app.services.transaction_store import TransactionStore
from app.services.webhook_service import WebhookDispatcher


def _state(request: Request, name: str, label: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} is not available",
        )
    return value


def get_stripe_client(request: Request) -> StripeClient:
    """Return the process-wide Stripe client."""
    return _state(request, "stripe_client", "Payment provider")


def get_transaction_store(request: Request) -> TransactionStore:
    return _state(request, "transaction_store", "Transaction store")


def get_notifier(request: Request) -> EmailNotifier:
    return _state(request, "notifier", "Email notifier")


def get_webhook_dispatcher(request: Request) -> WebhookDispatcher:
    return _state(request, "webhook_dispatcher", "Webhook dispatcher")
