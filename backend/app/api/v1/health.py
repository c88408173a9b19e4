"""Health check endpoints."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Request

from app.core.config import get_settings
from app.core.settings import get_email_settings, get_payment_settings

router = APIRouter()


@router.get("", summary="Service health status")
async def healthcheck(request: Request) -> dict[str, Any]:
    """Report which integrations are configured; never fails."""
    settings = get_settings()
    payment = get_payment_settings()
    email = get_email_settings()
    state = request.app.state
    store = getattr(state, "transaction_store", None)
    prefix = settings.api_v1_prefix
    return {
        "status": "healthy",
        "service": settings.app_name,
        "timestamp": datetime.now(UTC).isoformat(),
        "app_env": settings.app_env,
        "environment": {
            "stripe_secret_key": bool(payment.stripe_secret_key),
            "stripe_publishable_key": bool(payment.stripe_publishable_key),
            "stripe_webhook_secret": bool(payment.stripe_webhook_secret),
            "email_api_key": bool(email.api_key),
            "email_from": bool(email.from_address),
        },
        "services": {
            "payments": getattr(state, "stripe_client", None) is not None,
            "webhook": bool(payment.stripe_webhook_secret),
            "email": email.configured,
            "transaction_store": store is not None,
        },
        "store_backend": store.backend if store is not None else None,
        "endpoints": {
            "charge_intent": f"{prefix}/charge-intent",
            "webhook": f"{prefix}/webhook",
            "transactions": f"{prefix}/transactions",
            "pricing": f"{prefix}/pricing",
        },
    }
