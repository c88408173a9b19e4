"""Service layer exports."""
from app.services import (
    notification_service,
    payments_service,
    pricing_service,
    transaction_store,
    webhook_service,
)

__all__ = [
    "notification_service",
    "payments_service",
    "pricing_service",
    "transaction_store",
    "webhook_service",
]
