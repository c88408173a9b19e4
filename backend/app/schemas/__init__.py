"""Schema exports."""

from app.schemas.payments import (
    ChargeIntentCreateResponse,
    ChargeIntentRetrieveResponse,
    ChargeRequest,
    SimplifiedIntent,
)
from app.schemas.pricing import PricingQuoteRead
from app.schemas.transaction import (
    NO_EMAIL,
    ConfirmedTransaction,
    TransactionListResponse,
)
from app.schemas.webhook import EventKind, IntentPayload, WebhookAck, WebhookEvent

__all__ = [
    "NO_EMAIL",
    "ChargeIntentCreateResponse",
    "ChargeIntentRetrieveResponse",
    "ChargeRequest",
    "ConfirmedTransaction",
    "EventKind",
    "IntentPayload",
    "PricingQuoteRead",
    "SimplifiedIntent",
    "TransactionListResponse",
    "WebhookAck",
    "WebhookEvent",
]
