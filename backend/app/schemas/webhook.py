"""Schemas for inbound Stripe webhook events."""

from __future__ import annotations

import enum
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EventKind(str, enum.Enum):
    """Event categories the dispatcher acts on."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    OTHER = "other"


_KIND_BY_TYPE = {
    "payment_intent.succeeded": EventKind.SUCCEEDED,
    "payment_intent.payment_failed": EventKind.FAILED,
}


def kind_for(event_type: str | None) -> EventKind:
    return _KIND_BY_TYPE.get(event_type or "", EventKind.OTHER)


class IntentPayload(BaseModel):
    """Payment intent embedded in ``data.object`` of an intent event."""

    id: str = Field(min_length=1)
    amount: int = 0
    currency: str = "usd"
    status: str | None = None
    receipt_email: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict)
    last_payment_error: dict[str, Any] | None = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("metadata", mode="before")
    @classmethod
    def _stringify_metadata(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {str(k): str(v) for k, v in value.items() if v is not None}
        return value

    @property
    def failure_message(self) -> str | None:
        if not self.last_payment_error:
            return None
        message = self.last_payment_error.get("message")
        return str(message) if message else None


class WebhookEvent(BaseModel):
    """Verified webhook event; transient and never persisted itself."""

    id: str
    type: str
    kind: EventKind
    created_at: datetime
    payload: IntentPayload | None = None

    @classmethod
    def from_stripe(cls, event: dict[str, Any]) -> "WebhookEvent":
        event_type = str(event.get("type") or "")
        kind = kind_for(event_type)
        created = event.get("created")
        try:
            created_at = (
                datetime.fromtimestamp(int(created), UTC)
                if created is not None
                else datetime.now(UTC)
            )
        except (OverflowError, OSError) as exc:
            raise ValueError(f"event timestamp out of range: {created!r}") from exc
        payload = None
        if kind is not EventKind.OTHER:
            data = event.get("data") or {}
            if not isinstance(data, dict):
                raise ValueError("event data must be an object")
            payload = IntentPayload.model_validate(data.get("object") or {})
        return cls(
            id=str(event.get("id") or ""),
            type=event_type,
            kind=kind,
            created_at=created_at,
            payload=payload,
        )


class WebhookAck(BaseModel):
    """Webhook acknowledgement."""

    received: bool = True
