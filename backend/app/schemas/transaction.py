"""Confirmed transaction schemas."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

NO_EMAIL = "no-email"


class ConfirmedTransaction(BaseModel):
    """A successful payment recorded exactly once per payment intent id."""

    id: str
    amount: int
    currency: str
    customer_email: str = NO_EMAIL
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    metadata: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(from_attributes=True, frozen=True)


class TransactionListResponse(BaseModel):
    status: str = "success"
    timestamp: datetime
    transaction_count: int
    transactions: list[ConfirmedTransaction]
    message: str
