"""Schemas for charge intent operations."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class ChargeRequest(BaseModel):
    """Request payload for creating a charge intent.

    Either ``amount`` (major currency units) or ``code`` must resolve to a
    price; an explicit amount takes precedence over the code's price.
    ``code1``/``code2`` are an optional correlation pair kept for fee lookups.
    """

    amount: Decimal | None = None
    code: str | None = None
    email: str | None = None
    code1: str | None = None
    code2: str | None = None

    model_config = ConfigDict(str_strip_whitespace=True)


class ChargeIntentCreateResponse(BaseModel):
    """Response payload returned when creating a charge intent."""

    client_secret: str = Field(serialization_alias="clientSecret")


class SimplifiedIntent(BaseModel):
    """Display view of a payment intent without provider-only fields."""

    id: str
    amount: int
    currency: str
    status: str
    card_brand: str | None = Field(default=None, serialization_alias="cardBrand")
    card_last4: str | None = Field(default=None, serialization_alias="cardLast4")

    model_config = ConfigDict(from_attributes=True)


class ChargeIntentRetrieveResponse(BaseModel):
    payment_intent: SimplifiedIntent = Field(serialization_alias="paymentIntent")
