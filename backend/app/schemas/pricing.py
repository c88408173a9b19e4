"""Pricing schema definitions."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, field_serializer


class PricingQuoteRead(BaseModel):
    """Price resolved for a pricing code."""

    code: str
    price: Decimal
    formatted_price: str

    @field_serializer("price", when_used="json")
    def _price_as_number(self, price: Decimal) -> float:
        # The checkout UI reads the price as a JSON number.
        return float(price)
