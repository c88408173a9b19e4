"""Pricing code resolution for checkout amounts."""

from __future__ import annotations

import logging
from decimal import Decimal

from app.schemas.pricing import PricingQuoteRead

logger = logging.getLogger(__name__)

DEFAULT_PRICE = Decimal("10.00")
MIN_CHARGE_AMOUNT = Decimal("0.50")
# Stripe rejects charges above 99,999,999 minor units.
MAX_CHARGE_AMOUNT = Decimal("999999.99")

PRICE_TABLE: dict[str, Decimal] = {
    "basic": Decimal("5.00"),
    "premium": Decimal("15.00"),
    "pro": Decimal("25.00"),
    "enterprise": Decimal("50.00"),
}


def resolve_price(code: str | None) -> Decimal:
    """Return the price for ``code`` (case-insensitive), or the default price."""

    if not code:
        return DEFAULT_PRICE
    return PRICE_TABLE.get(code.strip().lower(), DEFAULT_PRICE)


def resolve_charge_amount(amount: Decimal | None, code: str | None) -> Decimal | None:
    """Pick the amount to charge.

    A usable explicit amount wins over the code price, which is then only
    logged. A code still applies when the explicit amount is below the
    minimum charge. Returns None when neither input is present.
    """

    if amount is not None:
        if not code:
            return amount
        code_price = resolve_price(code)
        if amount >= MIN_CHARGE_AMOUNT:
            logger.info(
                "Explicit amount %s overrides price %s for code %r",
                amount,
                code_price,
                code,
            )
            return amount
        logger.info(
            "Amount %s is below the minimum; using price %s for code %r",
            amount,
            code_price,
            code,
        )
        return code_price
    if code:
        return resolve_price(code)
    return None


def quote(code: str) -> PricingQuoteRead:
    price = resolve_price(code)
    return PricingQuoteRead(code=code, price=price, formatted_price=f"${price:.2f}")
