"""Pricing lookup endpoint."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from app.schemas.pricing import PricingQuoteRead
from app.services import pricing_service

router = APIRouter(prefix="/pricing", tags=["pricing"])


@router.get("", response_model=PricingQuoteRead)
async def get_price(code: str | None = None) -> PricingQuoteRead:
    """Return the price for a pricing code; unknown codes get the default."""
    if not code or not code.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Code parameter is required",
        )
    return pricing_service.quote(code)
