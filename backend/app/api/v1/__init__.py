"""Versioned API router."""

from fastapi import APIRouter

from . import health, payments, payments_webhook, pricing, transactions

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(pricing.router, tags=["pricing"])
router.include_router(payments.router, tags=["payments"])
router.include_router(payments_webhook.router, tags=["payments-webhook"])
router.include_router(transactions.router, tags=["transactions"])

__all__ = ["router"]
