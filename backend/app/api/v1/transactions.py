"""Confirmed transaction listing."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from app.api import deps
from app.core.errors import TransactionStoreError
from app.schemas.transaction import TransactionListResponse
from app.services.transaction_store import TransactionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("", response_model=TransactionListResponse)
async def list_transactions(
    store: Annotated[TransactionStore, Depends(deps.get_transaction_store)],
) -> TransactionListResponse:
    try:
        transactions = await store.list_all()
    except TransactionStoreError as exc:
        logger.exception("Failed to list transactions")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to load transactions: {exc}",
        ) from exc
    if transactions:
        message = f"Found {len(transactions)} confirmed transaction(s)."
    else:
        message = "No transactions yet. Complete a payment to see it here."
    return TransactionListResponse(
        timestamp=datetime.now(UTC),
        transaction_count=len(transactions),
        transactions=transactions,
        message=message,
    )
