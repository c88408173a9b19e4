"""Charge intent endpoints used by the checkout form."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api import deps
from app.core.errors import ChargeValidationError
from app.integrations import IntentNotFoundError, StripeClient, StripeClientError
from app.schemas.payments import (
    ChargeIntentCreateResponse,
    ChargeIntentRetrieveResponse,
    ChargeRequest,
)
from app.services import payments_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/charge-intent", tags=["payments"])


@router.post("", response_model=ChargeIntentCreateResponse)
async def create_charge_intent(
    payload: ChargeRequest,
    stripe_client: Annotated[StripeClient, Depends(deps.get_stripe_client)],
) -> ChargeIntentCreateResponse:
    try:
        client_secret = await payments_service.create_intent(stripe_client, payload)
    except ChargeValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    except StripeClientError as exc:
        logger.warning("Payment intent creation failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return ChargeIntentCreateResponse(client_secret=client_secret)


@router.get("", response_model=ChargeIntentRetrieveResponse)
async def retrieve_charge_intent(
    stripe_client: Annotated[StripeClient, Depends(deps.get_stripe_client)],
    payment_intent_id: Annotated[str, Query(alias="id", min_length=1)],
) -> ChargeIntentRetrieveResponse:
    try:
        intent = await payments_service.retrieve_intent(stripe_client, payment_intent_id)
    except IntentNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from exc
    except (ChargeValidationError, StripeClientError) as exc:
        logger.warning("Payment intent %s lookup failed: %s", payment_intent_id, exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return ChargeIntentRetrieveResponse(payment_intent=intent)
