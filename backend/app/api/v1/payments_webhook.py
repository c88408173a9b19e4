"""Stripe webhook receiver for payment events."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status

from app.api import deps
from app.core.errors import ConfigurationError, WebhookRejected
from app.core.settings import get_payment_settings
from app.schemas.webhook import WebhookAck
from app.services.webhook_service import WebhookDispatcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhook", tags=["payments-webhook"])


@router.get("", summary="Webhook liveness probe")
async def webhook_status() -> dict[str, str]:
    return {"message": "Stripe webhook endpoint is active."}


@router.post("", response_model=WebhookAck, status_code=status.HTTP_200_OK)
async def handle_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    dispatcher: Annotated[WebhookDispatcher, Depends(deps.get_webhook_dispatcher)],
) -> WebhookAck:
    settings = get_payment_settings()
    payload_bytes = await request.body()
    signature = request.headers.get("Stripe-Signature")

    try:
        event = dispatcher.verify(payload_bytes, signature)
    except ConfigurationError as exc:
        logger.error("Webhook received but %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Webhook secret is not configured",
        ) from exc
    except WebhookRejected as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc

    if settings.webhook_dispatch_mode == "background":
        background_tasks.add_task(dispatcher.dispatch, event)
    else:
        outcome = await dispatcher.dispatch(event)
        logger.debug("Webhook %s finished in state %s", outcome.event_id, outcome.state)
    return WebhookAck()
