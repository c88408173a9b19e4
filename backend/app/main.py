"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from secure import Secure
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import api_router
from app.core.config import get_settings
from app.core.settings import (
    get_email_settings,
    get_payment_settings,
    get_store_settings,
)
from app.integrations import StripeClient
from app.security.logging_filters import SensitiveFilter
from app.services.notification_service import EmailNotifier
from app.services.transaction_store import open_transaction_store
from app.services.webhook_service import WebhookDispatcher

logger = logging.getLogger(__name__)

settings = get_settings()

_ALLOWED_ORIGINS = [origin for origin in settings.cors_allow_origins if origin]
if not _ALLOWED_ORIGINS:
    _ALLOWED_ORIGINS = ["http://localhost:3000"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    payment = get_payment_settings()
    store_settings = get_store_settings()

    # Raises ConfigurationError without a secret key so startup fails fast.
    stripe_client = StripeClient(
        payment.stripe_secret_key,
        webhook_secret=payment.stripe_webhook_secret,
        currency=payment.currency,
        webhook_tolerance=payment.webhook_tolerance,
        max_network_retries=payment.max_network_retries,
    )
    if not payment.stripe_webhook_secret:
        logger.warning("STRIPE_WEBHOOK_SECRET is not set; webhooks will be refused")

    notifier = EmailNotifier(get_email_settings())
    if not notifier.configured:
        logger.warning("Email provider not configured; notifications are disabled")

    store = await open_transaction_store(store_settings)
    app.state.stripe_client = stripe_client
    app.state.transaction_store = store
    app.state.notifier = notifier
    app.state.webhook_dispatcher = WebhookDispatcher(
        stripe_client,
        store,
        notifier,
        side_effect_timeout=store_settings.side_effect_timeout_seconds,
    )
    try:
        yield
    finally:
        try:
            await store.close()
        except Exception:  # pragma: no cover - shutdown is best effort
            logger.exception("Failed to close transaction store")


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_ALLOWED_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Stripe-Signature", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)
app.add_middleware(CorrelationIdMiddleware, header_name="X-Request-ID")

_secure_headers = Secure.with_default_headers()


@app.middleware("http")
async def _apply_security_headers(request, call_next):
    response = await call_next(request)
    _secure_headers.set_headers(response)
    correlation_id = getattr(request.state, "correlation_id", None)
    if correlation_id:
        response.headers.setdefault("X-Request-ID", str(correlation_id))
    return response


@app.exception_handler(StarletteHTTPException)
async def _http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def _validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    message = "Invalid request"
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(
            str(part) for part in first.get("loc", ()) if part not in ("body", "query")
        )
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": message},
    )


logging.getLogger("app").setLevel(settings.log_level.upper())
for _logger_name in ("uvicorn", "uvicorn.access", "uvicorn.error", "app", ""):
    _logger = logging.getLogger(_logger_name)
    if not any(isinstance(flt, SensitiveFilter) for flt in _logger.filters):
        _logger.addFilter(SensitiveFilter())

app.include_router(api_router)


@app.get("/", include_in_schema=False)
async def root() -> dict[str, str]:
    """Return a simple welcome message."""
    return {"message": settings.app_name}
