"""Specialized settings adapters for integrations."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel

from app.core.config import DispatchMode, StoreBackend, get_settings


class PaymentSettings(BaseModel):
    """Slim view of payment-related configuration."""

    stripe_secret_key: str | None = None
    stripe_publishable_key: str | None = None
    stripe_webhook_secret: str | None = None
    currency: str = "usd"
    webhook_tolerance: int = 300
    max_network_retries: int = 2
    webhook_dispatch_mode: DispatchMode = "sync"


class EmailSettings(BaseModel):
    """SMTP relay configuration for transactional email."""

    api_key: str | None = None
    from_address: str | None = None
    smtp_host: str = "smtp.sendgrid.net"
    smtp_port: int = 587
    smtp_username: str = "apikey"

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.from_address)


class StoreSettings(BaseModel):
    """Transaction store selection."""

    backend: StoreBackend = "file"
    database_url: str | None = None
    transactions_file: Path = Path("data/transactions.json")
    side_effect_timeout_seconds: float = 5.0


def get_payment_settings() -> PaymentSettings:
    """Return payment-specific configuration."""

    settings = get_settings()
    return PaymentSettings(
        stripe_secret_key=settings.stripe_secret_key or None,
        stripe_publishable_key=settings.stripe_publishable_key or None,
        stripe_webhook_secret=settings.stripe_webhook_secret or None,
        currency=settings.stripe_currency,
        webhook_tolerance=settings.stripe_webhook_tolerance,
        max_network_retries=settings.stripe_max_network_retries,
        webhook_dispatch_mode=settings.webhook_dispatch_mode,
    )


def get_email_settings() -> EmailSettings:
    """Return email-provider configuration."""

    settings = get_settings()
    return EmailSettings(
        api_key=settings.email_api_key or None,
        from_address=settings.email_from or None,
        smtp_host=settings.smtp_host,
        smtp_port=settings.smtp_port,
        smtp_username=settings.smtp_username,
    )


def get_store_settings() -> StoreSettings:
    """Return transaction-store configuration."""

    settings = get_settings()
    return StoreSettings(
        backend=settings.resolved_store_backend,
        database_url=settings.resolved_database_url,
        transactions_file=settings.transactions_file,
        side_effect_timeout_seconds=settings.side_effect_timeout_seconds,
    )
