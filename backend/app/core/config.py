"""Application configuration via pydantic settings."""

from functools import lru_cache
from pathlib import Path

from typing import Annotated, Any, Literal

from pydantic import AliasChoices, Field
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from sqlalchemy.engine import URL

StoreBackend = Literal["database", "file", "memory"]
DispatchMode = Literal["sync", "background"]


class Settings(BaseSettings):
    """Typed application configuration."""

    app_env: str = Field("local", alias="APP_ENV")
    app_name: str = Field("Checkout Payments API", alias="APP_NAME")
    api_v1_prefix: str = Field("/api/v1", alias="API_V1_PREFIX")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    stripe_publishable_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "STRIPE_PUBLISHABLE_KEY", "NEXT_PUBLIC_STRIPE_PUBLISHABLE_KEY"
        ),
    )
    stripe_secret_key: str | None = Field(default=None, alias="STRIPE_SECRET_KEY")
    stripe_webhook_secret: str | None = Field(
        default=None, alias="STRIPE_WEBHOOK_SECRET"
    )
    stripe_currency: str = Field("usd", alias="STRIPE_CURRENCY")
    stripe_webhook_tolerance: int = Field(300, alias="STRIPE_WEBHOOK_TOLERANCE")
    stripe_max_network_retries: int = Field(2, alias="STRIPE_MAX_NETWORK_RETRIES")

    email_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("EMAIL_API_KEY", "SENDGRID_API_KEY"),
    )
    email_from: str | None = Field(
        default=None,
        validation_alias=AliasChoices("EMAIL_FROM", "SENDGRID_FROM_EMAIL"),
    )
    smtp_host: str = Field("smtp.sendgrid.net", alias="SMTP_HOST")
    smtp_port: int = Field(587, alias="SMTP_PORT")
    smtp_username: str = Field("apikey", alias="SMTP_USER")

    database_url: str | None = Field(default=None, alias="DATABASE_URL")
    db_driver: str = Field("postgresql+asyncpg", alias="DB_DRIVER")
    db_host: str | None = Field(default=None, alias="DB_HOST")
    db_port: int | None = Field(default=None, alias="DB_PORT")
    db_user: str | None = Field(default=None, alias="DB_USER")
    db_password: str | None = Field(default=None, alias="DB_PASSWORD")
    db_name: str = Field("stripe_payments", alias="DB_NAME")

    transaction_store_backend: StoreBackend | None = Field(
        default=None, alias="TRANSACTION_STORE_BACKEND"
    )
    transactions_file: Path = Field(
        Path("data/transactions.json"), alias="TRANSACTIONS_FILE"
    )

    webhook_dispatch_mode: DispatchMode = Field("sync", alias="WEBHOOK_DISPATCH_MODE")
    side_effect_timeout_seconds: float = Field(
        5.0, alias="SIDE_EFFECT_TIMEOUT_SECONDS"
    )

    cors_allow_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        alias="CORS_ALLOW_ORIGINS",
    )

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[3] / ".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @property
    def resolved_database_url(self) -> str | None:
        """Return DATABASE_URL, or a URL assembled from the DB_* parts."""

        if self.database_url:
            return self.database_url
        if not self.db_host:
            return None
        url = URL.create(
            self.db_driver,
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )
        return url.render_as_string(hide_password=False)

    @property
    def resolved_store_backend(self) -> StoreBackend:
        if self.transaction_store_backend:
            return self.transaction_store_backend
        return "database" if self.resolved_database_url else "file"


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()  # type: ignore[call-arg]
