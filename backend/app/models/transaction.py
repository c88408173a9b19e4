"""Confirmed transaction model."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from app.db.base import Base

JSONB_TYPE = JSONB(astext_type=Text()).with_variant(JSON(), "sqlite")


class ConfirmedTransactionRecord(Base):
    """A succeeded payment, keyed by its Stripe payment intent id."""

    __tablename__ = "confirmed_transactions"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(12), nullable=False, default="usd")
    customer_email: Mapped[str] = mapped_column(String(320), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )
    metadata_: Mapped[dict[str, str]] = mapped_column(
        "metadata", JSONB_TYPE, nullable=False, default=dict
    )
