"""ORM models package export."""

from app.models.transaction import ConfirmedTransactionRecord

__all__ = ["ConfirmedTransactionRecord"]
