"""Exception types shared across the checkout services."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when a required credential or setting is missing."""


class ChargeValidationError(ValueError):
    """Raised when a charge request cannot be turned into a valid amount."""


class WebhookRejected(ValueError):
    """Raised when an inbound webhook fails signature or payload checks."""


class TransactionStoreError(RuntimeError):
    """Raised when the transaction store cannot complete an operation."""

    def __init__(self, operation: str, message: str, *, transaction_id: str | None = None):
        self.operation = operation
        self.transaction_id = transaction_id
        detail = f"{operation} failed"
        if transaction_id:
            detail += f" for {transaction_id}"
        super().__init__(f"{detail}: {message}")


__all__ = [
    "ChargeValidationError",
    "ConfigurationError",
    "TransactionStoreError",
    "WebhookRejected",
]
