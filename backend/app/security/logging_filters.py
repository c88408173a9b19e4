"""Logging filters that scrub sensitive content."""

from __future__ import annotations

import logging
import re

_SENSITIVE_PATTERN = re.compile(
    r"(sk_(?:live|test)_[A-Za-z0-9]+"
    r"|rk_(?:live|test)_[A-Za-z0-9]+"
    r"|whsec_[A-Za-z0-9]+"
    r"|pi_[A-Za-z0-9]+_secret_[A-Za-z0-9]+"
    r"|SG\.[\w-]+\.[\w-]+"
    r"|Stripe-Signature:\s*\S+)",
    re.IGNORECASE,
)


def scrub(text: str) -> str:
    return _SENSITIVE_PATTERN.sub("**REDACTED**", text)


class SensitiveFilter(logging.Filter):
    """Replace API keys, webhook secrets and client secrets with a marker."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = scrub(record.msg)
        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    key: scrub(value) if isinstance(value, str) else value
                    for key, value in record.args.items()
                }
            else:
                record.args = tuple(
                    scrub(arg) if isinstance(arg, str) else arg for arg in record.args
                )
        return True


__all__ = ["SensitiveFilter", "scrub"]
