from __future__ import annotations

import secrets
from datetime import date

DEFAULT_PREFIX = "ORD-"
MAX_ATTEMPTS = 20


def generate_order_number(prefix: str = DEFAULT_PREFIX, today: date | None = None) -> str:
    """ORD-YYYYMMDD-XXXXXX with a six character upper-case hex suffix"""
    today = today or date.today()
    return f"{prefix}{today:%Y%m%d}-{secrets.token_hex(3).upper()}"


def generate_unique_order_number(exists, prefix: str = DEFAULT_PREFIX, generator=generate_order_number) -> str:
    """
    Draw order numbers until ``exists(number)`` is False.

    Raises:
        RuntimeError: no free number after MAX_ATTEMPTS draws
    """
    for _ in range(MAX_ATTEMPTS):
        number = generator(prefix)
        if not exists(number):
            return number
    raise RuntimeError(f"Could not generate a unique order number after {MAX_ATTEMPTS} attempts")
