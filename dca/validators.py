"""Validation and numeric conversion for purchase amounts.

Keeps the cents-to-volume arithmetic and the sanity checks around it in one
place so the client and the CLI agree on what a usable amount is.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any

from dca.errors import DecodeError, ValidationError
from dca.models import PurchaseRequest


def validate_amount(amount_in_cents: Any) -> int:
    """Return a positive integer amount in cents or raise."""
    if isinstance(amount_in_cents, bool):
        raise ValidationError(f"Invalid amount '{amount_in_cents}'. Must be a positive integer.")
    try:
        amount = int(str(amount_in_cents).strip())
    except ValueError:
        raise ValidationError(
            f"Invalid amount '{amount_in_cents}'. Must be a positive integer number of cents."
        )
    if amount <= 0:
        raise ValidationError(f"Amount must be positive, got {amount}.")
    return amount


def validate_purchase(amount_in_cents: Any) -> PurchaseRequest:
    """Run validation and return a ``PurchaseRequest``."""
    return PurchaseRequest(amount_in_cents=validate_amount(amount_in_cents))


def parse_quote(raw: Any) -> float:
    """Parse an ask price string into a positive float."""
    try:
        quote = float(raw)
    except (TypeError, ValueError):
        raise DecodeError(f"failed to parse quote: {raw!r}")
    if not math.isfinite(quote) or quote <= 0:
        raise DecodeError(f"ask price must be a positive number, got {raw!r}")
    return quote


def compute_volume(amount_in_cents: int, quote: float) -> float:
    """Asset volume bought by *amount_in_cents* at *quote* dollars per unit."""
    dollar_rate = 1.0 / quote
    cents_rate = dollar_rate / 100
    return validate_volume(cents_rate * amount_in_cents)


def validate_volume(volume: float) -> float:
    """Return *volume* if it is a finite positive number, else raise."""
    if not isinstance(volume, (int, float)) or not math.isfinite(volume) or volume <= 0:
        raise ValidationError(f"Volume must be a positive finite number, got {volume!r}.")
    return float(volume)


def format_volume(volume: float) -> str:
    """Shortest decimal string for *volume*, never in exponent notation."""
    text = format(Decimal(repr(volume)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"
