"""Money / rounding helpers.

Centralized so the result line, the history list and the API render amounts
with identical rounding semantics. Formatting is deliberately locale-free.
"""

from __future__ import annotations
import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

NOT_AVAILABLE = "n/a"


def round2(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_amount(value: float) -> str:
    """Two-decimal rounding with trailing zeros dropped: 100.0 -> '100', 5.5 -> '5.5'."""
    if not math.isfinite(value):
        return NOT_AVAILABLE
    try:
        text = f"{Decimal(str(round2(value))).normalize():f}"
    except InvalidOperation:
        # beyond decimal context precision
        text = f"{value:.2f}"
    return "0" if text == "-0" else text


def format_rate(rate: float) -> str:
    if not math.isfinite(rate):
        return NOT_AVAILABLE
    return f"{rate:.6f}"
