"""Text formatting helpers for rendered invoices."""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Union

from dateutil import parser as dateutil_parser

CURRENCY_SYMBOL = "$"
CENTS = Decimal("0.01")


def fmt_money(amount: float, symbol: str = CURRENCY_SYMBOL) -> str:
    # Rounds the exact binary value half up, so 1.125 -> 1.13 but 2.675 -> 2.67.
    value = Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)
    return f"{symbol}{value}"


def fmt_qty(qty: Any) -> str:
    try:
        quantity = float(qty)
        if quantity.is_integer():
            return str(int(quantity))
        return str(quantity)
    except (TypeError, ValueError, OverflowError):
        return str(qty)


def fmt_percent(rate: Any) -> str:
    return f"{fmt_qty(rate)}%"


def fmt_date(value: Union[datetime, str]) -> str:
    """Format a timestamp as 'month/day/year' without zero padding, e.g. '3/5/2024'."""
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return raw
        try:
            value = dateutil_parser.parse(raw)
        except (ValueError, OverflowError):
            return raw
    return f"{value.month}/{value.day}/{value.year}"
