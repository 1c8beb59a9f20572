"""Subtotal, tax and total arithmetic for invoice line items.

Values are kept at full float precision; rounding to two decimals is a
presentation concern handled by :mod:`invoice_builder.formatting`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable

from .models import LineItem


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: float
    tax: float
    total: float

    def as_payload(self) -> Dict[str, float]:
        return {"subtotal": self.subtotal, "tax": self.tax, "total": self.total}


def compute_subtotal(items: Iterable[LineItem]) -> float:
    # fsum keeps the result independent of item order.
    return math.fsum(item.quantity * item.unit_price for item in items)


def compute_tax(subtotal: float, tax_rate_percent: float) -> float:
    # Callers guarantee 0 <= tax_rate_percent <= 100.
    return subtotal * (tax_rate_percent / 100)


def compute_total(subtotal: float, tax: float) -> float:
    return subtotal + tax


def calculate_totals(items: Iterable[LineItem], tax_rate_percent: float) -> InvoiceTotals:
    subtotal = compute_subtotal(items)
    tax = compute_tax(subtotal, tax_rate_percent)
    return InvoiceTotals(subtotal=subtotal, tax=tax, total=compute_total(subtotal, tax))
