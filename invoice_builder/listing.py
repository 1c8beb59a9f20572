"""Read-through cache of stored invoices for list views."""

from __future__ import annotations

from typing import List, NamedTuple, Optional, Protocol

from .formatting import fmt_date, fmt_money
from .models import PersistedInvoice

LIST_COLUMNS = ("Invoice #", "Date", "Customer", "Total")


class InvoiceSource(Protocol):
    def list(self) -> List[PersistedInvoice]:
        ...


class InvoiceRow(NamedTuple):
    invoice_id: str
    date: str
    customer: str
    total: str


def invoice_row(invoice: PersistedInvoice) -> InvoiceRow:
    return InvoiceRow(
        invoice_id=invoice.id,
        date=fmt_date(invoice.created_at),
        customer=invoice.customer_name,
        total=fmt_money(invoice.total),
    )


class InvoiceIndex:
    """Fetches the invoice list once and serves it until :meth:`refresh`."""

    def __init__(self, source: InvoiceSource) -> None:
        self.source = source
        self._invoices: Optional[List[PersistedInvoice]] = None

    def invoices(self) -> List[PersistedInvoice]:
        if self._invoices is None:
            self._invoices = list(self.source.list())
        return list(self._invoices)

    def refresh(self) -> List[PersistedInvoice]:
        self._invoices = None
        return self.invoices()

    def record(self, invoice: PersistedInvoice) -> None:
        """Add a freshly saved invoice without refetching the whole list."""
        if self._invoices is not None:
            self._invoices.append(invoice)

    def rows(self) -> List[InvoiceRow]:
        return [invoice_row(invoice) for invoice in self.invoices()]


def format_table(rows: List[InvoiceRow]) -> str:
    table = [LIST_COLUMNS, *rows]
    widths = [max(len(str(row[col])) for row in table) for col in range(len(LIST_COLUMNS))]
    lines = []
    for row in table:
        lines.append("  ".join(str(cell).ljust(width) for cell, width in zip(row, widths)).rstrip())
    return "\n".join(lines)
