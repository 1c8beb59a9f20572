"""Public package API for invoice totals, submission and rendering."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from .errors import ExportFailure, FetchFailure, FieldError, StoreError, SubmissionFailure, ValidationError
from .models import InvoiceDraft, LineItem, PersistedInvoice, validate_draft
from .totals import InvoiceTotals, calculate_totals, compute_subtotal, compute_tax, compute_total

if TYPE_CHECKING:
    from .layout import LayoutConfig
    from .rendering import Document


def render_invoice(invoice: PersistedInvoice, layout: Optional["LayoutConfig"] = None) -> "Document":
    from .rendering import render_invoice as _render_invoice

    return _render_invoice(invoice, layout)


def submit_invoice(raw: Any, store: Any, sink: Any) -> Any:
    from .workflow import submit_invoice as _submit_invoice

    return _submit_invoice(raw, store, sink)


def run(host: str = "0.0.0.0", port: int = 8080) -> None:
    from .server import run as _run

    _run(host, port)


__all__ = [
    "ExportFailure",
    "FetchFailure",
    "FieldError",
    "InvoiceDraft",
    "InvoiceTotals",
    "LineItem",
    "PersistedInvoice",
    "StoreError",
    "SubmissionFailure",
    "ValidationError",
    "calculate_totals",
    "compute_subtotal",
    "compute_tax",
    "compute_total",
    "render_invoice",
    "run",
    "submit_invoice",
    "validate_draft",
]
