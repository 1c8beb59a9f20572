"""End-to-end invoice submission: validate, total, store, render, export."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Protocol, Union

from .errors import ExportFailure
from .export import ExportSink
from .models import InvoiceDraft, PersistedInvoice, draft_payload, parse_persisted_invoice, validate_draft
from .rendering import Document, DocumentRenderer
from .totals import InvoiceTotals, calculate_totals

logger = logging.getLogger(__name__)

PREVIEW_ID = "preview"


class InvoiceStore(Protocol):
    def create(self, payload: Mapping[str, Any]) -> PersistedInvoice:
        ...


class InvoiceRecorder(Protocol):
    def record(self, invoice: PersistedInvoice) -> None:
        ...


@dataclass(frozen=True)
class SubmissionResult:
    invoice: PersistedInvoice
    document: Document


def build_create_payload(draft: InvoiceDraft, totals: InvoiceTotals) -> Dict[str, Any]:
    """Request body for the store: the draft fields plus unrounded totals."""
    payload = draft_payload(draft)
    payload.update(totals.as_payload())
    return payload


def prepare_submission(raw: Union[InvoiceDraft, Mapping[str, Any]]) -> Dict[str, Any]:
    draft = raw if isinstance(raw, InvoiceDraft) else validate_draft(raw)
    totals = calculate_totals(draft.items, draft.tax_rate)
    return build_create_payload(draft, totals)


def preview_invoice(payload: Mapping[str, Any]) -> PersistedInvoice:
    """Stand-in record for a payload that has not been stored yet."""
    return parse_persisted_invoice(
        {**payload, "_id": PREVIEW_ID, "createdAt": datetime.now(timezone.utc)}
    )


def submit_invoice(
    raw: Union[InvoiceDraft, Mapping[str, Any]],
    store: InvoiceStore,
    sink: ExportSink,
    renderer: Optional[DocumentRenderer] = None,
    index: Optional[InvoiceRecorder] = None,
) -> SubmissionResult:
    """Persist a draft and export its rendered document.

    Raises ``ValidationError`` before any network call when the draft is
    invalid, and ``SubmissionFailure`` when the store does not save it.
    Text the PDF fonts cannot encode raises ``ExportFailure`` before the
    store is called. Failures after the save raise ``ExportFailure`` with
    the stored invoice attached.
    """
    payload = prepare_submission(raw)
    renderer = renderer if renderer is not None else DocumentRenderer()
    renderer.render(preview_invoice(payload)).to_pdf()

    invoice = store.create(payload)
    if index is not None:
        index.record(invoice)

    document = renderer.render(invoice)
    try:
        sink.save(document.to_pdf(), document.filename)
    except (ExportFailure, OSError) as exc:
        logger.error("Invoice %s was saved but %s was not exported: %s", invoice.id, document.filename, exc)
        raise ExportFailure(
            f"Invoice {invoice.id} was saved but {document.filename} could not be exported: {exc}",
            invoice=invoice,
        ) from exc
    logger.info("Exported %s (%d page(s))", document.filename, len(document.pages))
    return SubmissionResult(invoice=invoice, document=document)
