"""Invoice document layout and PDF rendering logic."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from itertools import groupby
from typing import List, Optional, Sequence, Tuple

from fpdf import FPDF
from fpdf.errors import FPDFUnicodeEncodingException

from .errors import ExportFailure
from .fonts import FontManager
from .formatting import fmt_date, fmt_money, fmt_percent, fmt_qty
from .layout import LayoutConfig, default_layout
from .models import PersistedInvoice, StoredLineItem
from .pagination import plan_pages


@dataclass(frozen=True)
class TextInstruction:
    x: float
    y: float
    text: str
    font_size: int
    bold: bool = False


@dataclass(frozen=True)
class Page:
    instructions: Tuple[TextInstruction, ...]

    def text_lines(self) -> List[str]:
        """Join the instructions that share a baseline, left to right."""
        ordered = sorted(self.instructions, key=lambda ins: (ins.y, ins.x))
        return [
            " ".join(ins.text for ins in row)
            for _, row in groupby(ordered, key=lambda ins: ins.y)
        ]


@dataclass(frozen=True)
class Document:
    invoice_id: str
    created_at: datetime
    pages: Tuple[Page, ...]
    layout: LayoutConfig = field(default_factory=LayoutConfig)

    @property
    def filename(self) -> str:
        return f"invoice-{self.invoice_id}.pdf"

    def text_lines(self) -> List[str]:
        lines: List[str] = []
        for page in self.pages:
            lines.extend(page.text_lines())
        return lines

    def to_pdf(self) -> bytes:
        pdf = FPDF(unit=self.layout.unit, format=self.layout.page_format)
        pdf.set_auto_page_break(False)
        # Pinning the creation date keeps output byte-identical across renders.
        pdf.set_creation_date(self.created_at)
        fonts = FontManager(pdf)

        try:
            for page in self.pages:
                pdf.add_page()
                for ins in page.instructions:
                    fonts.draw_text(
                        ins.x,
                        ins.y,
                        ins.text,
                        ins.font_size,
                        self.layout.text_color,
                        bold=ins.bold,
                    )
            pdf_blob = pdf.output()
        except FPDFUnicodeEncodingException as exc:
            raise ExportFailure(
                "Invoice text cannot be encoded with the core PDF font. "
                "Set INVOICE_FONT_PATH (and INVOICE_FONT_BOLD_PATH) to a Unicode TTF font."
            ) from exc

        if isinstance(pdf_blob, (bytes, bytearray)):
            return bytes(pdf_blob)
        raise ExportFailure(f"Unexpected PDF output type: {type(pdf_blob).__name__}")


class InvoiceLayout:
    """Lays out a single invoice; create one per render."""

    def __init__(self, invoice: PersistedInvoice, layout: LayoutConfig) -> None:
        self.invoice = invoice
        self.layout = layout
        self.pages: List[List[TextInstruction]] = [[]]

    def _text(self, x: float, y: float, text: str, size: Optional[int] = None, bold: bool = False) -> None:
        font_size = self.layout.body_font_size if size is None else size
        self.pages[-1].append(TextInstruction(x, y, text, font_size, bold))

    def _new_page(self) -> None:
        self.pages.append([])

    def _draw_title_block(self) -> None:
        layout = self.layout
        self._text(layout.margin_x, layout.title_y, layout.issuer_name, size=layout.title_font_size)
        self._text(layout.margin_x, layout.invoice_number_y, f"Invoice Number: {self.invoice.id}")
        self._text(layout.margin_x, layout.date_y, f"Date: {fmt_date(self.invoice.created_at)}")

    def _draw_bill_to(self) -> None:
        layout = self.layout
        y = layout.bill_to_y
        self._text(layout.margin_x, y, "Bill To:")
        for line in (
            f"Name: {self.invoice.customer_name}",
            f"Email: {self.invoice.customer_email}",
            f"Address: {self.invoice.customer_address}",
        ):
            y += layout.line_height
            self._text(layout.indent_x, y, line)

    def _draw_table_header(self, y: float) -> None:
        layout = self.layout
        self._text(layout.col_description_x, y, "Description", bold=True)
        self._text(layout.col_qty_x, y, "Qty", bold=True)
        self._text(layout.col_price_x, y, "Price", bold=True)
        self._text(layout.col_total_x, y, "Total", bold=True)

    def _draw_items(self, start_y: float, items: Sequence[StoredLineItem]) -> None:
        layout = self.layout
        y = start_y
        for item in items:
            self._text(layout.col_description_x, y, item.description)
            self._text(layout.col_qty_x, y, fmt_qty(item.quantity))
            self._text(layout.col_price_x, y, fmt_money(item.unit_price))
            self._text(layout.col_total_x, y, fmt_money(item.line_total))
            y += layout.line_height

    def _draw_totals(self, start_y: float) -> None:
        layout = self.layout
        rows = (
            ("Subtotal:", self.invoice.subtotal, False),
            (f"Tax ({fmt_percent(self.invoice.tax_rate)}):", self.invoice.tax, False),
            ("Total:", self.invoice.total, True),
        )
        y = start_y
        for label, amount, bold in rows:
            self._text(layout.totals_label_x, y, label, bold=bold)
            self._text(layout.totals_value_x, y, fmt_money(amount), bold=bold)
            y += layout.line_height

    def build(self) -> Document:
        items = self.invoice.items
        plan = plan_pages(len(items), self.layout)

        self._draw_title_block()
        self._draw_bill_to()
        for index, page_slice in enumerate(plan.slices):
            if index:
                self._new_page()
            self._draw_table_header(page_slice.header_y)
            self._draw_items(
                page_slice.header_y + self.layout.line_height,
                items[page_slice.start : page_slice.end],
            )

        if plan.totals_on_new_page:
            self._new_page()
        self._draw_totals(plan.totals_y)

        return Document(
            invoice_id=self.invoice.id,
            created_at=self.invoice.created_at,
            pages=tuple(Page(tuple(instructions)) for instructions in self.pages),
            layout=self.layout,
        )


class DocumentRenderer:
    def __init__(self, layout: Optional[LayoutConfig] = None) -> None:
        self.layout = layout if layout is not None else default_layout()

    def render(self, invoice: PersistedInvoice) -> Document:
        return InvoiceLayout(invoice, self.layout).build()


def render_invoice(invoice: PersistedInvoice, layout: Optional[LayoutConfig] = None) -> Document:
    return DocumentRenderer(layout).render(invoice)
