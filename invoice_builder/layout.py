"""Page geometry and typography for rendered invoices.

Coordinates use a top-left origin in ``unit`` (millimetres by default) and
mark the text baseline, matching ``FPDF.text``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

from .config import ISSUER_NAME


@dataclass(frozen=True)
class LayoutConfig:
    issuer_name: str = "Company Name"

    unit: str = "mm"
    page_format: str = "A4"
    page_height: float = 297.0
    top_margin: float = 20.0
    bottom_margin: float = 20.0

    margin_x: float = 20.0
    indent_x: float = 30.0

    title_y: float = 20.0
    invoice_number_y: float = 40.0
    date_y: float = 50.0
    bill_to_y: float = 70.0

    table_top: float = 120.0
    line_height: float = 10.0
    totals_gap: float = 10.0

    col_description_x: float = 20.0
    col_qty_x: float = 120.0
    col_price_x: float = 150.0
    col_total_x: float = 180.0
    totals_label_x: float = 150.0
    totals_value_x: float = 180.0

    title_font_size: int = 20
    body_font_size: int = 12
    text_color: Tuple[int, int, int] = (0, 0, 0)

    def __post_init__(self) -> None:
        if self.line_height <= 0:
            raise ValueError("line_height must be positive")
        if self.top_margin + self.line_height > self.page_bottom:
            raise ValueError("page is too short to hold a table row below the top margin")

    @property
    def page_bottom(self) -> float:
        return self.page_height - self.bottom_margin

    def with_issuer(self, issuer_name: str) -> "LayoutConfig":
        return replace(self, issuer_name=issuer_name)


def default_layout() -> LayoutConfig:
    return LayoutConfig(issuer_name=ISSUER_NAME)
