"""Font discovery and text drawing helpers."""

from __future__ import annotations

import os
import threading
from typing import List, Optional, Tuple

from fpdf import FPDF

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))

CORE_FAMILY = "Helvetica"


def find_font_path(env_var: str, candidates: List[str]) -> Optional[str]:
    override = os.getenv(env_var)
    if override and os.path.exists(override):
        return override

    for path in candidates:
        if os.path.exists(path):
            return path
    return None


FONT_INIT_LOCK = threading.Lock()


class FontManager:
    """Draws text with a Unicode TTF font when one is found, Helvetica otherwise.

    ``INVOICE_FONT_PATH``/``INVOICE_FONT_BOLD_PATH`` take precedence over the
    bundled and system DejaVu fonts. The core Helvetica fallback only covers
    Latin-1.
    """

    FAMILY = "InvoiceFont"
    BUNDLED_REGULAR = os.path.join(_PACKAGE_DIR, "fonts", "DejaVuSans.ttf")
    BUNDLED_BOLD = os.path.join(_PACKAGE_DIR, "fonts", "DejaVuSans-Bold.ttf")
    SYSTEM_REGULAR_CANDIDATES = [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/TTF/DejaVuSans.ttf",
        "/Library/Fonts/DejaVuSans.ttf",
    ]
    SYSTEM_BOLD_CANDIDATES = [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/TTF/DejaVuSans-Bold.ttf",
        "/Library/Fonts/DejaVuSans-Bold.ttf",
    ]

    def __init__(self, pdf: FPDF) -> None:
        self.pdf = pdf
        self.family = CORE_FAMILY
        self.has_bold = True
        self.use_unicode = False

        regular_path = find_font_path(
            "INVOICE_FONT_PATH",
            [self.BUNDLED_REGULAR, *self.SYSTEM_REGULAR_CANDIDATES],
        )
        if not regular_path:
            return

        bold_path = find_font_path(
            "INVOICE_FONT_BOLD_PATH",
            [self.BUNDLED_BOLD, *self.SYSTEM_BOLD_CANDIDATES],
        )
        # fpdf font registration parses and caches metrics; serialize it.
        with FONT_INIT_LOCK:
            self.pdf.add_font(self.FAMILY, "", regular_path)
            self.has_bold = False
            if bold_path:
                self.pdf.add_font(self.FAMILY, "B", bold_path)
                self.has_bold = True
        self.family = self.FAMILY
        self.use_unicode = True

    def set_font(self, size: int, bold: bool = False) -> None:
        style = "B" if bold and self.has_bold else ""
        self.pdf.set_font(self.family, style, size)

    def draw_text(
        self,
        x: float,
        y: float,
        text: str,
        size: int,
        color: Tuple[int, int, int],
        bold: bool = False,
    ) -> None:
        self.pdf.set_text_color(*color)
        self.set_font(size, bold)
        if bold and not self.has_bold:
            # Fake bold by overprinting with a small horizontal offset.
            offset = 0.4 / self.pdf.k
            self.pdf.text(x, y, text)
            self.pdf.text(x + offset, y, text)
        else:
            self.pdf.text(x, y, text)
