"""PDF ledger report rendered with reportlab's canvas API.

Layout (A4 portrait): title, company, generation date and a divider on the
first page, then a grid table of the filtered entries followed by a bold
summary row. The table header repeats on every page, every page carries
``Page N of M`` and the last page ends with the app footer.
"""

from __future__ import annotations

import datetime as dt
import os
import re
from collections.abc import Sequence
from pathlib import Path

from reportlab.lib.colors import Color, HexColor, white
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.pdfgen import canvas

from ..errors import EmptyExportError
from ..logging_setup import get_logger
from ..models import LedgerEntry, LedgerSummary
from ..report import format_money, format_optional_money, long_date, short_date, summarize

REPORT_TITLE = "Company Ledger Report"
FALLBACK_COMPANY = "Unknown"
FOOTER_TEXT = "Generated via Company Ledger App"

REPORT_HEADERS: tuple[str, ...] = (
    "Date",
    "Company Name",
    "Particular",
    "Category",
    "Credit",
    "Debit",
    "Balance",
)

_MARGIN = 14 * mm
_ROW_H = 18
_PAD = 3
_FONT_SIZE = 9
# Sums to the usable A4 width inside the margins.
_COL_WIDTHS = (58, 92, 128, 64, 56, 56, 61.6)
_RIGHT_ALIGNED = {4, 5, 6}

_TITLE_COLOR = HexColor("#333333")
_ACCENT = HexColor("#4CAF50")
_MUTED = HexColor("#666666")
_TEXT = HexColor("#333333")
_ROW_FILL = HexColor("#F9F9F9")
_ALT_ROW_FILL = HexColor("#F1F1F1")
_GRID = HexColor("#C8C8C8")

# Unicode-capable fonts, tried in order; Helvetica is the final fallback.
_FONT_CANDIDATES = (
    (
        "DejaVuSans",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    ),
    (
        "LiberationSans",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    ),
    ("Arial", "C:/Windows/Fonts/arial.ttf", "C:/Windows/Fonts/arialbd.ttf"),
)

_logger = get_logger("company_ledger.exporters.pdf")


# ----------------------------------------------------------------------------
# Table content
# ----------------------------------------------------------------------------


def report_company_name(entries: Sequence[LedgerEntry]) -> str:
    return entries[0].company_name if entries else FALLBACK_COMPANY


def report_filename(company_name: str) -> str:
    return re.sub(r"\s+", "_", company_name) + "_ledger-report.pdf"


def report_rows(
    entries: Sequence[LedgerEntry],
    summary: LedgerSummary | None = None,
    *,
    symbol: str = "₹",
) -> list[list[str]]:
    """Body rows for the report table, ending with the summary row."""

    if summary is None:
        summary = summarize(entries)
    rows = [
        [
            short_date(e.date),
            e.company_name,
            e.particular,
            e.category,
            format_optional_money(e.credit, symbol=symbol),
            format_optional_money(e.debit, symbol=symbol),
            format_money(e.balance, symbol=symbol),
        ]
        for e in entries
    ]
    rows.append(
        [
            "",
            "Summary",
            "",
            "",
            format_money(summary.total_credit, symbol=symbol),
            format_money(summary.total_debit, symbol=symbol),
            format_money(summary.ending_balance, symbol=symbol),
        ]
    )
    return rows


# ----------------------------------------------------------------------------
# Rendering
# ----------------------------------------------------------------------------


class _NumberedCanvas(canvas.Canvas):
    """Canvas that defers page output so each page can show the page total."""

    def __init__(self, *args, page_font: str = "Helvetica", **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._page_font = page_font
        self._page_states: list[dict] = []

    def showPage(self) -> None:  # noqa: N802 - reportlab API
        self._page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self) -> None:
        total = len(self._page_states)
        for state in self._page_states:
            self.__dict__.update(state)
            self.setFont(self._page_font, 10)
            self.setFillColor(_MUTED)
            self.drawString(_MARGIN, 10 * mm, f"Page {self.getPageNumber()} of {total}")
            super().showPage()
        super().save()


def _resolve_fonts() -> tuple[str, str, bool]:
    """Return ``(regular, bold, unicode_capable)`` font names."""

    for name, regular, bold in _FONT_CANDIDATES:
        if not (os.path.exists(regular) and os.path.exists(bold)):
            continue
        try:
            try:
                pdfmetrics.getFont(name)
            except KeyError:
                pdfmetrics.registerFont(TTFont(name, regular))
                pdfmetrics.registerFont(TTFont(name + "-Bold", bold))
        except (TTFError, OSError):
            _logger.debug("pdf:font_unusable name=%s", name, exc_info=True)
            continue
        return name, name + "-Bold", True
    return "Helvetica", "Helvetica-Bold", False


def _fit(text: str, font: str, size: float, width: float) -> str:
    if pdfmetrics.stringWidth(text, font, size) <= width:
        return text
    while text and pdfmetrics.stringWidth(text + "...", font, size) > width:
        text = text[:-1]
    return text + "..."


def export_pdf(
    entries: Sequence[LedgerEntry],
    path: Path | str | None = None,
    *,
    directory: Path | str | None = None,
    generated_on: dt.date | None = None,
    symbol: str = "₹",
) -> Path:
    """Render the ledger report for ``entries`` and return the file path.

    Without an explicit ``path`` the file is named after the report's company
    (see :func:`report_filename`) inside ``directory`` (default: CWD).
    """

    if not entries:
        raise EmptyExportError("No entries to export.")

    company = report_company_name(entries)
    out = Path(path) if path is not None else Path(directory or Path.cwd()) / report_filename(company)
    out.parent.mkdir(parents=True, exist_ok=True)

    font, font_b, unicode_ok = _resolve_fonts()
    # The built-in Helvetica has no glyph for symbols such as the rupee sign.
    money_symbol = symbol if unicode_ok or symbol.isascii() else "Rs."
    rows = report_rows(entries, summarize(entries), symbol=money_symbol)

    c = _NumberedCanvas(os.fspath(out), pagesize=A4, page_font=font)
    c.setTitle(f"{REPORT_TITLE} - {company}")
    pw, ph = A4
    bottom_limit = 16 * mm

    c.setFont(font_b, 20)
    c.setFillColor(_TITLE_COLOR)
    c.drawString(_MARGIN, ph - 20 * mm, REPORT_TITLE)
    c.setFont(font, 16)
    c.setFillColor(_ACCENT)
    c.drawString(_MARGIN, ph - 30 * mm, f"Company: {company}")
    c.setFont(font, 12)
    c.setFillColor(_MUTED)
    c.drawString(_MARGIN, ph - 40 * mm, f"Generated on: {long_date(generated_on or dt.date.today())}")
    c.setStrokeColor(_GRID)
    c.line(_MARGIN, ph - 45 * mm, pw - _MARGIN, ph - 45 * mm)

    y = ph - 50 * mm

    def draw_row(cells: Sequence[str], *, fill: Color, text_color: Color, bold: bool) -> None:
        nonlocal y
        c.setLineWidth(0.4)
        c.setStrokeColor(_GRID)
        c.setFillColor(fill)
        x = _MARGIN
        for w in _COL_WIDTHS:
            c.rect(x, y - _ROW_H, w, _ROW_H, stroke=1, fill=1)
            x += w
        fn = font_b if bold else font
        c.setFont(fn, _FONT_SIZE)
        c.setFillColor(text_color)
        baseline = y - _ROW_H + 6
        x = _MARGIN
        for i, (text, w) in enumerate(zip(cells, _COL_WIDTHS, strict=True)):
            fitted = _fit(text, fn, _FONT_SIZE, w - 2 * _PAD)
            if i in _RIGHT_ALIGNED:
                c.drawRightString(x + w - _PAD, baseline, fitted)
            else:
                c.drawCentredString(x + w / 2, baseline, fitted)
            x += w
        y -= _ROW_H

    def draw_header() -> None:
        draw_row(REPORT_HEADERS, fill=_ACCENT, text_color=white, bold=True)

    draw_header()
    last = len(rows) - 1
    for i, row in enumerate(rows):
        if y - _ROW_H < bottom_limit:
            c.showPage()
            y = ph - _MARGIN
            draw_header()
        draw_row(
            row,
            fill=_ALT_ROW_FILL if i % 2 else _ROW_FILL,
            text_color=_TEXT,
            bold=i == last,
        )

    c.setFont(font, 10)
    c.setFillColor(_MUTED)
    c.drawString(_MARGIN, 5 * mm, FOOTER_TEXT)
    c.showPage()
    c.save()

    _logger.info("export:pdf rows=%d path=%s", len(entries), os.fspath(out))
    return out
