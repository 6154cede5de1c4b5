"""Spreadsheet (``.xlsx``) export of a filtered view, written with openpyxl."""

from __future__ import annotations

import os
from collections.abc import Sequence
from decimal import Decimal
from pathlib import Path
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from ..errors import EmptyExportError
from ..logging_setup import get_logger
from ..models import LedgerEntry

DEFAULT_FILENAME = "ledger.xlsx"
SHEET_NAME = "Ledger"

SPREADSHEET_HEADERS: tuple[str, ...] = (
    "Date",
    "Company Name",
    "Particular",
    "Category",
    "Credit",
    "Debit",
    "Balance",
)

_COLUMN_WIDTHS = (12, 28, 40, 14, 14, 14, 14)

_logger = get_logger("company_ledger.exporters.spreadsheet")


def spreadsheet_rows(entries: Sequence[LedgerEntry]) -> list[list[Any]]:
    """Header row followed by one row per entry, in entry order.

    Cells keep native types (``date``/``Decimal``) so the spreadsheet can
    format and sum them; absent amounts are empty cells.
    """

    rows: list[list[Any]] = [list(SPREADSHEET_HEADERS)]
    for e in entries:
        rows.append(
            [
                e.date,
                e.company_name,
                e.particular,
                e.category,
                e.credit,
                e.debit,
                e.balance,
            ]
        )
    return rows


def export_spreadsheet(entries: Sequence[LedgerEntry], path: Path | str) -> Path:
    """Write ``entries`` to an ``.xlsx`` workbook at ``path`` and return it."""

    if not entries:
        raise EmptyExportError("No entries to export.")

    out = Path(path)
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_NAME

    for row in spreadsheet_rows(entries):
        ws.append(row)
    for c in ws[1]:
        c.font = Font(bold=True)

    for row in ws.iter_rows(min_row=2, min_col=1, max_col=1):
        row[0].number_format = "yyyy-mm-dd"
    for row in ws.iter_rows(min_row=2, min_col=5, max_col=7):
        for cell in row:
            if isinstance(cell.value, Decimal):
                cell.number_format = "0.00"
    for i, width in enumerate(_COLUMN_WIDTHS, start=1):
        ws.column_dimensions[get_column_letter(i)].width = width

    out.parent.mkdir(parents=True, exist_ok=True)
    wb.save(out)
    _logger.info("export:xlsx rows=%d path=%s", len(entries), os.fspath(out))
    return out
