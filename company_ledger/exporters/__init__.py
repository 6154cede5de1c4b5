"""Renderers that turn a filtered view and its summary into artifacts.

Each exporter refuses an empty set of entries with
:class:`~company_ledger.errors.EmptyExportError` instead of emitting a zeroed
report.
"""

from __future__ import annotations

from .pdf import REPORT_HEADERS, export_pdf, report_company_name, report_filename, report_rows
from .share import share_message, share_url
from .spreadsheet import SPREADSHEET_HEADERS, export_spreadsheet, spreadsheet_rows

__all__ = [
    "REPORT_HEADERS",
    "SPREADSHEET_HEADERS",
    "export_pdf",
    "export_spreadsheet",
    "report_company_name",
    "report_filename",
    "report_rows",
    "share_message",
    "share_url",
    "spreadsheet_rows",
]
