"""company_ledger package.

Bookkeeping for a company: credit/debit entries with a running balance,
filtered views, and spreadsheet/PDF/share exports.
"""

from __future__ import annotations

from .balance import recompute
from .config import LedgerSettings
from .errors import EmptyExportError, EntryValidationError, LedgerError, PersistenceReadError
from .ledger import Ledger, parse_input_amount, validate_draft
from .models import (
    ALL_CATEGORIES,
    CATEGORIES,
    Category,
    Composing,
    DraftState,
    Editing,
    EntryDraft,
    LedgerEntry,
    LedgerSummary,
)
from .query import QueryView, filter_entries
from .report import summarize
from .storage import JsonFileStorage, KeyValueStorage, MemoryStorage, SqlStorage
from .store import EntryStore

__all__ = [
    "ALL_CATEGORIES",
    "CATEGORIES",
    "Category",
    "Composing",
    "DraftState",
    "Editing",
    "EmptyExportError",
    "EntryDraft",
    "EntryStore",
    "EntryValidationError",
    "JsonFileStorage",
    "KeyValueStorage",
    "Ledger",
    "LedgerEntry",
    "LedgerError",
    "LedgerSettings",
    "LedgerSummary",
    "MemoryStorage",
    "PersistenceReadError",
    "QueryView",
    "SqlStorage",
    "filter_entries",
    "parse_input_amount",
    "recompute",
    "summarize",
    "validate_draft",
]
