"""Exception types raised by the ledger core and its collaborators."""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for all ledger-specific failures."""


class EntryValidationError(LedgerError, ValueError):
    """A draft entry failed validation; the mutation was not applied.

    ``field`` names the offending entry field (``"companyName"``,
    ``"category"``, ``"credit"``, ``"debit"`` or ``"date"``).
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class PersistenceReadError(LedgerError):
    """Persisted ledger state could not be decoded.

    Storage readers raise this; :meth:`company_ledger.store.EntryStore.load`
    recovers from it by starting with an empty collection.
    """


class EmptyExportError(LedgerError):
    """An export or share was requested over an empty set of entries."""


__all__ = [
    "EmptyExportError",
    "EntryValidationError",
    "LedgerError",
    "PersistenceReadError",
]
