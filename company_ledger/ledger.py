"""Ledger mutation API: add, edit and delete entries.

Every mutation runs to completion before returning: validate the draft,
build the new collection, recompute all running balances and hand the full
snapshot to the store for persistence. A draft that fails validation raises
:class:`~company_ledger.errors.EntryValidationError` and leaves the ledger
untouched. Edits and deletes that reference an unknown id are no-ops.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from .balance import recompute
from .errors import EntryValidationError
from .logging_setup import get_logger
from .models import (
    ALL_CATEGORIES,
    CATEGORIES,
    Composing,
    DraftState,
    Editing,
    EntryDraft,
    LedgerEntry,
)
from .query import QueryView
from .storage import KeyValueStorage
from .store import EntryStore

_logger = get_logger("company_ledger.ledger")

# Amounts must be below 10**15 (a quadrillion) in absolute value.
MAX_AMOUNT_DIGITS = 15


# ----------------------------------------------------------------------------
# Draft validation
# ----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class _ValidFields:
    date: dt.date
    particular: str
    category: str
    company_name: str
    credit: Decimal | None
    debit: Decimal | None


def parse_input_amount(field: str, raw: Decimal | str | None) -> Decimal | None:
    """Strictly parse a user-entered amount.

    Blank input means "not set". Anything else must be a finite,
    non-negative number below ``10**MAX_AMOUNT_DIGITS``.
    """

    if raw is None:
        return None
    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, str):
        s = raw.strip()
        if not s:
            return None
        try:
            value = Decimal(s)
        except InvalidOperation:
            raise EntryValidationError(field, f"{field.capitalize()} must be a number") from None
    else:
        raise EntryValidationError(field, f"{field.capitalize()} must be a number")
    if not value.is_finite():
        raise EntryValidationError(field, f"{field.capitalize()} must be a finite number")
    if value < 0:
        raise EntryValidationError(field, f"{field.capitalize()} cannot be negative")
    if value and value.adjusted() >= MAX_AMOUNT_DIGITS:
        raise EntryValidationError(
            field, f"{field.capitalize()} must be less than 10^{MAX_AMOUNT_DIGITS}"
        )
    return value


def validate_draft(draft: EntryDraft) -> _ValidFields:
    company_name = " ".join(draft.company_name.split())
    if not company_name:
        raise EntryValidationError("companyName", "Company name is required")
    category = draft.category.strip()
    if not category:
        raise EntryValidationError("category", "Category is required")
    if category not in CATEGORIES:
        raise EntryValidationError(
            "category", f"Unknown category {category!r}; expected one of: {', '.join(CATEGORIES)}"
        )
    entry_date = draft.date
    if not isinstance(entry_date, dt.date):
        raise EntryValidationError("date", "Date is required")
    if isinstance(entry_date, dt.datetime):
        entry_date = entry_date.date()

    credit = parse_input_amount("credit", draft.credit)
    debit = parse_input_amount("debit", draft.debit)
    if credit is not None and debit is not None:
        raise EntryValidationError("debit", "An entry can have a credit or a debit, not both")

    return _ValidFields(
        date=entry_date,
        particular=draft.particular,
        category=category,
        company_name=company_name,
        credit=credit,
        debit=debit,
    )


def _build_entry(entry_id: int, fields: _ValidFields) -> LedgerEntry:
    return LedgerEntry(
        id=entry_id,
        date=fields.date,
        particular=fields.particular,
        category=fields.category,
        company_name=fields.company_name,
        credit=fields.credit,
        debit=fields.debit,
    )


# ----------------------------------------------------------------------------
# Ledger service
# ----------------------------------------------------------------------------


class Ledger:
    """The single mutator of an :class:`EntryStore`."""

    def __init__(
        self, store: EntryStore, *, today: Callable[[], dt.date] = dt.date.today
    ) -> None:
        self._store = store
        self._today = today

    @classmethod
    def open(cls, storage: KeyValueStorage) -> Ledger:
        """Create a ledger over ``storage`` and load its persisted entries."""

        store = EntryStore(storage)
        store.load()
        return cls(store)

    @property
    def store(self) -> EntryStore:
        return self._store

    @property
    def entries(self) -> tuple[LedgerEntry, ...]:
        return self._store.entries

    def get(self, entry_id: int) -> LedgerEntry | None:
        return next((e for e in self._store.entries if e.id == entry_id), None)

    def view(self, search_term: str = "", category_filter: str = ALL_CATEGORIES) -> QueryView:
        return QueryView(self._store, search_term=search_term, category_filter=category_filter)

    def _commit(self, entries: list[LedgerEntry]) -> None:
        self._store.replace_all(recompute(entries))

    # ---- Mutations ---------------------------------------------------------

    def add(self, draft: EntryDraft) -> LedgerEntry:
        """Validate ``draft`` and append it as a new entry."""

        fields = validate_draft(draft)
        entry = _build_entry(self._store.next_id(), fields)
        self._commit([*self._store.entries, entry])
        _logger.info("ledger:add id=%d count=%d", entry.id, len(self._store.entries))
        # Return the stored copy, which carries the computed balance.
        return self._store.entries[-1]

    def edit(self, entry_id: int, draft: EntryDraft) -> LedgerEntry | None:
        """Replace the fields of entry ``entry_id`` in place.

        Returns the updated entry, or ``None`` when no entry has that id.
        """

        fields = validate_draft(draft)
        current = list(self._store.entries)
        pos = next((i for i, e in enumerate(current) if e.id == entry_id), None)
        if pos is None:
            _logger.debug("ledger:edit_missing id=%d", entry_id)
            return None
        current[pos] = _build_entry(entry_id, fields)
        self._commit(current)
        _logger.info("ledger:edit id=%d pos=%d", entry_id, pos)
        return self._store.entries[pos]

    def delete(self, entry_id: int) -> bool:
        """Remove entry ``entry_id``; returns whether anything was removed."""

        remaining = [e for e in self._store.entries if e.id != entry_id]
        if len(remaining) == len(self._store.entries):
            _logger.debug("ledger:delete_missing id=%d", entry_id)
            return False
        self._commit(remaining)
        _logger.info("ledger:delete id=%d count=%d", entry_id, len(remaining))
        return True

    # ---- Draft states ------------------------------------------------------

    def new_draft(self) -> Composing:
        return Composing(EntryDraft(date=self._today()))

    def begin_edit(self, entry_id: int) -> Editing | None:
        """Load entry ``entry_id`` into an editing draft, or ``None`` if absent."""

        entry = self.get(entry_id)
        if entry is None:
            return None
        return Editing(target_id=entry_id, draft=EntryDraft.from_entry(entry))

    def save(self, state: DraftState) -> Composing:
        """Persist ``state`` and return a fresh draft for the next entry.

        ``Composing`` creates a new entry; ``Editing`` updates its target (a
        no-op when the target has since been deleted). Validation errors
        propagate and the caller keeps its current state.
        """

        match state:
            case Editing(target_id=target_id, draft=draft):
                self.edit(target_id, draft)
            case Composing(draft=draft):
                self.add(draft)
            case _:
                raise TypeError(f"unsupported draft state: {type(state).__name__}")
        return self.new_draft()
