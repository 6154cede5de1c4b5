"""Data models for ``company_ledger``.

``LedgerEntry`` is the persisted record. Its JSON shape (camelCase
``companyName``, string amounts, numeric ``balance``) is the on-disk format
shared with earlier versions of the application, so field names and
serializers here must stay stable.

Drafts are plain frozen dataclasses: they hold raw, not-yet-validated user
input and never carry an ``id`` or ``balance``. Whether a draft creates a new
entry or updates an existing one is decided by the draft *state*
(:class:`Composing` vs :class:`Editing`), not by the draft itself.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import StrEnum
from typing import Any, NamedTuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_serializer,
    field_validator,
)

# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class Category(StrEnum):
    SALES = "Sales"
    PURCHASE = "Purchase"
    SALARY = "Salary"
    RENT = "Rent"
    UTILITIES = "Utilities"
    MARKETING = "Marketing"
    OTHERS = "Others"


CATEGORIES: tuple[str, ...] = tuple(c.value for c in Category)

# Category filter value that matches every entry.
ALL_CATEGORIES = "all"

ZERO = Decimal(0)


def parse_amount(raw: Any) -> Decimal | None:
    """Leniently parse a stored amount; anything unusable becomes ``None``.

    Accepts numbers and numeric strings. Empty strings, booleans, non-numeric
    text and non-finite values are treated as absent, so such entries
    contribute nothing to the running balance.
    """

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        value = raw
    else:
        s = str(raw).strip()
        if not s:
            return None
        try:
            value = Decimal(s)
        except (InvalidOperation, ValueError):
            return None
    if not value.is_finite():
        return None
    return value


# ---------------------------------------------------------------------------
# Persisted entry
# ---------------------------------------------------------------------------


class LedgerEntry(BaseModel):
    """One persisted transaction.

    ``balance`` is derived by :func:`company_ledger.balance.recompute`; any
    value read from storage is overwritten before the entry is exposed.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: int
    date: dt.date
    particular: str = ""
    category: str
    company_name: str = Field(alias="companyName")
    credit: Decimal | None = None
    debit: Decimal | None = None
    balance: Decimal = ZERO

    @field_validator("credit", "debit", mode="before")
    @classmethod
    def _lenient_amount(cls, v: Any) -> Decimal | None:
        return parse_amount(v)

    @field_validator("balance", mode="before")
    @classmethod
    def _lenient_balance(cls, v: Any) -> Decimal:
        parsed = parse_amount(v)
        return parsed if parsed is not None else ZERO

    @field_validator("particular", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_serializer("credit", "debit")
    def _amount_as_text(self, v: Decimal | None) -> str:
        return "" if v is None else format(v, "f")

    @field_serializer("balance")
    def _balance_as_number(self, v: Decimal) -> int | float:
        return int(v) if v == v.to_integral_value() else float(v)

    def with_balance(self, balance: Decimal) -> LedgerEntry:
        return self.model_copy(update={"balance": balance})

    def to_record(self) -> dict[str, Any]:
        """Return the JSON-ready mapping written to storage."""

        return self.model_dump(mode="json", by_alias=True)


ENTRY_LIST_ADAPTER: TypeAdapter[list[LedgerEntry]] = TypeAdapter(list[LedgerEntry])


# ---------------------------------------------------------------------------
# Drafts and draft states
# ---------------------------------------------------------------------------


def _today() -> dt.date:
    return dt.date.today()


@dataclass(frozen=True, slots=True)
class EntryDraft:
    """User input for an entry that is being composed or edited.

    ``credit`` and ``debit`` keep the raw input (text, number or ``None``);
    they are parsed strictly when the draft is saved.
    """

    company_name: str = ""
    category: str = ""
    particular: str = ""
    credit: Decimal | str | None = None
    debit: Decimal | str | None = None
    date: dt.date = field(default_factory=_today)

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> EntryDraft:
        return cls(
            company_name=entry.company_name,
            category=entry.category,
            particular=entry.particular,
            credit=entry.credit,
            debit=entry.debit,
            date=entry.date,
        )


@dataclass(frozen=True, slots=True)
class Composing:
    """A draft that will become a new entry when saved."""

    draft: EntryDraft = field(default_factory=EntryDraft)


@dataclass(frozen=True, slots=True)
class Editing:
    """A draft that replaces the fields of entry ``target_id`` when saved."""

    target_id: int
    draft: EntryDraft


type DraftState = Composing | Editing


# ---------------------------------------------------------------------------
# Report figures
# ---------------------------------------------------------------------------


class LedgerSummary(NamedTuple):
    """Aggregate figures over a subset of entries.

    ``ending_balance`` is the running balance of the subset's last entry as
    computed over the whole ledger, not ``total_credit - total_debit``.
    """

    total_credit: Decimal
    total_debit: Decimal
    ending_balance: Decimal


__all__ = [
    "ALL_CATEGORIES",
    "CATEGORIES",
    "Category",
    "Composing",
    "DraftState",
    "ENTRY_LIST_ADAPTER",
    "Editing",
    "EntryDraft",
    "LedgerEntry",
    "LedgerSummary",
    "ZERO",
    "parse_amount",
]
