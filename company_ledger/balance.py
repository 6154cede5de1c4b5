"""Running-balance computation.

The balance of an entry is the sum of ``credit - debit`` over every entry up
to and including it, in insertion order (never calendar order). Any edit or
delete can shift every later balance, so mutations always recompute the whole
sequence with :func:`recompute`.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from .models import ZERO, LedgerEntry


def contribution(entry: LedgerEntry) -> Decimal:
    """Return the signed effect of ``entry`` on the running balance."""

    return (entry.credit or ZERO) - (entry.debit or ZERO)


def recompute(entries: Iterable[LedgerEntry]) -> tuple[LedgerEntry, ...]:
    """Return ``entries`` with ``balance`` set to the running total.

    Pure: the input entries are not modified. Entries whose balance is
    already correct are returned as-is.
    """

    running = ZERO
    out: list[LedgerEntry] = []
    for entry in entries:
        running += contribution(entry)
        out.append(entry if entry.balance == running else entry.with_balance(running))
    return tuple(out)
