"""Summary figures and money/date formatting shared by the exporters."""

from __future__ import annotations

import datetime as dt
from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal, localcontext

from .models import ZERO, LedgerEntry, LedgerSummary

_CENT = Decimal("0.01")
# Significant digits kept by the default decimal context.
_DEFAULT_PREC = 28


def summarize(entries: Sequence[LedgerEntry]) -> LedgerSummary:
    """Total credit, total debit and the ending running balance of ``entries``.

    The ending balance is the ``balance`` of the last entry, which carries the
    running total of the whole ledger up to that entry. It is therefore not
    derivable from a filtered subset's own totals.
    """

    if not entries:
        return LedgerSummary(ZERO, ZERO, ZERO)
    total_credit = sum((e.credit or ZERO for e in entries), ZERO)
    total_debit = sum((e.debit or ZERO for e in entries), ZERO)
    return LedgerSummary(total_credit, total_debit, entries[-1].balance)


def format_money(amount: Decimal, *, symbol: str = "") -> str:
    """Format ``amount`` with two decimals, e.g. ``₹1234.50``."""

    with localcontext() as ctx:
        # quantize fails once the integer part no longer fits the precision
        ctx.prec = max(_DEFAULT_PREC, amount.adjusted() + 3)
        ctx.Emax = max(ctx.Emax, amount.adjusted() + 1)
        return f"{symbol}{amount.quantize(_CENT, rounding=ROUND_HALF_UP)}"


def format_optional_money(amount: Decimal | None, *, symbol: str = "") -> str:
    """Like :func:`format_money` but renders a missing amount as ``-``."""

    if amount is None:
        return "-"
    return format_money(amount, symbol=symbol)


def long_date(d: dt.date) -> str:
    """``October 18, 2026`` style date used in report and share headers."""

    return d.strftime("%B %d, %Y")


def short_date(d: dt.date) -> str:
    """``10/18/2026`` style date used in table rows."""

    return d.strftime("%m/%d/%Y")
