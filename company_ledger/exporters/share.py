"""Plain-text ledger summary for sharing through a chat link."""

from __future__ import annotations

import datetime as dt
from collections.abc import Sequence
from urllib.parse import quote

from ..errors import EmptyExportError
from ..models import LedgerEntry
from ..report import format_money, long_date, summarize

SHARE_BASE_URL = "https://wa.me/"

# Unreserved characters of a URI query component.
_URI_SAFE = "-_.!~*'()"

_TEMPLATE = """\
🏢 Company Ledger Summary
📅 {date}

💰 Total Credit: {credit}
💸 Total Debit: {debit}
📊 Current Balance: {balance}

Generated via Company Ledger App"""


def share_message(
    entries: Sequence[LedgerEntry],
    *,
    generated_on: dt.date | None = None,
    symbol: str = "₹",
) -> str:
    """Summary message over ``entries`` (callers pass the whole ledger)."""

    if not entries:
        raise EmptyExportError("No entries to share.")
    summary = summarize(entries)
    return _TEMPLATE.format(
        date=long_date(generated_on or dt.date.today()),
        credit=format_money(summary.total_credit, symbol=symbol),
        debit=format_money(summary.total_debit, symbol=symbol),
        balance=format_money(summary.ending_balance, symbol=symbol),
    )


def share_url(message: str) -> str:
    return f"{SHARE_BASE_URL}?text={quote(message, safe=_URI_SAFE)}"
