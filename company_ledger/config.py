"""Runtime settings resolved from environment variables.

Entrypoints load a local ``.env`` (``python-dotenv``) before calling
:meth:`LedgerSettings.from_env`; library code receives a settings object and
never reads the environment itself.

Variables
---------
- ``LEDGER_DATABASE_URL``: SQLAlchemy URL for the key-value table backend.
  When unset the JSON file backend is used.
- ``LEDGER_DATA_FILE``: JSON file holding the ledger (default ``./ledger.json``).
- ``LEDGER_EXPORT_DIR``: directory for exported artifacts (default: CWD).
- ``LEDGER_CURRENCY_SYMBOL``: symbol prefixed to amounts (default ``₹``).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_DATA_FILE = "ledger.json"
DEFAULT_CURRENCY_SYMBOL = "₹"


def _env_str(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    s = raw.strip()
    return s or None


@dataclass(frozen=True, slots=True)
class LedgerSettings:
    data_file: Path
    export_dir: Path
    database_url: str | None = None
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL

    @classmethod
    def from_env(cls) -> LedgerSettings:
        data_file = _env_str("LEDGER_DATA_FILE")
        export_dir = _env_str("LEDGER_EXPORT_DIR")
        return cls(
            data_file=Path(data_file).expanduser() if data_file else Path.cwd() / DEFAULT_DATA_FILE,
            export_dir=Path(export_dir).expanduser() if export_dir else Path.cwd(),
            database_url=_env_str("LEDGER_DATABASE_URL"),
            currency_symbol=_env_str("LEDGER_CURRENCY_SYMBOL") or DEFAULT_CURRENCY_SYMBOL,
        )
